"""
Resolver for repofarm.

Turns a category's repository keys into the store's entries, in declared
order, and refuses dangling keys.
"""

from typing import Dict, List, TYPE_CHECKING

from ..domain.category import Category
from ..domain.repository import RepoEntry
from ..domain.store import EntryStore
from ..exit_codes import DanglingReferenceError

if TYPE_CHECKING:
    from ..domain.configuration import Configuration


def resolve(category: Category, store: EntryStore) -> List[RepoEntry]:
    """
    Look up every key of ``category`` in ``store``.

    Args:
        category: Category to resolve
        store: Store owning the entries

    Returns:
        Entries in the order the category declares their keys

    Raises:
        DanglingReferenceError: A key has no entry in the store
    """
    entries = []
    for key in category.repo_keys:
        entry = store.get(key)
        if entry is None:
            raise DanglingReferenceError(key, category.name)
        entries.append(entry)
    return entries


def resolve_all(config: 'Configuration') -> Dict[str, List[RepoEntry]]:
    """Resolve every category of ``config``, keyed by category name."""
    return {name: resolve(category, config.store) for name, category in config.categories.items()}


def validate(config: 'Configuration') -> None:
    """Raise on the first dangling reference anywhere in ``config``."""
    resolve_all(config)
