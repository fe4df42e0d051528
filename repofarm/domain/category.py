"""
Category domain object for repofarm.

A category is the unit of selection: a named, ordered list of store keys,
its own flags, and the links that belong to it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Tuple

from .link import Link, links_to_dict
from .repository import RepoFlag


@dataclass(frozen=True)
class Category:
    """
    Attributes:
        name: Unique category name
        flags: Category-level flags (select the commit message strategy)
        repo_keys: Store keys in declared order
        links: Category-scoped links
    """
    name: str
    flags: FrozenSet[RepoFlag] = field(default_factory=frozenset)
    repo_keys: Tuple[str, ...] = ()
    links: Tuple[Link, ...] = ()

    def has_flag(self, flag: RepoFlag) -> bool:
        return flag in self.flags

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.flags:
            result['flags'] = sorted(f.value for f in self.flags)
        result['repos'] = list(self.repo_keys)
        if self.links:
            result['links'] = links_to_dict(self.links)
        return result
