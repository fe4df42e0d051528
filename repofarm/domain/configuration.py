"""
Configuration aggregate for repofarm.

Owns the entry store, the category map and the global links. Built once per
run from the parsed YAML document; editing methods return a new
Configuration instead of changing the one in use.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging

from ..exit_codes import ConfigError, DuplicateKeyError
from .category import Category
from .link import Link, links_to_dict, parse_links
from .repository import RepoEntry, parse_flags, repo_name
from .store import EntryStore

logger = logging.getLogger(__name__)

TOP_LEVEL_KEYS = {'settings', 'repos', 'categories', 'links'}
CATEGORY_KEYS = {'flags', 'repos', 'links'}


@dataclass(frozen=True)
class Configuration:
    """
    The root object of a run.

    Attributes:
        store: Every repository entry, keyed by name
        categories: Category name -> Category, in declared order
        links: Global links not bound to any category
        settings: Effective tool settings (defaults, file and environment merged)
        document_settings: The document's own settings section, written back on save
        path: File the configuration was loaded from
    """
    store: EntryStore = field(default_factory=EntryStore)
    categories: Dict[str, Category] = field(default_factory=dict)
    links: Tuple[Link, ...] = ()
    settings: Dict[str, Any] = field(default_factory=dict, compare=False)
    document_settings: Dict[str, Any] = field(default_factory=dict, compare=False)
    path: Optional[Path] = field(default=None, compare=False)

    @classmethod
    def from_dict(
        cls,
        data: Optional[Dict[str, Any]],
        settings: Optional[Dict[str, Any]] = None,
        path: Optional[Path] = None,
        validate: bool = True,
    ) -> 'Configuration':
        """
        Build a configuration from the parsed document.

        Top-level ``repos`` seed the store, then inline repository
        definitions in each category are merged into it (last write wins).
        Categories keep only the keys.

        Args:
            data: Parsed YAML document
            settings: Already merged settings (defaults to the document's own)
            path: Source file, kept for saving edits back
            validate: Resolve every category reference before returning

        Returns:
            Configuration instance

        Raises:
            ConfigError: Malformed document
            DuplicateKeyError: A repository listed twice in one category
            DanglingReferenceError: A category key missing from the store
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration document must be a mapping")

        unknown = set(data) - TOP_LEVEL_KEYS
        if unknown:
            raise ConfigError(f"Unknown top-level sections: {', '.join(sorted(unknown))}")

        store = EntryStore()
        top_repos = data.get('repos') or {}
        if not isinstance(top_repos, dict):
            raise ConfigError("'repos' must be a mapping of repository name to definition")
        for name, entry_data in top_repos.items():
            store.insert(RepoEntry.from_dict(name, entry_data))

        document_settings = data.get('settings') or {}
        if not isinstance(document_settings, dict):
            raise ConfigError("'settings' must be a mapping")

        raw_categories = data.get('categories') or {}
        if not isinstance(raw_categories, dict):
            raise ConfigError("'categories' must be a mapping of category name to definition")

        categories: Dict[str, Category] = {}
        for cat_name, cat_data in raw_categories.items():
            categories[str(cat_name)] = _parse_category(str(cat_name), cat_data, store)

        config = cls(
            store=store,
            categories=categories,
            links=parse_links(data.get('links'), context="'links'"),
            settings=dict(settings if settings is not None else document_settings),
            document_settings=dict(document_settings),
            path=path,
        )

        if validate:
            config.validate()
        return config

    def validate(self) -> None:
        """Resolve every category, raising on the first dangling key."""
        from ..services.resolver import validate
        validate(self)

    def category(self, name: str) -> Optional[Category]:
        return self.categories.get(name)

    def all_links(self) -> List[Link]:
        """Global links followed by every category's links, without repeats."""
        links: List[Link] = []
        for link in list(self.links) + [l for c in self.categories.values() for l in c.links]:
            if link not in links:
                links.append(link)
        return links

    def with_repo(self, entry: RepoEntry, category: Optional[str] = None) -> 'Configuration':
        """
        Return a copy with ``entry`` stored, and referenced by ``category``.

        A missing category is created. Re-adding an existing key replaces the
        stored definition without duplicating the reference.
        """
        store = self.store.copy()
        store.insert(entry)
        categories = dict(self.categories)
        if category is not None:
            current = categories.get(category, Category(name=category))
            if entry.name not in current.repo_keys:
                current = replace(current, repo_keys=current.repo_keys + (entry.name,))
            categories[category] = current
        return replace(self, store=store, categories=categories)

    def with_link(self, link: Link, category: Optional[str] = None) -> 'Configuration':
        """Return a copy with ``link`` added globally or to ``category``."""
        if category is None:
            if link in self.links:
                return self
            return replace(self, links=self.links + (link,))

        categories = dict(self.categories)
        current = categories.get(category, Category(name=category))
        if link not in current.links:
            current = replace(current, links=current.links + (link,))
        categories[category] = current
        return replace(self, categories=categories)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the canonical document shape (store + key lists)."""
        result: Dict[str, Any] = {}
        if self.document_settings:
            result['settings'] = dict(self.document_settings)
        result['repos'] = {entry.name: entry.to_dict() for entry in self.store}
        result['categories'] = {name: cat.to_dict() for name, cat in self.categories.items()}
        if self.links:
            result['links'] = links_to_dict(self.links)
        return result


def _parse_category(name: str, data: Any, store: EntryStore) -> Category:
    """Parse one category, merging its inline repositories into the store."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Category '{name}' must be a mapping")
    unknown = set(data) - CATEGORY_KEYS
    if unknown:
        raise ConfigError(f"Category '{name}' has unknown fields: {', '.join(sorted(unknown))}")

    keys: List[str] = []
    raw_repos = data.get('repos')

    if raw_repos is None:
        pass
    elif isinstance(raw_repos, dict):
        for key, repo_data in raw_repos.items():
            if repo_data is not None:
                _merge_inline(store, RepoEntry.from_dict(key, repo_data))
            keys.append(repo_name(key))
    elif isinstance(raw_repos, list):
        for item in raw_repos:
            if isinstance(item, dict):
                if 'name' not in item:
                    raise ConfigError(f"Inline repository in category '{name}' needs a name")
                entry = RepoEntry.from_dict(item['name'], item)
                _merge_inline(store, entry)
                key = entry.name
            else:
                key = repo_name(item)
            if key in keys:
                raise DuplicateKeyError(key, f"category '{name}'")
            keys.append(key)
    else:
        raise ConfigError(f"Category '{name}': 'repos' must be a mapping or a list of names")

    return Category(
        name=name,
        flags=parse_flags(data.get('flags')),
        repo_keys=tuple(keys),
        links=parse_links(data.get('links'), context=f"links of category '{name}'"),
    )


def _merge_inline(store: EntryStore, entry: RepoEntry) -> None:
    existing = store.get(entry.name)
    if existing is not None and existing != entry:
        logger.debug(f"Repository '{entry.name}' redefined, keeping the later definition")
    store.insert(entry)
