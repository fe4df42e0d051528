"""
Entry store for repofarm.

The single owner of every RepoEntry. Categories only hold keys into it, so a
repository used by several categories is stored exactly once.
"""

from typing import Dict, Iterator, List, Optional

from .repository import RepoEntry


class EntryStore:
    """
    Deduplicated registry of repository entries keyed by name.

    Example:
        store = EntryStore()
        store.insert(RepoEntry(name="dots", path="~/src"))
        store.get("dots").working_dir  # ~/src/dots
    """

    def __init__(self, entries: Optional[List[RepoEntry]] = None):
        self._entries: Dict[str, RepoEntry] = {}
        for entry in entries or []:
            self.insert(entry)

    def insert(self, entry: RepoEntry) -> None:
        """Add an entry or replace the one with the same name."""
        self._entries[entry.name] = entry

    def get(self, key: str) -> Optional[RepoEntry]:
        return self._entries.get(key)

    def all(self) -> List[RepoEntry]:
        return list(self._entries.values())

    def keys(self) -> List[str]:
        return list(self._entries)

    def copy(self) -> 'EntryStore':
        return EntryStore(self.all())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RepoEntry]:
        return iter(self._entries.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntryStore):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"EntryStore({', '.join(self._entries)})"
