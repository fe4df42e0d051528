"""
Repository entry domain object for repofarm.

A RepoEntry is one declared repository: its unique name, where its working
tree lives, where it is cloned from and which operations it takes part in.
Entries are immutable; the EntryStore owns them.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional
import os

from ..exit_codes import ConfigError


class RepoFlag(Enum):
    """Capability markers on repositories and categories."""
    CLONE = "clone"
    PULL = "pull"
    PUSH = "push"
    FAST = "fast"    # derive the commit message, never open an editor
    QUICK = "quick"  # use the default commit message

    @classmethod
    def parse(cls, value: Any) -> 'RepoFlag':
        """Parse a flag name case-insensitively (``Clone``, ``push``)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(f.value for f in cls)
            raise ConfigError(f"Unknown flag '{value}' (expected one of: {valid})")


class RepoKind(Enum):
    """What kind of repository an entry describes."""
    GIT = "git"

    @classmethod
    def parse(cls, value: Any) -> 'RepoKind':
        if value is None:
            return cls.GIT
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigError(f"Unknown repository kind '{value}'")


def parse_flags(values: Optional[Iterable[Any]]) -> FrozenSet[RepoFlag]:
    """Parse a list of flag names from the configuration document."""
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    elif not isinstance(values, (list, tuple, set, frozenset)):
        raise ConfigError(f"Flags must be a list of names, got {type(values).__name__}")
    return frozenset(RepoFlag.parse(v) for v in values)


def repo_name(value: Any) -> str:
    """Validate a repository key; it doubles as the working tree directory name."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ConfigError(f"Repository name must be a string, got {value!r}")
    name = str(value)
    if not name or name in ('.', '..') or '/' in name or os.sep in name:
        raise ConfigError(f"Repository name '{name}' is not a valid directory name")
    return name


def optional_str(value: Any, what: str) -> Optional[str]:
    """Return a configured string field, rejecting other YAML scalars and collections."""
    if value is None or isinstance(value, str):
        return value
    raise ConfigError(f"{what} must be a string, got {type(value).__name__}")


def expand_path(value: str) -> Path:
    """Expand ``~`` and environment variables in a configured path."""
    return Path(os.path.expandvars(value)).expanduser()


@dataclass(frozen=True)
class RepoEntry:
    """
    A repository declared in the configuration.

    Attributes:
        name: Unique key in the store, also the working tree directory name
        path: Directory the working tree lives in (working tree is path/name)
        url: Remote to clone from
        kind: Repository kind
        flags: Operations this repository takes part in (empty means all)
    """
    name: str
    path: Optional[str] = None
    url: Optional[str] = None
    kind: RepoKind = RepoKind.GIT
    flags: FrozenSet[RepoFlag] = field(default_factory=frozenset)

    @property
    def parent_dir(self) -> Optional[Path]:
        """Expanded directory the repository is cloned into."""
        if not self.path:
            return None
        return expand_path(self.path)

    @property
    def working_dir(self) -> Optional[Path]:
        """Expanded path of the working tree, or None without a path."""
        parent = self.parent_dir
        if parent is None:
            return None
        return parent / self.name

    @classmethod
    def from_dict(cls, name: str, data: Optional[Dict[str, Any]]) -> 'RepoEntry':
        """
        Build an entry from its mapping in the configuration document.

        Args:
            name: Key the entry was declared under
            data: Mapping with optional path, url, kind and flags

        Returns:
            RepoEntry instance
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Repository '{name}' must be a mapping, got {type(data).__name__}")
        unknown = set(data) - {'name', 'path', 'url', 'kind', 'flags'}
        if unknown:
            raise ConfigError(f"Repository '{name}' has unknown fields: {', '.join(sorted(unknown))}")
        name = repo_name(name)
        return cls(
            name=name,
            path=optional_str(data.get('path'), f"Repository '{name}' path"),
            url=optional_str(data.get('url'), f"Repository '{name}' url"),
            kind=RepoKind.parse(data.get('kind')),
            flags=parse_flags(data.get('flags')),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.path is not None:
            result['path'] = self.path
        if self.url is not None:
            result['url'] = self.url
        if self.kind is not RepoKind.GIT:
            result['kind'] = self.kind.value
        if self.flags:
            result['flags'] = sorted(f.value for f in self.flags)
        return result
