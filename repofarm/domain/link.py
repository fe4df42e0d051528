"""
Link domain object for repofarm.

A Link is a source/target pair: ``tx`` is the file that exists, ``rx`` is
where a symlink pointing at it should exist.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..exit_codes import ConfigError
from .repository import expand_path, optional_str


@dataclass(frozen=True)
class Link:
    """
    A declared symlink.

    Two links are the same link when source and target match; the name is
    informational only.
    """
    tx: str
    rx: str
    name: Optional[str] = field(default=None, compare=False)

    @property
    def source_path(self) -> Path:
        return expand_path(self.tx)

    @property
    def target_path(self) -> Path:
        return expand_path(self.rx)

    @property
    def label(self) -> str:
        return self.name or self.rx

    @classmethod
    def from_dict(cls, name: Optional[str], data: Any) -> 'Link':
        """
        Build a link from its mapping, accepting source/target as aliases.

        Args:
            name: Key the link was declared under
            data: Mapping with tx/rx (or source/target)

        Returns:
            Link instance
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Link '{name}' must be a mapping")
        tx = optional_str(data.get('tx', data.get('source')), f"Link '{name}' tx")
        rx = optional_str(data.get('rx', data.get('target')), f"Link '{name}' rx")
        if not tx or not rx:
            raise ConfigError(f"Link '{name}' needs both tx (source) and rx (target)")
        return cls(tx=tx, rx=rx, name=None if name is None else str(name))

    def to_dict(self) -> Dict[str, Any]:
        return {'tx': self.tx, 'rx': self.rx}


def parse_links(data: Any, context: str = "links") -> Tuple[Link, ...]:
    """
    Parse a link mapping (or list of mappings) into unique links.

    Order of first declaration is kept; repeated source/target pairs collapse.
    """
    if data is None:
        return ()

    if isinstance(data, dict):
        items: Iterable[Tuple[Optional[str], Any]] = data.items()
    elif isinstance(data, list):
        items = [(entry.get('name') if isinstance(entry, dict) else None, entry) for entry in data]
    else:
        raise ConfigError(f"{context} must be a mapping of link name to {{tx, rx}}")

    links: List[Link] = []
    for name, value in items:
        link = Link.from_dict(name, value)
        if link not in links:
            links.append(link)
    return tuple(links)


def links_to_dict(links: Iterable[Link]) -> Dict[str, Any]:
    """Serialize links back to a name -> {tx, rx} mapping."""
    result: Dict[str, Any] = {}
    for index, link in enumerate(links):
        key = link.name or f"link-{index}"
        while key in result:
            key = f"{key}-{index}"
        result[key] = link.to_dict()
    return result
