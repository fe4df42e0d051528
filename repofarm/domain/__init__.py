"""
Domain layer for repofarm.

Contains pure domain objects with no I/O or side effects:
- RepoEntry: A declared repository and its flags
- Link: A source/target symlink pair
- Category: A named group of repository keys, flags and links
- EntryStore: The deduplicated owner of every RepoEntry
- Configuration: Store, categories and global links together
- Operation / RunResult: What a run does and what happened
"""

from .repository import RepoEntry, RepoFlag, RepoKind
from .link import Link
from .category import Category
from .store import EntryStore
from .configuration import Configuration
from .operation import (
    Operation,
    OperationStatus,
    OperationDetail,
    RunResult,
    Selection,
)

__all__ = [
    'RepoEntry',
    'RepoFlag',
    'RepoKind',
    'Link',
    'Category',
    'EntryStore',
    'Configuration',
    'Operation',
    'OperationStatus',
    'OperationDetail',
    'RunResult',
    'Selection',
]
