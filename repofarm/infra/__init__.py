"""
Infrastructure layer for repofarm.

Contains abstractions for external systems:
- GitClient: Git command execution
- SymlinkClient: Symlink creation and removal
- Executor: The collaborator the dispatcher drives side effects through
- YamlFileStore: YAML configuration persistence

These provide clean interfaces that can be mocked for testing.
"""

from .result import CommandResult
from .git_client import GitClient
from .symlinks import SymlinkClient
from .executor import Executor
from .file_store import YamlFileStore

__all__ = [
    'CommandResult',
    'GitClient',
    'SymlinkClient',
    'Executor',
    'YamlFileStore',
]
