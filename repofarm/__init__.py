"""
repofarm - Declarative manager for a farm of git repositories and symlinks.

Repositories are declared once in an entry store and grouped into
categories. Each run applies one operation (clone, pull, push, add, commit,
quick, link, unlink) across the selected categories and records one
outcome per repository or link; a failing item never stops the run.

Quick Start:
    import repofarm

    config = repofarm.load_config("~/.config/repofarm/config.yaml")
    dispatcher = repofarm.Dispatcher(config)

    result = dispatcher.run(repofarm.Operation.PULL)
    for detail in result.failures:
        print(detail.label, detail.error)

    # Only some categories
    selection = repofarm.Selection(categories=("dots",))
    dispatcher.run(repofarm.Operation.LINK, selection)

Domain Objects:
    RepoEntry - A declared repository with its flags
    Link - A source/target symlink pair
    Category - Named group of repository keys, flags and links
    Configuration - Entry store, categories and global links
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    Category,
    Configuration,
    EntryStore,
    Link,
    Operation,
    OperationDetail,
    OperationStatus,
    RepoEntry,
    RepoFlag,
    RepoKind,
    RunResult,
    Selection,
)

# Services
from .services import Dispatcher, DispatchOptions

# Infrastructure
from .infra import CommandResult, Executor

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "Category",
    "Configuration",
    "EntryStore",
    "Link",
    "Operation",
    "OperationDetail",
    "OperationStatus",
    "RepoEntry",
    "RepoFlag",
    "RepoKind",
    "RunResult",
    "Selection",
    # Services
    "Dispatcher",
    "DispatchOptions",
    # Infrastructure
    "CommandResult",
    "Executor",
    # Configuration
    "load_config",
    "save_config",
]
