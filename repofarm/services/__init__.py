"""
Service layer for repofarm.

Contains the logic that ties domain objects to infrastructure:
- resolver: category keys -> store entries
- policy: which operations apply to which repositories
- commit_message: quick / fast / edit commit messages
- Dispatcher: runs an operation over a selection and aggregates outcomes
"""

from .resolver import resolve, resolve_all, validate
from .policy import is_eligible
from .commit_message import (
    ClickEditor,
    EditMessage,
    FastMessage,
    MessageStrategy,
    QuickMessage,
    strategy_for_category,
)
from .dispatcher import Dispatcher, DispatchOptions

__all__ = [
    'resolve',
    'resolve_all',
    'validate',
    'is_eligible',
    'ClickEditor',
    'EditMessage',
    'FastMessage',
    'MessageStrategy',
    'QuickMessage',
    'strategy_for_category',
    'Dispatcher',
    'DispatchOptions',
]
