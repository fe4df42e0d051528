"""
Commit message strategies for repofarm.

Three mutually exclusive ways to get a commit message:
- QuickMessage: one fixed message, no I/O
- FastMessage: derived from the category and repository names and the time
- EditMessage: asks an editor collaborator; None means the user cancelled

A strategy returning None makes the dispatcher skip that repository.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

import click

from ..domain.category import Category
from ..domain.repository import RepoEntry, RepoFlag

logger = logging.getLogger(__name__)

DEFAULT_QUICK_MESSAGE = "repofarm: quick commit"

EDIT_TEMPLATE = """
# Commit message for {repo} (category: {category}).
# Lines starting with '#' are ignored; an empty message cancels this commit.
"""


def strip_comments(text: str) -> str:
    """Drop ``#`` comment lines and surrounding blank space, like git does."""
    lines = [line.rstrip() for line in text.splitlines() if not line.lstrip().startswith('#')]
    return '\n'.join(lines).strip()


class MessageStrategy:
    """Base class: produce a commit message for one repository."""

    mode = "none"

    def message_for(self, entry: RepoEntry, category: Optional[str]) -> Optional[str]:
        raise NotImplementedError


class QuickMessage(MessageStrategy):
    """Always the same message."""

    mode = "quick"

    def __init__(self, message: str = DEFAULT_QUICK_MESSAGE):
        self.message = message

    def message_for(self, entry: RepoEntry, category: Optional[str]) -> Optional[str]:
        return self.message


class FastMessage(MessageStrategy):
    """Message derived from context; the clock is injectable for tests."""

    mode = "fast"

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock

    def message_for(self, entry: RepoEntry, category: Optional[str]) -> Optional[str]:
        stamp = self.clock().strftime('%Y-%m-%d %H:%M')
        scope = category or "repofarm"
        return f"{scope}: update {entry.name} ({stamp})"


class ClickEditor:
    """Opens ``$EDITOR`` through click and returns the saved text."""

    def __init__(self, editor: Optional[str] = None):
        self.editor = editor

    def edit(self, template: str) -> Optional[str]:
        try:
            return click.edit(template, editor=self.editor, extension='.txt', require_save=True)
        except click.ClickException as e:
            logger.warning(f"Could not open editor: {e.format_message()}")
            return None


class EditMessage(MessageStrategy):
    """
    Ask an editor collaborator for the message.

    The editor is any object with ``edit(template) -> Optional[str]``.
    """

    mode = "edit"

    def __init__(self, editor: Optional[ClickEditor] = None):
        self.editor = editor or ClickEditor()

    def message_for(self, entry: RepoEntry, category: Optional[str]) -> Optional[str]:
        template = EDIT_TEMPLATE.format(repo=entry.name, category=category or "-")
        text = self.editor.edit(template)
        if text is None:
            return None
        message = strip_comments(text)
        return message or None


def strategy_for_category(
    category: Category,
    editor: Optional[ClickEditor] = None,
    quick_message: str = DEFAULT_QUICK_MESSAGE,
) -> MessageStrategy:
    """
    Pick the strategy a category's flags ask for.

    QUICK wins over FAST; a category with neither opens the editor.
    """
    if category.has_flag(RepoFlag.QUICK):
        return QuickMessage(quick_message)
    if category.has_flag(RepoFlag.FAST):
        return FastMessage()
    return EditMessage(editor)
