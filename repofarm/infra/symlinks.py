"""
Symlink client for repofarm.

Creates and removes the symlinks declared as links. Both directions are
idempotent: an existing correct link and a missing link to remove are
reported as no-ops, never as failures.
"""

import logging
import os
from pathlib import Path

from ..domain.link import Link
from .result import CommandResult

logger = logging.getLogger(__name__)


def points_to(link_path: Path, source: Path) -> bool:
    """True if the symlink at ``link_path`` points at ``source``."""
    raw = Path(os.readlink(link_path))
    if not raw.is_absolute():
        raw = link_path.parent / raw
    if os.path.normpath(str(raw)) == os.path.normpath(str(source.absolute())):
        return True
    return link_path.resolve() == source.resolve()


class SymlinkClient:
    """
    Filesystem side of link operations.

    Example:
        client = SymlinkClient()
        result = client.create(Link(tx="~/dots/vimrc", rx="~/.vimrc"))
    """

    def create(self, link: Link, force: bool = False) -> CommandResult:
        """
        Make ``link.rx`` a symlink to ``link.tx``.

        Args:
            link: Link to materialize
            force: Replace a symlink pointing elsewhere (or a broken one).
                   Regular files and directories are never replaced.

        Returns:
            CommandResult; ``skipped`` is set when the link already exists
        """
        source = link.source_path.absolute()
        target = link.target_path

        try:
            if not source.exists():
                return CommandResult.fail(f"Source not found: {source}")

            if target.is_symlink():
                if points_to(target, source):
                    return CommandResult.noop("already linked")
                if not force:
                    if not target.exists():
                        return CommandResult.fail(f"Broken symlink in the way: {target}")
                    return CommandResult.fail(f"Link to a different file exists: {target}")
                logger.debug(f"Replacing symlink {target}")
                target.unlink()

            elif target.exists():
                return CommandResult.fail(f"Path exists and is not a symlink: {target}")

            target.parent.mkdir(parents=True, exist_ok=True)
            target.symlink_to(source)
            logger.debug(f"Linked {target} -> {source}")
            return CommandResult.ok(f"{target} -> {source}")

        except OSError as e:
            return CommandResult.fail(f"Linking {source} -> {target} failed: {e}")

    def remove(self, link: Link) -> CommandResult:
        """
        Remove ``link.rx`` if it is a symlink to ``link.tx``.

        Anything else at the target is left alone and reported as a no-op.
        """
        source = link.source_path.absolute()
        target = link.target_path

        try:
            if not target.is_symlink():
                if target.exists():
                    return CommandResult.noop("not a symlink")
                return CommandResult.noop("not linked")

            if not points_to(target, source):
                return CommandResult.noop("points elsewhere")

            target.unlink()
            logger.debug(f"Removed {target}")
            return CommandResult.ok(f"removed {target}")

        except OSError as e:
            return CommandResult.fail(f"Removing {target} failed: {e}")
