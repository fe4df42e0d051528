"""
External executor for repofarm.

The single collaborator the dispatcher drives side effects through. It maps
repository entries and links onto the git and symlink clients and always
answers with a CommandResult.
"""

from typing import Optional

from ..domain.link import Link
from ..domain.repository import RepoEntry
from .git_client import GitClient
from .result import CommandResult
from .symlinks import SymlinkClient


class Executor:
    """
    Performs clone/pull/push/add/commit and link changes.

    Example:
        executor = Executor()
        result = executor.clone(entry)
    """

    def __init__(
        self,
        git_client: Optional[GitClient] = None,
        symlink_client: Optional[SymlinkClient] = None,
    ):
        self.git = git_client or GitClient()
        self.symlinks = symlink_client or SymlinkClient()

    def _working_dir(self, entry: RepoEntry):
        path = entry.working_dir
        if path is None:
            raise ValueError(f"Repository '{entry.name}' has no path")
        return path

    def clone(self, entry: RepoEntry) -> CommandResult:
        if not entry.url or entry.parent_dir is None:
            raise ValueError(f"Repository '{entry.name}' needs url and path to clone")
        return self.git.clone(entry.url, entry.parent_dir, entry.name)

    def pull(self, entry: RepoEntry) -> CommandResult:
        return self.git.pull(self._working_dir(entry))

    def push(self, entry: RepoEntry) -> CommandResult:
        return self.git.push(self._working_dir(entry))

    def add(self, entry: RepoEntry) -> CommandResult:
        return self.git.add_all(self._working_dir(entry))

    def commit(self, entry: RepoEntry, message: str) -> CommandResult:
        return self.git.commit(self._working_dir(entry), message)

    def create_link(self, link: Link, force: bool = False) -> CommandResult:
        return self.symlinks.create(link, force=force)

    def remove_link(self, link: Link) -> CommandResult:
        return self.symlinks.remove(link)
