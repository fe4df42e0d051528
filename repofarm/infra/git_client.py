"""
Git client infrastructure for repofarm.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import subprocess
from pathlib import Path
from typing import List, Optional
import logging

from .result import CommandResult

logger = logging.getLogger(__name__)

GIT_NOT_FOUND = 127
TIMED_OUT = 124

# git commit output when there is nothing staged
NOTHING_TO_COMMIT = (
    "nothing to commit",
    "nothing added to commit",
    "no changes added to commit",
)


class GitClient:
    """
    Abstraction over git commands.

    Every method returns a CommandResult instead of raising, so one
    repository's failure can be recorded and the run can go on.

    Example:
        client = GitClient()
        result = client.pull(Path("/path/to/repo"))
        if not result.success:
            print(result.returncode, result.output)
    """

    def __init__(self, git: str = "git", timeout: Optional[int] = 300):
        """
        Initialize GitClient.

        Args:
            git: Git executable to invoke
            timeout: Command timeout in seconds (None for no timeout)
        """
        self.git = git
        self.timeout = timeout

    def _run(self, args: List[str], cwd: Path) -> CommandResult:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory

        Returns:
            CommandResult with exit status and combined output
        """
        cmd = [self.git] + args
        logger.debug(f"Running {' '.join(cmd)} in {cwd}")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            if not Path(cwd).is_dir():
                return CommandResult.fail(f"Directory not found: {cwd}")
            return CommandResult.fail(f"git executable not found: {self.git}", GIT_NOT_FOUND)
        except PermissionError as e:
            return CommandResult.fail(f"Cannot execute {self.git}: {e}", GIT_NOT_FOUND)
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return CommandResult.fail(f"timed out after {self.timeout}s", TIMED_OUT)

        output = '\n'.join(part.strip() for part in (result.stdout, result.stderr) if part and part.strip())
        if result.returncode != 0:
            logger.debug(f"{' '.join(cmd)} exited with {result.returncode}: {output}")
            return CommandResult.fail(output or f"git exited with {result.returncode}", result.returncode)
        return CommandResult.ok(output)

    def is_git_repo(self, path: Path) -> bool:
        """Check if path is a git working tree."""
        return (Path(path) / ".git").exists()

    def clone(self, url: str, parent: Path, name: str) -> CommandResult:
        """
        Clone ``url`` into ``parent/name``.

        The parent directory is created when missing; an existing working
        tree is reported as a no-op.
        """
        target = Path(parent) / name
        if self.is_git_repo(target):
            return CommandResult.noop("already cloned")
        try:
            Path(parent).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return CommandResult.fail(f"Cannot create {parent}: {e}")
        return self._run(["clone", url, name], cwd=parent)

    def pull(self, path: Path) -> CommandResult:
        return self._run(["pull"], cwd=path)

    def push(self, path: Path) -> CommandResult:
        return self._run(["push"], cwd=path)

    def add_all(self, path: Path) -> CommandResult:
        """Stage every change in the working tree."""
        return self._run(["add", "--all"], cwd=path)

    def commit(self, path: Path, message: str) -> CommandResult:
        """
        Commit staged changes with ``message``.

        Nothing staged is a no-op rather than a failure.
        """
        result = self._run(["commit", "-m", message], cwd=path)
        if not result.success and any(text in result.output for text in NOTHING_TO_COMMIT):
            return CommandResult.noop("nothing to commit")
        return result
