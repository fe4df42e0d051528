"""
Standard exit codes for repofarm commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Every attempted item succeeded (or was skipped)
GENERAL_ERROR = 1        # At least one item failed
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, unknown names)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Configuration file error (dangling reference, duplicate key, ...)
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised when the configuration document is missing or malformed."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class DanglingReferenceError(ConfigError):
    """Raised when a category lists a repository key the store does not hold."""
    def __init__(self, key: str, category: Optional[str] = None):
        where = f" in category '{category}'" if category else ""
        super().__init__(f"Unknown repository '{key}' referenced{where}")
        self.key = key
        self.category = category


class DuplicateKeyError(ConfigError):
    """Raised when a name that must be unique is declared twice."""
    def __init__(self, key: str, context: str = ""):
        where = f" in {context}" if context else ""
        super().__init__(f"Duplicate key '{key}'{where}")
        self.key = key


class SelectionError(CommandError):
    """Raised when a selection names a category or repository that does not exist."""
    def __init__(self, message: str):
        super().__init__(message, USAGE_ERROR)


def exit_code_for_failures(failed: int) -> int:
    """
    Exit code for a finished run: 0 when nothing failed, never the count.

    Args:
        failed: Number of failed items in the run

    Returns:
        SUCCESS or GENERAL_ERROR
    """
    return GENERAL_ERROR if failed else SUCCESS
