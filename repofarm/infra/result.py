"""
Result type shared by the infrastructure clients.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of one external action (git subprocess or filesystem change).

    Attributes:
        success: True if the action succeeded or had nothing to do
        returncode: Process exit status (0 for filesystem actions)
        output: Combined diagnostic text
        skipped: Reason when nothing needed doing (already cloned, ...)
    """
    success: bool
    returncode: int = 0
    output: str = ""
    skipped: Optional[str] = None

    @classmethod
    def ok(cls, output: str = "") -> 'CommandResult':
        return cls(success=True, output=output)

    @classmethod
    def noop(cls, reason: str) -> 'CommandResult':
        return cls(success=True, skipped=reason)

    @classmethod
    def fail(cls, output: str, returncode: int = 1) -> 'CommandResult':
        return cls(success=False, returncode=returncode, output=output)
