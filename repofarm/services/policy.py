"""
Flag policy for repofarm.

An operation applies to a repository when the repository declares no flags
at all, or declares every flag the operation requires. Category flags never
restrict eligibility; they only pick the commit message strategy.
"""

from typing import Dict, FrozenSet

from ..domain.operation import Operation
from ..domain.repository import RepoEntry, RepoFlag

REQUIRED_FLAGS: Dict[Operation, FrozenSet[RepoFlag]] = {
    Operation.CLONE: frozenset({RepoFlag.CLONE}),
    Operation.PULL: frozenset({RepoFlag.PULL}),
    Operation.PUSH: frozenset({RepoFlag.PUSH}),
    Operation.ADD: frozenset({RepoFlag.PUSH}),
    Operation.COMMIT: frozenset({RepoFlag.PUSH}),
    Operation.QUICK: frozenset({RepoFlag.PULL, RepoFlag.PUSH}),
    Operation.LINK: frozenset(),
    Operation.UNLINK: frozenset(),
}


def required_flags(operation: Operation) -> FrozenSet[RepoFlag]:
    return REQUIRED_FLAGS[operation]


def is_eligible(entry: RepoEntry, operation: Operation) -> bool:
    """True if ``operation`` may run on ``entry``."""
    if not entry.flags:
        return True
    return required_flags(operation) <= entry.flags


def ineligible_reason(entry: RepoEntry, operation: Operation) -> str:
    missing = sorted(f.value for f in required_flags(operation) - entry.flags)
    return f"{operation.value} not enabled (missing flag: {', '.join(missing)})"
