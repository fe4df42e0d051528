"""
Operation domain objects for repofarm.

Provides the operation tags the dispatcher understands, the selection a run
applies to, and the standardized per-item and aggregate result types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple


class Operation(Enum):
    """Operations the dispatcher can apply."""
    CLONE = "clone"
    PULL = "pull"
    PUSH = "push"
    ADD = "add"
    COMMIT = "commit"
    QUICK = "quick"    # pull, add, commit and push in one pass
    LINK = "link"      # create links
    UNLINK = "unlink"  # remove links

    @property
    def is_link_operation(self) -> bool:
        return self in (Operation.LINK, Operation.UNLINK)

    @property
    def needs_message(self) -> bool:
        return self in (Operation.COMMIT, Operation.QUICK)

    @property
    def needs_url(self) -> bool:
        return self is Operation.CLONE


class OperationStatus(Enum):
    """Status of an individual operation."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class Selection:
    """
    Which part of the configuration a run applies to.

    No categories means every category. ``repos`` narrows the repositories
    within the selected categories. Global links are included for whole-
    configuration runs unless ``include_global_links`` says otherwise.
    """
    categories: Tuple[str, ...] = ()
    repos: Tuple[str, ...] = ()
    include_global_links: Optional[bool] = None

    @classmethod
    def all(cls) -> 'Selection':
        return cls()

    @property
    def is_all(self) -> bool:
        return not self.categories

    @property
    def wants_global_links(self) -> bool:
        if self.include_global_links is not None:
            return self.include_global_links
        return self.is_all and not self.repos

    def includes_repo(self, name: str) -> bool:
        return not self.repos or name in self.repos


@dataclass
class OperationDetail:
    """
    Details of a single operation on one repository or link.

    Used to track what happened to each item during a run.
    """
    category: Optional[str]
    name: str
    kind: str  # "repo" or "link"
    status: OperationStatus
    action: str  # e.g., "cloned", "pushed", "linked", "would_pull"
    path: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    returncode: Optional[int] = None

    @property
    def label(self) -> str:
        scope = self.category if self.category is not None else "global"
        return f"{scope}/{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            'category': self.category,
            'name': self.name,
            'kind': self.kind,
            'status': self.status.value,
            'action': self.action,
        }
        if self.path:
            result['path'] = self.path
        if self.message:
            result['message'] = self.message
        if self.error:
            result['error'] = self.error
        if self.returncode is not None:
            result['returncode'] = self.returncode
        return result


@dataclass
class RunResult:
    """
    Aggregate outcome of one dispatcher run.

    Collects one detail per (category, repo-or-link) pair plus counts.
    """
    operation: str
    total: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0
    dry_run: bool = False
    interrupted: bool = False
    details: List[OperationDetail] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no failures occurred."""
        return self.failed == 0

    @property
    def failures(self) -> List[OperationDetail]:
        return [d for d in self.details if d.status == OperationStatus.FAILED]

    @property
    def skips(self) -> List[OperationDetail]:
        return [d for d in self.details if d.status == OperationStatus.SKIPPED]

    def add_detail(self, detail: OperationDetail) -> None:
        """Add an operation detail and update counts."""
        self.details.append(detail)
        self.total += 1

        if detail.status == OperationStatus.SUCCESS:
            self.successful += 1
        elif detail.status == OperationStatus.SKIPPED:
            self.skipped += 1
        elif detail.status == OperationStatus.FAILED:
            self.failed += 1
            if detail.error:
                self.errors.append(f"{detail.label}: {detail.error}")
        elif detail.status == OperationStatus.DRY_RUN:
            self.successful += 1  # Count dry-run as successful

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'operation': self.operation,
            'total': self.total,
            'successful': self.successful,
            'skipped': self.skipped,
            'failed': self.failed,
            'dry_run': self.dry_run,
            'interrupted': self.interrupted,
            'errors': self.errors,
        }
