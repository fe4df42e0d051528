"""
Operation dispatcher for repofarm.

Applies one operation across the selected categories: resolves each
category's repositories, checks flag eligibility, gets commit messages,
drives the executor and records one outcome per repository or link.
A failing item is recorded and the run goes on with the next one.
"""

import logging
import signal
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Generator, Iterator, List, Optional, Tuple, Union

from ..domain.category import Category
from ..domain.configuration import Configuration
from ..domain.link import Link
from ..domain.operation import (
    Operation,
    OperationDetail,
    OperationStatus,
    RunResult,
    Selection,
)
from ..domain.repository import RepoEntry
from ..exit_codes import SelectionError
from ..infra.executor import Executor
from ..infra.result import CommandResult
from .commit_message import (
    DEFAULT_QUICK_MESSAGE,
    ClickEditor,
    MessageStrategy,
    QuickMessage,
    strategy_for_category,
)
from .policy import ineligible_reason, is_eligible
from .resolver import resolve

logger = logging.getLogger(__name__)

ACTIONS = {
    Operation.CLONE: "cloned",
    Operation.PULL: "pulled",
    Operation.PUSH: "pushed",
    Operation.ADD: "added",
    Operation.COMMIT: "committed",
    Operation.QUICK: "synced",
    Operation.LINK: "linked",
    Operation.UNLINK: "unlinked",
}

Progress = Union[str, OperationDetail]


@dataclass
class DispatchOptions:
    """Options for a dispatcher run."""
    dry_run: bool = False
    jobs: int = 1  # Number of concurrent operations per category (1 = sequential)
    force: bool = False  # Replace symlinks that point elsewhere
    quick_message: str = DEFAULT_QUICK_MESSAGE


@dataclass
class _Item:
    """One repository or link queued for an operation."""
    category: Optional[str]
    name: str
    kind: str
    path: Optional[str] = None
    entry: Optional[RepoEntry] = None
    link: Optional[Link] = None
    message: Optional[str] = None
    skip_reason: Optional[str] = None

    @property
    def label(self) -> str:
        scope = self.category if self.category is not None else "global"
        return f"{scope}/{self.name}"


class Dispatcher:
    """
    Runs operations over a configuration.

    Example:
        dispatcher = Dispatcher(config)
        result = dispatcher.run(Operation.PULL, Selection(categories=("dots",)))
        print(f"{result.failed} of {result.total} failed")

        # Or stream progress while it runs
        for progress in dispatcher.iter_run(Operation.CLONE):
            print(progress)
        result = dispatcher.last_result
    """

    def __init__(
        self,
        config: Configuration,
        executor: Optional[Executor] = None,
        options: Optional[DispatchOptions] = None,
        editor: Optional[ClickEditor] = None,
    ):
        """
        Initialize Dispatcher.

        Args:
            config: Validated configuration
            executor: Side-effect collaborator (creates a real one if None)
            options: Run options
            editor: Editor collaborator for interactive commit messages
        """
        self.config = config
        self.executor = executor or Executor()
        self.options = options or DispatchOptions()
        self.editor = editor
        self.last_result: Optional[RunResult] = None
        self._cancel = threading.Event()
        self._path_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Stop starting new items; in-flight ones finish."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @contextmanager
    def interrupt_guard(self) -> Iterator[None]:
        """Turn SIGINT into cancel() while the block runs."""
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def handle_interrupt(signum, frame):
            logger.warning("Interrupted, letting running operations finish")
            self.cancel()

        previous = signal.signal(signal.SIGINT, handle_interrupt)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        operation: Operation,
        selection: Optional[Selection] = None,
        strategy: Optional[MessageStrategy] = None,
    ) -> RunResult:
        """
        Apply ``operation`` to ``selection`` and return the aggregated result.

        Args:
            operation: Operation to apply
            selection: Categories/repositories to apply it to (all if None)
            strategy: Commit message strategy; defaults from category flags

        Returns:
            RunResult with one detail per attempted repository or link

        Raises:
            SelectionError: Unknown category or repository name
            DanglingReferenceError: A selected category has a dangling key
        """
        progress = self.iter_run(operation, selection, strategy)
        while True:
            try:
                next(progress)
            except StopIteration as stop:
                return stop.value

    def iter_run(
        self,
        operation: Operation,
        selection: Optional[Selection] = None,
        strategy: Optional[MessageStrategy] = None,
    ) -> Generator[Progress, None, RunResult]:
        """
        Generator form of run().

        Yields:
            A "<category>/<name>: <operation>" string before each item starts,
            then the item's OperationDetail once it is done

        Returns:
            RunResult with results
        """
        selection = selection or Selection.all()
        result = RunResult(operation=operation.value, dry_run=self.options.dry_run)
        self.last_result = result

        # Everything is resolved before the first side effect
        groups = self._select(selection)

        for category, entries in groups:
            if operation.is_link_operation:
                items = [self._link_item(category.name, link) for link in category.links]
            else:
                category_strategy = strategy or self._default_strategy(operation, category)
                items = self._repo_items(operation, category, entries, category_strategy)
            yield from self._run_items(operation, items, result)

        if operation.is_link_operation and selection.wants_global_links:
            items = [self._link_item(None, link) for link in self.config.links]
            yield from self._run_items(operation, items, result)

        result.interrupted = self.cancelled
        return result

    # ------------------------------------------------------------------
    # Selection and planning
    # ------------------------------------------------------------------

    def _select(self, selection: Selection) -> List[Tuple[Category, List[RepoEntry]]]:
        """Resolve the selected categories, narrowed to the selected repos."""
        categories = self.config.categories

        unknown = [name for name in selection.categories if name not in categories]
        if unknown:
            raise SelectionError(f"Unknown categories: {', '.join(unknown)}")

        missing = [name for name in selection.repos if name not in self.config.store]
        if missing:
            raise SelectionError(f"Unknown repositories: {', '.join(missing)}")

        names = selection.categories or tuple(categories)
        groups = []
        for name in names:
            category = categories[name]
            entries = [e for e in resolve(category, self.config.store) if selection.includes_repo(e.name)]
            groups.append((category, entries))
        return groups

    def _default_strategy(self, operation: Operation, category: Category) -> Optional[MessageStrategy]:
        if not operation.needs_message:
            return None
        if operation is Operation.QUICK:
            return QuickMessage(self.options.quick_message)
        return strategy_for_category(category, self.editor, self.options.quick_message)

    def _repo_items(
        self,
        operation: Operation,
        category: Category,
        entries: List[RepoEntry],
        strategy: Optional[MessageStrategy],
    ) -> Iterator[_Item]:
        """Plan each repository lazily, so messages are asked for in order."""
        for entry in entries:
            working_dir = entry.working_dir
            item = _Item(
                category=category.name,
                name=entry.name,
                kind="repo",
                path=str(working_dir) if working_dir is not None else None,
                entry=entry,
            )

            if self.cancelled:
                item.skip_reason = "interrupted"
            elif not is_eligible(entry, operation):
                item.skip_reason = ineligible_reason(entry, operation)
            elif operation.needs_url and not entry.url:
                item.skip_reason = "no url configured"
            elif working_dir is None:
                item.skip_reason = "no path configured"
            elif strategy is not None and not self.options.dry_run:
                item.message = strategy.message_for(entry, category.name)
                if item.message is None:
                    item.skip_reason = "commit message cancelled"

            yield item

    def _link_item(self, category: Optional[str], link: Link) -> _Item:
        return _Item(
            category=category,
            name=link.label,
            kind="link",
            path=str(link.target_path),
            link=link,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _run_items(
        self,
        operation: Operation,
        items,
        result: RunResult,
    ) -> Generator[Progress, None, None]:
        if self.options.jobs > 1:
            yield from self._run_parallel(operation, list(items), result)
        else:
            yield from self._run_sequential(operation, items, result)

    def _run_sequential(self, operation: Operation, items, result: RunResult) -> Generator[Progress, None, None]:
        for item in items:
            if item.skip_reason is None:
                yield f"{item.label}: {operation.value}"
            detail = self._execute(operation, item)
            result.add_detail(detail)
            yield detail

    def _run_parallel(self, operation: Operation, items: List[_Item], result: RunResult) -> Generator[Progress, None, None]:
        if not items:
            return
        yield f"{operation.value}: {len(items)} items (jobs={self.options.jobs})"

        with ThreadPoolExecutor(max_workers=self.options.jobs) as pool:
            futures = [pool.submit(self._execute, operation, item) for item in items]

            # Declared order, whatever order they finish in
            for future in futures:
                detail = future.result()
                result.add_detail(detail)
                yield detail

    def _execute(self, operation: Operation, item: _Item) -> OperationDetail:
        """Run one item and turn its outcome into a detail. Never raises."""
        if item.skip_reason is None and self.cancelled:
            item.skip_reason = "interrupted"

        if item.skip_reason is not None:
            return self._detail(item, OperationStatus.SKIPPED, "skipped", message=item.skip_reason)

        if self.options.dry_run:
            return self._detail(item, OperationStatus.DRY_RUN, f"would_{operation.value}")

        with self._lock_for(item.path):
            try:
                outcome = self._invoke(operation, item)
            except Exception as e:
                logger.warning(f"{item.label}: {operation.value} raised {e!r}")
                return self._detail(item, OperationStatus.FAILED, f"{operation.value}_failed", error=str(e))

        if outcome.skipped:
            return self._detail(item, OperationStatus.SKIPPED, "unchanged", message=outcome.skipped)
        if outcome.success:
            return self._detail(item, OperationStatus.SUCCESS, ACTIONS[operation], message=outcome.output or None)

        logger.warning(f"{item.label}: {operation.value} failed ({outcome.returncode}): {outcome.output}")
        return self._detail(
            item,
            OperationStatus.FAILED,
            f"{operation.value}_failed",
            error=outcome.output or "Unknown error",
            returncode=outcome.returncode,
        )

    def _invoke(self, operation: Operation, item: _Item) -> CommandResult:
        executor = self.executor

        if operation is Operation.LINK:
            return executor.create_link(item.link, force=self.options.force)
        if operation is Operation.UNLINK:
            return executor.remove_link(item.link)

        entry = item.entry
        if operation is Operation.CLONE:
            return executor.clone(entry)
        if operation is Operation.PULL:
            return executor.pull(entry)
        if operation is Operation.PUSH:
            return executor.push(entry)
        if operation is Operation.ADD:
            return executor.add(entry)
        if operation is Operation.COMMIT:
            return executor.commit(entry, item.message)
        if operation is Operation.QUICK:
            return self._quick(entry, item.message)
        raise ValueError(f"Unsupported operation: {operation}")

    def _quick(self, entry: RepoEntry, message: str) -> CommandResult:
        """Pull, stage, commit and push; stop at the first failing step."""
        steps = [
            ("pull", lambda: self.executor.pull(entry)),
            ("add", lambda: self.executor.add(entry)),
            ("commit", lambda: self.executor.commit(entry, message)),
            ("push", lambda: self.executor.push(entry)),
        ]
        done = []
        for step, call in steps:
            outcome = call()
            if not outcome.success:
                return CommandResult.fail(f"{step}: {outcome.output}", outcome.returncode)
            if not outcome.skipped:
                done.append(step)
        return CommandResult.ok(', '.join(done))

    @contextmanager
    def _lock_for(self, path: Optional[str]) -> Iterator[None]:
        """Serialize items that touch the same working tree or link target."""
        if path is None:
            yield
            return
        with self._locks_guard:
            lock = self._path_locks.setdefault(path, threading.Lock())
        with lock:
            yield

    def _detail(
        self,
        item: _Item,
        status: OperationStatus,
        action: str,
        message: Optional[str] = None,
        error: Optional[str] = None,
        returncode: Optional[int] = None,
    ) -> OperationDetail:
        return OperationDetail(
            category=item.category,
            name=item.name,
            kind=item.kind,
            status=status,
            action=action,
            path=item.path,
            message=message,
            error=error,
            returncode=returncode,
        )
