"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Optional, Tuple

import click

from .config import configure_logging, load_config
from .domain.configuration import Configuration
from .domain.operation import Operation, OperationDetail, Selection
from .exit_codes import INTERRUPTED, CommandError, exit_code_for_failures
from .infra.executor import Executor
from .infra.git_client import GitClient
from .progress import ProgressReporter
from .render import render_summary
from .services.commit_message import (
    DEFAULT_QUICK_MESSAGE,
    ClickEditor,
    EditMessage,
    FastMessage,
    MessageStrategy,
    QuickMessage,
)
from .services.dispatcher import Dispatcher, DispatchOptions

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Global options shared by every subcommand."""
    config_path: Optional[Path] = None
    quiet: bool = False
    emoji: bool = True
    debug: bool = False

    def reporter(self, enabled: Optional[bool] = None) -> ProgressReporter:
        return ProgressReporter(
            enabled=not self.quiet if enabled is None else enabled,
            use_emoji=self.emoji,
        )

    def load(self) -> Configuration:
        """Load the configuration and set up logging from its settings."""
        config = load_config(self.config_path)
        configure_logging(self.debug, config.settings)
        return config


pass_app = click.make_pass_decorator(AppContext, ensure=True)


def handle_errors(func):
    """
    Decorator that maps exceptions to exit codes:
    - CommandError subclasses exit with their own code
    - Ctrl+C exits with 130
    Click's own exceptions pass through untouched.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            ProgressReporter(enabled=False).error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except CommandError as e:
            ProgressReporter(enabled=False).error(str(e))
            sys.exit(e.exit_code)
    return wrapper


def operation_options(f):
    """Decorator to add the selection and run flags every operation takes."""
    f = click.option('--json', 'output_json', is_flag=True, help='Output results as JSONL')(f)
    f = click.option('--jobs', '-j', type=click.IntRange(min=1), default=None,
                     help='Run up to N items at once (default from settings)')(f)
    f = click.option('--dry-run', is_flag=True, help='Show what would be done without doing it')(f)
    f = click.option('--repo', '-r', 'repos', multiple=True, help='Only this repository (repeatable)')(f)
    f = click.option('--category', '-c', 'categories', multiple=True,
                     help='Only this category (repeatable)')(f)
    return f


def build_dispatcher(config: Configuration, dry_run: bool = False, jobs: Optional[int] = None,
                     force: bool = False, quick_message: Optional[str] = None) -> Dispatcher:
    """Create a Dispatcher wired to real git and symlink clients."""
    settings = config.settings
    options = DispatchOptions(
        dry_run=dry_run,
        jobs=jobs or int(settings.get('jobs', 1) or 1),
        force=force,
        quick_message=quick_message or settings.get("quick_message") or DEFAULT_QUICK_MESSAGE,
    )
    executor = Executor(git_client=GitClient(timeout=settings.get('git_timeout', 300)))
    return Dispatcher(config, executor=executor, options=options, editor=ClickEditor())


def strategy_for_mode(mode: Optional[str], dispatcher: Dispatcher) -> Optional[MessageStrategy]:
    """Commit message strategy for --quick/--fast/--edit; None keeps the category default."""
    if mode == 'quick':
        return QuickMessage(dispatcher.options.quick_message)
    if mode == 'fast':
        return FastMessage()
    if mode == 'edit':
        return EditMessage(dispatcher.editor)
    return None


def run_operation(
    app: AppContext,
    operation: Operation,
    categories: Tuple[str, ...] = (),
    repos: Tuple[str, ...] = (),
    dry_run: bool = False,
    jobs: Optional[int] = None,
    output_json: bool = False,
    force: bool = False,
    commit_mode: Optional[str] = None,
    quick_message: Optional[str] = None,
) -> None:
    """
    Load the configuration, run ``operation`` and exit with the run's code.

    Progress lines go to stderr (hidden by --quiet), JSONL details to
    stdout with --json, and the failure/skip summary always to stderr.
    """
    config = app.load()
    dispatcher = build_dispatcher(config, dry_run=dry_run, jobs=jobs, force=force,
                                  quick_message=quick_message)
    selection = Selection(categories=tuple(categories), repos=tuple(repos))
    strategy = strategy_for_mode(commit_mode, dispatcher)
    reporter = app.reporter(enabled=False if output_json else None)

    with dispatcher.interrupt_guard():
        progress_iter = dispatcher.iter_run(operation, selection, strategy)
        try:
            for progress in progress_iter:
                if isinstance(progress, OperationDetail):
                    reporter.finish(progress)
                    if output_json:
                        print(json.dumps(progress.to_dict()), flush=True)
                else:
                    reporter.start(progress)
        finally:
            reporter.stop()

    result = dispatcher.last_result
    if output_json:
        print(json.dumps(result.to_dict()), flush=True)
    render_summary(result)

    if result.interrupted:
        sys.exit(INTERRUPTED)
    sys.exit(exit_code_for_failures(result.failed))
