"""
Repository operation commands for repofarm.

Each command applies one git operation across the selected categories:
- clone, pull, push, add
- commit (quick, fast or editor message)
- quick (pull, add, commit and push in one pass)
"""

from typing import Optional

import click

from ..cli_utils import AppContext, handle_errors, operation_options, pass_app, run_operation
from ..domain.operation import Operation


@click.command('clone')
@operation_options
@pass_app
@handle_errors
def clone_handler(app: AppContext, categories, repos, dry_run, jobs, output_json):
    """Clone repositories that are not checked out yet.

    Only repositories with the 'clone' flag (or no flags at all) are cloned.
    Existing checkouts are left alone.

    \b
    Examples:
        repofarm clone
        repofarm clone -c dots --dry-run
    """
    run_operation(app, Operation.CLONE, categories, repos, dry_run, jobs, output_json)


@click.command('pull')
@operation_options
@pass_app
@handle_errors
def pull_handler(app: AppContext, categories, repos, dry_run, jobs, output_json):
    """Pull updates for the selected repositories."""
    run_operation(app, Operation.PULL, categories, repos, dry_run, jobs, output_json)


@click.command('push')
@operation_options
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
@pass_app
@handle_errors
def push_handler(app: AppContext, categories, repos, dry_run, jobs, output_json, yes):
    """Push the selected repositories to their remotes.

    \b
    Examples:
        repofarm push --dry-run
        repofarm push -c work --yes
    """
    if not yes and not dry_run:
        click.confirm("Push the selected repositories?", abort=True, err=True)
    run_operation(app, Operation.PUSH, categories, repos, dry_run, jobs, output_json)


@click.command('add')
@operation_options
@pass_app
@handle_errors
def add_handler(app: AppContext, categories, repos, dry_run, jobs, output_json):
    """Stage every change in the selected repositories."""
    run_operation(app, Operation.ADD, categories, repos, dry_run, jobs, output_json)


@click.command('commit')
@operation_options
@click.option('--quick', 'mode', flag_value='quick', help='Use the quick commit message')
@click.option('--fast', 'mode', flag_value='fast', help='Use a generated timestamp message')
@click.option('--edit', 'mode', flag_value='edit', help='Write each message in $EDITOR')
@click.option('--message', '-m', help='Commit message for every repository')
@pass_app
@handle_errors
def commit_handler(app: AppContext, categories, repos, dry_run, jobs, output_json,
                   mode: Optional[str], message: Optional[str]):
    """Commit staged changes in the selected repositories.

    Without a mode flag the message comes from each category's flags:
    'quick' categories use the quick message, 'fast' categories a generated
    one, and everything else opens an editor per repository.

    \b
    Examples:
        repofarm commit -m "Update dotfiles"
        repofarm commit --fast -c notes
    """
    if message is not None and mode not in (None, 'quick'):
        raise click.UsageError("--message can only be combined with --quick")

    if message is not None:
        mode = 'quick'

    run_operation(app, Operation.COMMIT, categories, repos, dry_run, jobs, output_json,
                  commit_mode=mode, quick_message=message)


@click.command('quick')
@click.argument('message', required=False)
@operation_options
@pass_app
@handle_errors
def quick_handler(app: AppContext, message: Optional[str], categories, repos, dry_run, jobs, output_json):
    """Pull, stage, commit and push in one pass.

    Repositories need both the 'pull' and 'push' flags (or no flags).

    \b
    Examples:
        repofarm quick
        repofarm quick "Sync notes" -c notes
    """
    run_operation(app, Operation.QUICK, categories, repos, dry_run, jobs, output_json,
                  quick_message=message)
