"""
Link commands for repofarm.

Creates or removes the symlinks declared in categories and at the top
level of the configuration.
"""

import click

from ..cli_utils import AppContext, handle_errors, operation_options, pass_app, run_operation
from ..domain.operation import Operation


@click.command('link')
@operation_options
@click.option('--force', '-f', is_flag=True,
              help='Replace symlinks that point somewhere else (files are never replaced)')
@pass_app
@handle_errors
def link_handler(app: AppContext, categories, repos, dry_run, jobs, output_json, force):
    """Create the configured symlinks.

    Links that already point at the right file are left alone. A symlink
    pointing elsewhere is only replaced with --force.

    \b
    Examples:
        repofarm link
        repofarm link -c dots --force
    """
    run_operation(app, Operation.LINK, categories, repos, dry_run, jobs, output_json, force=force)


@click.command('unlink')
@operation_options
@pass_app
@handle_errors
def unlink_handler(app: AppContext, categories, repos, dry_run, jobs, output_json):
    """Remove the configured symlinks.

    Only symlinks that point at their configured source are removed.
    """
    run_operation(app, Operation.UNLINK, categories, repos, dry_run, jobs, output_json)
