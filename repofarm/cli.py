#!/usr/bin/env python3

import copy
from pathlib import Path

import click

from repofarm import __version__
from repofarm.cli_utils import AppContext
from repofarm.commands.config import config_cmd
from repofarm.commands.link import link_handler, unlink_handler
from repofarm.commands.list import list_handler
from repofarm.commands.ops import (
    add_handler,
    clone_handler,
    commit_handler,
    pull_handler,
    push_handler,
    quick_handler,
)

LICENSE_NOTICE = """\
repofarm  Copyright (C) the repofarm authors
This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

See <https://www.gnu.org/licenses/> for the full license text."""

WARRANTY_NOTICE = """\
THERE IS NO WARRANTY FOR THE PROGRAM, TO THE EXTENT PERMITTED BY
APPLICABLE LAW. EXCEPT WHEN OTHERWISE STATED IN WRITING THE COPYRIGHT
HOLDERS AND/OR OTHER PARTIES PROVIDE THE PROGRAM "AS IS" WITHOUT WARRANTY
OF ANY KIND, EITHER EXPRESSED OR IMPLIED, INCLUDING, BUT NOT LIMITED TO,
THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR
PURPOSE. THE ENTIRE RISK AS TO THE QUALITY AND PERFORMANCE OF THE PROGRAM
IS WITH YOU. SHOULD THE PROGRAM PROVE DEFECTIVE, YOU ASSUME THE COST OF
ALL NECESSARY SERVICING, REPAIR OR CORRECTION."""


def _print_notice(text):
    def callback(ctx, param, value):
        if not value or ctx.resilient_parsing:
            return
        click.echo(text)
        ctx.exit()
    return callback


@click.group()
@click.version_option(__version__, prog_name='repofarm')
@click.option('--config', '-C', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Configuration file (default: $REPOFARM_CONFIG or ~/.config/repofarm/config.yaml)')
@click.option('--quiet', '-q', is_flag=True, help='Hide per-item progress (the summary is still shown)')
@click.option('--no-emoji', is_flag=True, help='Plain-word status markers instead of emoji')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--license', is_flag=True, expose_value=False, is_eager=True,
              callback=_print_notice(LICENSE_NOTICE), help='Show license information and exit')
@click.option('--warranty', is_flag=True, expose_value=False, is_eager=True,
              callback=_print_notice(WARRANTY_NOTICE), help='Show warranty information and exit')
@click.pass_context
def cli(ctx, config_path, quiet, no_emoji, debug):
    """repofarm - Declarative manager for a farm of git repositories and symlinks.

    Repositories are declared once in a YAML store and grouped into
    categories; every command applies one operation across the selected
    categories and reports each repository and link on its own.

    \b
    Examples:
        repofarm clone                  # clone everything missing
        repofarm link -c dots           # create the dots symlinks
        repofarm quick "Sync" -c notes  # pull, commit and push notes
    """
    ctx.obj = AppContext(config_path=config_path, quiet=quiet, emoji=not no_emoji, debug=debug)


def alias(command, name):
    """Register ``command`` again under a short, hidden name."""
    short = copy.copy(command)
    short.name = name
    short.hidden = True
    return short


# Repository operations
cli.add_command(clone_handler)
cli.add_command(pull_handler)
cli.add_command(push_handler)
cli.add_command(add_handler)
cli.add_command(commit_handler)
cli.add_command(quick_handler)

# Links
cli.add_command(link_handler)
cli.add_command(unlink_handler)

# Inspection and configuration
cli.add_command(list_handler)
cli.add_command(config_cmd)

# Short aliases
cli.add_command(alias(clone_handler, 'c'))
cli.add_command(alias(pull_handler, 'p'))
cli.add_command(alias(add_handler, 'a'))
cli.add_command(alias(commit_handler, 'ct'))
cli.add_command(alias(quick_handler, 'q'))
cli.add_command(alias(link_handler, 'l'))


def main():
    cli()

if __name__ == "__main__":
    main()
