"""
Configuration management commands.

Inspect, validate and extend the YAML configuration document.
"""

import json

import click
import yaml
from rich.console import Console

from ..cli_utils import AppContext, handle_errors, pass_app
from ..config import get_config_path, get_default_settings, save_config
from ..domain.configuration import Configuration
from ..domain.link import Link
from ..domain.repository import RepoEntry, RepoKind, parse_flags, repo_name
from ..infra.file_store import YamlFileStore
from ..services.resolver import resolve_all

console = Console()


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("path")
@pass_app
def show_path(app: AppContext):
    """Show the config file path being used."""
    click.echo(str(get_config_path(app.config_path)))


@config_cmd.command("show")
@click.option("--json", "output_json", is_flag=True, help="Output as single-line JSON instead of YAML")
@pass_app
@handle_errors
def show_config(app: AppContext, output_json):
    """Show the configuration in canonical form.

    Inline repositories are moved into the top-level store and categories
    list plain keys, so the output is what ``config add-repo`` would write.
    """
    config = app.load()
    document = config.to_dict()
    document['settings'] = dict(config.settings)

    if output_json:
        print(json.dumps(document, ensure_ascii=False))
    else:
        click.echo(yaml.safe_dump(document, sort_keys=False, default_flow_style=False), nl=False)


@config_cmd.command("validate")
@pass_app
@handle_errors
def validate_config(app: AppContext):
    """Check the configuration for dangling references and bad fields.

    Exits with status 66 when the configuration is invalid.
    """
    config = app.load()
    resolved = resolve_all(config)
    repo_count = sum(len(entries) for entries in resolved.values())
    console.print(f"[green]✓[/green] Configuration is valid: {get_config_path(app.config_path)}")
    console.print(
        f"  {len(config.categories)} categories, {len(config.store)} repositories, "
        f"{repo_count} references, {len(config.all_links())} links"
    )


def _load_or_new(app: AppContext) -> Configuration:
    """Load the configuration, or start an empty one if the file does not exist yet."""
    path = get_config_path(app.config_path)
    if not YamlFileStore(path).exists():
        return Configuration.from_dict({}, settings=get_default_settings(), path=path)
    return app.load()


@config_cmd.command("add-repo")
@click.argument("name")
@click.option("--path", "-p", "repo_path", help="Directory the working tree lives in")
@click.option("--url", "-u", help="Remote to clone from")
@click.option("--kind", "-k", default=RepoKind.GIT.value, show_default=True, help="Repository kind")
@click.option("--flag", "-f", "flags", multiple=True,
              help="Operation flag: clone, pull, push, fast, quick (repeatable)")
@click.option("--category", "-c", help="Category that references the repository")
@pass_app
@handle_errors
def add_repo(app: AppContext, name, repo_path, url, kind, flags, category):
    """Add or replace a repository in the store.

    NAME: Store key, also the working tree directory name

    \b
    Examples:
        repofarm config add-repo nvim -p ~/src -u git@github.com:me/nvim.git -c dots
        repofarm config add-repo notes -p ~/src -f pull -f push
    """
    entry = RepoEntry(
        name=repo_name(name),
        path=repo_path,
        url=url,
        kind=RepoKind.parse(kind),
        flags=parse_flags(flags),
    )
    config = _load_or_new(app)
    replaced = name in config.store
    written = save_config(config.with_repo(entry, category), get_config_path(app.config_path))

    verb = "Updated" if replaced else "Added"
    where = f" in category [cyan]{category}[/cyan]" if category else ""
    console.print(f"[green]✓[/green] {verb} repository [cyan]{name}[/cyan]{where} ({written})")


@config_cmd.command("add-link")
@click.argument("name")
@click.option("--tx", "--source", "tx", required=True, help="File the link points at")
@click.option("--rx", "--target", "rx", required=True, help="Where the symlink is created")
@click.option("--category", "-c", help="Category the link belongs to (global if omitted)")
@pass_app
@handle_errors
def add_link(app: AppContext, name, tx, rx, category):
    """Add a link to a category, or to the global links.

    \b
    Examples:
        repofarm config add-link nvim --tx ~/src/dots/nvim --rx ~/.config/nvim -c dots
        repofarm config add-link gitconfig --source ~/src/dots/gitconfig --target ~/.gitconfig
    """
    link = Link(tx=tx, rx=rx, name=name)
    config = _load_or_new(app)
    written = save_config(config.with_link(link, category), get_config_path(app.config_path))

    where = f"category [cyan]{category}[/cyan]" if category else "global links"
    console.print(f"[green]✓[/green] Added link [cyan]{name}[/cyan] to {where} ({written})")
