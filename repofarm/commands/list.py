"""
List command for repofarm.

Shows every category with the repositories and links it manages.
"""

import json
from dataclasses import replace

import click

from ..cli_utils import AppContext, handle_errors, pass_app
from ..exit_codes import SelectionError
from ..render import render_config_table


@click.command('list')
@click.option('--category', '-c', 'categories', multiple=True, help='Only this category (repeatable)')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSONL')
@pass_app
@handle_errors
def list_handler(app: AppContext, categories, output_json):
    """List categories, repositories and links.

    \b
    Examples:
        repofarm list
        repofarm list -c dots --json
    """
    config = app.load()

    unknown = [name for name in categories if name not in config.categories]
    if unknown:
        raise SelectionError(f"Unknown categories: {', '.join(unknown)}")

    if categories:
        selected = {name: config.categories[name] for name in categories}
        config = replace(config, categories=selected, links=())

    if not output_json:
        render_config_table(config)
        return

    for category in config.categories.values():
        for key in category.repo_keys:
            entry = config.store.get(key)
            working_dir = entry.working_dir
            record = {'type': 'repo', 'category': category.name, 'name': entry.name}
            record.update(entry.to_dict())
            record['kind'] = entry.kind.value
            record['working_dir'] = str(working_dir) if working_dir is not None else None
            print(json.dumps(record, ensure_ascii=False), flush=True)
        for link in category.links:
            record = {'type': 'link', 'category': category.name, 'name': link.label}
            record.update(link.to_dict())
            print(json.dumps(record, ensure_ascii=False), flush=True)

    for link in config.links:
        record = {'type': 'link', 'category': None, 'name': link.label}
        record.update(link.to_dict())
        print(json.dumps(record, ensure_ascii=False), flush=True)
