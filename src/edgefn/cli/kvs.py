"""CLI: edgefn kvs get|exists|meta"""

import json

import click
from rich.console import Console
from rich.table import Table

from edgefn.errors import EdgeFunctionError
from edgefn.kvs import FORMATS, KvsClient

console = Console()


def _get_store(kvs_file, kvs_id):
    from edgefn.cli.main import _get_store
    return _get_store(kvs_file, kvs_id)


def _run(coro):
    from edgefn.cli.main import _run
    return _run(coro)


def _fail(err: Exception) -> None:
    from edgefn.cli.main import _fail
    _fail(err)


@click.group()
@click.option("--kvs-file", default=None, help="JSON file backing the store (default from config)")
@click.option("--kvs-id", default=None)
@click.pass_context
def kvs(ctx: click.Context, kvs_file, kvs_id):
    """Query a key value store file."""
    try:
        store = _get_store(kvs_file, kvs_id)
    except (OSError, ValueError) as e:
        _fail(e)
    ctx.obj = KvsClient(store, kvs_id)


@kvs.command("get")
@click.argument("key")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default="string")
@click.pass_obj
def kvs_get(client: KvsClient, key, fmt):
    """Print the value stored under KEY."""
    try:
        value = _run(client.get(key, fmt))
    except EdgeFunctionError as e:
        _fail(e)
    if fmt == "json":
        click.echo(json.dumps(value, indent=2))
    else:
        click.echo(value, nl=fmt == "string")


@kvs.command("exists")
@click.argument("key")
@click.pass_obj
def kvs_exists(client: KvsClient, key):
    """Exit 0 if KEY exists, 1 otherwise."""
    try:
        found = _run(client.exists(key))
    except EdgeFunctionError as e:
        _fail(e)
    console.print("[green]yes[/green]" if found else "[yellow]no[/yellow]")
    if not found:
        raise SystemExit(1)


@kvs.command("meta")
@click.option("--json-output", "--json", is_flag=True)
@click.pass_obj
def kvs_meta(client: KvsClient, json_output):
    """Show store metadata."""
    try:
        meta = _run(client.meta())
    except EdgeFunctionError as e:
        _fail(e)
    if json_output:
        click.echo(json.dumps(meta.to_wire(), indent=2))
        return
    table = Table(title=f"Key value store {client.kvs_id}")
    table.add_column("Created")
    table.add_column("Last updated")
    table.add_column("Keys", justify="right")
    table.add_row(meta.creation_date_time.isoformat(), meta.last_updated_date_time.isoformat(), str(meta.key_count))
    console.print(table)
