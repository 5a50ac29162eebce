"""CLI: edgefn config show|set"""

import click
from rich.console import Console

console = Console()

CONFIG_KEYS = ("kvs_file", "kvs_id", "origin_file")


def _load_config() -> dict:
    from edgefn.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from edgefn.cli.main import _save_config
    _save_config(cfg)


@click.group()
def config():
    """CLI defaults."""


@config.command("show")
def config_show():
    """Print saved defaults."""
    cfg = _load_config()
    if not cfg:
        console.print("[yellow]No defaults saved.[/yellow]")
        return
    console.print_json(data=cfg)


@config.command("set")
@click.argument("key", type=click.Choice(CONFIG_KEYS))
@click.argument("value")
def config_set(key, value):
    """Save a default."""
    _save_config({**_load_config(), key: value})
    console.print(f"[green]{key} = {value}[/green]")
