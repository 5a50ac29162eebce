"""CLI: edgefn origin merge"""

import json

import click

from edgefn.errors import EdgeFunctionError
from edgefn.origin import merge


def _read_json(path: str):
    from edgefn.cli.main import _read_json
    return _read_json(path)


def _fail(err: Exception) -> None:
    from edgefn.cli.main import _fail
    _fail(err)


@click.group()
def origin():
    """Origin override tools."""


@origin.command("merge")
@click.argument("base_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("override_file", type=click.Path(exists=True, dir_okay=False))
def origin_merge(base_file, override_file):
    """Print the effective origin for BASE_FILE with OVERRIDE_FILE applied."""
    try:
        effective = merge(_read_json(base_file), _read_json(override_file))
    except (EdgeFunctionError, ValueError) as e:
        _fail(e)
    click.echo(json.dumps(effective.to_wire(), indent=2))
