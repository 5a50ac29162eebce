"""CLI: edgefn validate, edgefn invoke"""

import importlib
import importlib.util
import json
from pathlib import Path
from typing import Callable, Optional

import click
from rich.console import Console
from rich.markup import escape

from edgefn.dispatch import run_invocation
from edgefn.errors import EdgeFunctionError
from edgefn.events import construct_event
from edgefn.models.event import Response
from edgefn.runtime import EdgeRuntime

console = Console()


def _read_json(path: str):
    from edgefn.cli.main import _read_json
    return _read_json(path)


def _load_config() -> dict:
    from edgefn.cli.main import _load_config
    return _load_config()


def _get_store(kvs_file, kvs_id):
    from edgefn.cli.main import _get_store
    return _get_store(kvs_file, kvs_id)


def _run(coro):
    from edgefn.cli.main import _run
    return _run(coro)


def _fail(err: Exception) -> None:
    from edgefn.cli.main import _fail
    _fail(err)


def load_handler(ref: str) -> Callable:
    """Resolve `module:function` or `path/to/file.py:function`."""
    target, sep, name = ref.rpartition(":")
    if not sep or not target or not name:
        raise click.BadParameter(f"expected module:function, got {ref!r}", param_hint="HANDLER")
    if target.endswith(".py"):
        path = Path(target)
        module_spec = importlib.util.spec_from_file_location(path.stem, path)
        if module_spec is None or module_spec.loader is None:
            raise click.BadParameter(f"cannot load {target}", param_hint="HANDLER")
        module = importlib.util.module_from_spec(module_spec)
        module_spec.loader.exec_module(module)
    else:
        module = importlib.import_module(target)
    handler = getattr(module, name, None)
    if not callable(handler):
        raise click.BadParameter(f"{name!r} is not a callable in {target}", param_hint="HANDLER")
    return handler


@click.command("validate")
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False))
def validate_cmd(event_file: str):
    """Validate an event envelope file."""
    try:
        event = construct_event(_read_json(event_file))
    except EdgeFunctionError as e:
        _fail(e)
    console.print(f"[green]Valid {event.phase.value} event[/green]: {escape(event.request.method)} {escape(event.request.uri)}")


@click.command("invoke")
@click.argument("handler_ref", metavar="HANDLER")
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--kvs-file", default=None, help="JSON file backing the key value store")
@click.option("--kvs-id", default=None, help="Id of the key value store")
@click.option("--origin-file", default=None, help="JSON file with the assigned origin")
@click.option("--json-output", "--json", is_flag=True)
def invoke_cmd(handler_ref: str, event_file: str, kvs_file: Optional[str], kvs_id: Optional[str],
               origin_file: Optional[str], json_output: bool):
    """Run HANDLER (module:function) against an event file."""
    handler = load_handler(handler_ref)
    raw_event = _read_json(event_file)
    origin_path = origin_file or _load_config().get("origin_file")
    base_origin = _read_json(origin_path) if origin_path else None

    try:
        runtime = EdgeRuntime(store=_get_store(kvs_file, kvs_id), origin=base_origin)
        result, invocation = _run(run_invocation(handler, raw_event, runtime))
    except (EdgeFunctionError, OSError, ValueError) as e:
        _fail(e)

    kind = "response" if isinstance(result, Response) else "request"
    origin = invocation.origin.to_wire() if invocation.origin else None
    if json_output:
        click.echo(json.dumps({"kind": kind, "result": result.to_wire(), "origin": origin}, indent=2))
        return
    console.print(f"[green]Handler returned a {kind}[/green]")
    console.print_json(data=result.to_wire())
    if origin:
        console.print("[cyan]Effective origin[/cyan]")
        console.print_json(data=origin)
