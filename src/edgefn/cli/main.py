"""
edgefn CLI: `edgefn` command.

Commands:
  edgefn validate <event>              Check an event envelope
  edgefn invoke <handler> <event>      Run a handler against an event locally
  edgefn kvs get|exists|meta           Query a JSON key value store file
  edgefn origin merge <base> <patch>   Compute an effective origin
  edgefn config show|set               CLI defaults (~/.edgefn/config.json)
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.markup import escape
except ImportError:
    raise SystemExit("CLI requires extras: pip install edgefn[cli]")

from edgefn.transport.memory import MemoryStore

console = Console()
DEFAULT_CONFIG_FILE = Path.home() / ".edgefn" / "config.json"


def _config_file() -> Path:
    return Path(os.environ.get("EDGEFN_CONFIG", DEFAULT_CONFIG_FILE))


def _load_config() -> dict:
    try:
        return json.loads(_config_file().read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    path = _config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {escape(str(e))}[/red]")
        raise SystemExit(1)


def _get_store(kvs_file: Optional[str], kvs_id: Optional[str]) -> Optional[MemoryStore]:
    cfg = _load_config()
    path = kvs_file or cfg.get("kvs_file")
    if not path:
        return None
    return MemoryStore.from_file(path, kvs_id or cfg.get("kvs_id"))


def _run(coro):
    return asyncio.run(coro)


def _fail(err: Exception) -> None:
    code = getattr(err, "code", "invalid_input")
    console.print(f"[red]{code}: {escape(str(err))}[/red]")
    raise SystemExit(1)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log dispatch details to stderr")
def main(verbose: bool):
    """edgefn: validate and run edge function handlers locally."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


# Register subcommands from separate modules
from edgefn.cli.invoke import invoke_cmd, validate_cmd
from edgefn.cli.kvs import kvs
from edgefn.cli.origin import origin
from edgefn.cli.config import config

main.add_command(validate_cmd)
main.add_command(invoke_cmd)
main.add_command(kvs)
main.add_command(origin)
main.add_command(config)


if __name__ == "__main__":
    main()
