"""CLI entrypoint.

    obfuscate TypeName

CONTRACT
- Inputs: exactly one positional argument (the Go type name), run in the
  directory of the Go package that declares it
- Outputs (required):
  - gen_<typename>_obfuscated.go in the current directory
  - Exit code 0 on success
- Invariants:
  - Any other argument count prints `usage: obfuscate typeName` and exits 2
  - No flag selects another package directory
- Failure:
  - Run errors are logged with their stage and exit with code 1
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from .config import build_config
from .errors import FormatterError, ObfuscateError
from .orchestrator import run_generate
from .util.logs import configure_logging

USAGE = "usage: obfuscate typeName"

app = typer.Typer(add_completion=False, help="Generate redacting String()/GoString() methods for a Go type.")
console = Console()


def _version_callback(value: bool):
    if value:
        from . import __version__

        console.print(f"obfuscate version: {__version__}")
        raise typer.Exit()


@app.command()
def main(
    args: list[str] | None = typer.Argument(None, metavar="TYPENAME", show_default=False),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug details."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
) -> None:
    """Generate redacting String()/GoString() methods for TYPENAME."""
    if not args or len(args) != 1:
        typer.echo(USAGE)
        raise typer.Exit(code=2)
    type_name = args[0]

    log = configure_logging(verbose)
    try:
        cfg = build_config(type_name, Path.cwd())
    except ValueError as e:
        log.error(f"invalid configuration: {e}")
        raise typer.Exit(code=1) from e

    try:
        result = asyncio.run(run_generate(cfg, log))
    except FormatterError as e:
        log.bind(stage=e.stage).error(f"{e}\n{e.output}".rstrip())
        raise typer.Exit(code=1) from e
    except ObfuscateError as e:
        log.bind(stage=e.stage).error(f"{type_name}: {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Wrote[/green] {result.output_path.name} ({result.shape.value} {result.type_name})")


if __name__ == "__main__":
    app()
