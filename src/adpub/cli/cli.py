"""CLI entrypoint: Typer app definition, logging setup and command registration"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from adpub.cli.commands import compile_cmd, diff_cmd, merge_cmd, outline_cmd, validate_cmd
from adpub.config import load_config


app = typer.Typer(name="adpub", no_args_is_help=True, help="Compile outline documents into addressable records")


def setup_logging(verbose: bool = False, level: str = "WARNING") -> None:
    """Route all log records through a rich handler on stderr; verbose forces DEBUG."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Compile outline documents into addressable records."""
    try:
        level = load_config().log_level
    except ValueError:
        level = "WARNING"   # commands report the config error themselves
    setup_logging(verbose, level)


app.command(name="validate")(validate_cmd)
app.command(name="compile")(compile_cmd)
app.command(name="outline")(outline_cmd)
app.command(name="merge")(merge_cmd)
app.command(name="diff")(diff_cmd)
