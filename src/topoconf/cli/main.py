# src/topoconf/cli/main.py
"""
Entry point of the topoconf CLI; wires the render, reconcile and start
sub-commands together.
"""

import logging

import typer

from .. import __version__
from ..core.config import Config
from . import reconcile, render, start

logger = logging.getLogger(__name__)


app = typer.Typer(
    name="topoconf",
    help="Keep the resource-topology agent configuration of each worker pool in sync with its KubeletConfig.",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), None)
    logging.basicConfig(
        level=numeric_level if isinstance(numeric_level, int) else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    if not isinstance(numeric_level, int):
        logger.warning("Unknown LOG_LEVEL %r, using INFO.", level)


def _echo_version() -> None:
    typer.echo(f"topoconf version: {__version__}")


def version_callback(value: bool):
    if value:
        _echo_version()
        raise typer.Exit()


@app.command()
def version():
    """
    Show the version of topoconf.
    """
    _echo_version()


@app.callback()
def main(
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    topoconf: publishes NUMA-aware topology agent settings per MachineConfigPool.
    """
    configure_logging(Config().LOG_LEVEL)


app.add_typer(render.app, name="render")
app.add_typer(reconcile.app, name="reconcile")
app.add_typer(start.app, name="start")


if __name__ == "__main__":
    app()
