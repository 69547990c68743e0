# src/topoconf/cli/start.py
"""
Start command for the topoconf CLI.

Runs the controller: every KubeletConfig is reconciled at startup and then
again on each resync interval.
"""

import asyncio
import logging
import signal
import traceback

import typer

from ..core.config import Config
from ..core.controller import KubeletConfigController
from ..core.events import KubernetesEventRecorder
from ..core.scheduler import Scheduler
from ..storage.kubernetes_store import KubernetesClusterStore
from .utils import build_reconciler

logger = logging.getLogger(__name__)

app = typer.Typer(name="start", help="Start the KubeletConfig controller.")


async def run_controller(config: Config, stop_event: asyncio.Event) -> None:
    """
    Runs the resync loop until stop_event is set.
    """
    store = KubernetesClusterStore()
    recorder = KubernetesEventRecorder()
    controller = KubeletConfigController(build_reconciler(config, store, recorder), store)
    scheduler = Scheduler()

    async def resync_kubelet_configs():
        await controller.resync()

    try:
        scheduler.add_job(resync_kubelet_configs, config.resync_interval)
        logger.info("topoconf is running. Press CTRL+C to exit.")
        await stop_event.wait()
    finally:
        await scheduler.stop()
        await controller.stop()
        await store.close()
        await recorder.close()


@app.callback(invoke_without_command=True)
def start(ctx: typer.Context) -> None:
    """
    Start the controller loop.
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = Config().validate()
    except ValueError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(
        "Initializing topoconf (namespace=%s, declaration=%s, resync=%s)",
        config.NAMESPACE,
        config.DECLARATION_NAME,
        config.RESYNC_INTERVAL,
    )

    async def _main():
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop_event.set)
        await run_controller(config, stop_event)

    try:
        asyncio.run(_main())
        logger.info("Shutting down topoconf gracefully.")
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}")
        logger.error("Controller failed: %s", traceback.format_exc())
        raise typer.Exit(code=1)
