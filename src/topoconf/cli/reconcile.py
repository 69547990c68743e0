# src/topoconf/cli/reconcile.py
"""
Reconcile command: runs a single reconciliation pass for one KubeletConfig
against the cluster.
"""

import asyncio
import logging

import typer
from typing_extensions import Annotated

from ..core.config import Config
from ..core.events import KubernetesEventRecorder
from ..core.exceptions import TopoConfError
from ..core.reconciler import ReconcileRequest, ReconcileResult
from ..storage.kubernetes_store import KubernetesClusterStore
from ..utils.date_utils import format_duration
from .utils import build_reconciler

logger = logging.getLogger(__name__)

app = typer.Typer(name="reconcile", help="Reconcile one KubeletConfig once.")


async def reconcile_once(config: Config, request: ReconcileRequest) -> ReconcileResult:
    store = KubernetesClusterStore()
    recorder = KubernetesEventRecorder()
    try:
        reconciler = build_reconciler(config, store, recorder)
        return await reconciler.reconcile(request)
    finally:
        await store.close()
        await recorder.close()


@app.callback(invoke_without_command=True)
def reconcile(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", help="Name of the KubeletConfig.")],
    namespace: Annotated[str, typer.Option("--namespace", help="Namespace, empty for cluster-scoped objects.")] = "",
) -> None:
    """
    Reconcile the given KubeletConfig and report the outcome.
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = Config().validate()
        result = asyncio.run(reconcile_once(config, ReconcileRequest(name=name, namespace=namespace)))
    except TopoConfError as e:
        typer.echo(f"Reconciliation failed: {e}", err=True)
        raise typer.Exit(code=1)

    if result.requeue:
        typer.echo(f"NUMAResourcesOperator not found yet, retry in {format_duration(result.requeue_after)}.")
    else:
        typer.echo(f"KubeletConfig {ReconcileRequest(name=name, namespace=namespace)} reconciled.")
