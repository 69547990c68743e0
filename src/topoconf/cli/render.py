# src/topoconf/cli/render.py
"""
Render command: prints the agent configuration that would be published for
the given topology manager settings.
"""

from typing import List, Optional

import typer
from typing_extensions import Annotated

from ..core.codec import read_file, render
from ..core.exceptions import CodecError
from .utils import parse_pod_excludes

app = typer.Typer(name="render", help="Render the resource-topology agent configuration.")


@app.callback(invoke_without_command=True)
def render_config(
    ctx: typer.Context,
    policy: Annotated[Optional[str], typer.Option("--policy", help="Topology manager policy.")] = None,
    scope: Annotated[Optional[str], typer.Option("--scope", help="Topology manager scope.")] = None,
    pod_exclude: Annotated[
        Optional[List[str]],
        typer.Option("--pod-exclude", help="Pod exclude as 'namespace=name-pattern'. Repeatable."),
    ] = None,
    from_file: Annotated[
        Optional[str],
        typer.Option("--from-file", help="Start from an existing configuration file."),
    ] = None,
) -> None:
    """
    Print the rendered configuration. Command line values override the file.
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        base = read_file(from_file) if from_file else None
        pod_excludes = dict(base.pod_excludes or {}) if base else {}
        pod_excludes.update(parse_pod_excludes(pod_exclude))
        data = render(
            policy or (base.topology_manager_policy if base else None),
            scope or (base.topology_manager_scope if base else None),
            pod_excludes,
        )
    except CodecError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(data, nl=False)
