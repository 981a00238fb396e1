"""nexus sync -- run a manual reconciliation pass."""

from __future__ import annotations

import click

from nexus.cli.formatting import format_state, format_synthesis


@click.command()
@click.option("--show-state", is_flag=True, help="Print the shared state afterwards.")
@click.pass_context
def sync(ctx: click.Context, show_state: bool) -> None:
    """Re-derive the objective and scratchpad from the transcript and active file."""
    from nexus.cli import _nexus_session

    with _nexus_session(ctx) as (nexus, console):
        result = nexus.synthesize()
        format_synthesis(result, console)
        if show_state:
            format_state(nexus.state, console)
        if not result.success:
            raise SystemExit(1)
