"""nexus status -- show shared state and agents."""

from __future__ import annotations

import click

from nexus.cli.formatting import format_agents, format_state


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the objective, scratchpad, active file and agent queue."""
    from nexus.cli import _nexus_session

    with _nexus_session(ctx) as (nexus, console):
        format_state(nexus.state, console)
        format_agents(nexus.roster, console)
        if not nexus.configured:
            console.print("[yellow]No API key configured (set NEXUS_API_KEY).[/yellow]")
