"""nexus reset -- factory reset of the saved state."""

from __future__ import annotations

import click

from nexus.cli.formatting import format_error, get_console


@click.command()
@click.option("--force", is_flag=True, help="Required: confirms the reset.")
@click.pass_context
def reset(ctx: click.Context, force: bool) -> None:
    """Erase the saved objective, scratchpad, active file and error log."""
    from nexus.cli import _nexus_session

    if not force:
        format_error("Factory reset requires --force flag.", get_console())
        raise SystemExit(1)

    with _nexus_session(ctx) as (nexus, console):
        nexus.factory_reset()
        console.print("Nexus state reset to defaults.")
