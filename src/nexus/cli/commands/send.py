"""nexus send -- post a message and run one agent round."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import click

from nexus.cli.formatting import format_entry, format_round
from nexus.models.transcript import EntryKind
from nexus.sync.trigger import TriggerState

if TYPE_CHECKING:
    from rich.console import Console

    from nexus.session import Nexus


def resolve_target(nexus: Nexus, target: str | None) -> str | None:
    """Map a user-typed target to a registered role ("all" -> None).

    Role names match case-insensitively. Unknown names are passed through
    so the roster raises UnknownAgentError.
    """
    if target is None or target.lower() == "all":
        return None
    for role in nexus.roster.roles():
        if role.lower() == target.lower():
            return role
    return target


def wait_for_sync(nexus: Nexus, console: Console, timeout: float = 30.0) -> None:
    """Drive timers until the sync trigger is idle, printing any synthesis entry."""
    seen = len(nexus.transcript)
    deadline = time.monotonic() + timeout
    while nexus.trigger.state != TriggerState.IDLE and time.monotonic() < deadline:
        time.sleep(0.1)
        nexus.tick()
    for entry in nexus.transcript.since(seen):
        if entry.kind in (EntryKind.SYNTHESIS, EntryKind.ERROR):
            format_entry(entry, console)


@click.command()
@click.argument("text")
@click.option("--to", "target", default="all", show_default=True, help="Agent role to address, or 'all'.")
@click.option("--sync/--no-sync", "wait_sync", default=False, help="Wait for the automatic sync check after the round.")
@click.pass_context
def send(ctx: click.Context, text: str, target: str, wait_sync: bool) -> None:
    """Post TEXT as the operator and run a round.

    With --to all (the default) every unmuted agent runs in priority
    order. Naming a role runs only that agent, even if it is muted.
    """
    from nexus.cli import _nexus_session

    with _nexus_session(ctx) as (nexus, console):
        result = nexus.send(text, resolve_target(nexus, target))
        format_round(result, console)
        if wait_sync:
            wait_for_sync(nexus, console)
