"""Rich formatting helpers for the Nexus CLI.

Provides functions that format engine data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nexus.models.agents import SYSTEM_AUTHOR, USER_AUTHOR, AgentStatus
from nexus.models.transcript import EntryKind

if TYPE_CHECKING:
    from nexus.models.errors import ErrorRecord
    from nexus.models.state import ContextState
    from nexus.models.transcript import TranscriptEntry
    from nexus.orchestrator.models import RoundResult
    from nexus.orchestrator.roster import AgentRoster
    from nexus.sync.synthesis import SynthesisResult

_STATUS_STYLES = {
    AgentStatus.IDLE: "green",
    AgentStatus.PROCESSING: "yellow",
    AgentStatus.ERROR: "red",
}

_PREVIEW_LINES = 12


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {message}", highlight=False)


def format_entry(entry: TranscriptEntry, console: Console) -> None:
    """Display one transcript entry with its tool invocations."""
    if entry.kind == EntryKind.ERROR:
        style = "red"
    elif entry.kind in (EntryKind.SYNTHESIS, EntryKind.RESTORE):
        style = "magenta"
    elif entry.author == USER_AUTHOR:
        style = "cyan"
    elif entry.author == SYSTEM_AUTHOR:
        style = "dim"
    else:
        style = "bold"

    stamp = entry.created_at.strftime("%H:%M:%S")
    console.print(f"[dim]{stamp}[/dim] [{style}]{escape(entry.author)}[/{style}]")
    if entry.content:
        console.print(escape(entry.content), highlight=False)
    for invocation in entry.tool_invocations:
        mark = "[green]ok[/green]" if invocation.succeeded else "[red]failed[/red]"
        outcome = escape(invocation.outcome.replace("\n", "; "))
        console.print(f"  [dim]tool[/dim] {escape(invocation.tool_name)} {mark}: {outcome}")
    console.print()


def format_round(result: RoundResult, console: Console) -> None:
    """Display every entry produced by a round."""
    if not result.turns:
        console.print("[dim]No agents to run.[/dim]")
        return
    for turn in result.turns:
        format_entry(turn.entry, console)
    if result.failed:
        failed = ", ".join(turn.role for turn in result.failed)
        console.print(f"[red]{len(result.failed)} turn(s) failed:[/red] {escape(failed)}")


def format_synthesis(result: SynthesisResult, console: Console) -> None:
    if result.entry is not None:
        format_entry(result.entry, console)
    if result.rationale:
        console.print(f"[dim]Rationale: {escape(result.rationale)}[/dim]")


def format_state(state: ContextState, console: Console) -> None:
    """Display the shared state: objective, scratchpad, active file preview."""
    console.print(f"[bold]Objective:[/bold] {escape(state.objective) or '[dim](none)[/dim]'}")
    console.print(
        Panel(
            escape(state.scratchpad) or "[dim](empty)[/dim]",
            title="Scratchpad",
            title_align="left",
        )
    )

    lines = state.artifact_content.split("\n") if state.artifact_content else []
    preview = "\n".join(lines[:_PREVIEW_LINES])
    if len(lines) > _PREVIEW_LINES:
        preview += f"\n... ({len(lines) - _PREVIEW_LINES} more lines)"
    console.print(
        Panel(
            escape(preview) or "[dim]// No content[/dim]",
            title=f"{escape(state.artifact_label)} ({state.artifact_bytes} bytes)",
            title_align="left",
        )
    )


def format_agents(roster: AgentRoster, console: Console) -> None:
    """Display agents in execution order with priority, mute and status."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Role", style="cyan")
    table.add_column("Name")
    table.add_column("Priority")
    table.add_column("Muted")
    table.add_column("Status")

    queue = [agent.role for agent in roster.execution_queue()]
    statuses = roster.statuses()
    for agent in roster.agents():
        position = str(queue.index(agent.role) + 1) if agent.role in queue else "-"
        status = statuses.get(agent.role, AgentStatus.IDLE)
        style = _STATUS_STYLES[status]
        table.add_row(
            position,
            escape(agent.role),
            escape(agent.name),
            agent.priority.value,
            "yes" if agent.muted else "",
            f"[{style}]{status.value}[/{style}]",
        )
    console.print(table)


def format_errors(records: list[ErrorRecord], console: Console) -> None:
    """Display recorded failures, oldest first."""
    if not records:
        console.print("[dim]No recorded errors.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Time", style="dim")
    table.add_column("Kind", style="red")
    table.add_column("Context", style="cyan")
    table.add_column("Message")
    table.add_column("Hint", style="dim")
    for record in records:
        table.add_row(
            record.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            record.kind.value,
            escape(record.context),
            escape(record.message),
            escape(record.hint or ""),
        )
    console.print(table)
