"""nexus chat -- interactive session REPL."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nexus.cli.commands.send import resolve_target
from nexus.cli.formatting import (
    format_agents,
    format_entry,
    format_error,
    format_errors,
    format_state,
)
from nexus.exceptions import NexusError

if TYPE_CHECKING:
    from rich.console import Console

    from nexus.session import Nexus

HELP_TEXT = """\
Type a message to address every unmuted agent, or '@ROLE message' for one agent.
  /mute ROLE            toggle mute for an agent
  /priority ROLE [LVL]  set HIGH, NORMAL or LOW (cycles when LVL is omitted)
  /sync                 run a manual reconciliation pass
  /status               show shared state and agents
  /errors               show errors recorded this session
  /retry                re-run agents whose last turn failed
  /help                 show this help
  /quit                 leave the session"""


class ChatSession:
    """Line-oriented command dispatcher over a Nexus session."""

    def __init__(self, nexus: Nexus, console: Console) -> None:
        self.nexus = nexus
        self.console = console
        self._seen = 0

    def handle(self, line: str) -> bool:
        """Process one input line. Returns False when the session should end."""
        line = line.strip()
        if not line:
            return True
        try:
            if line.startswith("/"):
                return self._command(line)
            if line.startswith("@"):
                target, _, text = line[1:].partition(" ")
                if not text.strip():
                    format_error("Usage: @ROLE message", self.console)
                    return True
                self.nexus.send(text.strip(), resolve_target(self.nexus, target))
            else:
                self.nexus.send(line)
        except (NexusError, ValueError) as e:
            format_error(str(e), self.console)
        self.show_new_entries()
        return True

    def show_new_entries(self) -> None:
        entries = self.nexus.transcript.since(self._seen)
        self._seen += len(entries)
        for entry in entries:
            format_entry(entry, self.console)

    def _command(self, line: str) -> bool:
        parts = line[1:].split()
        if not parts:
            return True
        name, args = parts[0], parts[1:]
        name = name.lower()
        if name in ("quit", "exit", "q"):
            return False
        if name == "help":
            self.console.print(HELP_TEXT, highlight=False, markup=False)
        elif name == "mute":
            if not args:
                format_error("Usage: /mute ROLE", self.console)
            else:
                agent = self.nexus.toggle_mute(resolve_target(self.nexus, args[0]) or args[0])
                state = "muted" if agent.muted else "unmuted"
                self.console.print(f"{agent.name} {state}.")
        elif name == "priority":
            if not args:
                format_error("Usage: /priority ROLE [HIGH|NORMAL|LOW]", self.console)
            else:
                role = resolve_target(self.nexus, args[0]) or args[0]
                if len(args) > 1:
                    agent = self.nexus.set_priority(role, args[1].upper())
                else:
                    agent = self.nexus.cycle_priority(role)
                self.console.print(f"{agent.name} priority: {agent.priority.value}")
        elif name == "sync":
            self.nexus.synthesize()
        elif name == "status":
            format_state(self.nexus.state, self.console)
            format_agents(self.nexus.roster, self.console)
        elif name == "errors":
            format_errors(self.nexus.recent_errors(), self.console)
        elif name == "retry":
            result = self.nexus.retry_failed()
            if not result.turns:
                self.console.print("[dim]No failed agents to retry.[/dim]")
        else:
            format_error(f"Unknown command: /{name}. Type /help.", self.console)
        self.show_new_entries()
        return True


@click.command()
@click.option("--background/--no-background", default=True, help="Run debounced sync and saves on background threads.")
@click.pass_context
def chat(ctx: click.Context, background: bool) -> None:
    """Start an interactive session with the agent team."""
    from nexus.cli import _nexus_session

    with _nexus_session(ctx) as (nexus, console):
        session = ChatSession(nexus, console)
        console.print("[bold]Nexus chat[/bold]. Type /help for commands.")
        session.show_new_entries()
        if background:
            nexus.start_background()
        while True:
            try:
                line = click.prompt("", prompt_suffix="> ", default="", show_default=False)
            except (click.exceptions.Abort, EOFError):
                break
            if not background:
                nexus.tick()
            if not session.handle(line):
                break
