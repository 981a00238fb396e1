"""Nexus CLI -- terminal interface for a multi-agent collaboration session.

This module is NEVER imported from nexus/__init__.py.
It is only loaded via the ``nexus`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

try:
    import click
    from dotenv import load_dotenv
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install nexus-context[cli]"
    ) from None

from nexus.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from nexus.session import Nexus


@click.group()
@click.option(
    "--db",
    default=".nexus.db",
    envvar="NEXUS_DB",
    help="Path to the Nexus state database.",
)
@click.option("-v", "--verbose", count=True, help="Log to stderr (-vv for debug).")
@click.pass_context
def cli(ctx: click.Context, db: str, verbose: int) -> None:
    """Nexus: shared-state collaboration between Architect, Engineer and Critic agents."""
    load_dotenv()
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db


def _get_nexus(ctx: click.Context) -> Nexus:
    """Open a Nexus session from Click context.

    Tests may place a prebuilt session factory in ``ctx.obj["factory"]``.
    """
    factory = ctx.obj.get("factory")
    if factory is not None:
        return factory()

    from nexus.models.config import NexusConfig
    from nexus.session import Nexus

    db_path = ctx.obj["db_path"]
    config = NexusConfig.from_env(db_path=db_path)
    return Nexus.open(db_path, config=config)


@contextmanager
def _nexus_session(ctx: click.Context) -> Iterator[tuple[Nexus, Console]]:
    """Open a session, yield (nexus, console), and close it on exit.

    Exceptions are formatted as CLI errors.
    """
    console = get_console()
    try:
        nexus = _get_nexus(ctx)
        try:
            yield nexus, console
        finally:
            nexus.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from nexus.cli.commands.send import send  # noqa: E402
from nexus.cli.commands.sync import sync  # noqa: E402
from nexus.cli.commands.status import status  # noqa: E402
from nexus.cli.commands.errors import errors  # noqa: E402
from nexus.cli.commands.reset import reset  # noqa: E402
from nexus.cli.commands.chat import chat  # noqa: E402

cli.add_command(send)
cli.add_command(sync)
cli.add_command(status)
cli.add_command(errors)
cli.add_command(reset)
cli.add_command(chat)
