"""nexus errors -- show the rolling error log."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nexus.cli.formatting import format_error, format_errors, get_console

if TYPE_CHECKING:
    from nexus.storage.persistence import MemoryPersistence, SqlitePersistence


@click.command()
@click.option("--clear", is_flag=True, help="Empty the error log after showing it.")
@click.pass_context
def errors(ctx: click.Context, clear: bool) -> None:
    """Show the most recent recorded failures, oldest first."""
    console = get_console()
    try:
        # Opening a session replays and drains the log, so read storage directly.
        persistence = _open_persistence(ctx)
        try:
            format_errors(persistence.errors(), console)
            if clear:
                persistence.clear_errors()
                console.print("Error log cleared.")
        finally:
            persistence.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


def _open_persistence(ctx: click.Context) -> SqlitePersistence | MemoryPersistence:
    factory = ctx.obj.get("persistence_factory")
    if factory is not None:
        return factory()

    from nexus.models.config import NexusConfig
    from nexus.storage.persistence import SqlitePersistence

    config = NexusConfig.from_env()
    return SqlitePersistence.open(ctx.obj["db_path"], max_errors=config.error_log_size)
