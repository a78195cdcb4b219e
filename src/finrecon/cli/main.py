"""Main CLI entry point."""

import click
from finrecon.database.factories import create_sqlite_database
from finrecon.utils.logging_config import configure_logging

# Import and register all commands at module level
from finrecon.cli.commands import (
    init_types,
    import_cmd,
    record,
    schedule,
    calendar_cmd,
    link,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINRECON_DB_PATH environment variable)",
    envvar="FINRECON_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="FINRECON_LOG_LEVEL",
    help="Log level for diagnostics written to stderr",
)
@click.option(
    "--log-timestamps",
    is_flag=True,
    default=False,
    envvar="FINRECON_LOG_TIMESTAMPS",
    help="Prefix diagnostics with a timestamp",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_timestamps: bool):
    """Finrecon - recurring schedules and ledger reconciliation.

    Import bank exports without duplicates, project recurring items onto a
    calendar, and link records that belong to the same transfer or split.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level, verbose_format=log_timestamps)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
init_types.register_commands(cli)
import_cmd.register_commands(cli)
record.register_commands(cli)
schedule.register_commands(cli)
calendar_cmd.register_commands(cli)
link.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
