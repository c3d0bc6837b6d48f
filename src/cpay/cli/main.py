"""Main CLI entry point."""

import logging

import click
from cpay.cli.error_handling import handle_config_error
from cpay.config import get_settings
from cpay.database.factories import create_database, create_sqlite_database

# Import and register all commands at module level
from cpay.cli.commands import (
    account,
    history,
    pending,
    transfer,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CPAY_DB_PATH / CPAY_DATABASE_URL)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides CPAY_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """CPay - wallet transfers confirmed by one-time codes.

    Send money to another wallet by mobile number. Each transfer is
    confirmed with a verification code sent to the sender's phone before
    any funds move.
    """
    ctx.ensure_object(dict)
    try:
        settings = get_settings()
    except ValueError as e:
        handle_config_error(ctx, e)
    logging.basicConfig(level=(log_level or settings.log_level).upper(), format=LOG_FORMAT)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "db" not in ctx.obj:
        if db_path is not None:
            db = create_sqlite_database(database_path=db_path)
        else:
            db = create_database()
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)
    ctx.obj.setdefault("settings", settings)


# Register all commands
account.register_commands(cli)
transfer.register_commands(cli)
history.register_commands(cli)
pending.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
