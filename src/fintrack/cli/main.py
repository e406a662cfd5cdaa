"""Main CLI entry point."""

import click

from fintrack.database.factories import DB_PATH_ENV, create_sqlite_database
from fintrack.logging_config import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV, configure_logging

# Import and register all commands at module level
from fintrack.cli.commands import (
    account,
    category,
    dps,
    goal,
    loan,
    purchase,
    statement,
    summary,
    transaction,
    transfer,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=DEFAULT_LOG_LEVEL,
    show_default=True,
    envvar=LOG_LEVEL_ENV,
    help="Log verbosity (logs go to stderr)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Fintrack - personal finance ledger.

    Track accounts, transactions, purchases and DPS savings plans, and see
    running balances and per-currency totals.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
transfer.register_commands(cli)
dps.register_commands(cli)
purchase.register_commands(cli)
category.register_commands(cli)
goal.register_commands(cli)
loan.register_commands(cli)
statement.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
