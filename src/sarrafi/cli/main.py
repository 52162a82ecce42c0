"""Main CLI entry point."""

import logging

import click
from sarrafi.database.factories import create_sqlite_database

# Import and register all commands at module level
from sarrafi.cli.commands import (
    account,
    balances,
    commission,
    convert,
    entity,
    opening_balance,
    rate,
    report,
    snapshot,
    transaction,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool) -> None:
    """Send sarrafi debug logs to stderr when verbose.

    Without --verbose, warnings still reach stderr through logging's
    last-resort handler.
    """
    if not verbose:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger("sarrafi")
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SARRAFI_DB_PATH environment variable)",
    envvar="SARRAFI_DB_PATH",
)
@click.option(
    "--user",
    help="Operator name recorded on new entries",
    envvar="SARRAFI_USER",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, user: str | None, verbose: bool):
    """Sarrafi - Currency exchange back-office ledger.

    Record customer and partner ledgers, cashbox, bank, rented and dedicated
    accounts and commission transfers, and report balances and net worth in USD.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)
    ctx.obj["user"] = user

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
entity.register_commands(cli)
account.register_commands(cli)
transaction.register_commands(cli)
opening_balance.register_commands(cli)
rate.register_commands(cli)
commission.register_commands(cli)
balances.register_commands(cli)
report.register_commands(cli)
snapshot.register_commands(cli)
convert.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
