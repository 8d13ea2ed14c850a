"""Main CLI entry point."""

import logging

import click
from finledger.database.factories import create_sqlite_database
from finledger.cli.notifications import ClickSink

# Import and register all commands at module level
from finledger.cli.commands import (
    account,
    add,
    budget,
    card,
    income,
    insurance,
    recurring,
    savings_goal,
    transaction,
    transfer,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINLEDGER_DB_PATH environment variable)",
    envvar="FINLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Finledger - Personal finance ledger.

    Track bank accounts and credit cards, move money between them, pick the
    best card for a purchase, follow sign-up bonus progress and keep budgets,
    savings goals and recurring bills in view.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["notifier"] = ClickSink()
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
transfer.register_commands(cli)
card.register_commands(cli)
income.register_commands(cli)
insurance.register_commands(cli)
budget.register_commands(cli)
savings_goal.register_commands(cli)
recurring.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
