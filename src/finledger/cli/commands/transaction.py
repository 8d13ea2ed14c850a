"""Transaction management commands."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.date_filters import period_options, resolve_cli_date_range
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import TransactionStatus, TransactionType
from finledger.domain.transaction import TransactionService


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.option("--account", help="Account name or ID")
@click.option("--category", help="Exact category")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--hidden", "include_hidden", is_flag=True, help="Include hidden transactions")
@click.option("--verbose", "-v", is_flag=True, help="Show status, notes and transfer group")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    this_year: bool,
    last_year: bool,
    account: str | None,
    category: str | None,
    txn_type: str | None,
    include_hidden: bool,
    verbose: bool,
):
    """View transactions with optional filters, oldest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-month": this_month,
            "last-month": last_month,
            "this-year": this_year,
            "last-year": last_year,
        },
    )
    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None

    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        account_id=account_id,
        category=category,
        type=TransactionType(txn_type) if txn_type else None,
        include_hidden=include_hidden,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        line = (
            f"{txn.id:5d} | {txn.date} | acct {txn.account_id:3d} | {txn.type.value:8s} | "
            f"${txn.amount:>10,.2f} | {(txn.category or '-'):18s} | {txn.description or ''}"
        )
        if txn.is_hidden:
            line += " [hidden]"
        click.echo(line)
        if verbose:
            click.echo(f"        status: {txn.status.value}")
            if txn.counterpart_account_id is not None:
                click.echo(f"        funded by account {txn.counterpart_account_id}")
            if txn.transfer_group:
                click.echo(f"        transfer group: {txn.transfer_group}")
            if txn.notes:
                click.echo(f"        notes: {txn.notes}")


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category")
@click.pass_context
def categorize(ctx, transaction_id: int, category: str):
    """Set a transaction's category. Use "" to clear it."""
    try:
        TransactionService(ctx.obj["db"]).update_category(transaction_id, category)
        click.echo(f"Updated category of transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("notes")
@click.argument("transaction_id", type=int)
@click.argument("notes")
@click.pass_context
def set_notes(ctx, transaction_id: int, notes: str):
    """Set a transaction's notes."""
    try:
        TransactionService(ctx.obj["db"]).update_notes(transaction_id, notes or None)
        click.echo(f"Updated notes of transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("status")
@click.argument("transaction_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in TransactionStatus]))
@click.pass_context
def set_status(ctx, transaction_id: int, status: str):
    """Mark a transaction pending, cleared or reconciled."""
    try:
        TransactionService(ctx.obj["db"]).update_status(transaction_id, TransactionStatus(status))
        click.echo(f"Transaction {transaction_id} is now {status}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("hide")
@click.argument("transaction_id", type=int)
@click.pass_context
def hide(ctx, transaction_id: int):
    """Hide a transaction. Hidden transactions do not count toward balances.

    Hiding one leg of a transfer hides the other leg too.
    """
    try:
        changed = TransactionService(ctx.obj["db"]).set_hidden(transaction_id, True)
        ids = ", ".join(str(i) for i in changed)
        click.echo(f"Hid transactions {ids}" if len(changed) > 1 else f"Hid transaction {ids}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("unhide")
@click.argument("transaction_id", type=int)
@click.pass_context
def unhide(ctx, transaction_id: int):
    """Show a previously hidden transaction again."""
    try:
        changed = TransactionService(ctx.obj["db"]).set_hidden(transaction_id, False)
        ids = ", ".join(str(i) for i in changed)
        click.echo(f"Visible again: {ids}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
