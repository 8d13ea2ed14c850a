"""Transfer command."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import TransactionType
from finledger.domain.transfer import TransferService
from finledger.utils.amount_parser import parse_positive_amount
from finledger.utils.date_parser import parse_date


@click.command("transfer")
@click.option("--from", "source", required=True, help="Account the money leaves (name or ID)")
@click.option("--to", "destination", required=True, help="Account the money enters (name or ID)")
@click.option("--amount", required=True, help="Positive amount")
@click.option("--date", default="today", show_default=True, help="Transfer date")
@click.option("--description", help="Description")
@click.option("--notes", help="Notes")
@click.pass_context
def transfer(
    ctx,
    source: str,
    destination: str,
    amount: str,
    date: str,
    description: str | None,
    notes: str | None,
):
    """Move money between accounts.

    Moving money from a bank account to a credit card records a card
    payment, which lowers both balances.

    Examples:
        finledger transfer --from Checking --to Savings --amount 200
        finledger transfer --from Checking --to Sapphire --amount 450.00
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    source_id = resolve_account_or_exit(ctx, account_service, source)
    destination_id = resolve_account_or_exit(ctx, account_service, destination)

    try:
        result = TransferService(db).transfer(
            source_id=source_id,
            destination_id=destination_id,
            amount=parse_positive_amount(amount),
            description=description,
            notes=notes,
            on=parse_date(date),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if result.kind == TransactionType.PAYMENT:
        click.echo(f"Recorded payment of ${result.amount:,.2f} (transaction {result.transaction_ids[0]})")
    else:
        ids = ", ".join(str(i) for i in result.transaction_ids)
        click.echo(f"Transferred ${result.amount:,.2f} (transactions {ids})")


def register_commands(cli):
    """Register transfer command with main CLI."""
    cli.add_command(transfer)
