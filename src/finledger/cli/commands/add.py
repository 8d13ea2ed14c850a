"""Add transaction command."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import (
    CreditCardAccount,
    TransactionStatus,
    TransactionType,
    TransferDirection,
)
from finledger.domain.insurance import InsuranceService
from finledger.domain.rewards import RewardService, format_reward
from finledger.domain.transaction import TransactionService
from finledger.utils.amount_parser import parse_positive_amount
from finledger.utils.date_parser import parse_date


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Positive transaction amount (e.g., 123.45)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType]),
    default=TransactionType.EXPENSE.value,
    show_default=True,
)
@click.option("--direction", type=click.Choice([d.value for d in TransferDirection]), help="Required for transfers")
@click.option("--description", help="Payer or merchant")
@click.option("--category", help="Category (e.g., 'Food & Dining')")
@click.option("--notes", help="Notes")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus]),
    default=TransactionStatus.CLEARED.value,
    show_default=True,
)
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    txn_type: str,
    direction: str | None,
    description: str | None,
    category: str | None,
    notes: str | None,
    status: str,
):
    """Add a transaction manually.

    Purchases on a credit card earn rewards and count toward the card's
    bonuses. Expenses matching an insurance policy are linked to it.

    Examples:
        finledger add --account Checking --type income --amount 2500 --description "ACME PAYROLL"
        finledger add --account Sapphire --amount 84.20 --category "Food & Dining"
    """
    db = ctx.obj["db"]
    notifier = ctx.obj["notifier"]
    account_service = AccountService(db)
    transaction_service = TransactionService(db, notifier=notifier)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    account_obj = account_service.get_account(account_id)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_positive_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = transaction_service.create_transaction(
            account_id=account_id,
            type=TransactionType(txn_type),
            amount=txn_amount,
            date=txn_date,
            category=category,
            description=description,
            notes=notes,
            status=TransactionStatus(status),
            direction=TransferDirection(direction) if direction else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Account: {account_obj.name}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: ${txn_amount:,.2f} ({txn_type})")
    if description:
        click.echo(f"  Description: {description}")
    if category:
        click.echo(f"  Category: {category}")

    if txn_type != TransactionType.EXPENSE.value:
        return

    if isinstance(account_obj, CreditCardAccount):
        processed = RewardService(db, notifier=notifier).process_transaction_rewards(transaction_id)
        click.echo(f"  Reward: {format_reward(processed.quote)}")

    for policy_id in InsuranceService(db).auto_link_transaction(transaction_id):
        click.echo(f"  Linked to insurance policy {policy_id}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
