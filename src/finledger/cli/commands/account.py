"""Account management commands."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import BankAccountType, CreditCardAccount, RewardType
from finledger.domain.ledger import LedgerService
from finledger.utils.amount_parser import parse_amount
from finledger.utils.date_parser import parse_date


@click.group()
def account_group():
    """Manage bank accounts and credit cards."""
    pass


@account_group.command("create-bank")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--institution", help="Bank name (defaults to account name if not provided)")
@click.option("--balance", "initial_balance", default="0", help="Opening balance")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in BankAccountType]),
    default=BankAccountType.CHECKING.value,
    show_default=True,
)
@click.pass_context
def create_bank(ctx, name: str, institution: str | None, initial_balance: str, account_type: str):
    """Create a bank account.

    Examples:
        finledger account create-bank "Checking" --institution "Chase" --balance 1500
        finledger account create-bank "Rainy Day" --type savings
    """
    service = AccountService(ctx.obj["db"])
    try:
        account_id = service.create_bank_account(
            name=name,
            institution=institution if institution is not None else name,
            initial_balance=parse_amount(initial_balance),
            account_type=BankAccountType(account_type),
        )
        click.echo(f"Created bank account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("create-card")
@click.argument("name", metavar="CARD_NAME")
@click.option("--institution", help="Card issuer (defaults to card name if not provided)")
@click.option("--limit", "credit_limit", required=True, help="Credit limit")
@click.option("--balance", "initial_balance", default="0", help="Amount owed when tracking starts")
@click.option("--apr", "interest_rate", default="0", help="Interest rate in percent")
@click.option(
    "--reward-type",
    type=click.Choice([t.value for t in RewardType]),
    default=RewardType.CASHBACK.value,
    show_default=True,
)
@click.option("--reward-rate", default="1", show_default=True, help="Percent for cashback, per dollar for points/miles")
@click.option("--annual-fee", default="0", help="Annual fee")
@click.option("--annual-fee-date", help="Next annual fee date")
@click.option("--due-date", help="Next payment due date")
@click.pass_context
def create_card(
    ctx,
    name: str,
    institution: str | None,
    credit_limit: str,
    initial_balance: str,
    interest_rate: str,
    reward_type: str,
    reward_rate: str,
    annual_fee: str,
    annual_fee_date: str | None,
    due_date: str | None,
):
    """Create a credit card.

    Examples:
        finledger account create-card "Sapphire" --institution Chase --limit 5000 --reward-type points --reward-rate 2
    """
    service = AccountService(ctx.obj["db"])
    try:
        card_id = service.create_credit_card(
            name=name,
            institution=institution if institution is not None else name,
            credit_limit=parse_amount(credit_limit),
            initial_balance=parse_amount(initial_balance),
            interest_rate=parse_amount(interest_rate),
            reward_type=RewardType(reward_type),
            reward_rate=parse_amount(reward_rate),
            annual_fee=parse_amount(annual_fee),
            next_annual_fee_date=parse_date(annual_fee_date) if annual_fee_date else None,
            payment_due_date=parse_date(due_date) if due_date else None,
        )
        click.echo(f"Created credit card '{name}' (ID: {card_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include closed accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts with their balances."""
    db = ctx.obj["db"]
    accounts = AccountService(db).list_accounts(include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    balances = LedgerService(db).get_balances(include_inactive=include_inactive)
    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        closed = " (closed)" if not acc.is_active else ""
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.kind.value:6s} | "
            f"{acc.institution:15s} | ${balances[acc.id]:>12,.2f}{closed}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show balance, totals and card status for an account.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    ledger = LedgerService(db)
    account_id = resolve_account_or_exit(ctx, account_service, account)
    acc = account_service.get_account(account_id)
    summary = ledger.get_summary(account_id)

    click.echo(f"{acc.name} ({acc.kind.value}, {acc.institution})")
    click.echo(f"  Balance:       ${summary.balance:,.2f}")
    click.echo(f"  Income:        ${summary.total_income:,.2f}")
    click.echo(f"  Expenses:      ${summary.total_expenses:,.2f}")
    click.echo(f"  Payments:      ${summary.total_payments:,.2f}")
    click.echo(f"  Transfers in:  ${summary.total_transfers_in:,.2f}")
    click.echo(f"  Transfers out: ${summary.total_transfers_out:,.2f}")
    click.echo(f"  Transactions:  {summary.transaction_count}")

    if isinstance(acc, CreditCardAccount):
        status = ledger.get_card_status(account_id)
        click.echo(f"  Limit:         ${acc.credit_limit:,.2f}")
        click.echo(f"  Available:     ${status.available_credit:,.2f}")
        click.echo(f"  Utilization:   {status.utilization:.1f}%")
        click.echo(f"  Min. payment:  ${status.minimum_payment:,.2f}")
        if status.high_utilization:
            click.echo("  Warning: utilization is high")
        if status.overdue:
            click.echo("  Warning: payment is overdue")
        elif status.payment_due_soon:
            click.echo(f"  Payment due in {status.days_until_due} days")


@account_group.command("register")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_register(ctx, account: str):
    """Show transactions with a running balance."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    rows = LedgerService(db).get_register(account_id)
    if not rows:
        click.echo("No transactions found.")
        return
    for txn, balance in rows:
        description = (txn.description or "")[:30]
        click.echo(f"{txn.date} | {txn.id:5d} | {txn.type.value:8s} | {txn.amount:>10,.2f} | {balance:>12,.2f} | {description}")


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--institution", help="New institution (optional)")
@click.pass_context
def rename_account(ctx, account: str, new_name: str, institution: str | None) -> None:
    """Rename an account.

    Examples:
        finledger account rename "Checking" "Joint Checking"
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.rename_account(account_id=account_id, name=new_name, institution=institution)
        click.echo(f"Renamed account to '{new_name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("update-card")
@click.argument("card", metavar="CARD")
@click.option("--limit", "credit_limit", help="New credit limit")
@click.option("--apr", "interest_rate", help="New interest rate in percent")
@click.option("--annual-fee", help="New annual fee")
@click.option("--annual-fee-date", help="Next annual fee date")
@click.option("--due-date", help="Next payment due date")
@click.pass_context
def update_card(
    ctx,
    card: str,
    credit_limit: str | None,
    interest_rate: str | None,
    annual_fee: str | None,
    annual_fee_date: str | None,
    due_date: str | None,
) -> None:
    """Update credit card terms. Only given options change."""
    service = AccountService(ctx.obj["db"])
    card_id = resolve_account_or_exit(ctx, service, card)
    try:
        service.update_credit_card(
            card_id,
            credit_limit=parse_amount(credit_limit) if credit_limit else None,
            interest_rate=parse_amount(interest_rate) if interest_rate else None,
            annual_fee=parse_amount(annual_fee) if annual_fee else None,
            next_annual_fee_date=parse_date(annual_fee_date) if annual_fee_date else None,
            payment_due_date=parse_date(due_date) if due_date else None,
        )
        click.echo(f"Updated card {card_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("close")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def close_account(ctx, account: str) -> None:
    """Close an account, keeping its history."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.close_account(account_id)
        click.echo(f"Closed account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account that has no transactions.

    Accounts with history cannot be deleted; use 'account close' instead.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
