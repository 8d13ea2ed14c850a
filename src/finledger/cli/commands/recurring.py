"""Recurring payment commands."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import Frequency
from finledger.domain.recurring import RecurringPaymentService
from finledger.utils.amount_parser import parse_positive_amount
from finledger.utils.date_parser import parse_date


@click.group()
def recurring_group():
    """Track bills and subscriptions."""
    pass


@recurring_group.command("create")
@click.argument("name")
@click.option("--amount", required=True, help="Amount paid each time")
@click.option("--due", "next_due_date", required=True, help="Next due date")
@click.option(
    "--every",
    "frequency",
    type=click.Choice([f.value for f in Frequency]),
    default=Frequency.MONTHLY.value,
    show_default=True,
)
@click.option("--interval", type=int, default=1, show_default=True, help="Frequency units between payments")
@click.option("--account", help="Account the payment comes from (name or ID)")
@click.option("--category", help="Expense category")
@click.option("--auto", "is_automatic", is_flag=True, help="Paid automatically")
@click.pass_context
def create_payment(
    ctx,
    name: str,
    amount: str,
    next_due_date: str,
    frequency: str,
    interval: int,
    account: str | None,
    category: str | None,
    is_automatic: bool,
):
    """Create a recurring payment.

    Examples:
        finledger recurring create Rent --amount 1500 --due 2024-07-01 --account Checking --category "Bills & Utilities"
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None
    try:
        payment_id = RecurringPaymentService(db).create_payment(
            name=name,
            amount=parse_positive_amount(amount),
            next_due_date=parse_date(next_due_date),
            frequency=Frequency(frequency),
            interval=interval,
            account_id=account_id,
            category=category,
            is_automatic=is_automatic,
        )
        click.echo(f"Created recurring payment '{name}' (ID: {payment_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@recurring_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated payments")
@click.pass_context
def list_payments(ctx, include_inactive: bool):
    """List recurring payments by due date."""
    service = RecurringPaymentService(ctx.obj["db"])
    payments = service.list_payments(include_inactive=include_inactive)
    if not payments:
        click.echo("No recurring payments found.")
        return

    for payment in payments:
        every = payment.frequency.value if payment.interval == 1 else f"every {payment.interval} {payment.frequency.value}"
        inactive = " (inactive)" if not payment.is_active else ""
        click.echo(
            f"ID: {payment.id:3d} | {payment.name:20s} | ${payment.amount:>10,.2f} | {every:16s} | "
            f"due {payment.next_due_date}{inactive}"
        )
    click.echo(f"About ${service.monthly_total():,.2f} per month")


@recurring_group.command("due")
@click.option("--days", "within_days", type=int, default=7, show_default=True, help="Look ahead this many days")
@click.pass_context
def due(ctx, within_days: int):
    """Show overdue and upcoming payments."""
    service = RecurringPaymentService(ctx.obj["db"])
    overdue = service.overdue()
    upcoming = service.upcoming(within_days=within_days)
    if not overdue and not upcoming:
        click.echo("Nothing due.")
        return
    for item in overdue:
        click.echo(f"! {item.payment.name}: ${item.payment.amount:,.2f} overdue by {-item.days_until_due} days")
    for item in upcoming:
        click.echo(f"* {item.payment.name}: ${item.payment.amount:,.2f} due in {item.days_until_due} days")


@recurring_group.command("pay")
@click.argument("payment_id", type=int)
@click.option("--date", "paid_on", default="today", show_default=True)
@click.pass_context
def pay(ctx, payment_id: int, paid_on: str):
    """Record a payment and move the due date forward."""
    service = RecurringPaymentService(ctx.obj["db"], notifier=ctx.obj["notifier"])
    try:
        transaction_id = service.mark_paid(payment_id, parse_date(paid_on))
    except ValueError as e:
        handle_domain_error(ctx, e)

    payment = service.get_payment(payment_id)
    recorded = f" as transaction {transaction_id}" if transaction_id is not None else ""
    click.echo(f"Paid '{payment.name}'{recorded}; next due {payment.next_due_date}")


@recurring_group.command("deactivate")
@click.argument("payment_id", type=int)
@click.pass_context
def deactivate(ctx, payment_id: int):
    try:
        RecurringPaymentService(ctx.obj["db"]).deactivate_payment(payment_id)
        click.echo(f"Deactivated recurring payment {payment_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register recurring payment commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
