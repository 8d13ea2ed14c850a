"""Budget commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.budget import BudgetService
from finledger.domain.entities import BudgetPeriod
from finledger.utils.amount_parser import parse_positive_amount
from finledger.utils.date_parser import parse_date


@click.group()
def budget_group():
    """Manage category budgets."""
    pass


@budget_group.command("create")
@click.argument("name")
@click.option("--category", required=True, help="Expense category to watch")
@click.option("--amount", required=True, help="Limit per period")
@click.option(
    "--period",
    type=click.Choice([p.value for p in BudgetPeriod]),
    default=BudgetPeriod.MONTHLY.value,
    show_default=True,
)
@click.option("--start", "start_date", default="today", show_default=True, help="First day of the first period")
@click.option("--end", "end_date", help="Last day the budget applies")
@click.pass_context
def create_budget(ctx, name: str, category: str, amount: str, period: str, start_date: str, end_date: str | None):
    """Create a spending limit for a category.

    Examples:
        finledger budget create Groceries --category "Food & Dining" --amount 600
    """
    try:
        budget_id = BudgetService(ctx.obj["db"]).create_budget(
            name=name,
            category=category,
            amount=parse_positive_amount(amount),
            period=BudgetPeriod(period),
            start_date=parse_date(start_date),
            end_date=parse_date(end_date) if end_date else None,
        )
        click.echo(f"Created budget '{name}' (ID: {budget_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@budget_group.command("list")
@click.option("--date", "on", default="today", show_default=True, help="Report the period containing this day")
@click.pass_context
def list_budgets(ctx, on: str):
    """Show spending against each active budget."""
    try:
        report = BudgetService(ctx.obj["db"]).report(today=parse_date(on))
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not report:
        click.echo("No budgets found.")
        return
    for item in report:
        budget = item.budget
        flag = " OVER BUDGET" if item.over_budget else (" (near limit)" if item.near_limit else "")
        click.echo(
            f"ID: {budget.id:3d} | {budget.name:20s} | {budget.category:18s} | "
            f"${item.spent:,.2f} / ${budget.amount:,.2f} ({item.percent}%) | "
            f"{item.period_start} to {item.period_end}{flag}"
        )


@budget_group.command("set")
@click.argument("budget_id", type=int)
@click.option("--amount", required=True, help="New limit per period")
@click.pass_context
def set_amount(ctx, budget_id: int, amount: str):
    """Change a budget's limit."""
    try:
        limit = parse_positive_amount(amount)
        BudgetService(ctx.obj["db"]).update_amount(budget_id, limit)
        click.echo(f"Budget {budget_id} limit is now ${limit:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@budget_group.command("deactivate")
@click.argument("budget_id", type=int)
@click.pass_context
def deactivate(ctx, budget_id: int):
    try:
        BudgetService(ctx.obj["db"]).deactivate_budget(budget_id)
        click.echo(f"Deactivated budget {budget_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx, budget_id: int, yes: bool):
    if not yes and not click.confirm(f"Are you sure you want to delete budget {budget_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        BudgetService(ctx.obj["db"]).delete_budget(budget_id)
        click.echo(f"Deleted budget {budget_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
