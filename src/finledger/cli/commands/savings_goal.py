"""Savings goal commands."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import GoalPriority, GoalStatus
from finledger.domain.savings_goal import SavingsGoalService
from finledger.utils.amount_parser import parse_amount, parse_positive_amount
from finledger.utils.date_parser import parse_date


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("create")
@click.argument("name")
@click.option("--target", required=True, help="Amount to save")
@click.option("--by", "target_date", help="Target date (date or 'in 6 months')")
@click.option("--saved", "current_amount", default="0", help="Amount already saved")
@click.option("--monthly", "monthly_contribution", default="0", help="Planned monthly contribution")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in GoalPriority]),
    default=GoalPriority.MEDIUM.value,
    show_default=True,
)
@click.option("--category", help='Goal category, e.g. "Emergency Fund"')
@click.option("--account", help="Account the money is kept in (name or ID)")
@click.option("--description", help="Goal description")
@click.pass_context
def create_goal(
    ctx,
    name: str,
    target: str,
    target_date: str | None,
    current_amount: str,
    monthly_contribution: str,
    priority: str,
    category: str | None,
    account: str | None,
    description: str | None,
):
    """Create a savings goal.

    Examples:
        finledger goal create "Emergency fund" --target 10000 --by "in 12 months" --monthly 800
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None
    try:
        goal_id = SavingsGoalService(db).create_goal(
            name=name,
            target_amount=parse_positive_amount(target),
            target_date=parse_date(target_date) if target_date else None,
            current_amount=parse_amount(current_amount),
            category=category,
            priority=GoalPriority(priority),
            description=description,
            monthly_contribution=parse_amount(monthly_contribution),
            account_id=account_id,
        )
        click.echo(f"Created savings goal '{name}' (ID: {goal_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in GoalStatus]), help="Only goals in this status")
@click.pass_context
def list_goals(ctx, status: str | None):
    """Show progress toward each goal."""
    report = SavingsGoalService(ctx.obj["db"]).report()
    if status is not None:
        report = [item for item in report if item.goal.status.value == status]
    if not report:
        click.echo("No savings goals found.")
        return

    for item in report:
        goal = item.goal
        deadline = f"{item.days_left} days left" if item.days_left is not None else "no deadline"
        click.echo(
            f"ID: {goal.id:3d} | {goal.name:20s} | {goal.status.value:9s} | "
            f"${goal.current_amount:,.2f} / ${goal.target_amount:,.2f} ({item.percent}%) | {deadline}"
        )
        if goal.status == GoalStatus.ACTIVE and not item.on_track:
            click.echo(f"      behind: ${item.remaining:,.2f} to go")


@goal_group.command("add")
@click.argument("goal_id", type=int)
@click.argument("amount")
@click.option("--date", "on", default="today", show_default=True)
@click.pass_context
def contribute(ctx, goal_id: int, amount: str, on: str):
    """Add money to a goal."""
    try:
        goal = SavingsGoalService(ctx.obj["db"]).contribute(goal_id, parse_positive_amount(amount), parse_date(on))
        click.echo(f"'{goal.name}' now has ${goal.current_amount:,.2f} of ${goal.target_amount:,.2f}")
        if goal.status == GoalStatus.COMPLETED:
            click.echo("Goal reached!")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("withdraw")
@click.argument("goal_id", type=int)
@click.argument("amount")
@click.pass_context
def withdraw(ctx, goal_id: int, amount: str):
    """Take money out of a goal."""
    try:
        goal = SavingsGoalService(ctx.obj["db"]).withdraw(goal_id, parse_positive_amount(amount))
        click.echo(f"'{goal.name}' now has ${goal.current_amount:,.2f} of ${goal.target_amount:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("pause")
@click.argument("goal_id", type=int)
@click.pass_context
def pause(ctx, goal_id: int):
    try:
        SavingsGoalService(ctx.obj["db"]).set_status(goal_id, GoalStatus.PAUSED)
        click.echo(f"Paused savings goal {goal_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@goal_group.command("resume")
@click.argument("goal_id", type=int)
@click.pass_context
def resume(ctx, goal_id: int):
    try:
        SavingsGoalService(ctx.obj["db"]).set_status(goal_id, GoalStatus.ACTIVE)
        click.echo(f"Resumed savings goal {goal_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register savings goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
