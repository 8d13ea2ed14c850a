"""Credit card rewards and bonus commands."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.bonus import BonusService
from finledger.domain.entities import AlertPriority, BonusStatus, CreditCardAccount, RewardType
from finledger.domain.errors import ValidationError, not_a_credit_card
from finledger.domain.rewards import RewardService, format_reward
from finledger.utils.amount_parser import parse_amount, parse_positive_amount
from finledger.utils.date_parser import parse_date


@click.group()
def card_group():
    """Credit card rewards, bonuses and alerts."""
    pass


@card_group.group("reward")
def reward_group():
    """Configure category rewards."""
    pass


@reward_group.command("set")
@click.argument("card", metavar="CARD")
@click.argument("category")
@click.option("--rate", required=True, help="Percent for cashback, per dollar for points/miles")
@click.option("--type", "reward_type", type=click.Choice([t.value for t in RewardType]), help="Defaults to the card's reward type")
@click.option("--ratio", help='Display text such as "$1 = 3 points"')
@click.pass_context
def set_reward(ctx, card: str, category: str, rate: str, reward_type: str | None, ratio: str | None):
    """Set the reward a card earns in a category.

    Examples:
        finledger card reward set Sapphire "Food & Dining" --rate 3
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    card_id = resolve_account_or_exit(ctx, account_service, card)
    try:
        if reward_type is None:
            card_obj = account_service.get_account(card_id)
            default = card_obj.reward_type if isinstance(card_obj, CreditCardAccount) else RewardType.CASHBACK
            reward_type = default.value
        RewardService(db).set_category_reward(card_id, category, RewardType(reward_type), parse_amount(rate), ratio)
        click.echo(f"Card {card_id} now earns {rate} {reward_type} on '{category}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@reward_group.command("remove")
@click.argument("card", metavar="CARD")
@click.argument("category")
@click.pass_context
def remove_reward(ctx, card: str, category: str):
    """Remove a category reward so the card default applies."""
    db = ctx.obj["db"]
    card_id = resolve_account_or_exit(ctx, AccountService(db), card)
    try:
        RewardService(db).remove_category_reward(card_id, category)
        click.echo(f"Removed '{category}' reward from card {card_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@reward_group.command("list")
@click.argument("card", metavar="CARD")
@click.pass_context
def list_rewards(ctx, card: str):
    """Show a card's reward configuration and rewards earned."""
    db = ctx.obj["db"]
    account_service = AccountService(db)
    card_id = resolve_account_or_exit(ctx, account_service, card)
    card_obj = account_service.get_account(card_id)
    if not isinstance(card_obj, CreditCardAccount):
        handle_domain_error(ctx, ValidationError(not_a_credit_card(card_id)))

    click.echo(f"{card_obj.name}: {card_obj.reward_rate} {card_obj.reward_type.value} by default")
    for reward in card_obj.category_rewards:
        extra = f" ({reward.ratio})" if reward.ratio else ""
        click.echo(f"  {reward.category:20s} {reward.rate} {reward.reward_type.value}{extra}")

    totals = RewardService(db).total_rewards(card_id)
    for reward_type, total in totals.items():
        click.echo(f"Earned: {total} {reward_type.value}")


@card_group.command("suggest")
@click.option("--amount", required=True, help="Purchase amount")
@click.option("--category", help="Purchase category")
@click.pass_context
def suggest(ctx, amount: str, category: str | None):
    """Suggest the card that earns the most on a purchase."""
    try:
        suggestion = RewardService(ctx.obj["db"]).suggest_card(parse_amount(amount), category)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if suggestion is None:
        click.echo("No card to suggest.")
        return
    click.echo(
        f"Use {suggestion.card.name} (ID: {suggestion.card.id}): earns {format_reward(suggestion.quote)} "
        f"at {suggestion.quote.rate} {suggestion.quote.reward_type.value}"
    )


@card_group.command("quote")
@click.argument("card", metavar="CARD")
@click.option("--amount", required=True, help="Purchase amount")
@click.option("--category", help="Purchase category")
@click.pass_context
def quote(ctx, card: str, amount: str, category: str | None):
    """Show what one card would earn on a purchase.

    Examples:
        finledger card quote Sapphire --amount 84.20 --category "Food & Dining"
    """
    db = ctx.obj["db"]
    card_id = resolve_account_or_exit(ctx, AccountService(db), card)
    try:
        reward = RewardService(db).quote(card_id, parse_positive_amount(amount), category)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Card {card_id} earns {format_reward(reward)} at {reward.rate} {reward.reward_type.value}")


@card_group.command("earn")
@click.argument("transaction_id", type=int)
@click.pass_context
def earn(ctx, transaction_id: int):
    """Process rewards for a card purchase recorded earlier."""
    try:
        processed = RewardService(ctx.obj["db"], notifier=ctx.obj["notifier"]).process_transaction_rewards(
            transaction_id
        )
        click.echo(f"Transaction {transaction_id} earned {format_reward(processed.quote)}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@card_group.group("bonus")
def bonus_group():
    """Track sign-up bonuses."""
    pass


@bonus_group.command("add")
@click.argument("card", metavar="CARD")
@click.option("--title", required=True, help='Bonus description, e.g. "60k points"')
@click.option("--spend", "spending_required", required=True, help="Spending required")
@click.option("--start", "start_date", default="today", show_default=True, help="Window start")
@click.option("--end", "end_date", required=True, help="Window end (date or 'in 90 days')")
@click.option("--category", help="Only count purchases in this category")
@click.option("--value", "bonus_value", help="Value of the bonus")
@click.option("--spent", "current_spending", default="0", help="Spending already made")
@click.option("--manual", is_flag=True, help="Do not accrue purchases automatically")
@click.pass_context
def add_bonus(
    ctx,
    card: str,
    title: str,
    spending_required: str,
    start_date: str,
    end_date: str,
    category: str | None,
    bonus_value: str | None,
    current_spending: str,
    manual: bool,
):
    """Add a sign-up bonus to a card.

    Examples:
        finledger card bonus add Sapphire --title "60k points" --spend 4000 --end "in 3 months"
    """
    db = ctx.obj["db"]
    card_id = resolve_account_or_exit(ctx, AccountService(db), card)
    try:
        bonus_id = BonusService(db).add_bonus(
            card_id=card_id,
            title=title,
            spending_required=parse_positive_amount(spending_required),
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
            category=category,
            auto_tracking=not manual,
            bonus_value=parse_amount(bonus_value) if bonus_value else None,
            current_spending=parse_amount(current_spending),
        )
        click.echo(f"Added bonus '{title}' (ID: {bonus_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@bonus_group.command("list")
@click.option("--card", help="Limit to one card (name or ID)")
@click.pass_context
def list_bonuses(ctx, card: str | None):
    """Show bonus progress."""
    db = ctx.obj["db"]
    card_id = resolve_account_or_exit(ctx, AccountService(db), card) if card else None
    report = BonusService(db).progress_report(card_id=card_id)
    if not report:
        click.echo("No bonuses found.")
        return

    for item in report:
        bonus = item.bonus
        click.echo(
            f"{bonus.id:3d} | card {bonus.card_id:3d} | {bonus.title:20s} | {bonus.status.value:11s} | "
            f"${bonus.current_spending:,.2f} / ${bonus.spending_required:,.2f} ({item.percent}%) | "
            f"{item.days_left} days left"
        )
        if item.near_completion:
            click.echo(f"      almost there: ${item.remaining:,.2f} to go")


@bonus_group.command("status")
@click.argument("bonus_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in BonusStatus]))
@click.pass_context
def set_bonus_status(ctx, bonus_id: int, status: str):
    """Change a bonus status, e.g. mark it paid_out."""
    try:
        BonusService(ctx.obj["db"]).update_status(bonus_id, BonusStatus(status))
        click.echo(f"Bonus {bonus_id} is now {status}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@card_group.command("alerts")
@click.pass_context
def alerts(ctx):
    """Show bonus and annual fee alerts."""
    found = BonusService(ctx.obj["db"]).alerts()
    if not found:
        click.echo("No alerts.")
        return
    for alert in found:
        marker = "!" if alert.priority == AlertPriority.HIGH else "*"
        click.echo(f"{marker} [{alert.priority.value}] {alert.title}: {alert.message}")


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
