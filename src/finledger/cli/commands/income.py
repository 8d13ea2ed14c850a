"""Income source commands."""

import click
from finledger.cli.account_resolution import resolve_account_or_exit
from finledger.cli.date_filters import period_options, resolve_cli_date_range
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.account import AccountService
from finledger.domain.entities import IncomeSourceType, PayerRuleType
from finledger.domain.income import IncomeSourceService
from finledger.utils.amount_parser import parse_amount


@click.group()
def income_group():
    """Manage income sources and payer rules."""
    pass


@income_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "source_type",
    type=click.Choice([t.value for t in IncomeSourceType]),
    default=IncomeSourceType.OTHER.value,
    show_default=True,
)
@click.option("--employer", help="Employer or payer name")
@click.option("--expected", help="Expected monthly amount")
@click.pass_context
def create_source(ctx, name: str, source_type: str, employer: str | None, expected: str | None):
    """Create an income source.

    Examples:
        finledger income create "Salary" --type salary --employer "ACME" --expected 5000
    """
    try:
        source_id = IncomeSourceService(ctx.obj["db"]).create_source(
            name=name,
            source_type=IncomeSourceType(source_type),
            employer=employer,
            expected_monthly_amount=parse_amount(expected) if expected else None,
        )
        click.echo(f"Created income source '{name}' (ID: {source_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@income_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated sources")
@click.pass_context
def list_sources(ctx, include_inactive: bool):
    """List income sources and their rules."""
    service = IncomeSourceService(ctx.obj["db"])
    sources = service.list_sources(include_inactive=include_inactive)
    if not sources:
        click.echo("No income sources found.")
        return

    for source in sources:
        expected = f"${source.expected_monthly_amount:,.2f}/month" if source.expected_monthly_amount else "-"
        inactive = " (inactive)" if not source.is_active else ""
        click.echo(f"ID: {source.id:3d} | {source.name:20s} | {source.source_type.value:10s} | {expected}{inactive}")
        for rule in source.payer_rules:
            if rule.rule_type == PayerRuleType.AMOUNT_RANGE:
                detail = f"${rule.amount_min:,.2f} - ${rule.amount_max:,.2f}"
            elif rule.rule_type == PayerRuleType.ACCOUNT:
                detail = f"account {rule.account_id}"
            else:
                detail = repr(rule.pattern)
            click.echo(f"      rule {rule.id}: {rule.rule_type.value} {detail}")
    click.echo(f"Expected monthly total: ${service.total_expected_monthly():,.2f}")


@income_group.command("rule")
@click.argument("source_id", type=int)
@click.option("--payer", help="Exact payer (matches the whole description)")
@click.option("--contains", help="Description fragment")
@click.option("--min", "amount_min", help="Minimum amount (with --max)")
@click.option("--max", "amount_max", help="Maximum amount (with --min)")
@click.option("--account", help="Deposit account name or ID")
@click.pass_context
def add_rule(
    ctx,
    source_id: int,
    payer: str | None,
    contains: str | None,
    amount_min: str | None,
    amount_max: str | None,
    account: str | None,
):
    """Add a payer rule used to recognise income from a source.

    Give exactly one of --payer, --contains, --min/--max or --account.
    """
    db = ctx.obj["db"]
    given = [opt for opt in (payer, contains, amount_min or amount_max, account) if opt]
    if len(given) != 1:
        click.echo("Error: Give exactly one of --payer, --contains, --min/--max or --account", err=True)
        ctx.exit(1)

    try:
        if payer:
            kwargs = {"rule_type": PayerRuleType.EXACT_PAYER, "pattern": payer}
        elif contains:
            kwargs = {"rule_type": PayerRuleType.PARTIAL_DESCRIPTION, "pattern": contains}
        elif account:
            account_id = resolve_account_or_exit(ctx, AccountService(db), account)
            kwargs = {"rule_type": PayerRuleType.ACCOUNT, "account_id": account_id}
        else:
            kwargs = {
                "rule_type": PayerRuleType.AMOUNT_RANGE,
                "amount_min": parse_amount(amount_min) if amount_min else None,
                "amount_max": parse_amount(amount_max) if amount_max else None,
            }
        rule_id = IncomeSourceService(db).add_payer_rule(source_id, **kwargs)
        click.echo(f"Added rule {rule_id} to income source {source_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@income_group.command("link")
@click.argument("source_id", type=int)
@click.argument("transaction_id", type=int)
@click.pass_context
def link(ctx, source_id: int, transaction_id: int):
    """Attribute an income transaction to a source."""
    try:
        IncomeSourceService(ctx.obj["db"]).link_transaction(source_id, transaction_id)
        click.echo(f"Linked transaction {transaction_id} to income source {source_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@income_group.command("match")
@click.argument("transaction_id", type=int)
@click.pass_context
def match(ctx, transaction_id: int):
    """Show which income source a transaction matches."""
    try:
        source = IncomeSourceService(ctx.obj["db"]).find_matching_source(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if source is None:
        click.echo("No matching income source.")
    else:
        click.echo(f"Matches '{source.name}' (ID: {source.id})")


@income_group.command("deactivate")
@click.argument("source_id", type=int)
@click.pass_context
def deactivate(ctx, source_id: int):
    """Stop matching income against a source."""
    try:
        IncomeSourceService(ctx.obj["db"]).deactivate_source(source_id)
        click.echo(f"Deactivated income source {source_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@income_group.command("report")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@period_options
@click.pass_context
def report(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    this_year: bool,
    last_year: bool,
):
    """Total income per source."""
    service = IncomeSourceService(ctx.obj["db"])
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
    totals = service.income_by_source(start, end)
    if not totals:
        click.echo("No income found.")
        return

    names = {s.id: s.name for s in service.list_sources(include_inactive=True)}
    for source_id, total in sorted(totals.items(), key=lambda item: -item[1]):
        label = names.get(source_id, "Unassigned")
        click.echo(f"{label:25s} ${total:>12,.2f}")


def register_commands(cli):
    """Register income commands with main CLI."""
    cli.add_command(income_group, name="income")
