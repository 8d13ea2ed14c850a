"""Insurance policy and claim commands."""

import click
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.entities import BillingCycle, ClaimStatus, PolicyType
from finledger.domain.insurance import InsuranceService
from finledger.utils.amount_parser import parse_amount, parse_positive_amount
from finledger.utils.date_parser import parse_date


@click.group()
def insurance_group():
    """Track insurance policies and claims."""
    pass


@insurance_group.group("policy")
def policy_group():
    """Manage policies."""
    pass


@policy_group.command("add")
@click.argument("policy_number")
@click.option("--provider", required=True)
@click.option("--name", required=True, help="Display name")
@click.option("--premium", required=True, help="Premium per billing period")
@click.option("--effective", "effective_date", required=True, help="Coverage start")
@click.option("--expires", "expiration_date", required=True, help="Coverage end")
@click.option("--type", "policy_type", type=click.Choice([t.value for t in PolicyType]), default=PolicyType.OTHER.value)
@click.option(
    "--cycle",
    "billing_cycle",
    type=click.Choice([c.value for c in BillingCycle]),
    default=BillingCycle.MONTHLY.value,
    show_default=True,
)
@click.option("--next-due", help="First premium due date (defaults to the effective date)")
@click.option("--merchant", "merchant_patterns", multiple=True, help="Description fragment of premium payments")
@click.option("--tolerance", default="0", help="Amount tolerance for matching premium payments")
@click.option("--category", "category_filters", multiple=True, help="Category allowed for amount matching")
@click.option("--auto-pay", is_flag=True)
@click.pass_context
def add_policy(
    ctx,
    policy_number: str,
    provider: str,
    name: str,
    premium: str,
    effective_date: str,
    expiration_date: str,
    policy_type: str,
    billing_cycle: str,
    next_due: str | None,
    merchant_patterns: tuple[str, ...],
    tolerance: str,
    category_filters: tuple[str, ...],
    auto_pay: bool,
):
    """Add an insurance policy.

    Examples:
        finledger insurance policy add AUTO-123 --provider Geico --name "Car" --premium 120 \\
            --effective 2024-01-01 --expires 2024-12-31 --type auto --merchant geico
    """
    try:
        policy_id = InsuranceService(ctx.obj["db"]).create_policy(
            policy_number=policy_number,
            provider=provider,
            name=name,
            premium=parse_amount(premium),
            effective_date=parse_date(effective_date),
            expiration_date=parse_date(expiration_date),
            policy_type=PolicyType(policy_type),
            billing_cycle=BillingCycle(billing_cycle),
            next_due=parse_date(next_due) if next_due else None,
            auto_pay=auto_pay,
            merchant_patterns=merchant_patterns,
            amount_tolerance=parse_amount(tolerance),
            category_filters=category_filters,
        )
        click.echo(f"Added policy '{name}' (ID: {policy_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@policy_group.command("list")
@click.pass_context
def list_policies(ctx):
    """List policies with their next premium due date."""
    policies = InsuranceService(ctx.obj["db"]).list_policies()
    if not policies:
        click.echo("No policies found.")
        return
    for policy in policies:
        click.echo(
            f"ID: {policy.id:3d} | {policy.name:20s} | {policy.provider:15s} | "
            f"${policy.premium:,.2f} {policy.billing_cycle.value} | next due {policy.next_due_date} | "
            f"{policy.status.value} | {len(policy.linked_transaction_ids)} linked"
        )


@policy_group.command("pay")
@click.argument("policy_id", type=int)
@click.option("--date", "paid_on", default="today", show_default=True)
@click.pass_context
def pay_premium(ctx, policy_id: int, paid_on: str):
    """Record a premium payment and advance the due date."""
    try:
        policy = InsuranceService(ctx.obj["db"]).record_premium_payment(policy_id, parse_date(paid_on))
        click.echo(f"Premium recorded. Next due {policy.next_due_date}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@insurance_group.group("claim")
def claim_group():
    """Manage claims."""
    pass


@claim_group.command("add")
@click.argument("policy_id", type=int)
@click.argument("claim_number")
@click.option("--amount", required=True, help="Amount claimed")
@click.option("--date-of-loss", required=True)
@click.option("--description")
@click.pass_context
def add_claim(ctx, policy_id: int, claim_number: str, amount: str, date_of_loss: str, description: str | None):
    """File a claim against a policy."""
    try:
        claim_id = InsuranceService(ctx.obj["db"]).create_claim(
            policy_id=policy_id,
            claim_number=claim_number,
            date_of_loss=parse_date(date_of_loss),
            claim_amount=parse_positive_amount(amount),
            description=description,
        )
        click.echo(f"Filed claim {claim_number} (ID: {claim_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@claim_group.command("list")
@click.option("--policy", "policy_id", type=int, help="Limit to one policy")
@click.pass_context
def list_claims(ctx, policy_id: int | None):
    """List claims."""
    claims = InsuranceService(ctx.obj["db"]).list_claims(policy_id=policy_id)
    if not claims:
        click.echo("No claims found.")
        return
    for claim in claims:
        paid = f" | paid ${claim.paid_amount:,.2f}" if claim.paid_amount is not None else ""
        click.echo(
            f"ID: {claim.id:3d} | {claim.claim_number:12s} | policy {claim.policy_id} | "
            f"${claim.claim_amount:,.2f} | {claim.status.value}{paid}"
        )


@claim_group.command("status")
@click.argument("claim_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in ClaimStatus]))
@click.option("--amount", help="Approved or paid amount")
@click.pass_context
def set_claim_status(ctx, claim_id: int, status: str, amount: str | None):
    """Move a claim to a new status."""
    try:
        InsuranceService(ctx.obj["db"]).update_claim_status(
            claim_id, ClaimStatus(status), parse_amount(amount) if amount else None
        )
        click.echo(f"Claim {claim_id} is now {status}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register insurance commands with main CLI."""
    cli.add_command(insurance_group, name="insurance")
