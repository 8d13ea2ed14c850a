"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic. The single ``accounts`` table is
split back into the ``BankAccount`` / ``CreditCardAccount`` variants here.
"""

from decimal import Decimal
from typing import Optional

from finledger.domain import entities as domain
from finledger.database.models import (
    Account as ORMAccount,
    CategoryReward as ORMCategoryReward,
    Transaction as ORMTransaction,
    CreditCardBonus as ORMCreditCardBonus,
    RewardEntry as ORMRewardEntry,
    IncomeSource as ORMIncomeSource,
    PayerRule as ORMPayerRule,
    InsurancePolicy as ORMInsurancePolicy,
    InsuranceClaim as ORMInsuranceClaim,
    Budget as ORMBudget,
    SavingsGoal as ORMSavingsGoal,
    RecurringPayment as ORMRecurringPayment,
)


def _decimal(value, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None:
        return default
    return Decimal(value)


def category_reward_to_domain(orm_reward: ORMCategoryReward) -> domain.CategoryReward:
    """Convert SQLAlchemy CategoryReward model to domain CategoryReward entity."""
    return domain.CategoryReward(
        category=orm_reward.category,
        reward_type=domain.RewardType(orm_reward.reward_type),
        rate=_decimal(orm_reward.rate),
        ratio=orm_reward.ratio,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to the matching domain account variant."""
    kind = domain.AccountKind(orm_account.kind)
    if kind == domain.AccountKind.BANK:
        return domain.BankAccount(
            id=orm_account.id,
            name=orm_account.name,
            institution=orm_account.institution,
            initial_balance=_decimal(orm_account.initial_balance, Decimal("0")),
            is_active=orm_account.is_active,
            opened_on=orm_account.opened_on,
            closed_on=orm_account.closed_on,
            created_at=orm_account.created_at,
            account_type=domain.BankAccountType(orm_account.account_type or "checking"),
        )
    if kind == domain.AccountKind.CREDIT:
        return domain.CreditCardAccount(
            id=orm_account.id,
            name=orm_account.name,
            institution=orm_account.institution,
            initial_balance=_decimal(orm_account.initial_balance, Decimal("0")),
            is_active=orm_account.is_active,
            opened_on=orm_account.opened_on,
            closed_on=orm_account.closed_on,
            created_at=orm_account.created_at,
            credit_limit=_decimal(orm_account.credit_limit, Decimal("0")),
            interest_rate=_decimal(orm_account.interest_rate, Decimal("0")),
            reward_type=domain.RewardType(orm_account.reward_type or "cashback"),
            reward_rate=_decimal(orm_account.reward_rate, Decimal("1")),
            annual_fee=_decimal(orm_account.annual_fee, Decimal("0")),
            next_annual_fee_date=orm_account.next_annual_fee_date,
            payment_due_date=orm_account.payment_due_date,
            payment_reminder_days=(
                orm_account.payment_reminder_days if orm_account.payment_reminder_days is not None else 7
            ),
            category_rewards=tuple(category_reward_to_domain(r) for r in orm_account.category_rewards),
        )
    raise ValueError(f"Unknown account kind '{orm_account.kind}'")


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        type=domain.TransactionType(orm_transaction.type),
        amount=_decimal(orm_transaction.amount),
        date=orm_transaction.date,
        category=orm_transaction.category,
        description=orm_transaction.description,
        notes=orm_transaction.notes,
        status=domain.TransactionStatus(orm_transaction.status),
        is_hidden=orm_transaction.is_hidden,
        created_at=orm_transaction.created_at,
        direction=(
            domain.TransferDirection(orm_transaction.direction) if orm_transaction.direction else None
        ),
        counterpart_account_id=orm_transaction.counterpart_account_id,
        transfer_group=orm_transaction.transfer_group,
    )


def bonus_to_domain(orm_bonus: ORMCreditCardBonus) -> domain.CreditCardBonus:
    """Convert SQLAlchemy CreditCardBonus model to domain CreditCardBonus entity."""
    return domain.CreditCardBonus(
        id=orm_bonus.id,
        card_id=orm_bonus.card_id,
        title=orm_bonus.title,
        spending_required=_decimal(orm_bonus.spending_required),
        current_spending=_decimal(orm_bonus.current_spending, Decimal("0")),
        start_date=orm_bonus.start_date,
        end_date=orm_bonus.end_date,
        status=domain.BonusStatus(orm_bonus.status),
        category=orm_bonus.category,
        auto_tracking=orm_bonus.auto_tracking,
        bonus_value=_decimal(orm_bonus.bonus_value),
        date_completed=orm_bonus.date_completed,
    )


def reward_entry_to_domain(orm_entry: ORMRewardEntry) -> domain.RewardEntry:
    """Convert SQLAlchemy RewardEntry model to domain RewardEntry entity."""
    return domain.RewardEntry(
        id=orm_entry.id,
        card_id=orm_entry.card_id,
        transaction_id=orm_entry.transaction_id,
        date=orm_entry.date,
        category=orm_entry.category,
        amount=_decimal(orm_entry.amount),
        reward_type=domain.RewardType(orm_entry.reward_type),
        reward_earned=_decimal(orm_entry.reward_earned),
        created_at=orm_entry.created_at,
    )


def payer_rule_to_domain(orm_rule: ORMPayerRule) -> domain.PayerRule:
    """Convert SQLAlchemy PayerRule model to domain PayerRule entity."""
    return domain.PayerRule(
        id=orm_rule.id,
        source_id=orm_rule.source_id,
        rule_type=domain.PayerRuleType(orm_rule.rule_type),
        pattern=orm_rule.pattern,
        amount_min=_decimal(orm_rule.amount_min),
        amount_max=_decimal(orm_rule.amount_max),
        account_id=orm_rule.account_id,
        is_active=orm_rule.is_active,
    )


def income_source_to_domain(orm_source: ORMIncomeSource) -> domain.IncomeSource:
    """Convert SQLAlchemy IncomeSource model to domain IncomeSource entity."""
    return domain.IncomeSource(
        id=orm_source.id,
        name=orm_source.name,
        source_type=domain.IncomeSourceType(orm_source.source_type),
        employer=orm_source.employer,
        expected_monthly_amount=_decimal(orm_source.expected_monthly_amount),
        is_active=orm_source.is_active,
        created_at=orm_source.created_at,
        payer_rules=tuple(payer_rule_to_domain(r) for r in orm_source.payer_rules),
        linked_transaction_ids=tuple(link.transaction_id for link in orm_source.links),
    )


def policy_to_domain(orm_policy: ORMInsurancePolicy) -> domain.InsurancePolicy:
    """Convert SQLAlchemy InsurancePolicy model to domain InsurancePolicy entity."""
    return domain.InsurancePolicy(
        id=orm_policy.id,
        policy_number=orm_policy.policy_number,
        provider=orm_policy.provider,
        policy_type=domain.PolicyType(orm_policy.policy_type),
        name=orm_policy.name,
        premium=_decimal(orm_policy.premium),
        billing_cycle=domain.BillingCycle(orm_policy.billing_cycle),
        effective_date=orm_policy.effective_date,
        expiration_date=orm_policy.expiration_date,
        status=domain.PolicyStatus(orm_policy.status),
        next_due_date=orm_policy.next_due_date,
        created_at=orm_policy.created_at,
        deductible=_decimal(orm_policy.deductible),
        coverage_amount=_decimal(orm_policy.coverage_amount),
        last_paid_date=orm_policy.last_paid_date,
        auto_pay=orm_policy.auto_pay,
        merchant_patterns=tuple(orm_policy.merchant_patterns or ()),
        amount_tolerance=_decimal(orm_policy.amount_tolerance, Decimal("0")),
        category_filters=tuple(orm_policy.category_filters or ()),
        linked_transaction_ids=tuple(link.transaction_id for link in orm_policy.links),
    )


def claim_to_domain(orm_claim: ORMInsuranceClaim) -> domain.InsuranceClaim:
    """Convert SQLAlchemy InsuranceClaim model to domain InsuranceClaim entity."""
    return domain.InsuranceClaim(
        id=orm_claim.id,
        policy_id=orm_claim.policy_id,
        claim_number=orm_claim.claim_number,
        date_of_loss=orm_claim.date_of_loss,
        claim_amount=_decimal(orm_claim.claim_amount),
        status=domain.ClaimStatus(orm_claim.status),
        description=orm_claim.description,
        created_at=orm_claim.created_at,
        approved_amount=_decimal(orm_claim.approved_amount),
        paid_amount=_decimal(orm_claim.paid_amount),
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        name=orm_budget.name,
        category=orm_budget.category,
        amount=_decimal(orm_budget.amount),
        period=domain.BudgetPeriod(orm_budget.period),
        start_date=orm_budget.start_date,
        created_at=orm_budget.created_at,
        end_date=orm_budget.end_date,
        is_active=orm_budget.is_active,
    )


def savings_goal_to_domain(orm_goal: ORMSavingsGoal) -> domain.SavingsGoal:
    """Convert SQLAlchemy SavingsGoal model to domain SavingsGoal entity."""
    return domain.SavingsGoal(
        id=orm_goal.id,
        name=orm_goal.name,
        target_amount=_decimal(orm_goal.target_amount),
        current_amount=_decimal(orm_goal.current_amount, Decimal("0")),
        priority=domain.GoalPriority(orm_goal.priority),
        status=domain.GoalStatus(orm_goal.status),
        created_at=orm_goal.created_at,
        target_date=orm_goal.target_date,
        category=orm_goal.category,
        description=orm_goal.description,
        monthly_contribution=_decimal(orm_goal.monthly_contribution, Decimal("0")),
        account_id=orm_goal.account_id,
        completed_on=orm_goal.completed_on,
    )


def recurring_payment_to_domain(orm_payment: ORMRecurringPayment) -> domain.RecurringPayment:
    """Convert SQLAlchemy RecurringPayment model to domain RecurringPayment entity."""
    return domain.RecurringPayment(
        id=orm_payment.id,
        name=orm_payment.name,
        amount=_decimal(orm_payment.amount),
        frequency=domain.Frequency(orm_payment.frequency),
        interval=orm_payment.interval,
        next_due_date=orm_payment.next_due_date,
        created_at=orm_payment.created_at,
        account_id=orm_payment.account_id,
        category=orm_payment.category,
        description=orm_payment.description,
        is_active=orm_payment.is_active,
        is_automatic=orm_payment.is_automatic,
        last_paid=orm_payment.last_paid,
    )
