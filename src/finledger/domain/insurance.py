"""Insurance policies, premium tracking and claims."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from finledger.database.base import Database
from finledger.domain.entities import (
    BillingCycle,
    ClaimStatus,
    InsuranceClaim,
    InsurancePolicy,
    PolicyStatus,
    PolicyType,
    Transaction,
    TransactionType,
)
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    claim_not_found,
    policy_not_found,
    require_cents,
    transaction_not_found,
)

logger = logging.getLogger(__name__)

BILLING_PERIODS = {
    BillingCycle.MONTHLY: relativedelta(months=1),
    BillingCycle.QUARTERLY: relativedelta(months=3),
    BillingCycle.SEMI_ANNUAL: relativedelta(months=6),
    BillingCycle.ANNUAL: relativedelta(years=1),
}

CLAIM_TRANSITIONS = {
    ClaimStatus.SUBMITTED: {ClaimStatus.UNDER_REVIEW, ClaimStatus.APPROVED, ClaimStatus.DENIED},
    ClaimStatus.UNDER_REVIEW: {ClaimStatus.APPROVED, ClaimStatus.DENIED},
    ClaimStatus.APPROVED: {ClaimStatus.PAID, ClaimStatus.CLOSED},
    ClaimStatus.DENIED: {ClaimStatus.CLOSED},
    ClaimStatus.PAID: {ClaimStatus.CLOSED},
    ClaimStatus.CLOSED: set(),
}


def next_due_date(current: date, cycle: BillingCycle) -> date:
    """Return the due date one billing period after ``current``."""
    return current + BILLING_PERIODS[cycle]


def policy_matches(policy: InsurancePolicy, txn: Transaction) -> bool:
    """Return True if a transaction looks like a payment toward a policy.

    A transaction matches when its description contains one of the policy's
    merchant patterns, or when its amount is within the tolerance of the
    premium and its category is allowed (an empty filter allows any).
    """
    description = (txn.description or "").lower()
    if any(pattern and pattern.lower() in description for pattern in policy.merchant_patterns):
        return True
    amount_match = abs(txn.amount - policy.premium) <= policy.amount_tolerance
    category_match = not policy.category_filters or txn.category in policy.category_filters
    return amount_match and category_match


class InsuranceService:
    """Service for insurance policies and claims."""

    def __init__(self, db: Database):
        """Initialize insurance service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_policy(self, policy_id: int) -> InsurancePolicy:
        policy = self.db.get_policy(policy_id)
        if policy is None:
            raise NotFoundError(policy_not_found(policy_id))
        return policy

    def create_policy(
        self,
        policy_number: str,
        provider: str,
        name: str,
        premium: Decimal,
        effective_date: date,
        expiration_date: date,
        policy_type: PolicyType = PolicyType.OTHER,
        billing_cycle: BillingCycle = BillingCycle.MONTHLY,
        next_due: Optional[date] = None,
        deductible: Optional[Decimal] = None,
        coverage_amount: Optional[Decimal] = None,
        auto_pay: bool = False,
        merchant_patterns: Iterable[str] = (),
        amount_tolerance: Decimal = Decimal("0"),
        category_filters: Iterable[str] = (),
    ) -> int:
        """Create an insurance policy.

        Args:
            policy_number: Insurer's policy number (unique)
            provider: Insurance company
            name: Display name
            premium: Premium charged each billing period
            effective_date: Coverage start
            expiration_date: Coverage end
            policy_type: Health, auto, home, life, disability or other
            billing_cycle: How often the premium is due
            next_due: First premium due date (defaults to the effective date)
            deductible: Optional deductible
            coverage_amount: Optional coverage limit
            auto_pay: Whether the premium is paid automatically
            merchant_patterns: Description fragments identifying premium payments
            amount_tolerance: Allowed difference from the premium for amount matching
            category_filters: Categories allowed for amount matching

        Returns:
            Policy ID

        Raises:
            ConflictError: If the policy number already exists
            ValidationError: If amounts or dates are invalid
        """
        if premium < 0:
            raise ValidationError("Premium cannot be negative")
        if amount_tolerance < 0:
            raise ValidationError("Amount tolerance cannot be negative")
        if expiration_date < effective_date:
            raise ValidationError("Expiration date cannot be before the effective date")
        for field, value in (
            ("Premium", premium),
            ("Deductible", deductible),
            ("Coverage amount", coverage_amount),
            ("Amount tolerance", amount_tolerance),
        ):
            require_cents(value, field)
        if any(p.policy_number == policy_number for p in self.db.list_policies()):
            raise ConflictError(f"Policy number '{policy_number}' already exists")

        policy_id = self.db.create_policy(
            policy_number=policy_number,
            provider=provider,
            policy_type=policy_type,
            name=name,
            premium=premium,
            billing_cycle=billing_cycle,
            deductible=deductible,
            coverage_amount=coverage_amount,
            effective_date=effective_date,
            expiration_date=expiration_date,
            status=PolicyStatus.ACTIVE,
            next_due_date=next_due or effective_date,
            auto_pay=auto_pay,
            merchant_patterns=tuple(merchant_patterns),
            amount_tolerance=amount_tolerance,
            category_filters=tuple(category_filters),
        )
        logger.info("Created policy %s (%s)", policy_id, policy_number)
        return policy_id

    def get_policy(self, policy_id: int) -> Optional[InsurancePolicy]:
        return self.db.get_policy(policy_id)

    def list_policies(self, status: Optional[PolicyStatus] = None) -> list[InsurancePolicy]:
        policies = self.db.list_policies()
        if status is not None:
            policies = [p for p in policies if p.status == status]
        return policies

    def set_policy_status(self, policy_id: int, status: PolicyStatus) -> None:
        self._require_policy(policy_id)
        self.db.update_policy(policy_id, status=status)

    def record_premium_payment(self, policy_id: int, paid_on: Optional[date] = None) -> InsurancePolicy:
        """Record a premium payment and move the due date forward one period.

        Raises:
            NotFoundError: If policy doesn't exist
            ValidationError: If the policy is not active
        """
        policy = self._require_policy(policy_id)
        if policy.status != PolicyStatus.ACTIVE:
            raise ValidationError(f"Policy {policy_id} is {policy.status.value}")

        paid_on = paid_on or date.today()
        due = next_due_date(policy.next_due_date, policy.billing_cycle)
        self.db.update_policy(policy_id, last_paid_date=paid_on, next_due_date=due)
        logger.info("Premium paid for policy %s, next due %s", policy_id, due)
        return self._require_policy(policy_id)

    def upcoming_premiums(self, today: Optional[date] = None, within_days: int = 30) -> list[InsurancePolicy]:
        """Active policies with a premium due within ``within_days``, soonest first."""
        today = today or date.today()
        horizon = today + relativedelta(days=within_days)
        due = [
            p
            for p in self.db.list_policies()
            if p.status == PolicyStatus.ACTIVE and p.next_due_date <= horizon
        ]
        return sorted(due, key=lambda p: p.next_due_date)

    def auto_link_transaction(self, transaction_id: int) -> list[int]:
        """Link an expense to every active policy it matches.

        Returns:
            IDs of the policies the transaction was linked to
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.type != TransactionType.EXPENSE:
            return []

        linked = []
        for policy in self.db.list_policies():
            if policy.status != PolicyStatus.ACTIVE or transaction_id in policy.linked_transaction_ids:
                continue
            if policy_matches(policy, txn):
                self.db.link_transaction_to_policy(policy.id, transaction_id)
                linked.append(policy.id)
        if linked:
            logger.info("Linked transaction %s to policies %s", transaction_id, linked)
        return linked

    def create_claim(
        self,
        policy_id: int,
        claim_number: str,
        date_of_loss: date,
        claim_amount: Decimal,
        description: Optional[str] = None,
    ) -> int:
        """File a claim against a policy.

        Raises:
            NotFoundError: If policy doesn't exist
            ConflictError: If the claim number already exists
            ValidationError: If the amount is not positive
        """
        self._require_policy(policy_id)
        if claim_amount <= 0:
            raise ValidationError("Claim amount must be greater than zero")
        require_cents(claim_amount, "Claim amount")
        if any(c.claim_number == claim_number for c in self.db.list_claims()):
            raise ConflictError(f"Claim number '{claim_number}' already exists")

        claim_id = self.db.create_claim(
            policy_id=policy_id,
            claim_number=claim_number,
            date_of_loss=date_of_loss,
            claim_amount=claim_amount,
            description=description,
        )
        logger.info("Filed claim %s against policy %s", claim_id, policy_id)
        return claim_id

    def get_claim(self, claim_id: int) -> Optional[InsuranceClaim]:
        return self.db.get_claim(claim_id)

    def list_claims(self, policy_id: Optional[int] = None) -> list[InsuranceClaim]:
        return self.db.list_claims(policy_id=policy_id)

    def update_claim_status(
        self, claim_id: int, status: ClaimStatus, amount: Optional[Decimal] = None
    ) -> InsuranceClaim:
        """Move a claim along its lifecycle.

        Approving records ``amount`` as the approved amount (the claimed
        amount when omitted). Marking paid requires the paid amount.

        Raises:
            NotFoundError: If claim doesn't exist
            ValidationError: If the transition is not allowed or an amount is missing
        """
        claim = self.db.get_claim(claim_id)
        if claim is None:
            raise NotFoundError(claim_not_found(claim_id))
        if status not in CLAIM_TRANSITIONS[claim.status]:
            raise ValidationError(f"Cannot change claim status from {claim.status.value} to {status.value}")
        if amount is not None and amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        require_cents(amount)

        fields: dict = {"status": status}
        if status == ClaimStatus.APPROVED:
            fields["approved_amount"] = amount if amount is not None else claim.claim_amount
        elif status == ClaimStatus.PAID:
            if amount is None:
                raise ValidationError("A paid amount is required to mark a claim paid")
            fields["paid_amount"] = amount

        self.db.update_claim(claim_id, **fields)
        logger.info("Claim %s moved from %s to %s", claim_id, claim.status.value, status.value)
        return self.db.get_claim(claim_id)
