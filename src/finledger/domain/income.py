"""Income sources and payer rules."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from finledger.database.base import Database
from finledger.domain.entities import (
    IncomeSource,
    IncomeSourceType,
    PayerRule,
    PayerRuleType,
    Transaction,
    TransactionType,
)
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    income_source_not_found,
    require_cents,
    transaction_not_found,
)

logger = logging.getLogger(__name__)


def rule_matches(rule: PayerRule, txn: Transaction) -> bool:
    """Return True if a payer rule matches a transaction.

    Text comparisons ignore case.
    """
    if not rule.is_active:
        return False
    description = (txn.description or "").lower()
    pattern = rule.pattern.lower()

    if rule.rule_type == PayerRuleType.EXACT_PAYER:
        return bool(pattern) and description == pattern
    if rule.rule_type == PayerRuleType.PARTIAL_DESCRIPTION:
        return bool(pattern) and pattern in description
    if rule.rule_type == PayerRuleType.AMOUNT_RANGE:
        if rule.amount_min is None or rule.amount_max is None:
            return False
        return rule.amount_min <= txn.amount <= rule.amount_max
    if rule.rule_type == PayerRuleType.ACCOUNT:
        return rule.account_id == txn.account_id
    return False


def find_matching_source(sources: Iterable[IncomeSource], txn: Optional[Transaction]) -> Optional[IncomeSource]:
    """Return the first active source with a rule matching the transaction."""
    if txn is None:
        return None
    for source in sources:
        if not source.is_active:
            continue
        if any(rule_matches(rule, txn) for rule in source.payer_rules):
            return source
    return None


class IncomeSourceService:
    """Service for managing income sources."""

    def __init__(self, db: Database):
        """Initialize income source service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_source(self, source_id: int) -> IncomeSource:
        source = self.db.get_income_source(source_id)
        if source is None:
            raise NotFoundError(income_source_not_found(source_id))
        return source

    def create_source(
        self,
        name: str,
        source_type: IncomeSourceType = IncomeSourceType.OTHER,
        employer: Optional[str] = None,
        expected_monthly_amount: Optional[Decimal] = None,
    ) -> int:
        """Create an income source.

        Raises:
            ConflictError: If a source with the same name exists
            ValidationError: If the expected amount is negative
        """
        if expected_monthly_amount is not None and expected_monthly_amount < 0:
            raise ValidationError("Expected monthly amount cannot be negative")
        require_cents(expected_monthly_amount, "Expected monthly amount")
        for source in self.db.list_income_sources(include_inactive=True):
            if source.name == name:
                raise ConflictError(f"Income source '{name}' already exists")
        return self.db.create_income_source(
            name=name,
            source_type=source_type,
            employer=employer,
            expected_monthly_amount=expected_monthly_amount,
        )

    def get_source(self, source_id: int) -> Optional[IncomeSource]:
        return self.db.get_income_source(source_id)

    def list_sources(self, include_inactive: bool = False) -> list[IncomeSource]:
        return self.db.list_income_sources(include_inactive=include_inactive)

    def update_expected_amount(self, source_id: int, expected_monthly_amount: Optional[Decimal]) -> None:
        self._require_source(source_id)
        if expected_monthly_amount is not None and expected_monthly_amount < 0:
            raise ValidationError("Expected monthly amount cannot be negative")
        require_cents(expected_monthly_amount, "Expected monthly amount")
        self.db.update_income_source(source_id, expected_monthly_amount=expected_monthly_amount)

    def deactivate_source(self, source_id: int) -> None:
        """Stop matching new income against a source. Links are kept."""
        self._require_source(source_id)
        self.db.update_income_source(source_id, is_active=False)

    def add_payer_rule(
        self,
        source_id: int,
        rule_type: PayerRuleType,
        pattern: str = "",
        amount_min: Optional[Decimal] = None,
        amount_max: Optional[Decimal] = None,
        account_id: Optional[int] = None,
    ) -> int:
        """Add a payer rule to a source.

        Raises:
            NotFoundError: If source or account doesn't exist
            ValidationError: If the rule is missing the data its type needs
        """
        self._require_source(source_id)
        if rule_type in (PayerRuleType.EXACT_PAYER, PayerRuleType.PARTIAL_DESCRIPTION):
            if not pattern.strip():
                raise ValidationError(f"A {rule_type.value} rule needs a pattern")
        elif rule_type == PayerRuleType.AMOUNT_RANGE:
            if amount_min is None or amount_max is None:
                raise ValidationError("An amount_range rule needs both a minimum and a maximum")
            if amount_min > amount_max:
                raise ValidationError("Minimum amount cannot exceed maximum amount")
            require_cents(amount_min, "Minimum amount")
            require_cents(amount_max, "Maximum amount")
        elif rule_type == PayerRuleType.ACCOUNT:
            if account_id is None or self.db.get_account(account_id) is None:
                raise NotFoundError(f"Account {account_id} not found")

        return self.db.add_payer_rule(
            source_id=source_id,
            rule_type=rule_type,
            pattern=pattern.strip(),
            amount_min=amount_min,
            amount_max=amount_max,
            account_id=account_id,
        )

    def link_transaction(self, source_id: int, transaction_id: int) -> None:
        """Attribute an income transaction to a source.

        Raises:
            NotFoundError: If source or transaction doesn't exist
            ValidationError: If the transaction is not income
            ConflictError: If the transaction is already linked to the source
        """
        source = self._require_source(source_id)
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.type != TransactionType.INCOME:
            raise ValidationError(f"Transaction {transaction_id} is not income")
        if transaction_id in source.linked_transaction_ids:
            raise ConflictError(f"Transaction {transaction_id} is already linked to '{source.name}'")
        self.db.link_transaction_to_source(source_id, transaction_id)
        logger.info("Linked transaction %s to income source %s", transaction_id, source_id)

    def find_matching_source(self, transaction_id: int) -> Optional[IncomeSource]:
        """Suggest an income source for a stored transaction."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return find_matching_source(self.db.list_income_sources(), txn)

    def total_expected_monthly(self) -> Decimal:
        return sum(
            (s.expected_monthly_amount or Decimal("0") for s in self.db.list_income_sources()),
            Decimal("0"),
        )

    def income_by_source(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> dict[Optional[int], Decimal]:
        """Total linked income per source in a date range.

        Income transactions not linked to any source are reported under None.
        """
        sources = self.db.list_income_sources(include_inactive=True)
        owner: dict[int, int] = {}
        for source in sources:
            for transaction_id in source.linked_transaction_ids:
                owner.setdefault(transaction_id, source.id)

        totals: dict[Optional[int], Decimal] = defaultdict(lambda: Decimal("0"))
        for txn in self.db.list_transactions(start_date=start_date, end_date=end_date, type=TransactionType.INCOME):
            totals[owner.get(txn.id)] += txn.amount
        return dict(totals)
