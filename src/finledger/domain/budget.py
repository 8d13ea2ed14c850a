"""Category budgets and spending against them."""

import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from finledger.database.base import Database
from finledger.domain.entities import (
    Budget,
    BudgetPeriod,
    BudgetUsage,
    Transaction,
    TransactionType,
)
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    budget_not_found,
    non_positive_amount,
    require_cents,
)

logger = logging.getLogger(__name__)

NEAR_LIMIT_PERCENT = Decimal("80")


def _shift(start: date, period: BudgetPeriod, count: int) -> date:
    if period == BudgetPeriod.WEEKLY:
        return start + relativedelta(weeks=count)
    if period == BudgetPeriod.YEARLY:
        return start + relativedelta(years=count)
    return start + relativedelta(months=count)


def budget_period(budget: Budget, on: date) -> tuple[date, date]:
    """Return the first and last day of the budget period containing ``on``.

    Periods repeat from ``start_date``. Days before the start fall in the
    first period, and the last period is cut short at ``end_date``.
    """
    if on <= budget.start_date:
        count = 0
    elif budget.period == BudgetPeriod.WEEKLY:
        count = (on - budget.start_date).days // 7
    else:
        delta = relativedelta(on, budget.start_date)
        count = delta.years if budget.period == BudgetPeriod.YEARLY else delta.years * 12 + delta.months
    # Month-end starts can leave ``on`` one step past the estimate
    while _shift(budget.start_date, budget.period, count + 1) <= on:
        count += 1

    start = _shift(budget.start_date, budget.period, count)
    end = _shift(budget.start_date, budget.period, count + 1) - timedelta(days=1)
    if budget.end_date is not None and budget.end_date < end:
        end = budget.end_date
    return start, end


def budget_spending(budget: Budget, transactions: Iterable[Transaction], start: date, end: date) -> Decimal:
    """Sum visible expenses in the budget's category between two dates, inclusive."""
    return sum(
        (
            txn.amount
            for txn in transactions
            if txn.type == TransactionType.EXPENSE
            and not txn.is_hidden
            and txn.category == budget.category
            and start <= txn.date <= end
        ),
        Decimal("0"),
    )


def budget_usage(budget: Budget, transactions: Iterable[Transaction], on: date) -> BudgetUsage:
    """Spending against a budget for the period containing ``on``."""
    start, end = budget_period(budget, on)
    spent = budget_spending(budget, transactions, start, end)
    percent = (spent / budget.amount * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return BudgetUsage(
        budget=budget,
        period_start=start,
        period_end=end,
        spent=spent,
        remaining=budget.amount - spent,
        percent=percent,
        over_budget=spent > budget.amount,
        near_limit=NEAR_LIMIT_PERCENT < percent <= 100,
    )


class BudgetService:
    """Service for managing category budgets."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_budget(self, budget_id: int) -> Budget:
        budget = self.db.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))
        return budget

    def create_budget(
        self,
        name: str,
        category: str,
        amount: Decimal,
        period: BudgetPeriod = BudgetPeriod.MONTHLY,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Create a spending limit for a category.

        Args:
            name: Budget name (unique)
            category: Expense category the budget watches
            amount: Limit per period
            period: Weekly, monthly or yearly
            start_date: First day of the first period (defaults to today)
            end_date: Optional last day the budget applies

        Returns:
            Budget ID

        Raises:
            ConflictError: If a budget with the same name exists
            ValidationError: If the amount or dates are invalid
        """
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount, "Budget amount")
        if not category.strip():
            raise ValidationError("A budget needs a category")
        start_date = start_date or date.today()
        if end_date is not None and end_date < start_date:
            raise ValidationError("Budget end date cannot be before its start date")
        for budget in self.db.list_budgets(include_inactive=True):
            if budget.name == name:
                raise ConflictError(f"Budget '{name}' already exists")

        budget_id = self.db.create_budget(
            name=name,
            category=category.strip(),
            amount=amount,
            period=period,
            start_date=start_date,
            end_date=end_date,
        )
        logger.info("Created budget %s (%s) for '%s'", budget_id, name, category)
        return budget_id

    def get_budget(self, budget_id: int) -> Optional[Budget]:
        return self.db.get_budget(budget_id)

    def list_budgets(self, include_inactive: bool = False) -> list[Budget]:
        return self.db.list_budgets(include_inactive=include_inactive)

    def update_amount(self, budget_id: int, amount: Decimal) -> None:
        """Change a budget's limit.

        Raises:
            NotFoundError: If budget doesn't exist
            ValidationError: If the amount is not positive or has fractions of a cent
        """
        self._require_budget(budget_id)
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount, "Budget amount")
        self.db.update_budget(budget_id, amount=amount)

    def deactivate_budget(self, budget_id: int) -> None:
        self._require_budget(budget_id)
        self.db.update_budget(budget_id, is_active=False)

    def delete_budget(self, budget_id: int) -> None:
        self._require_budget(budget_id)
        self.db.delete_budget(budget_id)
        logger.info("Deleted budget %s", budget_id)

    def usage(self, budget_id: int, today: Optional[date] = None) -> BudgetUsage:
        """Spending against one budget in its current period.

        Raises:
            NotFoundError: If budget doesn't exist
        """
        budget = self._require_budget(budget_id)
        today = today or date.today()
        start, end = budget_period(budget, today)
        transactions = self.db.list_transactions(
            start_date=start, end_date=end, category=budget.category, type=TransactionType.EXPENSE
        )
        return budget_usage(budget, transactions, today)

    def report(self, today: Optional[date] = None) -> list[BudgetUsage]:
        """Usage for every active budget."""
        today = today or date.today()
        report = [self.usage(budget.id, today) for budget in self.db.list_budgets()]
        over = [item.budget.name for item in report if item.over_budget]
        if over:
            logger.info("Over budget: %s", ", ".join(over))
        return report
