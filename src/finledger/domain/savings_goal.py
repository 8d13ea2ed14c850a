"""Savings goals and progress toward them."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Optional

from dateutil.relativedelta import relativedelta

from finledger.database.base import Database
from finledger.domain.entities import (
    GoalPriority,
    GoalProgress,
    GoalStatus,
    SavingsGoal,
)
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    goal_not_found,
    non_positive_amount,
    require_cents,
)

logger = logging.getLogger(__name__)


def goal_progress(goal: SavingsGoal, today: date) -> GoalProgress:
    """Derive progress figures for a goal as of ``today``.

    ``months_to_goal`` is None when nothing is contributed monthly and money
    is still missing. A goal without a target date is always on track; one
    with a date is on track when the monthly contribution gets there in time.
    """
    remaining = max(goal.target_amount - goal.current_amount, Decimal("0"))
    percent = (goal.current_amount / goal.target_amount * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    days_left = (goal.target_date - today).days if goal.target_date is not None else None

    if remaining == 0:
        months_to_goal: Optional[int] = 0
    elif goal.monthly_contribution > 0:
        months_to_goal = int((remaining / goal.monthly_contribution).to_integral_value(rounding=ROUND_CEILING))
    else:
        months_to_goal = None

    if remaining == 0 or goal.target_date is None:
        on_track = True
    elif months_to_goal is None:
        on_track = False
    else:
        on_track = today + relativedelta(months=months_to_goal) <= goal.target_date

    return GoalProgress(
        goal=goal,
        percent=percent,
        remaining=remaining,
        days_left=days_left,
        months_to_goal=months_to_goal,
        on_track=on_track,
    )


class SavingsGoalService:
    """Service for managing savings goals."""

    def __init__(self, db: Database):
        """Initialize savings goal service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_goal(self, goal_id: int) -> SavingsGoal:
        goal = self.db.get_savings_goal(goal_id)
        if goal is None:
            raise NotFoundError(goal_not_found(goal_id))
        return goal

    def create_goal(
        self,
        name: str,
        target_amount: Decimal,
        target_date: Optional[date] = None,
        current_amount: Decimal = Decimal("0"),
        category: Optional[str] = None,
        priority: GoalPriority = GoalPriority.MEDIUM,
        description: Optional[str] = None,
        monthly_contribution: Decimal = Decimal("0"),
        account_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> int:
        """Create a savings goal.

        A goal whose current amount already meets the target starts out
        completed.

        Args:
            name: Goal name (unique)
            target_amount: Amount to save
            target_date: Optional deadline
            current_amount: Amount already saved
            category: Optional free-text category, e.g. "Emergency Fund"
            priority: Low, medium or high
            description: Optional description
            monthly_contribution: Planned monthly saving, used for projections
            account_id: Optional account the money is kept in

        Returns:
            Goal ID

        Raises:
            ConflictError: If a goal with the same name exists
            NotFoundError: If the account doesn't exist
            ValidationError: If an amount is invalid
        """
        if target_amount <= 0:
            raise ValidationError(non_positive_amount(target_amount))
        if current_amount < 0:
            raise ValidationError("Current amount cannot be negative")
        if monthly_contribution < 0:
            raise ValidationError("Monthly contribution cannot be negative")
        require_cents(target_amount, "Target amount")
        require_cents(current_amount, "Current amount")
        require_cents(monthly_contribution, "Monthly contribution")
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        for goal in self.db.list_savings_goals():
            if goal.name == name:
                raise ConflictError(f"Savings goal '{name}' already exists")

        reached = current_amount >= target_amount
        goal_id = self.db.create_savings_goal(
            name=name,
            target_amount=target_amount,
            current_amount=current_amount,
            target_date=target_date,
            category=category,
            priority=priority,
            status=GoalStatus.COMPLETED if reached else GoalStatus.ACTIVE,
            description=description,
            monthly_contribution=monthly_contribution,
            account_id=account_id,
            completed_on=(today or date.today()) if reached else None,
        )
        logger.info("Created savings goal %s (%s)", goal_id, name)
        return goal_id

    def get_goal(self, goal_id: int) -> Optional[SavingsGoal]:
        return self.db.get_savings_goal(goal_id)

    def list_goals(self, status: Optional[GoalStatus] = None) -> list[SavingsGoal]:
        goals = self.db.list_savings_goals()
        if status is None:
            return goals
        return [goal for goal in goals if goal.status == status]

    def contribute(self, goal_id: int, amount: Decimal, on: Optional[date] = None) -> SavingsGoal:
        """Add money to a goal. Reaching the target completes it.

        Returns:
            The updated goal

        Raises:
            NotFoundError: If goal doesn't exist
            ValidationError: If the amount is invalid or the goal is paused
        """
        goal = self._require_goal(goal_id)
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount)
        if goal.status == GoalStatus.PAUSED:
            raise ValidationError(f"Savings goal '{goal.name}' is paused")

        updated = replace(goal, current_amount=goal.current_amount + amount)
        if goal.status == GoalStatus.ACTIVE and updated.current_amount >= goal.target_amount:
            updated = replace(updated, status=GoalStatus.COMPLETED, completed_on=on or date.today())
            logger.info("Savings goal %s reached its target", goal_id)
        self._save(updated)
        return updated

    def withdraw(self, goal_id: int, amount: Decimal) -> SavingsGoal:
        """Take money out of a goal. A completed goal falling short is reopened.

        Raises:
            NotFoundError: If goal doesn't exist
            ValidationError: If the amount is invalid or exceeds what is saved
        """
        goal = self._require_goal(goal_id)
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount)
        if amount > goal.current_amount:
            raise ValidationError(f"Cannot withdraw {amount}; only {goal.current_amount} saved toward '{goal.name}'")

        updated = replace(goal, current_amount=goal.current_amount - amount)
        if goal.status == GoalStatus.COMPLETED and updated.current_amount < goal.target_amount:
            updated = replace(updated, status=GoalStatus.ACTIVE, completed_on=None)
        self._save(updated)
        return updated

    def _save(self, goal: SavingsGoal) -> None:
        self.db.update_savings_goal(
            goal.id,
            current_amount=goal.current_amount,
            status=goal.status,
            completed_on=goal.completed_on,
        )

    def set_status(self, goal_id: int, status: GoalStatus) -> None:
        """Pause or resume a goal.

        Goals complete by reaching their target, so COMPLETED cannot be set
        here, and a completed goal cannot be paused.

        Raises:
            NotFoundError: If goal doesn't exist
            ValidationError: If the change is not allowed
        """
        goal = self._require_goal(goal_id)
        if status == goal.status:
            return
        if status == GoalStatus.COMPLETED or goal.status == GoalStatus.COMPLETED:
            raise ValidationError(f"Cannot change savings goal status from {goal.status.value} to {status.value}")
        self.db.update_savings_goal(goal_id, status=status)

    def progress(self, goal_id: int, today: Optional[date] = None) -> GoalProgress:
        return goal_progress(self._require_goal(goal_id), today or date.today())

    def report(self, today: Optional[date] = None) -> list[GoalProgress]:
        today = today or date.today()
        return [goal_progress(goal, today) for goal in self.db.list_savings_goals()]

    def total_saved(self) -> Decimal:
        return sum((goal.current_amount for goal in self.db.list_savings_goals()), Decimal("0"))
