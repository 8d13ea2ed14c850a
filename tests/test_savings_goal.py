"""Tests for savings goals."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from finledger.domain.entities import GoalPriority, GoalStatus, SavingsGoal
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError
from finledger.domain.savings_goal import goal_progress


def make_goal(current="200", monthly="100", target_date=date(2024, 12, 15)):
    return SavingsGoal(
        id=1,
        name="Vacation",
        target_amount=Decimal("1000"),
        current_amount=Decimal(current),
        priority=GoalPriority.MEDIUM,
        status=GoalStatus.ACTIVE,
        created_at=datetime(2024, 1, 1),
        target_date=target_date,
        monthly_contribution=Decimal(monthly),
    )


@pytest.fixture
def vacation(goal_service):
    goal_id = goal_service.create_goal(
        name="Vacation",
        target_amount=Decimal("1000"),
        target_date=date(2024, 12, 15),
        current_amount=Decimal("200"),
        monthly_contribution=Decimal("100"),
    )
    return goal_service.get_goal(goal_id)


class TestGoalProgress:
    def test_behind_schedule(self, today):
        progress = goal_progress(make_goal(), today)

        assert progress.percent == Decimal("20.00")
        assert progress.remaining == Decimal("800")
        assert progress.days_left == 183
        assert progress.months_to_goal == 8
        assert not progress.on_track

    def test_on_schedule(self, today):
        progress = goal_progress(make_goal(monthly="200"), today)

        assert progress.months_to_goal == 4
        assert progress.on_track

    def test_partial_month_rounds_up(self, today):
        assert goal_progress(make_goal(monthly="300"), today).months_to_goal == 3

    def test_no_contribution_with_deadline(self, today):
        progress = goal_progress(make_goal(monthly="0"), today)

        assert progress.months_to_goal is None
        assert not progress.on_track

    def test_no_deadline_is_on_track(self, today):
        progress = goal_progress(make_goal(monthly="0", target_date=None), today)

        assert progress.days_left is None
        assert progress.on_track

    def test_reached_goal(self, today):
        progress = goal_progress(make_goal(current="1000"), today)

        assert progress.percent == Decimal("100.00")
        assert progress.remaining == Decimal("0")
        assert progress.months_to_goal == 0
        assert progress.on_track


class TestSavingsGoalService:
    def test_create(self, vacation):
        assert vacation.status == GoalStatus.ACTIVE
        assert vacation.priority == GoalPriority.MEDIUM
        assert vacation.current_amount == Decimal("200")
        assert vacation.completed_on is None

    def test_duplicate_name(self, goal_service, vacation):
        with pytest.raises(ConflictError):
            goal_service.create_goal("Vacation", Decimal("50"))

    def test_target_must_be_positive(self, goal_service):
        with pytest.raises(ValidationError):
            goal_service.create_goal("Car", Decimal("0"))

    def test_sub_cent_target(self, goal_service):
        with pytest.raises(ValidationError, match="fractions of a cent"):
            goal_service.create_goal("Car", Decimal("100.001"))

    def test_unknown_account(self, goal_service):
        with pytest.raises(NotFoundError):
            goal_service.create_goal("Car", Decimal("100"), account_id=42)

    def test_already_reached_goal_starts_completed(self, goal_service, today):
        goal_id = goal_service.create_goal("Car", Decimal("100"), current_amount=Decimal("150"), today=today)
        goal = goal_service.get_goal(goal_id)

        assert goal.status == GoalStatus.COMPLETED
        assert goal.completed_on == today

    def test_contribution_reaching_target_completes(self, goal_service, vacation, today):
        goal_service.contribute(vacation.id, Decimal("300"), today)
        assert goal_service.get_goal(vacation.id).status == GoalStatus.ACTIVE

        goal = goal_service.contribute(vacation.id, Decimal("500"), today)

        assert goal.status == GoalStatus.COMPLETED
        assert goal.completed_on == today
        stored = goal_service.get_goal(vacation.id)
        assert stored.current_amount == Decimal("1000")
        assert stored.status == GoalStatus.COMPLETED

    def test_withdrawal_reopens_completed_goal(self, goal_service, vacation, today):
        goal_service.contribute(vacation.id, Decimal("800"), today)

        goal = goal_service.withdraw(vacation.id, Decimal("100"))

        assert goal.status == GoalStatus.ACTIVE
        assert goal.completed_on is None
        assert goal_service.get_goal(vacation.id).current_amount == Decimal("900")

    def test_cannot_withdraw_more_than_saved(self, goal_service, vacation):
        with pytest.raises(ValidationError):
            goal_service.withdraw(vacation.id, Decimal("200.01"))

    def test_paused_goal_rejects_contributions(self, goal_service, vacation):
        goal_service.set_status(vacation.id, GoalStatus.PAUSED)

        with pytest.raises(ValidationError, match="paused"):
            goal_service.contribute(vacation.id, Decimal("10"))

        goal_service.set_status(vacation.id, GoalStatus.ACTIVE)
        assert goal_service.contribute(vacation.id, Decimal("10")).current_amount == Decimal("210")

    def test_completed_cannot_be_set_by_hand(self, goal_service, vacation):
        with pytest.raises(ValidationError):
            goal_service.set_status(vacation.id, GoalStatus.COMPLETED)

    def test_list_by_status_and_total(self, goal_service, vacation):
        goal_service.create_goal("Car", Decimal("100"), current_amount=Decimal("100"))

        assert [g.name for g in goal_service.list_goals(GoalStatus.COMPLETED)] == ["Car"]
        assert [g.name for g in goal_service.list_goals()] == ["Car", "Vacation"]
        assert goal_service.total_saved() == Decimal("300")

    def test_unknown_goal(self, goal_service):
        with pytest.raises(NotFoundError):
            goal_service.contribute(99, Decimal("1"))
