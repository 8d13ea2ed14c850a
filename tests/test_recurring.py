"""Tests for recurring payments."""

from datetime import date
from decimal import Decimal

import pytest

from finledger.domain.entities import Frequency, RewardType, TransactionType
from finledger.domain.errors import NotFoundError, ValidationError
from finledger.domain.recurring import advance_due_date


@pytest.fixture
def rent(recurring_service, checking):
    payment_id = recurring_service.create_payment(
        name="Rent",
        amount=Decimal("150"),
        next_due_date=date(2024, 6, 20),
        account_id=checking.id,
        category="Bills & Utilities",
    )
    return recurring_service.get_payment(payment_id)


class TestAdvanceDueDate:
    def test_monthly_keeps_month_end(self):
        assert advance_due_date(date(2024, 1, 31), Frequency.MONTHLY) == date(2024, 2, 29)

    def test_every_two_weeks(self):
        assert advance_due_date(date(2024, 6, 15), Frequency.WEEKLY, 2) == date(2024, 6, 29)

    def test_daily(self):
        assert advance_due_date(date(2024, 6, 30), Frequency.DAILY) == date(2024, 7, 1)

    def test_yearly(self):
        assert advance_due_date(date(2024, 2, 29), Frequency.YEARLY) == date(2025, 2, 28)


class TestRecurringPayments:
    def test_create_defaults(self, rent):
        assert rent.frequency == Frequency.MONTHLY
        assert rent.interval == 1
        assert rent.is_active
        assert rent.last_paid is None

    def test_interval_must_be_positive(self, recurring_service):
        with pytest.raises(ValidationError):
            recurring_service.create_payment("Gym", Decimal("30"), date(2024, 7, 1), interval=0)

    def test_sub_cent_amount(self, recurring_service):
        with pytest.raises(ValidationError, match="fractions of a cent"):
            recurring_service.create_payment("Gym", Decimal("29.999"), date(2024, 7, 1))

    def test_unknown_account(self, recurring_service):
        with pytest.raises(NotFoundError):
            recurring_service.create_payment("Gym", Decimal("30"), date(2024, 7, 1), account_id=42)

    def test_mark_paid_records_expense(self, recurring_service, ledger_service, transaction_service, rent, checking):
        transaction_id = recurring_service.mark_paid(rent.id, date(2024, 6, 19))

        txn = transaction_service.get_transaction(transaction_id)
        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == Decimal("150")
        assert txn.category == "Bills & Utilities"
        assert txn.description == "Rent"
        assert ledger_service.get_balance(checking.id) == Decimal("850")

        payment = recurring_service.get_payment(rent.id)
        assert payment.next_due_date == date(2024, 7, 20)
        assert payment.last_paid == date(2024, 6, 19)

    def test_card_charge_earns_reward(self, recurring_service, reward_service, card):
        payment_id = recurring_service.create_payment(
            "Streaming", Decimal("20"), date(2024, 6, 1), account_id=card.id, category="Entertainment"
        )

        recurring_service.mark_paid(payment_id, date(2024, 6, 1))

        assert reward_service.total_rewards(card.id) == {RewardType.CASHBACK: Decimal("0.20")}

    def test_mark_paid_without_account(self, recurring_service):
        payment_id = recurring_service.create_payment("Streaming", Decimal("12.99"), date(2024, 6, 1))

        assert recurring_service.mark_paid(payment_id, date(2024, 6, 1)) is None
        assert recurring_service.get_payment(payment_id).next_due_date == date(2024, 7, 1)

    def test_rejected_expense_leaves_due_date(self, recurring_service, account_service, rent, checking):
        account_service.close_account(checking.id)

        with pytest.raises(ValidationError):
            recurring_service.mark_paid(rent.id, date(2024, 6, 19))
        assert recurring_service.get_payment(rent.id).next_due_date == date(2024, 6, 20)

    def test_inactive_payment_cannot_be_paid(self, recurring_service, rent):
        recurring_service.deactivate_payment(rent.id)

        with pytest.raises(ValidationError, match="inactive"):
            recurring_service.mark_paid(rent.id)
        assert recurring_service.list_payments() == []

    def test_upcoming_and_overdue(self, recurring_service, rent, today):
        recurring_service.create_payment("Phone", Decimal("40"), date(2024, 6, 10))
        recurring_service.create_payment("Insurance", Decimal("90"), date(2024, 7, 30))

        upcoming = recurring_service.upcoming(today)
        overdue = recurring_service.overdue(today)

        assert [item.payment.name for item in upcoming] == ["Rent"]
        assert upcoming[0].days_until_due == 5
        assert upcoming[0].due_soon
        assert [item.payment.name for item in overdue] == ["Phone"]
        assert overdue[0].days_until_due == -5

    def test_monthly_total(self, recurring_service):
        recurring_service.create_payment("Rent", Decimal("100"), date(2024, 7, 1))
        recurring_service.create_payment("Domain", Decimal("1200"), date(2024, 7, 1), frequency=Frequency.YEARLY)
        recurring_service.create_payment("Lunch", Decimal("10"), date(2024, 7, 1), frequency=Frequency.WEEKLY)

        assert recurring_service.monthly_total() == Decimal("243.33")
