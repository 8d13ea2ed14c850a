"""Recurring bills and subscriptions."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from finledger.database.base import Database
from finledger.domain.entities import (
    CreditCardAccount,
    DuePayment,
    Frequency,
    RecurringPayment,
    TransactionType,
)
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    non_positive_amount,
    recurring_payment_not_found,
    require_cents,
)
from finledger.domain.notifications import NotificationSink
from finledger.domain.rewards import RewardService
from finledger.domain.transaction import TransactionService

logger = logging.getLogger(__name__)

DUE_SOON_DAYS = 7


def advance_due_date(due: date, frequency: Frequency, interval: int = 1) -> date:
    """Return the due date ``interval`` frequency units after ``due``."""
    if frequency == Frequency.DAILY:
        return due + relativedelta(days=interval)
    if frequency == Frequency.WEEKLY:
        return due + relativedelta(weeks=interval)
    if frequency == Frequency.YEARLY:
        return due + relativedelta(years=interval)
    return due + relativedelta(months=interval)


def due_state(payment: RecurringPayment, today: date) -> DuePayment:
    days = (payment.next_due_date - today).days
    return DuePayment(
        payment=payment,
        days_until_due=days,
        overdue=days < 0,
        due_soon=0 <= days <= DUE_SOON_DAYS,
    )


class RecurringPaymentService:
    """Service for managing recurring payments."""

    def __init__(self, db: Database, notifier: Optional[NotificationSink] = None):
        """Initialize recurring payment service.

        Args:
            db: Database instance
            notifier: Passed on to the transaction and reward services when payments are recorded
        """
        self.db = db
        self.notifier = notifier

    def _require_payment(self, payment_id: int) -> RecurringPayment:
        payment = self.db.get_recurring_payment(payment_id)
        if payment is None:
            raise NotFoundError(recurring_payment_not_found(payment_id))
        return payment

    def create_payment(
        self,
        name: str,
        amount: Decimal,
        next_due_date: date,
        frequency: Frequency = Frequency.MONTHLY,
        interval: int = 1,
        account_id: Optional[int] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
        is_automatic: bool = False,
    ) -> int:
        """Create a recurring payment.

        Args:
            name: Payment name, e.g. "Rent"
            amount: Amount paid each time
            next_due_date: Next date the payment is due
            frequency: Daily, weekly, monthly or yearly
            interval: Number of frequency units between payments
            account_id: Optional account the payment is taken from
            category: Optional expense category
            description: Optional description recorded on the expense
            is_automatic: Paid automatically by the bank or merchant

        Returns:
            Payment ID

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If the amount or interval is invalid
        """
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount)
        if interval < 1:
            raise ValidationError("Interval must be at least 1")
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        payment_id = self.db.create_recurring_payment(
            name=name,
            amount=amount,
            next_due_date=next_due_date,
            frequency=frequency,
            interval=interval,
            account_id=account_id,
            category=category,
            description=description,
            is_automatic=is_automatic,
        )
        logger.info("Created recurring payment %s (%s)", payment_id, name)
        return payment_id

    def get_payment(self, payment_id: int) -> Optional[RecurringPayment]:
        return self.db.get_recurring_payment(payment_id)

    def list_payments(self, include_inactive: bool = False) -> list[RecurringPayment]:
        return self.db.list_recurring_payments(include_inactive=include_inactive)

    def update_amount(self, payment_id: int, amount: Decimal) -> None:
        self._require_payment(payment_id)
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount)
        self.db.update_recurring_payment(payment_id, amount=amount)

    def deactivate_payment(self, payment_id: int) -> None:
        """Stop tracking a payment. Expenses already recorded are kept."""
        self._require_payment(payment_id)
        self.db.update_recurring_payment(payment_id, is_active=False)

    def mark_paid(self, payment_id: int, paid_on: Optional[date] = None) -> Optional[int]:
        """Record one payment and move the due date forward one interval.

        When the payment has an account, an expense is recorded on it first;
        if that fails the due date is left alone. Card charges earn rewards
        like any other purchase.

        Returns:
            ID of the recorded expense, or None when the payment has no account

        Raises:
            NotFoundError: If payment doesn't exist
            ValidationError: If the payment is inactive or the expense is rejected
        """
        payment = self._require_payment(payment_id)
        if not payment.is_active:
            raise ValidationError(f"Recurring payment '{payment.name}' is inactive")
        paid_on = paid_on or date.today()

        transaction_id = None
        if payment.account_id is not None:
            transaction_id = TransactionService(self.db, notifier=self.notifier).create_transaction(
                account_id=payment.account_id,
                type=TransactionType.EXPENSE,
                amount=payment.amount,
                date=paid_on,
                category=payment.category,
                description=payment.description or payment.name,
            )
            if isinstance(self.db.get_account(payment.account_id), CreditCardAccount):
                RewardService(self.db, notifier=self.notifier).process_transaction_rewards(transaction_id)

        next_due = advance_due_date(payment.next_due_date, payment.frequency, payment.interval)
        self.db.update_recurring_payment(payment_id, next_due_date=next_due, last_paid=paid_on)
        logger.info("Recurring payment %s paid on %s, next due %s", payment_id, paid_on, next_due)
        return transaction_id

    def due_report(self, today: Optional[date] = None) -> list[DuePayment]:
        today = today or date.today()
        return [due_state(payment, today) for payment in self.db.list_recurring_payments()]

    def upcoming(self, today: Optional[date] = None, within_days: int = DUE_SOON_DAYS) -> list[DuePayment]:
        """Active payments due between today and ``within_days`` from now."""
        today = today or date.today()
        horizon = today + timedelta(days=within_days)
        return [item for item in self.due_report(today) if today <= item.payment.next_due_date <= horizon]

    def overdue(self, today: Optional[date] = None) -> list[DuePayment]:
        return [item for item in self.due_report(today) if item.overdue]

    def monthly_total(self) -> Decimal:
        """Approximate monthly cost of all active payments."""
        per_month = {
            Frequency.DAILY: Decimal("365") / 12,
            Frequency.WEEKLY: Decimal("52") / 12,
            Frequency.MONTHLY: Decimal("1"),
            Frequency.YEARLY: Decimal("1") / 12,
        }
        total = sum(
            (p.amount * per_month[p.frequency] / p.interval for p in self.db.list_recurring_payments()),
            Decimal("0"),
        )
        return total.quantize(Decimal("0.01"))
