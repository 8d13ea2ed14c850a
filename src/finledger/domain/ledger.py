"""Ledger reducer: balances derived from transaction history.

Balances are never stored. Every read replays the account's transactions on
top of its initial balance:

    balance = initial_balance + sum(signed_amount(t) for t in transactions)

For a bank account the balance is money held; for a credit card it is the
amount owed, so the same transaction type can move the two in opposite
directions.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Iterator, Optional

from finledger.database.base import Database
from finledger.domain.entities import (
    Account,
    AccountSummary,
    BankAccount,
    CardStatus,
    CreditCardAccount,
    Transaction,
    TransactionType,
    TransferDirection,
)
from finledger.domain.errors import NotFoundError, ValidationError, account_not_found, not_a_credit_card

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

HIGH_UTILIZATION_PERCENT = Decimal("70")
MINIMUM_PAYMENT_PERCENTAGE = Decimal("0.02")
MINIMUM_PAYMENT_FLOOR = Decimal("25")


def _bank_signed_amount(account: BankAccount, txn: Transaction) -> Decimal:
    if txn.counterpart_account_id == account.id:
        # Funding side of a card payment
        return -txn.amount if txn.type == TransactionType.PAYMENT else ZERO
    if txn.type == TransactionType.INCOME:
        return txn.amount
    if txn.type in (TransactionType.EXPENSE, TransactionType.PAYMENT):
        return -txn.amount
    if txn.type == TransactionType.TRANSFER:
        return txn.amount if txn.direction == TransferDirection.IN else -txn.amount
    return ZERO


def _credit_signed_amount(account: CreditCardAccount, txn: Transaction) -> Decimal:
    if txn.account_id != account.id:
        return ZERO
    if txn.type == TransactionType.EXPENSE:
        return txn.amount
    if txn.type in (TransactionType.PAYMENT, TransactionType.INCOME):
        return -txn.amount
    if txn.type == TransactionType.TRANSFER:
        # Money moved out of a card is a cash advance and adds to the debt
        return txn.amount if txn.direction == TransferDirection.OUT else -txn.amount
    return ZERO


def signed_amount(account: Account, txn: Transaction) -> Decimal:
    """Return the effect of a transaction on an account's balance.

    Transactions that do not reference the account contribute zero.
    """
    if not txn.references(account.id):
        return ZERO
    if isinstance(account, BankAccount):
        return _bank_signed_amount(account, txn)
    if isinstance(account, CreditCardAccount):
        return _credit_signed_amount(account, txn)
    raise TypeError(f"Unsupported account type: {type(account).__name__}")


def _ledger_order(account: Account, transactions: Iterable[Transaction]) -> list[Transaction]:
    relevant = [t for t in transactions if not t.is_hidden and t.references(account.id)]
    return sorted(relevant, key=lambda t: (t.date, t.id))


def running_balances(account: Account, transactions: Iterable[Transaction]) -> Iterator[tuple[Transaction, Decimal]]:
    """Yield each transaction with the balance after it, oldest first."""
    balance = account.initial_balance
    for txn in _ledger_order(account, transactions):
        balance += signed_amount(account, txn)
        yield txn, balance


def calculate_balance(account: Account, transactions: Iterable[Transaction]) -> Decimal:
    """Return the current balance of an account.

    Hidden transactions are ignored. An account without transactions has
    its initial balance.
    """
    balance = account.initial_balance
    for _, balance in running_balances(account, transactions):
        pass
    return balance


def summarize_account(account: Account, transactions: Iterable[Transaction]) -> AccountSummary:
    """Aggregate per-type totals for an account."""
    ordered = _ledger_order(account, transactions)
    totals = {
        "income": ZERO,
        "expenses": ZERO,
        "payments": ZERO,
        "transfers_in": ZERO,
        "transfers_out": ZERO,
    }
    for txn in ordered:
        if txn.type == TransactionType.INCOME:
            totals["income"] += txn.amount
        elif txn.type == TransactionType.EXPENSE:
            totals["expenses"] += txn.amount
        elif txn.type == TransactionType.PAYMENT:
            totals["payments"] += txn.amount
        elif txn.direction == TransferDirection.IN:
            totals["transfers_in"] += txn.amount
        else:
            totals["transfers_out"] += txn.amount

    return AccountSummary(
        account_id=account.id,
        balance=calculate_balance(account, ordered),
        total_income=totals["income"],
        total_expenses=totals["expenses"],
        total_payments=totals["payments"],
        total_transfers_in=totals["transfers_in"],
        total_transfers_out=totals["transfers_out"],
        transaction_count=len(ordered),
    )


def calculate_utilization(balance: Decimal, credit_limit: Decimal) -> Decimal:
    """Return credit utilization as a percentage in [0, 100].

    Defined as 0 when the limit is 0.
    """
    if credit_limit <= 0:
        return ZERO
    used = max(min(balance, credit_limit), ZERO)
    return used / credit_limit * HUNDRED


def calculate_available_credit(credit_limit: Decimal, balance: Decimal) -> Decimal:
    return max(credit_limit - balance, ZERO)


def calculate_minimum_payment(
    balance: Decimal,
    interest_rate: Decimal,
    minimum_percentage: Decimal = MINIMUM_PAYMENT_PERCENTAGE,
) -> Decimal:
    """Estimate the minimum payment: a share of the balance plus one month of interest.

    Never below the floor of $25 unless the balance itself is smaller, and
    zero when nothing is owed.
    """
    if balance <= 0:
        return ZERO
    monthly_interest = balance * interest_rate / HUNDRED / 12
    payment = max(balance * minimum_percentage + monthly_interest, MINIMUM_PAYMENT_FLOOR)
    payment = min(payment, balance)
    return payment.quantize(CENT, rounding=ROUND_HALF_UP)


def card_status(card: CreditCardAccount, balance: Decimal, today: date) -> CardStatus:
    """Derive utilization and payment reminders for a credit card."""
    utilization = calculate_utilization(balance, card.credit_limit)
    days_until_due: Optional[int] = None
    payment_due_soon = False
    overdue = False
    if card.payment_due_date is not None:
        days_until_due = (card.payment_due_date - today).days
        payment_due_soon = 0 < days_until_due <= card.payment_reminder_days
        overdue = days_until_due < 0 and balance > 0

    return CardStatus(
        card_id=card.id,
        balance=balance,
        utilization=utilization,
        available_credit=calculate_available_credit(card.credit_limit, balance),
        minimum_payment=calculate_minimum_payment(balance, card.interest_rate),
        high_utilization=utilization >= HIGH_UTILIZATION_PERCENT,
        days_until_due=days_until_due,
        payment_due_soon=payment_due_soon,
        overdue=overdue,
    )


class LedgerService:
    """Service computing balances from stored transactions."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def get_balance(self, account_id: int) -> Decimal:
        """Get the current balance of an account.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self._require_account(account_id)
        return calculate_balance(account, self.db.list_transactions(account_id=account_id))

    def get_balances(self, include_inactive: bool = False) -> dict[int, Decimal]:
        """Get balances for all accounts from a single transaction fetch."""
        transactions = self.db.list_transactions()
        return {
            account.id: calculate_balance(account, transactions)
            for account in self.db.list_accounts(include_inactive=include_inactive)
        }

    def get_summary(self, account_id: int) -> AccountSummary:
        """Get per-type totals and balance for an account."""
        account = self._require_account(account_id)
        return summarize_account(account, self.db.list_transactions(account_id=account_id))

    def get_register(self, account_id: int) -> list[tuple[Transaction, Decimal]]:
        """Get the account register: transactions with running balance."""
        account = self._require_account(account_id)
        return list(running_balances(account, self.db.list_transactions(account_id=account_id)))

    def get_card_status(self, card_id: int, today: Optional[date] = None) -> CardStatus:
        """Get utilization and payment status for a credit card.

        Raises:
            NotFoundError: If the card doesn't exist
            ValidationError: If the account is not a credit card
        """
        account = self._require_account(card_id)
        if not isinstance(account, CreditCardAccount):
            raise ValidationError(not_a_credit_card(card_id))
        balance = calculate_balance(account, self.db.list_transactions(account_id=card_id))
        return card_status(account, balance, today or date.today())
