"""Transaction domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal

from finledger.database.base import Database
from finledger.domain.entities import (
    AlertPriority,
    CreditCardAccount,
    Transaction as TransactionEntity,
    TransactionStatus,
    TransactionType,
    TransferDirection,
)
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_inactive,
    account_not_found,
    non_positive_amount,
    require_cents,
    transaction_not_found,
)
from finledger.domain.income import find_matching_source
from finledger.domain.notifications import LoggingSink, Notification, NotificationSink

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database, notifier: Optional[NotificationSink] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            notifier: Sink for "income detected" notifications (logs if None)
        """
        self.db = db
        self.notifier = notifier or LoggingSink()

    def create_transaction(
        self,
        account_id: int,
        type: TransactionType,
        amount: Decimal,
        date: date,
        category: Optional[str] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        status: TransactionStatus = TransactionStatus.CLEARED,
        direction: Optional[TransferDirection] = None,
    ) -> int:
        """Create a transaction.

        Args:
            account_id: Account ID
            type: Income, expense, transfer or payment
            amount: Positive transaction amount
            date: Transaction date
            category: Optional category
            description: Optional description (payer or merchant)
            notes: Optional notes
            status: Pending, cleared or reconciled
            direction: Required for transfers, ignored otherwise

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If account doesn't exist
            ValidationError: If the amount (positive, whole cents) or type rules are violated
        """
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount)

        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if not account.is_active:
            raise ValidationError(account_inactive(account_id))

        if type == TransactionType.TRANSFER:
            if direction is None:
                raise ValidationError("Transfers require a direction ('in' or 'out')")
        else:
            direction = None
        if type == TransactionType.PAYMENT and not isinstance(account, CreditCardAccount):
            raise ValidationError("Payments can only be recorded on credit cards")

        transaction_id = self.db.create_transaction(
            account_id=account_id,
            type=type,
            amount=amount,
            date=date,
            category=category,
            description=description,
            notes=notes,
            status=status,
            direction=direction,
        )

        if type == TransactionType.INCOME:
            self._detect_income_source(transaction_id)
        return transaction_id

    def _detect_income_source(self, transaction_id: int) -> None:
        """Suggest an income source for a newly recorded income transaction."""
        txn = self.db.get_transaction(transaction_id)
        source = find_matching_source(self.db.list_income_sources(), txn)
        if source is None:
            return
        logger.info("Income transaction %s matches source %s", transaction_id, source.id)
        self.notifier.notify(
            Notification(
                title="Income detected",
                message=f"${txn.amount:,.2f} looks like income from '{source.name}' (source {source.id})",
                priority=AlertPriority.MEDIUM,
                transaction_id=transaction_id,
            )
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def _require_transaction(self, transaction_id: int) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def update_category(self, transaction_id: int, category: Optional[str]) -> None:
        """Update transaction category. None clears it.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self._require_transaction(transaction_id)
        self.db.update_transaction_category(transaction_id, category or None)

    def update_notes(self, transaction_id: int, notes: Optional[str]) -> None:
        """Update transaction notes.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self._require_transaction(transaction_id)
        self.db.update_transaction_notes(transaction_id, notes)

    def update_status(self, transaction_id: int, status: TransactionStatus) -> None:
        self._require_transaction(transaction_id)
        self.db.update_transaction_status(transaction_id, status)

    def set_hidden(self, transaction_id: int, is_hidden: bool) -> list[int]:
        """Hide or show a transaction. Hidden transactions do not count toward balances.

        Both legs of a transfer are hidden or shown together so the pair stays
        balanced. Rewards already recorded for a card purchase, and the bonus
        spending they accrued, are kept: hiding changes what is displayed and
        summed, not what was earned.

        Returns:
            IDs of every transaction that changed

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self._require_transaction(transaction_id)
        changed = self.db.set_transaction_hidden(transaction_id, is_hidden)
        if len(changed) > 1:
            logger.info("Transfer legs %s are now %s", changed, "hidden" if is_hidden else "visible")
        return changed

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category: Optional[str] = None,
        type: Optional[TransactionType] = None,
        include_hidden: bool = False,
    ) -> list[TransactionEntity]:
        """List transactions with filters, oldest first.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            account_id: Optional account filter (owner or counterpart)
            category: Optional exact category filter
            type: Optional transaction type filter
            include_hidden: Include hidden transactions

        Returns:
            List of transaction entities
        """
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category=category,
            type=type,
            include_hidden=include_hidden,
        )
