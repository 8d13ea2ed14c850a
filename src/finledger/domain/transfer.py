"""Transfers between accounts and credit card payments."""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from finledger.database.base import Database
from finledger.domain.entities import (
    Account,
    BankAccount,
    CreditCardAccount,
    TransactionStatus,
    TransactionType,
    TransferDirection,
    TransferResult,
)
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_inactive,
    account_not_found,
    non_positive_amount,
    require_cents,
)

logger = logging.getLogger(__name__)

TRANSFER_CATEGORY = "Transfer"


def is_card_payment(source: Account, destination: Account) -> bool:
    """A move from a bank account to a credit card is a card payment."""
    return isinstance(source, BankAccount) and isinstance(destination, CreditCardAccount)


class TransferService:
    """Service recording money moved between accounts.

    Every transfer is written in a single database transaction, so either
    both sides of the movement are stored or nothing is.
    """

    def __init__(self, db: Database):
        """Initialize transfer service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_active(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if not account.is_active:
            raise ValidationError(account_inactive(account_id))
        return account

    def transfer(
        self,
        source_id: int,
        destination_id: int,
        amount: Decimal,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        on: Optional[date] = None,
    ) -> TransferResult:
        """Move money from one account to another.

        Bank to credit card is recorded as one ``payment`` transaction on the
        card, funded by the bank account. Every other combination is recorded
        as two ``transfer`` legs sharing a transfer group.

        Args:
            source_id: Account the money leaves
            destination_id: Account the money enters
            amount: Positive amount
            description: Optional description
            notes: Optional notes
            on: Transfer date (defaults to today)

        Returns:
            TransferResult with the created transaction IDs

        Raises:
            NotFoundError: If either account doesn't exist
            ValidationError: If the amount is not positive or has fractions of a cent, the accounts are
                the same, or an account is closed
        """
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))
        require_cents(amount)
        if source_id == destination_id:
            raise ValidationError("Source and destination must be different accounts")

        source = self._require_active(source_id)
        destination = self._require_active(destination_id)
        txn_date = on or date.today()

        if is_card_payment(source, destination):
            legs = [
                {
                    "account_id": destination.id,
                    "type": TransactionType.PAYMENT,
                    "amount": amount,
                    "date": txn_date,
                    "category": TRANSFER_CATEGORY,
                    "description": description or f"Payment from {source.name}",
                    "notes": notes,
                    "status": TransactionStatus.CLEARED,
                    "counterpart_account_id": source.id,
                }
            ]
            ids = self.db.create_transfer(legs)
            logger.info("Recorded payment of %s from account %s to card %s", amount, source.id, destination.id)
            return TransferResult(kind=TransactionType.PAYMENT, transaction_ids=tuple(ids), amount=amount)

        group = uuid.uuid4().hex
        legs = [
            {
                "account_id": source.id,
                "type": TransactionType.TRANSFER,
                "direction": TransferDirection.OUT,
                "amount": amount,
                "date": txn_date,
                "category": TRANSFER_CATEGORY,
                "description": description or f"Transfer to {destination.name}",
                "notes": notes,
                "status": TransactionStatus.CLEARED,
                "transfer_group": group,
            },
            {
                "account_id": destination.id,
                "type": TransactionType.TRANSFER,
                "direction": TransferDirection.IN,
                "amount": amount,
                "date": txn_date,
                "category": TRANSFER_CATEGORY,
                "description": description or f"Transfer from {source.name}",
                "notes": notes,
                "status": TransactionStatus.CLEARED,
                "transfer_group": group,
            },
        ]
        ids = self.db.create_transfer(legs)
        logger.info("Recorded transfer %s of %s from account %s to %s", group, amount, source.id, destination.id)
        return TransferResult(
            kind=TransactionType.TRANSFER, transaction_ids=tuple(ids), transfer_group=group, amount=amount
        )
