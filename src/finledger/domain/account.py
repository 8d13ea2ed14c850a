"""Account domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from finledger.database.base import Database
from finledger.domain.entities import (
    Account,
    BankAccountType,
    CreditCardAccount,
    RewardType,
)
from finledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_name,
    not_a_credit_card,
    require_cents,
)

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing bank accounts and credit cards."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        for acc in self.db.list_accounts(include_inactive=True):
            if acc.id != exclude_id and acc.name == name:
                raise ConflictError(duplicate_account_name(name))

    def _require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def create_bank_account(
        self,
        name: str,
        institution: str,
        initial_balance: Decimal = Decimal("0"),
        account_type: BankAccountType = BankAccountType.CHECKING,
        opened_on: Optional[date] = None,
    ) -> int:
        """Create a new bank account.

        Args:
            name: Account name (unique across all accounts)
            institution: Bank name
            initial_balance: Opening balance
            account_type: Checking, savings, investment or other
            opened_on: Optional opening date

        Returns:
            Account ID

        Raises:
            ConflictError: If account name already exists
            ValidationError: If the opening balance has fractions of a cent
        """
        require_cents(initial_balance, "Opening balance")
        self._check_unique_name(name)
        account_id = self.db.create_bank_account(
            name=name,
            institution=institution,
            initial_balance=initial_balance,
            account_type=account_type,
            opened_on=opened_on,
        )
        logger.info("Created bank account %s (%s)", account_id, name)
        return account_id

    def create_credit_card(
        self,
        name: str,
        institution: str,
        credit_limit: Decimal,
        initial_balance: Decimal = Decimal("0"),
        interest_rate: Decimal = Decimal("0"),
        reward_type: RewardType = RewardType.CASHBACK,
        reward_rate: Decimal = Decimal("1"),
        annual_fee: Decimal = Decimal("0"),
        next_annual_fee_date: Optional[date] = None,
        payment_due_date: Optional[date] = None,
        payment_reminder_days: int = 7,
        opened_on: Optional[date] = None,
    ) -> int:
        """Create a new credit card account.

        ``initial_balance`` is the amount owed when tracking starts. The
        default reward applies to every category without an override; a
        cashback rate is a percentage, a points/miles rate is per dollar.

        Returns:
            Account ID

        Raises:
            ConflictError: If account name already exists
            ValidationError: If limit, rate or fee is negative
        """
        if credit_limit < 0:
            raise ValidationError("Credit limit cannot be negative")
        if reward_rate < 0 or interest_rate < 0:
            raise ValidationError("Rates cannot be negative")
        if annual_fee < 0:
            raise ValidationError("Annual fee cannot be negative")
        require_cents(initial_balance, "Opening balance")
        require_cents(credit_limit, "Credit limit")
        require_cents(annual_fee, "Annual fee")
        self._check_unique_name(name)
        card_id = self.db.create_credit_card(
            name=name,
            institution=institution,
            initial_balance=initial_balance,
            credit_limit=credit_limit,
            interest_rate=interest_rate,
            reward_type=reward_type,
            reward_rate=reward_rate,
            annual_fee=annual_fee,
            next_annual_fee_date=next_annual_fee_date,
            payment_due_date=payment_due_date,
            payment_reminder_days=payment_reminder_days,
            opened_on=opened_on,
        )
        logger.info("Created credit card %s (%s)", card_id, name)
        return card_id

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, include_inactive: bool = False) -> list[Account]:
        """List accounts. Closed accounts are left out unless requested."""
        return self.db.list_accounts(include_inactive=include_inactive)

    def list_credit_cards(self, include_inactive: bool = False) -> list[CreditCardAccount]:
        return [
            acc
            for acc in self.db.list_accounts(include_inactive=include_inactive)
            if isinstance(acc, CreditCardAccount)
        ]

    def rename_account(self, account_id: int, name: str, institution: Optional[str] = None) -> None:
        """Rename an account.

        Args:
            account_id: Account ID to rename
            name: New account name
            institution: Optional new institution (if None, it is not updated)

        Raises:
            NotFoundError: If account not found
            ConflictError: If name already exists
        """
        self._require_account(account_id)
        self._check_unique_name(name, exclude_id=account_id)

        fields = {"name": name}
        if institution is not None:
            fields["institution"] = institution
        self.db.update_account(account_id, **fields)

    def update_credit_card(
        self,
        card_id: int,
        credit_limit: Optional[Decimal] = None,
        interest_rate: Optional[Decimal] = None,
        reward_type: Optional[RewardType] = None,
        reward_rate: Optional[Decimal] = None,
        annual_fee: Optional[Decimal] = None,
        next_annual_fee_date: Optional[date] = None,
        payment_due_date: Optional[date] = None,
        payment_reminder_days: Optional[int] = None,
    ) -> None:
        """Update credit card terms. Only provided values change.

        Raises:
            NotFoundError: If card not found
            ValidationError: If the account is a bank account or a value is negative
        """
        account = self._require_account(card_id)
        if not isinstance(account, CreditCardAccount):
            raise ValidationError(not_a_credit_card(card_id))

        fields = {
            "credit_limit": credit_limit,
            "interest_rate": interest_rate,
            "reward_type": reward_type,
            "reward_rate": reward_rate,
            "annual_fee": annual_fee,
            "next_annual_fee_date": next_annual_fee_date,
            "payment_due_date": payment_due_date,
            "payment_reminder_days": payment_reminder_days,
        }
        fields = {key: value for key, value in fields.items() if value is not None}
        for key in ("credit_limit", "interest_rate", "reward_rate", "annual_fee"):
            if key in fields and fields[key] < 0:
                raise ValidationError(f"{key.replace('_', ' ').capitalize()} cannot be negative")
        require_cents(fields.get("credit_limit"), "Credit limit")
        require_cents(fields.get("annual_fee"), "Annual fee")
        if fields:
            self.db.update_account(card_id, **fields)

    def close_account(self, account_id: int, closed_on: Optional[date] = None) -> None:
        """Close an account. Its history is kept and it stops accepting transactions.

        Raises:
            NotFoundError: If account not found
        """
        self._require_account(account_id)
        self.db.set_account_active(account_id, False, closed_on or date.today())
        logger.info("Closed account %s", account_id)

    def reopen_account(self, account_id: int) -> None:
        self._require_account(account_id)
        self.db.set_account_active(account_id, True)

    def delete_account(self, account_id: int) -> None:
        """Delete an account that has never been used.

        Raises:
            NotFoundError: If account not found
            DependencyError: If any transaction references the account
        """
        self._require_account(account_id)

        transaction_count = self.db.get_account_transaction_count(account_id)
        if transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(account_id)
