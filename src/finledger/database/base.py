"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from finledger.domain.entities import (
    Account,
    BankAccountType,
    Budget,
    CreditCardBonus,
    IncomeSource,
    InsuranceClaim,
    InsurancePolicy,
    RecurringPayment,
    RewardEntry,
    RewardType,
    SavingsGoal,
    Transaction,
    TransactionStatus,
    TransactionType,
    TransferDirection,
)


class Database(ABC):
    """Abstract database interface for finledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_bank_account(
        self,
        name: str,
        institution: str,
        initial_balance: Decimal,
        account_type: BankAccountType = BankAccountType.CHECKING,
        opened_on: Optional[date] = None,
    ) -> int:
        """Create a bank account. Returns account ID."""
        pass

    @abstractmethod
    def create_credit_card(
        self,
        name: str,
        institution: str,
        initial_balance: Decimal,
        credit_limit: Decimal,
        interest_rate: Decimal = Decimal("0"),
        reward_type: RewardType = RewardType.CASHBACK,
        reward_rate: Decimal = Decimal("1"),
        annual_fee: Decimal = Decimal("0"),
        next_annual_fee_date: Optional[date] = None,
        payment_due_date: Optional[date] = None,
        payment_reminder_days: int = 7,
        opened_on: Optional[date] = None,
    ) -> int:
        """Create a credit card account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, include_inactive: bool = False) -> list[Account]:
        """List accounts ordered by name."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, **fields) -> None:
        """Update account columns. Only the given fields are changed."""
        pass

    @abstractmethod
    def set_account_active(self, account_id: int, is_active: bool, closed_on: Optional[date] = None) -> None:
        """Open or close (soft delete) an account."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Physically delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions referencing an account, as owner or counterpart."""
        pass

    @abstractmethod
    def set_category_reward(
        self, card_id: int, category: str, reward_type: RewardType, rate: Decimal, ratio: Optional[str] = None
    ) -> None:
        """Create or replace the reward override for a card category."""
        pass

    @abstractmethod
    def remove_category_reward(self, card_id: int, category: str) -> bool:
        """Remove a category override. Returns False if none existed."""
        pass

    # Transaction operations
    @abstractmethod
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
        counterpart_account_id: Optional[int] = None,
        transfer_group: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def create_transfer(self, legs: Sequence[dict[str, Any]]) -> list[int]:
        """Write all legs in a single database transaction.

        Each leg holds the keyword arguments of ``create_transaction``.

        Either every leg is stored or none is. Returns the new IDs in leg order.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category: Optional[str] = None,
        type: Optional[TransactionType] = None,
        include_hidden: bool = False,
    ) -> list[Transaction]:
        """List transactions with optional filters, oldest first.

        Args:
            account_id: Matches the owning account or the counterpart account
            include_hidden: If False, hidden transactions are left out
        """
        pass

    @abstractmethod
    def update_transaction_category(self, transaction_id: int, category: Optional[str]) -> None:
        """Update transaction category."""
        pass

    @abstractmethod
    def update_transaction_notes(self, transaction_id: int, notes: Optional[str]) -> None:
        """Update transaction notes."""
        pass

    @abstractmethod
    def update_transaction_status(self, transaction_id: int, status: TransactionStatus) -> None:
        """Update transaction status."""
        pass

    @abstractmethod
    def set_transaction_hidden(self, transaction_id: int, is_hidden: bool) -> list[int]:
        """Hide or show a transaction together with every leg of its transfer.

        All rows change in one commit. Returns the affected transaction IDs.
        """
        pass

    # Bonus operations
    @abstractmethod
    def create_bonus(
        self,
        card_id: int,
        title: str,
        spending_required: Decimal,
        start_date: date,
        end_date: date,
        category: Optional[str] = None,
        auto_tracking: bool = True,
        bonus_value: Optional[Decimal] = None,
        current_spending: Decimal = Decimal("0"),
    ) -> int:
        """Create a credit card bonus. Returns bonus ID."""
        pass

    @abstractmethod
    def get_bonus(self, bonus_id: int) -> Optional[CreditCardBonus]:
        """Get bonus by ID."""
        pass

    @abstractmethod
    def list_bonuses(self, card_id: Optional[int] = None) -> list[CreditCardBonus]:
        """List bonuses, optionally for one card."""
        pass

    @abstractmethod
    def save_bonus(self, bonus: CreditCardBonus) -> None:
        """Persist spending, status and completion date of a bonus."""
        pass

    # Reward history operations
    @abstractmethod
    def record_reward(
        self,
        card_id: int,
        transaction_id: int,
        date: date,
        category: Optional[str],
        amount: Decimal,
        reward_type: RewardType,
        reward_earned: Decimal,
        updated_bonuses: Sequence[CreditCardBonus] = (),
    ) -> int:
        """Store a reward entry and bonus progress in one database transaction."""
        pass

    @abstractmethod
    def reward_exists_for_transaction(self, transaction_id: int) -> bool:
        """Check if rewards were already processed for a transaction."""
        pass

    @abstractmethod
    def list_reward_entries(self, card_id: Optional[int] = None) -> list[RewardEntry]:
        """List reward history, oldest first."""
        pass

    # Income source operations
    @abstractmethod
    def create_income_source(
        self,
        name: str,
        source_type: str,
        employer: Optional[str] = None,
        expected_monthly_amount: Optional[Decimal] = None,
    ) -> int:
        """Create an income source. Returns source ID."""
        pass

    @abstractmethod
    def get_income_source(self, source_id: int) -> Optional[IncomeSource]:
        """Get income source by ID."""
        pass

    @abstractmethod
    def list_income_sources(self, include_inactive: bool = False) -> list[IncomeSource]:
        """List income sources in creation order."""
        pass

    @abstractmethod
    def update_income_source(self, source_id: int, **fields) -> None:
        """Update income source columns."""
        pass

    @abstractmethod
    def add_payer_rule(
        self,
        source_id: int,
        rule_type: str,
        pattern: str = "",
        amount_min: Optional[Decimal] = None,
        amount_max: Optional[Decimal] = None,
        account_id: Optional[int] = None,
    ) -> int:
        """Add a payer rule to a source. Returns rule ID."""
        pass

    @abstractmethod
    def link_transaction_to_source(self, source_id: int, transaction_id: int) -> None:
        """Link a transaction to an income source."""
        pass

    # Insurance operations
    @abstractmethod
    def create_policy(self, **fields) -> int:
        """Create an insurance policy. Returns policy ID."""
        pass

    @abstractmethod
    def get_policy(self, policy_id: int) -> Optional[InsurancePolicy]:
        """Get policy by ID."""
        pass

    @abstractmethod
    def list_policies(self) -> list[InsurancePolicy]:
        """List policies ordered by name."""
        pass

    @abstractmethod
    def update_policy(self, policy_id: int, **fields) -> None:
        """Update policy columns."""
        pass

    @abstractmethod
    def link_transaction_to_policy(self, policy_id: int, transaction_id: int) -> None:
        """Link a transaction to a policy."""
        pass

    @abstractmethod
    def create_claim(
        self,
        policy_id: int,
        claim_number: str,
        date_of_loss: date,
        claim_amount: Decimal,
        description: Optional[str] = None,
    ) -> int:
        """Create an insurance claim. Returns claim ID."""
        pass

    @abstractmethod
    def get_claim(self, claim_id: int) -> Optional[InsuranceClaim]:
        """Get claim by ID."""
        pass

    @abstractmethod
    def list_claims(self, policy_id: Optional[int] = None) -> list[InsuranceClaim]:
        """List claims, optionally for one policy."""
        pass

    @abstractmethod
    def update_claim(self, claim_id: int, **fields) -> None:
        """Update claim columns."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(self, **fields) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self, include_inactive: bool = False) -> list[Budget]:
        """List budgets ordered by name."""
        pass

    @abstractmethod
    def update_budget(self, budget_id: int, **fields) -> None:
        """Update budget columns."""
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        """Delete a budget."""
        pass

    # Savings goal operations
    @abstractmethod
    def create_savings_goal(self, **fields) -> int:
        """Create a savings goal. Returns goal ID."""
        pass

    @abstractmethod
    def get_savings_goal(self, goal_id: int) -> Optional[SavingsGoal]:
        """Get savings goal by ID."""
        pass

    @abstractmethod
    def list_savings_goals(self) -> list[SavingsGoal]:
        """List savings goals ordered by name."""
        pass

    @abstractmethod
    def update_savings_goal(self, goal_id: int, **fields) -> None:
        """Update savings goal columns."""
        pass

    # Recurring payment operations
    @abstractmethod
    def create_recurring_payment(self, **fields) -> int:
        """Create a recurring payment. Returns payment ID."""
        pass

    @abstractmethod
    def get_recurring_payment(self, payment_id: int) -> Optional[RecurringPayment]:
        """Get recurring payment by ID."""
        pass

    @abstractmethod
    def list_recurring_payments(self, include_inactive: bool = False) -> list[RecurringPayment]:
        """List recurring payments ordered by next due date."""
        pass

    @abstractmethod
    def update_recurring_payment(self, payment_id: int, **fields) -> None:
        """Update recurring payment columns."""
        pass
