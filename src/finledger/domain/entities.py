"""Domain model entities for finledger.

These are pure data classes representing business concepts, independent of
database schema. Accounts are a tagged variant: code that needs to treat bank
accounts and credit cards differently dispatches on the concrete class rather
than on a type string.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountKind(str, Enum):
    """Discriminator for the two account variants."""

    BANK = "bank"
    CREDIT = "credit"


class BankAccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    OTHER = "other"


class TransactionType(str, Enum):
    """How a transaction moves money relative to its account."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    PAYMENT = "payment"


class TransferDirection(str, Enum):
    IN = "in"
    OUT = "out"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    CLEARED = "cleared"
    RECONCILED = "reconciled"


class RewardType(str, Enum):
    CASHBACK = "cashback"
    POINTS = "points"
    MILES = "miles"


class BonusStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAID_OUT = "paid_out"
    EXPIRED = "expired"


class IncomeSourceType(str, Enum):
    SALARY = "salary"
    FREELANCE = "freelance"
    GIG = "gig"
    BUSINESS = "business"
    INVESTMENT = "investment"
    GIFTS = "gifts"
    GOVERNMENT = "government"
    OTHER = "other"


class PayerRuleType(str, Enum):
    """Pattern kinds used to auto-classify income transactions."""

    EXACT_PAYER = "exact_payer"
    PARTIAL_DESCRIPTION = "partial_description"
    AMOUNT_RANGE = "amount_range"
    ACCOUNT = "account"


class PolicyType(str, Enum):
    HEALTH = "health"
    AUTO = "auto"
    HOME = "home"
    LIFE = "life"
    DISABILITY = "disability"
    OTHER = "other"


class BillingCycle(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi_annual"
    ANNUAL = "annual"


class PolicyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class ClaimStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    DENIED = "denied"
    PAID = "paid"
    CLOSED = "closed"


class AlertPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertKind(str, Enum):
    BONUS_NEAR_COMPLETION = "bonus_near_completion"
    BONUS_DEADLINE = "bonus_deadline"
    ANNUAL_FEE = "annual_fee"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


DEFAULT_CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Income",
    "Transfer",
    "Other",
)


@dataclass(frozen=True)
class CategoryReward:
    """Reward configuration for one spending category on a card.

    ``ratio`` is free text such as "$1 = 2 points" and is only displayed.
    """

    category: str
    reward_type: RewardType
    rate: Decimal
    ratio: Optional[str] = None


@dataclass(frozen=True)
class BankAccount:
    """Checking, savings or other deposit account."""

    id: int
    name: str
    institution: str
    initial_balance: Decimal
    is_active: bool
    opened_on: Optional[date]
    closed_on: Optional[date]
    created_at: datetime
    account_type: BankAccountType = BankAccountType.CHECKING

    @property
    def kind(self) -> AccountKind:
        return AccountKind.BANK


@dataclass(frozen=True)
class CreditCardAccount:
    """Credit card account. Its balance is the amount owed."""

    id: int
    name: str
    institution: str
    initial_balance: Decimal
    is_active: bool
    opened_on: Optional[date]
    closed_on: Optional[date]
    created_at: datetime
    credit_limit: Decimal = Decimal("0")
    interest_rate: Decimal = Decimal("0")
    reward_type: RewardType = RewardType.CASHBACK
    reward_rate: Decimal = Decimal("1")
    annual_fee: Decimal = Decimal("0")
    next_annual_fee_date: Optional[date] = None
    payment_due_date: Optional[date] = None
    payment_reminder_days: int = 7
    category_rewards: tuple[CategoryReward, ...] = ()

    @property
    def kind(self) -> AccountKind:
        return AccountKind.CREDIT


Account = BankAccount | CreditCardAccount


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always a positive magnitude; its effect on a balance is
    derived from ``type``, ``direction`` and the account variant.
    """

    id: int
    account_id: int
    type: TransactionType
    amount: Decimal
    date: date
    category: Optional[str]
    description: Optional[str]
    notes: Optional[str]
    status: TransactionStatus
    is_hidden: bool
    created_at: datetime
    direction: Optional[TransferDirection] = None
    counterpart_account_id: Optional[int] = None
    transfer_group: Optional[str] = None

    def references(self, account_id: int) -> bool:
        """Return True if the transaction moves money in or out of the account."""
        return self.account_id == account_id or self.counterpart_account_id == account_id


@dataclass(frozen=True)
class CreditCardBonus:
    """Sign-up bonus tied to a spending threshold within a time window."""

    id: int
    card_id: int
    title: str
    spending_required: Decimal
    current_spending: Decimal
    start_date: date
    end_date: date
    status: BonusStatus
    category: Optional[str] = None
    auto_tracking: bool = True
    bonus_value: Optional[Decimal] = None
    date_completed: Optional[date] = None


@dataclass(frozen=True)
class RewardEntry:
    """Reward earned on a single card transaction."""

    id: int
    card_id: int
    transaction_id: int
    date: date
    category: Optional[str]
    amount: Decimal
    reward_type: RewardType
    reward_earned: Decimal
    created_at: datetime


@dataclass(frozen=True)
class PayerRule:
    id: int
    source_id: int
    rule_type: PayerRuleType
    pattern: str
    amount_min: Optional[Decimal] = None
    amount_max: Optional[Decimal] = None
    account_id: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class IncomeSource:
    id: int
    name: str
    source_type: IncomeSourceType
    employer: Optional[str]
    expected_monthly_amount: Optional[Decimal]
    is_active: bool
    created_at: datetime
    payer_rules: tuple[PayerRule, ...] = ()
    linked_transaction_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class InsurancePolicy:
    id: int
    policy_number: str
    provider: str
    policy_type: PolicyType
    name: str
    premium: Decimal
    billing_cycle: BillingCycle
    effective_date: date
    expiration_date: date
    status: PolicyStatus
    next_due_date: date
    created_at: datetime
    deductible: Optional[Decimal] = None
    coverage_amount: Optional[Decimal] = None
    last_paid_date: Optional[date] = None
    auto_pay: bool = False
    merchant_patterns: tuple[str, ...] = ()
    amount_tolerance: Decimal = Decimal("0")
    category_filters: tuple[str, ...] = ()
    linked_transaction_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class InsuranceClaim:
    id: int
    policy_id: int
    claim_number: str
    date_of_loss: date
    claim_amount: Decimal
    status: ClaimStatus
    description: Optional[str]
    created_at: datetime
    approved_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class Budget:
    """Spending limit for one category, renewed every period from ``start_date``."""

    id: int
    name: str
    category: str
    amount: Decimal
    period: BudgetPeriod
    start_date: date
    created_at: datetime
    end_date: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class SavingsGoal:
    id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal
    priority: GoalPriority
    status: GoalStatus
    created_at: datetime
    target_date: Optional[date] = None
    category: Optional[str] = None
    description: Optional[str] = None
    monthly_contribution: Decimal = Decimal("0")
    account_id: Optional[int] = None
    completed_on: Optional[date] = None


@dataclass(frozen=True)
class RecurringPayment:
    """A bill or subscription that repeats every ``interval`` frequency units."""

    id: int
    name: str
    amount: Decimal
    frequency: Frequency
    interval: int
    next_due_date: date
    created_at: datetime
    account_id: Optional[int] = None
    category: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    is_automatic: bool = False
    last_paid: Optional[date] = None


@dataclass(frozen=True)
class AccountSummary:
    """Derived totals for one account."""

    account_id: int
    balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    total_payments: Decimal
    total_transfers_in: Decimal
    total_transfers_out: Decimal
    transaction_count: int


@dataclass(frozen=True)
class CardStatus:
    """Derived credit card health figures."""

    card_id: int
    balance: Decimal
    utilization: Decimal
    available_credit: Decimal
    minimum_payment: Decimal
    high_utilization: bool
    days_until_due: Optional[int]
    payment_due_soon: bool
    overdue: bool


@dataclass(frozen=True)
class RewardQuote:
    """Reward a card would earn on a charge."""

    card_id: int
    amount: Decimal
    reward_type: RewardType
    rate: Decimal
    value: Decimal


@dataclass(frozen=True)
class RewardSuggestion:
    card: CreditCardAccount
    quote: RewardQuote


@dataclass(frozen=True)
class BonusProgress:
    bonus: CreditCardBonus
    progress: Decimal
    percent: Decimal
    remaining: Decimal
    days_left: int
    near_completion: bool
    deadline_priority: Optional[AlertPriority]


@dataclass(frozen=True)
class Alert:
    """Advisory alert. Alerts never change stored state."""

    id: str
    kind: AlertKind
    priority: AlertPriority
    title: str
    message: str
    card_id: Optional[int] = None


@dataclass(frozen=True)
class TransferResult:
    kind: TransactionType
    transaction_ids: tuple[int, ...]
    transfer_group: Optional[str] = None
    amount: Decimal = field(default=Decimal("0"))


@dataclass(frozen=True)
class BudgetUsage:
    """Spending against a budget in the period containing a given day."""

    budget: Budget
    period_start: date
    period_end: date
    spent: Decimal
    remaining: Decimal
    percent: Decimal
    over_budget: bool
    near_limit: bool


@dataclass(frozen=True)
class GoalProgress:
    goal: SavingsGoal
    percent: Decimal
    remaining: Decimal
    days_left: Optional[int]
    months_to_goal: Optional[int]
    on_track: bool


@dataclass(frozen=True)
class DuePayment:
    payment: RecurringPayment
    days_until_due: int
    overdue: bool
    due_soon: bool
