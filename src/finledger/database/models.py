"""SQLAlchemy models for finledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Bank account or credit card, discriminated by ``kind``.

    Credit card columns are NULL for bank accounts.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    name = Column(String, unique=True, nullable=False)
    institution = Column(String, nullable=False)
    initial_balance = Column(Numeric(12, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    opened_on = Column(Date, nullable=True)
    closed_on = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Bank only
    account_type = Column(String, nullable=True)

    # Credit card only
    credit_limit = Column(Numeric(12, 2), nullable=True)
    interest_rate = Column(Numeric(8, 4), nullable=True)
    reward_type = Column(String, nullable=True)
    reward_rate = Column(Numeric(8, 4), nullable=True)
    annual_fee = Column(Numeric(10, 2), nullable=True)
    next_annual_fee_date = Column(Date, nullable=True)
    payment_due_date = Column(Date, nullable=True)
    payment_reminder_days = Column(Integer, nullable=True)

    # Relationships
    category_rewards = relationship(
        "CategoryReward",
        back_populates="card",
        cascade="all, delete-orphan",
        order_by="CategoryReward.category",
    )
    bonuses = relationship("CreditCardBonus", back_populates="card", cascade="all, delete-orphan")


class CategoryReward(Base):
    """Per-category reward override on a credit card."""

    __tablename__ = "category_rewards"

    id = Column(Integer, primary_key=True)
    card_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category = Column(String, nullable=False)
    reward_type = Column(String, nullable=False)
    rate = Column(Numeric(8, 4), nullable=False)
    ratio = Column(String, nullable=True)

    __table_args__ = (UniqueConstraint("card_id", "category", name="uq_card_category"),)

    card = relationship("Account", back_populates="category_rewards")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    counterpart_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    transfer_group = Column(String, nullable=True, index=True)
    type = Column(String, nullable=False)
    direction = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    category = Column(String, nullable=True)
    description = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    status = Column(String, nullable=False, default="cleared")
    is_hidden = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class CreditCardBonus(Base):
    """Sign-up bonus model."""

    __tablename__ = "credit_card_bonuses"

    id = Column(Integer, primary_key=True)
    card_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    title = Column(String, nullable=False)
    spending_required = Column(Numeric(12, 2), nullable=False)
    current_spending = Column(Numeric(12, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="not_started")
    category = Column(String, nullable=True)
    auto_tracking = Column(Boolean, default=True, nullable=False)
    bonus_value = Column(Numeric(12, 2), nullable=True)
    date_completed = Column(Date, nullable=True)

    card = relationship("Account", back_populates="bonuses")


class RewardEntry(Base):
    """Reward history model."""

    __tablename__ = "reward_entries"

    id = Column(Integer, primary_key=True)
    card_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    date = Column(Date, nullable=False)
    category = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    reward_type = Column(String, nullable=False)
    reward_earned = Column(Numeric(14, 4), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("transaction_id", name="uq_reward_transaction"),)


class IncomeSource(Base):
    """Income source model."""

    __tablename__ = "income_sources"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    source_type = Column(String, nullable=False)
    employer = Column(String, nullable=True)
    expected_monthly_amount = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    payer_rules = relationship(
        "PayerRule", back_populates="source", cascade="all, delete-orphan", order_by="PayerRule.id"
    )
    links = relationship(
        "IncomeSourceLink", back_populates="source", cascade="all, delete-orphan", order_by="IncomeSourceLink.id"
    )


class PayerRule(Base):
    """Pattern used to match incoming transactions to an income source."""

    __tablename__ = "payer_rules"

    id = Column(Integer, primary_key=True)
    source_id = Column(Integer, ForeignKey("income_sources.id"), nullable=False)
    rule_type = Column(String, nullable=False)
    pattern = Column(String, nullable=False, default="")
    amount_min = Column(Numeric(12, 2), nullable=True)
    amount_max = Column(Numeric(12, 2), nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    source = relationship("IncomeSource", back_populates="payer_rules")


class IncomeSourceLink(Base):
    """Link between an income source and a transaction."""

    __tablename__ = "income_source_links"

    id = Column(Integer, primary_key=True)
    source_id = Column(Integer, ForeignKey("income_sources.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)

    __table_args__ = (UniqueConstraint("source_id", "transaction_id", name="uq_source_transaction"),)

    source = relationship("IncomeSource", back_populates="links")


class InsurancePolicy(Base):
    """Insurance policy model."""

    __tablename__ = "insurance_policies"

    id = Column(Integer, primary_key=True)
    policy_number = Column(String, unique=True, nullable=False)
    provider = Column(String, nullable=False)
    policy_type = Column(String, nullable=False)
    name = Column(String, nullable=False)
    premium = Column(Numeric(12, 2), nullable=False)
    billing_cycle = Column(String, nullable=False)
    deductible = Column(Numeric(12, 2), nullable=True)
    coverage_amount = Column(Numeric(14, 2), nullable=True)
    effective_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="active")
    next_due_date = Column(Date, nullable=False)
    last_paid_date = Column(Date, nullable=True)
    auto_pay = Column(Boolean, default=False, nullable=False)
    merchant_patterns = Column(JSON, nullable=False, default=list)
    amount_tolerance = Column(Numeric(12, 2), nullable=False, default=0)
    category_filters = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    links = relationship(
        "PolicyTransactionLink", back_populates="policy", cascade="all, delete-orphan", order_by="PolicyTransactionLink.id"
    )
    claims = relationship("InsuranceClaim", back_populates="policy", cascade="all, delete-orphan")


class PolicyTransactionLink(Base):
    """Link between an insurance policy and a transaction."""

    __tablename__ = "policy_transaction_links"

    id = Column(Integer, primary_key=True)
    policy_id = Column(Integer, ForeignKey("insurance_policies.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)

    __table_args__ = (UniqueConstraint("policy_id", "transaction_id", name="uq_policy_transaction"),)

    policy = relationship("InsurancePolicy", back_populates="links")


class InsuranceClaim(Base):
    """Insurance claim model."""

    __tablename__ = "insurance_claims"

    id = Column(Integer, primary_key=True)
    policy_id = Column(Integer, ForeignKey("insurance_policies.id"), nullable=False)
    claim_number = Column(String, unique=True, nullable=False)
    date_of_loss = Column(Date, nullable=False)
    claim_amount = Column(Numeric(12, 2), nullable=False)
    approved_amount = Column(Numeric(12, 2), nullable=True)
    paid_amount = Column(Numeric(12, 2), nullable=True)
    status = Column(String, nullable=False, default="submitted")
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    policy = relationship("InsurancePolicy", back_populates="claims")


class Budget(Base):
    """Budget model."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    category = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    period = Column(String, nullable=False, default="monthly")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class SavingsGoal(Base):
    """Savings goal model."""

    __tablename__ = "savings_goals"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    target_amount = Column(Numeric(12, 2), nullable=False)
    current_amount = Column(Numeric(12, 2), nullable=False, default=0)
    target_date = Column(Date, nullable=True)
    category = Column(String, nullable=True)
    priority = Column(String, nullable=False, default="medium")
    status = Column(String, nullable=False, default="active")
    description = Column(String, nullable=True)
    monthly_contribution = Column(Numeric(12, 2), nullable=False, default=0)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    completed_on = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class RecurringPayment(Base):
    """Recurring payment model."""

    __tablename__ = "recurring_payments"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    frequency = Column(String, nullable=False, default="monthly")
    interval = Column(Integer, nullable=False, default=1)
    next_due_date = Column(Date, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    category = Column(String, nullable=True)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_automatic = Column(Boolean, default=False, nullable=False)
    last_paid = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
