"""Shared pytest fixtures for finledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from finledger.database.factories import create_sqlite_database
from finledger.domain.account import AccountService
from finledger.domain.bonus import BonusService
from finledger.domain.budget import BudgetService
from finledger.domain.income import IncomeSourceService
from finledger.domain.insurance import InsuranceService
from finledger.domain.ledger import LedgerService
from finledger.domain.notifications import Notification, NotificationSink
from finledger.domain.recurring import RecurringPaymentService
from finledger.domain.rewards import RewardService
from finledger.domain.savings_goal import SavingsGoalService
from finledger.domain.transaction import TransactionService
from finledger.domain.transfer import TransferService


class CollectingSink(NotificationSink):
    """Keeps notifications in memory so tests can inspect them."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def sink():
    """Collect notifications in memory."""
    return CollectingSink()


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db, sink):
    return TransactionService(temp_db, notifier=sink)


@pytest.fixture
def ledger_service(temp_db):
    return LedgerService(temp_db)


@pytest.fixture
def transfer_service(temp_db):
    return TransferService(temp_db)


@pytest.fixture
def reward_service(temp_db, sink):
    return RewardService(temp_db, notifier=sink)


@pytest.fixture
def bonus_service(temp_db):
    return BonusService(temp_db)


@pytest.fixture
def income_service(temp_db):
    return IncomeSourceService(temp_db)


@pytest.fixture
def insurance_service(temp_db):
    return InsuranceService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    return BudgetService(temp_db)


@pytest.fixture
def goal_service(temp_db):
    return SavingsGoalService(temp_db)


@pytest.fixture
def recurring_service(temp_db, sink):
    return RecurringPaymentService(temp_db, notifier=sink)


@pytest.fixture
def checking(account_service):
    """A checking account holding $1,000."""
    account_id = account_service.create_bank_account(
        name="Checking", institution="First Bank", initial_balance=Decimal("1000")
    )
    return account_service.get_account(account_id)


@pytest.fixture
def savings(account_service):
    """A savings account holding $500."""
    from finledger.domain.entities import BankAccountType

    account_id = account_service.create_bank_account(
        name="Savings",
        institution="First Bank",
        initial_balance=Decimal("500"),
        account_type=BankAccountType.SAVINGS,
    )
    return account_service.get_account(account_id)


@pytest.fixture
def card(account_service):
    """A 1% cashback card with $300 owed on a $1,000 limit."""
    card_id = account_service.create_credit_card(
        name="Everyday Card",
        institution="Card Co",
        credit_limit=Decimal("1000"),
        initial_balance=Decimal("300"),
        reward_rate=Decimal("1"),
    )
    return account_service.get_account(card_id)


@pytest.fixture
def today():
    return date(2024, 6, 15)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
