"""Tests for TransactionService."""

from datetime import date
from decimal import Decimal

import pytest

from finledger.domain.entities import PayerRuleType, TransactionStatus, TransactionType, TransferDirection
from finledger.domain.errors import NotFoundError, ValidationError


class TestCreateTransaction:
    def test_create_expense(self, transaction_service, checking, today):
        txn_id = transaction_service.create_transaction(
            checking.id,
            TransactionType.EXPENSE,
            Decimal("42.10"),
            today,
            category="Food & Dining",
            description="Corner Deli",
        )
        txn = transaction_service.get_transaction(txn_id)

        assert txn.amount == Decimal("42.10")
        assert txn.category == "Food & Dining"
        assert txn.status == TransactionStatus.CLEARED
        assert txn.direction is None
        assert not txn.is_hidden

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
    def test_amount_must_be_positive(self, transaction_service, checking, today, amount):
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, amount, today)

    def test_fractions_of_a_cent_are_rejected(self, transaction_service, ledger_service, checking, today):
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("10.555"), today)
        assert transaction_service.list_transactions() == []
        assert ledger_service.get_balance(checking.id) == Decimal("1000")

    def test_trailing_zeros_are_whole_cents(self, transaction_service, checking, today):
        txn_id = transaction_service.create_transaction(
            checking.id, TransactionType.EXPENSE, Decimal("10.5500"), today
        )
        assert transaction_service.get_transaction(txn_id).amount == Decimal("10.55")

    def test_unknown_account(self, transaction_service, today):
        with pytest.raises(NotFoundError):
            transaction_service.create_transaction(99, TransactionType.EXPENSE, Decimal("1"), today)

    def test_closed_account(self, transaction_service, account_service, checking, today):
        account_service.close_account(checking.id)
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("1"), today)

    def test_transfer_requires_direction(self, transaction_service, checking, today):
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(checking.id, TransactionType.TRANSFER, Decimal("1"), today)

    def test_transfer_with_direction(self, transaction_service, checking, today):
        txn_id = transaction_service.create_transaction(
            checking.id, TransactionType.TRANSFER, Decimal("1"), today, direction=TransferDirection.IN
        )
        assert transaction_service.get_transaction(txn_id).direction == TransferDirection.IN

    def test_direction_dropped_for_other_types(self, transaction_service, checking, today):
        txn_id = transaction_service.create_transaction(
            checking.id, TransactionType.INCOME, Decimal("1"), today, direction=TransferDirection.OUT
        )
        assert transaction_service.get_transaction(txn_id).direction is None

    def test_payment_only_on_cards(self, transaction_service, checking, today):
        with pytest.raises(ValidationError):
            transaction_service.create_transaction(checking.id, TransactionType.PAYMENT, Decimal("1"), today)


class TestIncomeDetection:
    def test_matching_income_notifies(self, transaction_service, income_service, sink, checking, today):
        source_id = income_service.create_source("Salary")
        income_service.add_payer_rule(source_id, PayerRuleType.PARTIAL_DESCRIPTION, pattern="acme payroll")

        txn_id = transaction_service.create_transaction(
            checking.id, TransactionType.INCOME, Decimal("2500"), today, description="ACME PAYROLL 0615"
        )

        assert len(sink.notifications) == 1
        notification = sink.notifications[0]
        assert notification.title == "Income detected"
        assert notification.transaction_id == txn_id
        assert "Salary" in notification.message

    def test_unmatched_income_is_silent(self, transaction_service, income_service, sink, checking, today):
        source_id = income_service.create_source("Salary")
        income_service.add_payer_rule(source_id, PayerRuleType.EXACT_PAYER, pattern="ACME")

        transaction_service.create_transaction(
            checking.id, TransactionType.INCOME, Decimal("20"), today, description="Refund"
        )
        assert sink.notifications == []

    def test_expenses_are_not_matched(self, transaction_service, income_service, sink, checking, today):
        source_id = income_service.create_source("Anything")
        income_service.add_payer_rule(source_id, PayerRuleType.ACCOUNT, account_id=checking.id)

        transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("20"), today)
        assert sink.notifications == []


class TestUpdateAndList:
    def test_update_category_and_clear(self, transaction_service, checking, today):
        txn_id = transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("5"), today)
        transaction_service.update_category(txn_id, "Shopping")
        assert transaction_service.get_transaction(txn_id).category == "Shopping"
        transaction_service.update_category(txn_id, "")
        assert transaction_service.get_transaction(txn_id).category is None

    def test_update_notes_and_status(self, transaction_service, checking, today):
        txn_id = transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("5"), today)
        transaction_service.update_notes(txn_id, "split with Sam")
        transaction_service.update_status(txn_id, TransactionStatus.RECONCILED)
        txn = transaction_service.get_transaction(txn_id)
        assert txn.notes == "split with Sam"
        assert txn.status == TransactionStatus.RECONCILED

    def test_update_missing_transaction(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.update_category(404, "Other")

    def test_hidden_transactions_are_excluded_by_default(self, transaction_service, ledger_service, checking, today):
        txn_id = transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("5"), today)
        transaction_service.set_hidden(txn_id, True)

        assert transaction_service.list_transactions() == []
        assert len(transaction_service.list_transactions(include_hidden=True)) == 1
        assert ledger_service.get_balance(checking.id) == Decimal("1000")

    def test_filters(self, transaction_service, checking, savings):
        transaction_service.create_transaction(
            checking.id, TransactionType.EXPENSE, Decimal("5"), date(2024, 1, 10), category="Shopping"
        )
        transaction_service.create_transaction(
            savings.id, TransactionType.INCOME, Decimal("7"), date(2024, 2, 10), category="Income"
        )

        assert len(transaction_service.list_transactions(account_id=savings.id)) == 1
        assert len(transaction_service.list_transactions(category="Shopping")) == 1
        assert len(transaction_service.list_transactions(type=TransactionType.INCOME)) == 1
        in_february = transaction_service.list_transactions(start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))
        assert [t.account_id for t in in_february] == [savings.id]


class TestHiding:
    def test_hiding_one_transfer_leg_hides_both(
        self, transaction_service, transfer_service, ledger_service, checking, savings, today
    ):
        result = transfer_service.transfer(checking.id, savings.id, Decimal("200"), on=today)
        out_leg, in_leg = result.transaction_ids

        assert transaction_service.set_hidden(in_leg, True) == [out_leg, in_leg]
        assert transaction_service.get_transaction(out_leg).is_hidden
        assert ledger_service.get_balance(checking.id) == Decimal("1000")
        assert ledger_service.get_balance(savings.id) == Decimal("500")

        transaction_service.set_hidden(out_leg, False)
        assert ledger_service.get_balance(checking.id) == Decimal("800")
        assert ledger_service.get_balance(savings.id) == Decimal("700")

    def test_plain_transaction_hides_alone(self, transaction_service, checking, today):
        first = transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("5"), today)
        transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("6"), today)

        assert transaction_service.set_hidden(first, True) == [first]
        assert len(transaction_service.list_transactions()) == 1

    def test_hidden_purchase_keeps_its_reward(self, transaction_service, reward_service, card, today):
        txn_id = transaction_service.create_transaction(card.id, TransactionType.EXPENSE, Decimal("50"), today)
        reward_service.process_transaction_rewards(txn_id, today=today)

        transaction_service.set_hidden(txn_id, True)

        assert [entry.transaction_id for entry in reward_service.reward_history(card.id)] == [txn_id]
