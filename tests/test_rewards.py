"""Tests for reward calculation, card suggestion and reward processing."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from finledger.domain.entities import (
    BonusStatus,
    CategoryReward,
    CreditCardAccount,
    RewardType,
    TransactionType,
)
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError
from finledger.domain.rewards import (
    POINT_VALUE,
    calculate_reward,
    resolve_reward,
    reward_value,
    suggest_optimal_card,
)


def make_card(card_id, rate="1", reward_type=RewardType.CASHBACK, category_rewards=(), is_active=True):
    return CreditCardAccount(
        id=card_id,
        name=f"Card {card_id}",
        institution="Issuer",
        initial_balance=Decimal("0"),
        is_active=is_active,
        opened_on=None,
        closed_on=None,
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
        credit_limit=Decimal("5000"),
        reward_type=reward_type,
        reward_rate=Decimal(rate),
        category_rewards=tuple(category_rewards),
    )


class TestCalculateReward:
    def test_default_rate_applies_without_override(self):
        card = make_card(1, rate="1.5")
        assert resolve_reward(card, "Groceries").rate == Decimal("1.5")

    def test_category_override(self):
        card = make_card(1, category_rewards=[CategoryReward("Groceries", RewardType.CASHBACK, Decimal("3"))])
        quote = calculate_reward(Decimal("50"), "Groceries", card)
        assert quote.amount == Decimal("1.50")
        assert quote.rate == Decimal("3")

    def test_cashback_is_rounded_to_cents(self):
        quote = calculate_reward(Decimal("33.33"), None, make_card(1, rate="1.5"))
        assert quote.amount == Decimal("0.50")

    def test_points_are_per_dollar(self):
        card = make_card(1, rate="2", reward_type=RewardType.POINTS)
        quote = calculate_reward(Decimal("100"), None, card)
        assert quote.amount == Decimal("200")
        assert reward_value(quote) == Decimal("200") * POINT_VALUE


class TestSuggestOptimalCard:
    def test_higher_category_rate_wins(self):
        card_a = make_card(1, category_rewards=[CategoryReward("Dining", RewardType.CASHBACK, Decimal("2"))])
        card_b = make_card(2, rate="1")

        suggestion = suggest_optimal_card(Decimal("100"), "Dining", [card_b, card_a])

        assert suggestion.card.id == 1
        assert suggestion.quote.amount == Decimal("2.00")

    def test_tie_goes_to_lowest_id(self):
        cards = [make_card(7, rate="2"), make_card(3, rate="2"), make_card(5, rate="2")]
        assert suggest_optimal_card(Decimal("100"), None, cards).card.id == 3

    def test_inactive_cards_are_skipped(self):
        cards = [make_card(1, rate="5", is_active=False), make_card(2, rate="1")]
        assert suggest_optimal_card(Decimal("100"), None, cards).card.id == 2

    def test_points_compared_by_value(self):
        # 3 points per dollar at one cent each beats 2% cashback
        cards = [make_card(1, rate="2"), make_card(2, rate="3", reward_type=RewardType.POINTS)]
        assert suggest_optimal_card(Decimal("100"), None, cards).card.id == 2

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount(self, amount):
        assert suggest_optimal_card(amount, None, [make_card(1)]) is None

    def test_no_active_cards(self):
        assert suggest_optimal_card(Decimal("10"), None, [make_card(1, is_active=False)]) is None

    def test_cards_earning_nothing_are_not_suggested(self):
        assert suggest_optimal_card(Decimal("100"), None, [make_card(1, rate="0")]) is None

    def test_earning_card_beats_zero_rate_card_with_lower_id(self):
        cards = [make_card(1, rate="0"), make_card(2, rate="0.5")]
        assert suggest_optimal_card(Decimal("100"), None, cards).card.id == 2


class TestRewardService:
    def test_set_and_remove_category_reward(self, reward_service, account_service, card):
        reward_service.set_category_reward(card.id, "Dining", RewardType.CASHBACK, Decimal("4"), "4% back")
        stored = account_service.get_account(card.id)
        assert stored.category_rewards[0].category == "Dining"
        assert stored.category_rewards[0].rate == Decimal("4")

        reward_service.remove_category_reward(card.id, "Dining")
        assert account_service.get_account(card.id).category_rewards == ()

    def test_quote_for_one_card(self, reward_service, card):
        reward_service.set_category_reward(card.id, "Travel", RewardType.MILES, Decimal("5"))

        quote = reward_service.quote(card.id, Decimal("40"), "Travel")

        assert quote.reward_type == RewardType.MILES
        assert quote.amount == Decimal("200")
        assert quote.value == Decimal("2.00")

    def test_quote_on_bank_account_fails(self, reward_service, checking):
        with pytest.raises(ValidationError):
            reward_service.quote(checking.id, Decimal("40"), None)

    def test_remove_missing_reward(self, reward_service, card):
        with pytest.raises(NotFoundError):
            reward_service.remove_category_reward(card.id, "Travel")

    def test_set_reward_on_bank_account_fails(self, reward_service, checking):
        with pytest.raises(ValidationError):
            reward_service.set_category_reward(checking.id, "Dining", RewardType.CASHBACK, Decimal("2"))

    def test_suggest_card_uses_stored_cards(self, reward_service, account_service, card):
        better = account_service.create_credit_card(
            name="Dining Card", institution="Issuer", credit_limit=Decimal("2000")
        )
        reward_service.set_category_reward(better, "Dining", RewardType.CASHBACK, Decimal("3"))

        suggestion = reward_service.suggest_card(Decimal("100"), "Dining")

        assert suggestion.card.id == better
        assert suggestion.quote.amount == Decimal("3.00")

    def test_process_transaction_records_reward(self, reward_service, transaction_service, card, today):
        txn_id = transaction_service.create_transaction(card.id, TransactionType.EXPENSE, Decimal("250"), today)

        processed = reward_service.process_transaction_rewards(txn_id, today)

        assert processed.quote.amount == Decimal("2.50")
        history = reward_service.reward_history(card.id)
        assert [e.transaction_id for e in history] == [txn_id]
        assert reward_service.total_rewards(card.id) == {RewardType.CASHBACK: Decimal("2.50")}

    def test_process_twice_is_rejected(self, reward_service, transaction_service, card, today):
        txn_id = transaction_service.create_transaction(card.id, TransactionType.EXPENSE, Decimal("10"), today)
        reward_service.process_transaction_rewards(txn_id, today)

        with pytest.raises(ConflictError):
            reward_service.process_transaction_rewards(txn_id, today)

    def test_bank_purchase_earns_nothing(self, reward_service, transaction_service, checking, today):
        txn_id = transaction_service.create_transaction(checking.id, TransactionType.EXPENSE, Decimal("10"), today)
        with pytest.raises(ValidationError):
            reward_service.process_transaction_rewards(txn_id, today)

    def test_processing_accrues_bonus_and_notifies(
        self, reward_service, bonus_service, transaction_service, sink, card, today
    ):
        bonus_id = bonus_service.add_bonus(
            card_id=card.id,
            title="Welcome offer",
            spending_required=Decimal("500"),
            start_date=date(2024, 6, 1),
            end_date=date(2024, 9, 1),
            current_spending=Decimal("400"),
        )
        txn_id = transaction_service.create_transaction(card.id, TransactionType.EXPENSE, Decimal("150"), today)

        processed = reward_service.process_transaction_rewards(txn_id, today)

        bonus = bonus_service.get_bonus(bonus_id)
        assert bonus.status == BonusStatus.COMPLETED
        assert bonus.current_spending == Decimal("550")
        assert bonus.date_completed == today
        assert [b.id for b in processed.completed_bonuses] == [bonus_id]
        assert [n.title for n in sink.notifications] == ["Bonus completed"]
