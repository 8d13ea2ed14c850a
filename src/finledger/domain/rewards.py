"""Reward calculation and optimal card selection."""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from finledger.database.base import Database
from finledger.domain.bonus import apply_spending
from finledger.domain.entities import (
    AlertPriority,
    BonusStatus,
    CategoryReward,
    CreditCardAccount,
    CreditCardBonus,
    RewardEntry,
    RewardQuote,
    RewardSuggestion,
    RewardType,
    TransactionType,
)
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    non_positive_amount,
    not_a_credit_card,
    transaction_not_found,
)
from finledger.domain.notifications import LoggingSink, Notification, NotificationSink

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
# Dollar value of one point or mile when comparing against cashback
POINT_VALUE = Decimal("0.01")


def resolve_reward(card: CreditCardAccount, category: Optional[str]) -> CategoryReward:
    """Return the category override for a card, or the card default."""
    if category is not None:
        for reward in card.category_rewards:
            if reward.category == category:
                return reward
    return CategoryReward(category=category or "", reward_type=card.reward_type, rate=card.reward_rate)


def calculate_reward(amount: Decimal, category: Optional[str], card: CreditCardAccount) -> RewardQuote:
    """Compute what a card earns on a charge.

    Cashback rates are percentages (``amount * rate / 100``, rounded to
    cents). Points and miles rates are per dollar (``amount * rate``).
    """
    reward = resolve_reward(card, category)
    if reward.reward_type == RewardType.CASHBACK:
        earned = (amount * reward.rate / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
    else:
        earned = amount * reward.rate
    quote = RewardQuote(
        card_id=card.id,
        amount=earned,
        reward_type=reward.reward_type,
        rate=reward.rate,
        value=Decimal("0"),
    )
    return replace(quote, value=reward_value(quote))


def reward_value(quote: RewardQuote) -> Decimal:
    """Dollar value of a quote, so cashback and points can be compared."""
    if quote.reward_type == RewardType.CASHBACK:
        return quote.amount
    return quote.amount * POINT_VALUE


def suggest_optimal_card(
    amount: Decimal, category: Optional[str], cards: Iterable[CreditCardAccount]
) -> Optional[RewardSuggestion]:
    """Pick the active card with the most valuable reward for a charge.

    Ties go to the card with the lowest id. Returns None when the amount is
    not positive, no card is active, or no card earns anything on it.
    """
    if amount <= 0:
        return None

    best: Optional[RewardSuggestion] = None
    for card in sorted(cards, key=lambda c: c.id):
        if not card.is_active:
            continue
        quote = calculate_reward(amount, category, card)
        if quote.value <= 0:
            continue
        if best is None or quote.value > best.quote.value:
            best = RewardSuggestion(card=card, quote=quote)
    return best


def format_reward(quote: RewardQuote) -> str:
    if quote.reward_type == RewardType.CASHBACK:
        return f"${quote.amount:,.2f}"
    return f"{quote.amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP):,} {quote.reward_type.value}"


@dataclass(frozen=True)
class ProcessedReward:
    """Outcome of processing rewards for one card transaction."""

    entry_id: int
    quote: RewardQuote
    completed_bonuses: tuple[CreditCardBonus, ...] = ()


class RewardService:
    """Service for card reward configuration and reward processing."""

    def __init__(self, db: Database, notifier: Optional[NotificationSink] = None):
        """Initialize reward service.

        Args:
            db: Database instance
            notifier: Sink for bonus completion notifications (logs if None)
        """
        self.db = db
        self.notifier = notifier or LoggingSink()

    def _require_card(self, card_id: int) -> CreditCardAccount:
        account = self.db.get_account(card_id)
        if account is None:
            raise NotFoundError(account_not_found(card_id))
        if not isinstance(account, CreditCardAccount):
            raise ValidationError(not_a_credit_card(card_id))
        return account

    def set_category_reward(
        self,
        card_id: int,
        category: str,
        reward_type: RewardType,
        rate: Decimal,
        ratio: Optional[str] = None,
    ) -> None:
        """Configure the reward a card earns in one category.

        Raises:
            NotFoundError: If the card doesn't exist
            ValidationError: If the account is not a card, or the rate is negative
        """
        self._require_card(card_id)
        if rate < 0:
            raise ValidationError("Reward rate cannot be negative")
        if not category.strip():
            raise ValidationError("Category is required")
        self.db.set_category_reward(card_id, category.strip(), reward_type, rate, ratio)

    def remove_category_reward(self, card_id: int, category: str) -> None:
        """Remove a category override so the card default applies again."""
        self._require_card(card_id)
        if not self.db.remove_category_reward(card_id, category):
            raise NotFoundError(f"Card {card_id} has no reward configured for '{category}'")

    def quote(self, card_id: int, amount: Decimal, category: Optional[str]) -> RewardQuote:
        card = self._require_card(card_id)
        return calculate_reward(amount, category, card)

    def suggest_card(self, amount: Decimal, category: Optional[str]) -> Optional[RewardSuggestion]:
        """Suggest the stored card earning the most on a charge."""
        cards = [acc for acc in self.db.list_accounts() if isinstance(acc, CreditCardAccount)]
        return suggest_optimal_card(amount, category, cards)

    def process_transaction_rewards(self, transaction_id: int, today: Optional[date] = None) -> ProcessedReward:
        """Record the reward earned by a card purchase and accrue bonus spending.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If it is not an expense on a credit card
            ConflictError: If rewards were already processed for it
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.type != TransactionType.EXPENSE:
            raise ValidationError(f"Only purchases earn rewards (transaction {transaction_id} is {txn.type.value})")
        if txn.amount <= 0:
            raise ValidationError(non_positive_amount(txn.amount))
        card = self._require_card(txn.account_id)
        if self.db.reward_exists_for_transaction(transaction_id):
            raise ConflictError(f"Rewards already processed for transaction {transaction_id}")

        today = today or date.today()
        quote = calculate_reward(txn.amount, txn.category, card)

        changed = []
        completed = []
        for bonus in self.db.list_bonuses(card_id=card.id):
            updated = apply_spending(bonus, txn.amount, txn.category, today)
            if updated == bonus:
                continue
            changed.append(updated)
            if updated.status == BonusStatus.COMPLETED and bonus.status != BonusStatus.COMPLETED:
                completed.append(updated)

        entry_id = self.db.record_reward(
            card_id=card.id,
            transaction_id=txn.id,
            date=txn.date,
            category=txn.category,
            amount=txn.amount,
            reward_type=quote.reward_type,
            reward_earned=quote.amount,
            updated_bonuses=changed,
        )
        logger.info("Transaction %s earned %s %s on card %s", txn.id, quote.amount, quote.reward_type.value, card.id)

        for bonus in completed:
            logger.info("Bonus %s on card %s completed", bonus.id, card.id)
            self.notifier.notify(
                Notification(
                    title="Bonus completed",
                    message=f"You've met the spending requirement for {bonus.title}",
                    priority=AlertPriority.HIGH,
                    transaction_id=txn.id,
                )
            )

        return ProcessedReward(entry_id=entry_id, quote=quote, completed_bonuses=tuple(completed))

    def reward_history(self, card_id: Optional[int] = None) -> list[RewardEntry]:
        return self.db.list_reward_entries(card_id=card_id)

    def total_rewards(self, card_id: int) -> dict[RewardType, Decimal]:
        """Sum earned rewards per reward type for a card."""
        totals: dict[RewardType, Decimal] = {}
        for entry in self.db.list_reward_entries(card_id=card_id):
            totals[entry.reward_type] = totals.get(entry.reward_type, Decimal("0")) + entry.reward_earned
        return totals
