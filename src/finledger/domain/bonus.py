"""Credit card sign-up bonus tracking and alerts."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from finledger.database.base import Database
from finledger.domain.entities import (
    Alert,
    AlertKind,
    AlertPriority,
    BonusProgress,
    BonusStatus,
    CreditCardAccount,
    CreditCardBonus,
)
from finledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    bonus_not_found,
    not_a_credit_card,
    require_cents,
)

logger = logging.getLogger(__name__)

NEAR_COMPLETION = Decimal("0.8")
DEADLINE_WINDOW_DAYS = 30
HIGH_PRIORITY_DAYS = 7
ANNUAL_FEE_WINDOW_DAYS = 30

# Bonuses in these states no longer accrue spending
CLOSED_STATUSES = frozenset({BonusStatus.COMPLETED, BonusStatus.PAID_OUT, BonusStatus.EXPIRED})

# Manual status changes a user may make
ALLOWED_TRANSITIONS = {
    BonusStatus.NOT_STARTED: {BonusStatus.IN_PROGRESS, BonusStatus.EXPIRED},
    BonusStatus.IN_PROGRESS: {BonusStatus.COMPLETED, BonusStatus.EXPIRED},
    BonusStatus.COMPLETED: {BonusStatus.PAID_OUT},
    BonusStatus.PAID_OUT: set(),
    BonusStatus.EXPIRED: set(),
}


def deadline_priority(days_left: int) -> Optional[AlertPriority]:
    if 0 < days_left <= HIGH_PRIORITY_DAYS:
        return AlertPriority.HIGH
    if HIGH_PRIORITY_DAYS < days_left <= DEADLINE_WINDOW_DAYS:
        return AlertPriority.MEDIUM
    return None


def bonus_progress(bonus: CreditCardBonus, today: date) -> BonusProgress:
    """Derive progress figures for a bonus as of ``today``.

    Progress is the fraction of the required spending reached and may exceed
    1. ``days_left`` counts whole days to the end date and is negative once
    the window has passed.
    """
    if bonus.spending_required > 0:
        progress = bonus.current_spending / bonus.spending_required
    else:
        progress = Decimal("0")
    days_left = (bonus.end_date - today).days
    return BonusProgress(
        bonus=bonus,
        progress=progress,
        percent=(progress * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        remaining=max(bonus.spending_required - bonus.current_spending, Decimal("0")),
        days_left=days_left,
        near_completion=(bonus.status == BonusStatus.IN_PROGRESS and NEAR_COMPLETION <= progress < 1),
        deadline_priority=deadline_priority(days_left),
    )


def bonus_alerts(
    cards: Iterable[CreditCardAccount], bonuses: Iterable[CreditCardBonus], today: date
) -> list[Alert]:
    """Build advisory alerts for bonuses and upcoming annual fees.

    Only in-progress bonuses on active cards are considered. Near completion
    alerts are high priority; deadline alerts are high within a week and
    medium within a month. Annual fee alerts fire for fees due within 30
    days.
    """
    active_cards = {card.id: card for card in cards if card.is_active}
    alerts: list[Alert] = []

    for bonus in bonuses:
        card = active_cards.get(bonus.card_id)
        if card is None or bonus.status != BonusStatus.IN_PROGRESS:
            continue
        progress = bonus_progress(bonus, today)
        if progress.near_completion:
            alerts.append(
                Alert(
                    id=f"bonus-near-{bonus.id}",
                    kind=AlertKind.BONUS_NEAR_COMPLETION,
                    priority=AlertPriority.HIGH,
                    title=f"{card.name}: bonus almost reached",
                    message=(
                        f"{bonus.title} is {progress.percent}% complete. "
                        f"${progress.remaining:,.2f} more spending needed."
                    ),
                    card_id=card.id,
                )
            )
        if progress.deadline_priority is not None:
            alerts.append(
                Alert(
                    id=f"bonus-deadline-{bonus.id}",
                    kind=AlertKind.BONUS_DEADLINE,
                    priority=progress.deadline_priority,
                    title=f"{card.name}: bonus deadline approaching",
                    message=(
                        f"{progress.days_left} days left to spend "
                        f"${progress.remaining:,.2f} for {bonus.title}."
                    ),
                    card_id=card.id,
                )
            )

    for card in active_cards.values():
        if card.annual_fee <= 0 or card.next_annual_fee_date is None:
            continue
        days = (card.next_annual_fee_date - today).days
        if 0 <= days <= ANNUAL_FEE_WINDOW_DAYS:
            alerts.append(
                Alert(
                    id=f"annual-fee-{card.id}",
                    kind=AlertKind.ANNUAL_FEE,
                    priority=AlertPriority.HIGH if days <= HIGH_PRIORITY_DAYS else AlertPriority.MEDIUM,
                    title=f"{card.name}: annual fee due",
                    message=f"${card.annual_fee:,.2f} annual fee due in {days} days.",
                    card_id=card.id,
                )
            )

    return alerts


def apply_spending(
    bonus: CreditCardBonus, amount: Decimal, category: Optional[str], today: date
) -> CreditCardBonus:
    """Accrue a purchase toward a bonus, returning the updated bonus.

    The bonus is returned unchanged when it is not auto-tracked, no longer
    accrues, or is limited to a different category.
    """
    if not bonus.auto_tracking or bonus.status in CLOSED_STATUSES:
        return bonus
    if bonus.category and bonus.category != category:
        return bonus

    spending = bonus.current_spending + amount
    if spending >= bonus.spending_required:
        return replace(bonus, current_spending=spending, status=BonusStatus.COMPLETED, date_completed=today)
    return replace(bonus, current_spending=spending, status=BonusStatus.IN_PROGRESS)


class BonusService:
    """Service for managing credit card bonuses."""

    def __init__(self, db: Database):
        """Initialize bonus service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_bonus(
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
        """Add a sign-up bonus to a card.

        Args:
            card_id: Credit card ID
            title: Short description, e.g. "60k points"
            spending_required: Spending needed to earn the bonus
            start_date: First day of the spending window
            end_date: Last day of the spending window
            category: Only count spending in this category (None counts all)
            auto_tracking: Accrue card purchases automatically
            bonus_value: Optional value of the bonus
            current_spending: Spending already made toward the bonus

        Returns:
            Bonus ID

        Raises:
            NotFoundError: If card doesn't exist
            ValidationError: If the account is not a card, or amounts or dates are invalid
        """
        account = self.db.get_account(card_id)
        if account is None:
            raise NotFoundError(account_not_found(card_id))
        if not isinstance(account, CreditCardAccount):
            raise ValidationError(not_a_credit_card(card_id))
        if spending_required <= 0:
            raise ValidationError("Spending requirement must be greater than zero")
        if current_spending < 0:
            raise ValidationError("Current spending cannot be negative")
        if end_date < start_date:
            raise ValidationError("Bonus end date cannot be before its start date")
        require_cents(spending_required, "Spending requirement")
        require_cents(current_spending, "Current spending")
        require_cents(bonus_value, "Bonus value")

        bonus_id = self.db.create_bonus(
            card_id=card_id,
            title=title,
            spending_required=spending_required,
            start_date=start_date,
            end_date=end_date,
            category=category,
            auto_tracking=auto_tracking,
            bonus_value=bonus_value,
            current_spending=current_spending,
        )
        logger.info("Added bonus %s to card %s", bonus_id, card_id)
        return bonus_id

    def get_bonus(self, bonus_id: int) -> Optional[CreditCardBonus]:
        return self.db.get_bonus(bonus_id)

    def list_bonuses(self, card_id: Optional[int] = None) -> list[CreditCardBonus]:
        return self.db.list_bonuses(card_id=card_id)

    def update_status(self, bonus_id: int, status: BonusStatus, today: Optional[date] = None) -> CreditCardBonus:
        """Move a bonus to a new status.

        Raises:
            NotFoundError: If bonus doesn't exist
            ValidationError: If the transition is not allowed
        """
        bonus = self.db.get_bonus(bonus_id)
        if bonus is None:
            raise NotFoundError(bonus_not_found(bonus_id))
        if status == bonus.status:
            return bonus
        if status not in ALLOWED_TRANSITIONS[bonus.status]:
            raise ValidationError(f"Cannot change bonus status from {bonus.status.value} to {status.value}")

        updated = replace(bonus, status=status)
        if status == BonusStatus.COMPLETED and bonus.date_completed is None:
            updated = replace(updated, date_completed=today or date.today())
        self.db.save_bonus(updated)
        logger.info("Bonus %s moved from %s to %s", bonus_id, bonus.status.value, status.value)
        return updated

    def progress_report(self, card_id: Optional[int] = None, today: Optional[date] = None) -> list[BonusProgress]:
        """Progress for every bonus, optionally limited to one card."""
        today = today or date.today()
        return [bonus_progress(bonus, today) for bonus in self.db.list_bonuses(card_id=card_id)]

    def alerts(self, today: Optional[date] = None) -> list[Alert]:
        cards = [acc for acc in self.db.list_accounts() if isinstance(acc, CreditCardAccount)]
        return bonus_alerts(cards, self.db.list_bonuses(), today or date.today())
