"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional

CENT = Decimal("0.01")


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_inactive(account_id: int) -> str:
    """Return message for an account that has been closed."""
    return f"Account {account_id} is closed"


def not_a_credit_card(account_id: int) -> str:
    """Return message when a credit card operation targets a bank account."""
    return f"Account {account_id} is not a credit card"


def duplicate_account_name(name: str) -> str:
    """Return message for duplicate account name."""
    return f"Account with name '{name}' already exists"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def bonus_not_found(bonus_id: int) -> str:
    """Return message for missing credit card bonus."""
    return f"Bonus {bonus_id} not found"


def income_source_not_found(source_id: int) -> str:
    """Return message for missing income source."""
    return f"Income source {source_id} not found"


def policy_not_found(policy_id: int) -> str:
    """Return message for missing insurance policy."""
    return f"Insurance policy {policy_id} not found"


def claim_not_found(claim_id: int) -> str:
    """Return message for missing insurance claim."""
    return f"Insurance claim {claim_id} not found"


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget."""
    return f"Budget {budget_id} not found"


def goal_not_found(goal_id: int) -> str:
    """Return message for missing savings goal."""
    return f"Savings goal {goal_id} not found"


def recurring_payment_not_found(payment_id: int) -> str:
    """Return message for missing recurring payment."""
    return f"Recurring payment {payment_id} not found"


def non_positive_amount(amount: Decimal) -> str:
    """Return message for an amount that must be greater than zero."""
    return f"Amount must be greater than zero (got {amount})"


def invalid_choice(field: str, value: str, choices) -> str:
    """Return message for a value outside an enumerated set."""
    return f"Invalid {field} '{value}'. Expected one of: {', '.join(choices)}"


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Close the account instead to keep its history."
    )


def sub_cent_amount(field: str, amount: Decimal) -> str:
    """Return message for a money amount finer than one cent."""
    return f"{field} cannot include fractions of a cent (got {amount})"


def require_cents(amount: Optional[Decimal], field: str = "Amount") -> None:
    """Reject money amounts that would not survive storage at cent precision.

    Raises:
        ValidationError: If the amount has non-zero digits past the cents
    """
    if amount is not None and amount != amount.quantize(CENT):
        raise ValidationError(sub_cent_amount(field, amount))
