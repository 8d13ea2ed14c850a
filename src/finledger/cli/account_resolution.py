"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from finledger.domain.account import AccountService
from finledger.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit listing the names that exist."""
    try:
        return resolve_account(account_service, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        names = [acc.name for acc in account_service.list_accounts(include_inactive=True)]
        if names:
            click.echo(f"Known accounts: {', '.join(names)}", err=True)
        ctx.exit(1)
