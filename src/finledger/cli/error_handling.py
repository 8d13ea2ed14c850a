"""CLI error handling helpers."""

import logging

import click

from finledger.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render an error on stderr and exit with status 1.

    Plain ValueErrors raised by the amount and date parsers are shown the
    same way as domain errors.
    """
    logger.debug("%s failed with %s", ctx.command_path, type(error).__name__)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
