"""CLI error handling helpers."""

import logging

import click

from cpay.domain.errors import DomainError, InternalError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Internal errors only carry a generic message; their chained cause goes
    to the debug log, never to the terminal.
    """
    if isinstance(error, InternalError) and error.__cause__ is not None:
        logger.debug("%s failed: %r", ctx.command_path, error.__cause__)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_config_error(ctx: click.Context, error: ValueError) -> None:
    """Render an invalid configuration and exit with failure."""
    click.echo(f"Error: Invalid configuration: {error}", err=True)
    ctx.exit(1)
