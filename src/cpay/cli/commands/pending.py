"""Pending transfer maintenance commands."""

import click
from cpay.cli.commands.transfer import build_transfer_service


@click.group()
def pending_group():
    """Maintain pending transfers."""
    pass


@pending_group.command("purge")
@click.pass_context
def purge_pending(ctx):
    """Delete pending transfers whose confirmation window has passed.

    Expired transfers can never be confirmed; run this periodically so
    abandoned requests do not accumulate.
    """
    removed = build_transfer_service(ctx).purge_expired()
    click.echo(f"Purged {removed} expired pending transfer{'s' if removed != 1 else ''}.")


def register_commands(cli):
    """Register pending commands with main CLI."""
    cli.add_command(pending_group, name="pending")
