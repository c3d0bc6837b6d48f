"""Transaction history command."""

import click
from cpay.cli.account_resolution import resolve_account_or_exit
from cpay.cli.error_handling import handle_domain_error
from cpay.domain.account import AccountService
from cpay.domain.errors import DomainError
from cpay.domain.ledger import LedgerService


@click.command("history")
@click.argument("account", metavar="ACCOUNT")
@click.option("--sent", "direction", flag_value="sent", help="Only transfers sent by the account")
@click.option(
    "--received", "direction", flag_value="received", help="Only transfers received by the account"
)
@click.option("--limit", type=int, default=50, show_default=True, help="Maximum entries to show")
@click.pass_context
def history(ctx, account: str, direction: str | None, limit: int):
    """Show settled transfers for an account, newest first.

    ACCOUNT can be an account ID, mobile number or name.

    Examples:
        cpay history 09171234567
        cpay history "Juan dela Cruz" --sent --limit 10
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, account_service, account)

    try:
        entries = LedgerService(db).list_entries(account_id, direction=direction or "all", limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'Date':19s} | {'Transaction ID':32s} | {'Dir':3s} | {'Amount':>16s} | Counterparty")
    click.echo("-" * 100)
    for entry in entries:
        outgoing = entry.sender_id == account_id
        counterparty_id = entry.recipient_id if outgoing else entry.sender_id
        counterparty = account_service.get_account(counterparty_id)
        label = counterparty.name if counterparty is not None else counterparty_id
        sign = "-" if outgoing else "+"
        amount = f"{sign}{entry.currency} {entry.amount:,.2f}"
        click.echo(
            f"{entry.timestamp:%Y-%m-%d %H:%M:%S} | {entry.transaction_id} | "
            f"{'OUT' if outgoing else 'IN':3s} | {amount:>16s} | {label}"
        )


def register_commands(cli):
    """Register history command with main CLI."""
    cli.add_command(history)
