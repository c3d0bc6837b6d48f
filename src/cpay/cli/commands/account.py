"""Account management commands."""

import click
from cpay.cli.account_resolution import resolve_account_or_exit
from cpay.cli.error_handling import handle_domain_error
from cpay.domain.account import AccountService
from cpay.domain.errors import DomainError
from cpay.utils.amount_parser import parse_amount


def _parse_balances(ctx, values: tuple[str, ...]) -> dict:
    balances = {}
    for value in values:
        currency, sep, amount = value.partition("=")
        if not sep:
            click.echo(f"Error: Invalid balance '{value}', expected CURRENCY=AMOUNT", err=True)
            ctx.exit(1)
        try:
            balances[currency.strip().upper()] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    return balances


@click.group()
def account_group():
    """Manage wallet accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--mobile", required=True, help="Mobile number (e.g., 09171234567)")
@click.option(
    "--balance",
    "balances",
    multiple=True,
    help="Opening balance as CURRENCY=AMOUNT (repeatable, e.g., PHP=1000.00)",
)
@click.pass_context
def create_account(ctx, name: str, mobile: str, balances: tuple[str, ...]):
    """Create a new wallet account.

    Examples:
        cpay account create "Juan dela Cruz" --mobile 09171234567
        cpay account create "Maria Santos" --mobile +639181234567 --balance PHP=1000.00
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    opening = _parse_balances(ctx, balances)

    try:
        account_id = service.create_account(name=name, mobile_number=mobile, balances=opening)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in accounts:
        balances = ", ".join(f"{cur} {amt:,.2f}" for cur, amt in sorted(acc.balances.items())) or "-"
        click.echo(f"{acc.id} | {acc.name:20s} | {acc.mobile_number} | {balances}")


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show an account and its balances.

    ACCOUNT can be an account ID, mobile number or name.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.require_account(account_id)

    click.echo(f"ID:      {acc.id}")
    click.echo(f"Name:    {acc.name}")
    click.echo(f"Mobile:  {acc.mobile_number}")
    click.echo(f"Created: {acc.created_at:%Y-%m-%d %H:%M:%S} UTC")
    if not acc.balances:
        click.echo("Balances: none")
        return
    click.echo("Balances:")
    for currency, amount in sorted(acc.balances.items()):
        click.echo(f"  {currency} {amount:,.2f}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
