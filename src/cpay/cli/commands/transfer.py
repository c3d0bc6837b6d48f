"""Transfer commands: initiate and confirm."""

import click
from cpay.cli.account_resolution import resolve_account_or_exit
from cpay.cli.error_handling import handle_config_error, handle_domain_error
from cpay.domain.account import AccountService
from cpay.domain.errors import DomainError
from cpay.domain.transfer import TransferService
from cpay.utils.amount_parser import parse_amount


def build_transfer_service(ctx) -> TransferService:
    """Build the service from the context, honoring injected collaborators."""
    kwargs = {"settings": ctx.obj.get("settings"), "delivery": ctx.obj.get("delivery")}
    if ctx.obj.get("clock") is not None:
        kwargs["clock"] = ctx.obj["clock"]
    try:
        return TransferService(ctx.obj["db"], **kwargs)
    except ValueError as e:
        handle_config_error(ctx, e)


@click.group()
def transfer_group():
    """Send money to another wallet."""
    pass


@transfer_group.command("initiate")
@click.option("--sender", required=True, help="Sending account (ID, mobile number or name)")
@click.option("--to", "recipient", required=True, help="Recipient mobile number")
@click.option("--amount", required=True, help="Amount to send (e.g., 500.00)")
@click.option("--currency", help="Currency code (defaults to CPAY_TRANSFER__DEFAULT_CURRENCY)")
@click.pass_context
def initiate_transfer(ctx, sender: str, recipient: str, amount: str, currency: str | None):
    """Start a transfer and send a verification code to the sender.

    Prints the token to pass to 'transfer confirm'.

    Examples:
        cpay transfer initiate --sender 09171234567 --to 09181234567 --amount 500
    """
    db = ctx.obj["db"]
    sender_id = resolve_account_or_exit(ctx, AccountService(db), sender)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    service = build_transfer_service(ctx)
    try:
        request = service.initiate(
            sender_id=sender_id,
            recipient_lookup_key=recipient,
            amount=txn_amount,
            currency=currency.upper() if currency else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("A verification code has been sent to your mobile number.")
    click.echo(f"Token: {request.token}")
    click.echo(f"Expires at: {request.expires_at:%Y-%m-%d %H:%M:%S} UTC")


@transfer_group.command("confirm")
@click.option("--sender", required=True, help="Sending account (ID, mobile number or name)")
@click.argument("token")
@click.argument("code")
@click.pass_context
def confirm_transfer(ctx, sender: str, token: str, code: str):
    """Confirm a pending transfer with its verification code.

    Examples:
        cpay transfer confirm --sender 09171234567 3f2a...c9 123456
    """
    db = ctx.obj["db"]
    sender_id = resolve_account_or_exit(ctx, AccountService(db), sender)

    service = build_transfer_service(ctx)
    try:
        receipt = service.confirm(sender_id=sender_id, token=token, code=code)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("Fund transfer confirmed and completed.")
    click.echo(f"Transaction ID: {receipt.transaction_id}")
    click.echo(f"Amount: {receipt.currency} {receipt.amount:,.2f}")


def register_commands(cli):
    """Register transfer commands with main CLI."""
    cli.add_command(transfer_group, name="transfer")
