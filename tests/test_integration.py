"""Integration tests for the transfer commands."""

import re
from decimal import Decimal

import pytest
from cpay.cli.main import cli


def invoke(cli_runner, temp_db, args, delivery=None, clock=None):
    obj = {"delivery": delivery, "clock": clock}
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path] + args, obj=obj)


def initiate(cli_runner, temp_db, delivery, clock, amount="500"):
    result = invoke(
        cli_runner,
        temp_db,
        ["transfer", "initiate", "--sender", "09171234567", "--to", "09181234567", "--amount", amount],
        delivery,
        clock,
    )
    assert result.exit_code == 0, result.output
    return re.search(r"Token: ([0-9a-f]{32})", result.output).group(1)


def test_transfer_workflow(cli_runner, temp_db, delivery, clock, account_service, sender, recipient):
    """Test initiate, confirm and history end to end."""
    token = initiate(cli_runner, temp_db, delivery, clock)

    result = invoke(
        cli_runner,
        temp_db,
        ["transfer", "confirm", "--sender", "Juan dela Cruz", token, delivery.last_code],
        delivery,
        clock,
    )
    assert result.exit_code == 0, result.output
    assert "Fund transfer confirmed and completed." in result.output
    assert "Amount: PHP 500.00" in result.output
    transaction_id = re.search(r"Transaction ID: ([0-9a-f]{32})", result.output).group(1)

    assert account_service.get_balance(sender.id, "PHP") == Decimal("500.00")
    assert account_service.get_balance(recipient.id, "PHP") == Decimal("750.00")

    result = invoke(cli_runner, temp_db, ["history", "09171234567"])
    assert result.exit_code == 0
    assert transaction_id in result.output
    assert "OUT" in result.output
    assert "-PHP 500.00" in result.output
    assert "Maria Santos" in result.output

    result = invoke(cli_runner, temp_db, ["history", "Maria Santos", "--received"])
    assert "+PHP 500.00" in result.output


def test_initiate_reports_expiry(cli_runner, temp_db, delivery, clock, sender, recipient):
    """Test that initiation prints the confirmation deadline."""
    result = invoke(
        cli_runner,
        temp_db,
        ["transfer", "initiate", "--sender", sender.id, "--to", "0918 123 4567", "--amount", "₱1,000.00"],
        delivery,
        clock,
    )

    assert result.exit_code == 0, result.output
    assert "A verification code has been sent to your mobile number." in result.output
    assert "Expires at: 2024-06-01 08:05:00 UTC" in result.output


def test_initiate_insufficient_balance(cli_runner, temp_db, delivery, clock, sender, recipient):
    """Test the error path for an unaffordable transfer."""
    result = invoke(
        cli_runner,
        temp_db,
        ["transfer", "initiate", "--sender", "09171234567", "--to", "09181234567", "--amount", "5000"],
        delivery,
        clock,
    )

    assert result.exit_code == 1
    assert "Insufficient balance." in result.output
    assert delivery.sent == []


def test_initiate_bad_amount(cli_runner, temp_db, delivery, clock, sender, recipient):
    """Test that unparseable amounts are rejected."""
    result = invoke(
        cli_runner,
        temp_db,
        ["transfer", "initiate", "--sender", "09171234567", "--to", "09181234567", "--amount", "lots"],
        delivery,
        clock,
    )

    assert result.exit_code == 1
    assert "Invalid amount format" in result.output


def test_initiate_unknown_sender(cli_runner, temp_db, delivery, clock, recipient):
    """Test that an unknown sender reference fails."""
    result = invoke(
        cli_runner,
        temp_db,
        ["transfer", "initiate", "--sender", "Nobody", "--to", "09181234567", "--amount", "1"],
        delivery,
        clock,
    )

    assert result.exit_code == 1
    assert "not found" in result.output


def test_confirm_expired(cli_runner, temp_db, delivery, clock, account_service, sender, recipient):
    """Test confirming after the window has passed."""
    token = initiate(cli_runner, temp_db, delivery, clock)
    clock.advance(301)

    result = invoke(
        cli_runner,
        temp_db,
        ["transfer", "confirm", "--sender", "09171234567", token, delivery.last_code],
        delivery,
        clock,
    )

    assert result.exit_code == 1
    assert "expired" in result.output
    assert account_service.get_balance(sender.id, "PHP") == Decimal("1000.00")


def test_confirm_twice(cli_runner, temp_db, delivery, clock, sender, recipient):
    """Test that a token is rejected after it has been used."""
    token = initiate(cli_runner, temp_db, delivery, clock)
    args = ["transfer", "confirm", "--sender", "09171234567", token, delivery.last_code]

    assert invoke(cli_runner, temp_db, args, delivery, clock).exit_code == 0
    result = invoke(cli_runner, temp_db, args, delivery, clock)

    assert result.exit_code == 1
    assert "No pending transfer" in result.output


def test_history_empty(cli_runner, temp_db, sender):
    """Test history of an account without transfers."""
    result = invoke(cli_runner, temp_db, ["history", "09171234567"])

    assert result.exit_code == 0
    assert "No transactions found." in result.output


@pytest.mark.parametrize("purged", [0, 1])
def test_pending_purge(cli_runner, temp_db, delivery, clock, sender, recipient, purged):
    """Test purging expired pending transfers."""
    initiate(cli_runner, temp_db, delivery, clock)
    if purged:
        clock.advance(301)

    result = invoke(cli_runner, temp_db, ["pending", "purge"], delivery, clock)

    assert result.exit_code == 0
    assert f"Purged {purged} expired pending transfer" in result.output
    assert temp_db.count_pending_transfers() == 1 - purged
