"""CLI commands for cpay."""
