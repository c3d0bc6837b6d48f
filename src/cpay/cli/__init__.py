"""CLI package for cpay."""
