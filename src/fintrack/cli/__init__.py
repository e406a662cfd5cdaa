"""CLI commands for fintrack."""
