"""CLI error handling helpers."""

import click

from fintrack.domain.errors import DomainError, DPSClosureError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_closure_error(ctx: click.Context, error: DPSClosureError) -> None:
    """Report where a DPS closure stopped and how to continue it."""
    closure = error.closure
    click.echo(f"Error: {error}", err=True)
    click.echo("The DPS account is partially closed. Completed steps were kept:", err=True)
    if closure.destination_account_id is not None:
        click.echo(f"  destination account: {closure.destination_account_id}", err=True)
    if closure.transfer_transaction_id is not None:
        click.echo(f"  transfer transaction: {closure.transfer_transaction_id}", err=True)
    click.echo(f"Run 'fintrack dps resume {closure.id}' to continue.", err=True)
    ctx.exit(1)
