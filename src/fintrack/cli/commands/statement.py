"""Account statement command."""

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.domain.account import AccountService
from fintrack.domain.transaction import TransactionService


@click.command("statement")
@click.argument("account", metavar="ACCOUNT")
@click.option("--limit", type=int, help="Show only the newest N lines")
@click.pass_context
def statement(ctx, account: str, limit: int | None):
    """Show an account's transactions with the balance after each one.

    ACCOUNT can be an account name or ID. Balances are computed in date
    order from the opening balance; lines are shown newest first.
    """
    db = ctx.obj["db"]
    account_obj = resolve_account_or_exit(ctx, AccountService(db), account)
    lines = TransactionService(db).get_statement(account_obj.id)

    click.echo(f"\nStatement for {account_obj.name} ({account_obj.currency})")
    click.echo(f"Opening balance: {account_obj.initial_balance:,.2f}")
    if not lines:
        click.echo("No transactions.")
        click.echo(f"Balance: {account_obj.initial_balance:,.2f}")
        return

    if limit is not None:
        lines = lines[:limit]

    click.echo(f"\n{'Date':<10}  {'Txn ID':<8}  {'Category':<16}  {'Amount':>12}  {'Balance':>12}  Description")
    click.echo("-" * 90)
    for line in lines:
        txn = line.transaction
        click.echo(
            f"{txn.date.isoformat():<10}  {txn.transaction_id:<8}  {txn.category[:16]:<16}  "
            f"{txn.signed_amount:>12,.2f}  {line.balance:>12,.2f}  {txn.description}"
        )
    click.echo(f"\nBalance: {account_obj.calculated_balance:,.2f}")


def register_commands(cli):
    """Register the statement command with main CLI."""
    cli.add_command(statement)
