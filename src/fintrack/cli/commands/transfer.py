"""Transfer command."""

from decimal import Decimal, InvalidOperation

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.errors import DomainError
from fintrack.domain.transfer import TransferService
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date
from fintrack.utils.transaction_id import create_success_message


@click.command("transfer")
@click.argument("from_account", metavar="FROM")
@click.argument("to_account", metavar="TO")
@click.argument("amount", metavar="AMOUNT")
@click.option("--rate", default="1", show_default=True, help="Exchange rate applied to the amount")
@click.option("--note", help="Description for both legs")
@click.option("--date", "txn_date", default="today", show_default=True, help="Transfer date")
@click.pass_context
def transfer(ctx, from_account: str, to_account: str, amount: str, rate: str, note: str | None, txn_date: str):
    """Move money between two accounts.

    The destination receives AMOUNT times --rate, so transfers between
    currencies are recorded in each account's own currency.

    Examples:
        fintrack transfer Checking Savings 250
        fintrack transfer "USD Wallet" "EUR Wallet" 100 --rate 0.92
    """
    db = ctx.obj["db"]
    accounts = AccountService(db)
    source = resolve_account_or_exit(ctx, accounts, from_account)
    destination = resolve_account_or_exit(ctx, accounts, to_account)

    try:
        exchange_rate = Decimal(rate)
    except InvalidOperation:
        click.echo(f"Error: Invalid exchange rate '{rate}'", err=True)
        ctx.exit(1)

    try:
        on_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = TransferService(db).transfer(
            source.id,
            destination.id,
            parse_amount(amount),
            exchange_rate=exchange_rate,
            note=note,
            on_date=on_date,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        create_success_message("Transfer", transaction_id, f"{source.name} -> {destination.name}")
    )


def register_commands(cli):
    """Register the transfer command with main CLI."""
    cli.add_command(transfer)
