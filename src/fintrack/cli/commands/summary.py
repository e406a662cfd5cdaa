"""Summary command."""

import click

from fintrack.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.entities import LedgerAggregates, RowFilter
from fintrack.domain.errors import DomainError
from fintrack.domain.ledger import compute_aggregates, compute_currency_aggregates, filter_rows
from fintrack.domain.transaction import TransactionService


def _display_aggregates(currency: str, totals: LedgerAggregates) -> None:
    click.echo(f"\n{currency}")
    click.echo("-" * 40)
    click.echo(f"{'Income':<20} {totals.total_income:>18,.2f}")
    click.echo(f"{'Expense':<20} {totals.total_expense:>18,.2f}")
    click.echo(f"{'Net':<20} {totals.net:>18,.2f}")
    click.echo(f"{'Saved':<20} {totals.total_saved:>18,.2f}")
    click.echo(f"{'Donated':<20} {totals.total_donated:>18,.2f}")
    click.echo(f"{'Transactions':<20} {totals.count:>18d}")


@click.command("summary")
@click.option("--currency", help="Only this currency")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date")
@period_options
@click.option("--include-transfers", is_flag=True, help="Count transfers and DPS movements")
@click.pass_context
def summary(
    ctx,
    currency: str | None,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    this_year: bool,
    last_year: bool,
    include_transfers: bool,
):
    """Show income, expense, savings and donation totals per currency."""
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(this_month, last_month, this_year, last_year),
    )

    accounts = AccountService(db).list_accounts()
    try:
        transactions = TransactionService(db).list_transactions(start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not include_transfers:
        transactions = filter_rows(transactions, RowFilter(exclude_transfers=True))

    if currency:
        _display_aggregates(currency.upper(), compute_aggregates(transactions, currency, accounts))
        return

    by_currency = compute_currency_aggregates(transactions, accounts)
    if not by_currency:
        click.echo("No transactions found.")
        return
    for code, totals in by_currency.items():
        _display_aggregates(code, totals)


def register_commands(cli):
    """Register the summary command with main CLI."""
    cli.add_command(summary)
