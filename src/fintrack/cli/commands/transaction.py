"""Transaction commands."""

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.entities import (
    PurchaseDetails,
    PurchasePriority,
    RowFilter,
    SortDirection,
    TransactionType,
)
from fintrack.domain.errors import DomainError
from fintrack.domain.ledger import filter_rows, sort_rows
from fintrack.domain.transaction import TransactionService
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date
from fintrack.utils.transaction_id import create_success_message

TRANSACTION_TYPES = [t.value for t in TransactionType]
SORT_KEYS = ["date", "amount", "category", "description", "type"]


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), default="expense", show_default=True)
@click.option("--category", required=True, help="Category name")
@click.option("--date", "txn_date", default="today", show_default=True, help="Transaction date")
@click.option("--description", default="", help="Description")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--donation", help="Donation part of an income")
@click.option("--purchase", "is_purchase", is_flag=True, help="Also record the expense as a purchase")
@click.option(
    "--priority", type=click.Choice([p.value for p in PurchasePriority]), default="medium", show_default=True
)
@click.option("--notes", default="", help="Purchase notes")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    amount: str,
    txn_type: str,
    category: str,
    txn_date: str,
    description: str,
    tags: tuple[str, ...],
    donation: str | None,
    is_purchase: bool,
    priority: str,
    notes: str,
):
    """Add a transaction to an account.

    ACCOUNT can be an account name or ID. AMOUNT is always positive; use
    --type to say whether money came in or went out.

    Examples:
        fintrack transaction add Checking 45.20 --category "Food & Dining"
        fintrack transaction add 1 3000 --type income --category Salary --date yesterday
    """
    db = ctx.obj["db"]
    account_obj = resolve_account_or_exit(ctx, AccountService(db), account)
    service = TransactionService(db)

    try:
        on_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        created = service.create_transaction(
            account_id=account_obj.id,
            amount=parse_amount(amount),
            type=TransactionType(txn_type),
            category=category,
            date=on_date,
            description=description,
            tags=tags,
            donation_amount=parse_amount(donation, allow_zero=True) if donation else None,
            purchase_details=PurchaseDetails(PurchasePriority(priority), notes) if is_purchase else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(create_success_message("Transaction", created.transaction_id, f"ID: {created.id}"))


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--category", default="all", help="Category name or 'all'")
@click.option("--type", "txn_type", type=click.Choice(["all"] + TRANSACTION_TYPES), default="all")
@click.option("--search", default="", help="Search description, category and tags")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@period_options
@click.option("--exclude-transfers", is_flag=True, help="Hide transfers and DPS movements")
@click.option("--sort", "sort_key", type=click.Choice(SORT_KEYS), default="date", show_default=True)
@click.option("--asc", is_flag=True, help="Sort ascending (default is newest first)")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    category: str,
    txn_type: str,
    search: str,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    this_year: bool,
    last_year: bool,
    exclude_transfers: bool,
    sort_key: str,
    asc: bool,
):
    """List transactions with optional filters."""
    db = ctx.obj["db"]
    account_service = AccountService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, account_service, account).id

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(this_month, last_month, this_year, last_year),
    )

    try:
        transactions = TransactionService(db).list_transactions(
            account_id=account_id, start_date=start, end_date=end
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    row_filter = RowFilter(
        search=search,
        search_fields=("description", "category", "tags", "transaction_id"),
        exact={"category": category, "type": txn_type},
        exclude_transfers=exclude_transfers,
    )
    rows = sort_rows(
        filter_rows(transactions, row_filter),
        sort_key,
        SortDirection.ASC if asc else SortDirection.DESC,
    )
    if not rows:
        click.echo("No transactions found.")
        return

    names = {acc.id: acc.name for acc in account_service.list_accounts()}
    click.echo(f"\n{'Date':<10}  {'Txn ID':<8}  {'Account':<18}  {'Category':<16}  {'Amount':>12}  Description")
    click.echo("-" * 90)
    for txn in rows:
        click.echo(
            f"{txn.date.isoformat():<10}  {txn.transaction_id:<8}  {names.get(txn.account_id, '?')[:18]:<18}  "
            f"{txn.category[:16]:<16}  {txn.signed_amount:>12,.2f}  {txn.description}"
        )
    click.echo(f"\n{len(rows)} transaction(s)")


@transaction_group.command("update")
@click.argument("transaction_id", type=int, metavar="ID")
@click.option("--amount", help="New amount")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="New type")
@click.option("--category", help="New category")
@click.option("--date", "txn_date", help="New date")
@click.option("--description", help="New description")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    amount: str | None,
    txn_type: str | None,
    category: str | None,
    txn_date: str | None,
    description: str | None,
):
    """Update a transaction by its store ID. Options not given are left unchanged."""
    service = TransactionService(ctx.obj["db"])

    changes = {}
    try:
        if amount is not None:
            changes["amount"] = parse_amount(amount)
        if txn_type is not None:
            changes["type"] = TransactionType(txn_type)
        if category is not None:
            changes["category"] = category
        if txn_date is not None:
            changes["date"] = parse_date(txn_date)
        if description is not None:
            changes["description"] = description
        if not changes:
            click.echo("Nothing to update.")
            return
        service.update_transaction(transaction_id, changes)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int, metavar="ID")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction by its store ID."""
    service = TransactionService(ctx.obj["db"])
    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Delete {txn.type.value} of {txn.amount:,.2f} on {txn.date.isoformat()} ({txn.transaction_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id} ({txn.transaction_id})")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
