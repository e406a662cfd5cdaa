"""Purchase tracking commands."""

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.entities import PurchasePriority, PurchaseStatus
from fintrack.domain.errors import DomainError
from fintrack.domain.purchase import PurchaseService
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date

STATUSES = [s.value for s in PurchaseStatus]


@click.group()
def purchase_group():
    """Track planned and completed purchases."""
    pass


@purchase_group.command("add")
@click.argument("item_name", metavar="ITEM")
@click.option("--category", required=True, help="Category name")
@click.option("--status", type=click.Choice(STATUSES), default="planned", show_default=True)
@click.option("--price", default="0", help="Price (ignored for planned purchases)")
@click.option("--account", help="Paying account name or ID")
@click.option("--date", "purchase_date", default="today", show_default=True)
@click.option(
    "--priority", type=click.Choice([p.value for p in PurchasePriority]), default="medium", show_default=True
)
@click.option("--notes", default="")
@click.option("--exclude", is_flag=True, help="Do not record a transaction for it")
@click.pass_context
def add_purchase(
    ctx,
    item_name: str,
    category: str,
    status: str,
    price: str,
    account: str | None,
    purchase_date: str,
    priority: str,
    notes: str,
    exclude: bool,
):
    """Record a purchase.

    Examples:
        fintrack purchase add "Laptop" --category Shopping
        fintrack purchase add "Headphones" --category Shopping --status purchased \\
            --price 89.99 --account Checking
    """
    db = ctx.obj["db"]
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account).id

    try:
        on_date = parse_date(purchase_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        purchase_id = PurchaseService(db).create_purchase(
            item_name=item_name,
            category=category,
            purchase_date=on_date,
            status=PurchaseStatus(status),
            price=parse_amount(price, allow_zero=True),
            account_id=account_id,
            priority=PurchasePriority(priority),
            notes=notes,
            exclude_from_calculation=exclude,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded purchase '{item_name.strip()}' (ID: {purchase_id})")


@purchase_group.command("list")
@click.option("--status", type=click.Choice(["all"] + STATUSES), default="all")
@click.pass_context
def list_purchases(ctx, status: str):
    """List purchases, newest first."""
    purchases = PurchaseService(ctx.obj["db"]).list_purchases(
        status=None if status == "all" else PurchaseStatus(status)
    )
    if not purchases:
        click.echo("No purchases found.")
        return

    click.echo("\nPurchases:")
    click.echo("-" * 78)
    for p in purchases:
        linked = f" | {p.transaction_id}" if p.transaction_id else ""
        click.echo(
            f"ID: {p.id:3d} | {p.purchase_date.isoformat()} | {p.item_name[:22]:22s} | "
            f"{p.status.value:9s} | {p.priority.value:6s} | {p.price:>10,.2f} {p.currency}{linked}"
        )


@purchase_group.command("status")
@click.argument("purchase_id", type=int, metavar="ID")
@click.argument("new_status", type=click.Choice(STATUSES), metavar="STATUS")
@click.option("--account", help="Paying account, when marking as purchased")
@click.option("--price", help="Final price, when marking as purchased")
@click.pass_context
def set_status(ctx, purchase_id: int, new_status: str, account: str | None, price: str | None):
    """Change the status of a purchase."""
    db = ctx.obj["db"]
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account).id

    try:
        PurchaseService(db).update_purchase_status(
            purchase_id,
            PurchaseStatus(new_status),
            account_id=account_id,
            price=parse_amount(price) if price else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Purchase {purchase_id} is now {new_status}")


@purchase_group.command("bulk-update")
@click.argument("purchase_ids", type=int, nargs=-1, required=True, metavar="ID...")
@click.option("--status", type=click.Choice([s for s in STATUSES if s != "purchased"]))
@click.option("--priority", type=click.Choice([p.value for p in PurchasePriority]))
@click.option("--category")
@click.option("--notes")
@click.pass_context
def bulk_update(
    ctx,
    purchase_ids: tuple[int, ...],
    status: str | None,
    priority: str | None,
    category: str | None,
    notes: str | None,
):
    """Apply the same change to several purchases.

    Examples:
        fintrack purchase bulk-update 3 4 7 --status cancelled
    """
    changes = {
        field: value
        for field, value in (("status", status), ("priority", priority), ("category", category), ("notes", notes))
        if value is not None
    }
    try:
        count = PurchaseService(ctx.obj["db"]).bulk_update_purchases(list(purchase_ids), changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated {count} purchase(s)")


@purchase_group.command("delete")
@click.argument("purchase_id", type=int, metavar="ID")
@click.pass_context
def delete_purchase(ctx, purchase_id: int):
    """Delete a purchase. A linked transaction is kept."""
    try:
        PurchaseService(ctx.obj["db"]).delete_purchase(purchase_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted purchase {purchase_id}")


def register_commands(cli):
    """Register purchase commands with main CLI."""
    cli.add_command(purchase_group, name="purchase")
