"""Lend and borrow commands."""

from datetime import date

import click

from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.entities import LendBorrowStatus, LendBorrowType
from fintrack.domain.errors import DomainError
from fintrack.domain.lend_borrow import LendBorrowService, summarize_lend_borrow
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date

TYPES = [t.value for t in LendBorrowType]
STATUSES = [s.value for s in LendBorrowStatus]


@click.group()
def loan_group():
    """Track money lent to and borrowed from people."""
    pass


@loan_group.command("add")
@click.argument("loan_type", type=click.Choice(TYPES), metavar="lend|borrow")
@click.argument("person")
@click.argument("amount")
@click.option("--currency", default="USD", show_default=True)
@click.option("--due", "due_date", help="Due date")
@click.option("--notes", default="")
@click.pass_context
def add_record(ctx, loan_type: str, person: str, amount: str, currency: str, due_date: str | None, notes: str):
    """Record money lent or borrowed.

    Examples:
        fintrack loan add lend Alice 50 --due 2024-07-01
        fintrack loan add borrow Bob 120 --currency EUR
    """
    due = None
    if due_date is not None:
        try:
            due = parse_date(due_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    try:
        record_id = LendBorrowService(ctx.obj["db"]).create_record(
            type=LendBorrowType(loan_type),
            person_name=person,
            amount=parse_amount(amount),
            currency=currency,
            due_date=due,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded {loan_type} with {person.strip()} (ID: {record_id})")


@loan_group.command("list")
@click.option("--type", "loan_type", type=click.Choice(["all"] + TYPES), default="all")
@click.option("--status", type=click.Choice(["all"] + STATUSES), default="all")
@click.pass_context
def list_records(ctx, loan_type: str, status: str):
    """List records, newest first. Active records past due are flagged overdue."""
    service = LendBorrowService(ctx.obj["db"])
    service.mark_overdue(date.today())
    records = service.list_records(
        type=None if loan_type == "all" else LendBorrowType(loan_type),
        status=None if status == "all" else LendBorrowStatus(status),
    )
    if not records:
        click.echo("No lend/borrow records found.")
        return

    click.echo("\nLend/borrow records:")
    click.echo("-" * 78)
    for r in records:
        due = r.due_date.isoformat() if r.due_date else "-"
        click.echo(
            f"ID: {r.id:3d} | {r.type.value:6s} | {r.person_name[:18]:18s} | "
            f"{r.amount:>10,.2f} {r.currency} | due {due:10s} | {r.status.value:7s} | "
            f"open {r.outstanding:,.2f}"
        )


@loan_group.command("return")
@click.argument("record_id", type=int, metavar="ID")
@click.argument("amount")
@click.option("--date", "return_date", default="today", show_default=True)
@click.pass_context
def record_return(ctx, record_id: int, amount: str, return_date: str):
    """Record part of the money coming back."""
    try:
        on_date = parse_date(return_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        record = LendBorrowService(ctx.obj["db"]).record_return(record_id, parse_amount(amount), on_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if record.status == LendBorrowStatus.SETTLED:
        click.echo(f"Record {record_id} is settled")
    else:
        click.echo(f"Record {record_id}: {record.outstanding:,.2f} {record.currency} outstanding")


@loan_group.command("settle")
@click.argument("record_id", type=int, metavar="ID")
@click.pass_context
def settle_record(ctx, record_id: int):
    """Mark a record as settled."""
    try:
        LendBorrowService(ctx.obj["db"]).settle(record_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Record {record_id} is settled")


@loan_group.command("delete")
@click.argument("record_id", type=int, metavar="ID")
@click.pass_context
def delete_record(ctx, record_id: int):
    """Delete a record."""
    try:
        LendBorrowService(ctx.obj["db"]).delete_record(record_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted lend/borrow record {record_id}")


@loan_group.command("summary")
@click.pass_context
def summary(ctx):
    """Show lent and borrowed totals per currency."""
    service = LendBorrowService(ctx.obj["db"])
    service.mark_overdue(date.today())
    totals = summarize_lend_borrow(service.list_records())
    if not totals:
        click.echo("No lend/borrow records found.")
        return

    for currency, t in totals.items():
        click.echo(f"\n{currency}:")
        click.echo(f"  Lent:     {t.total_lent:>12,.2f}  (outstanding {t.outstanding_lent:,.2f})")
        click.echo(f"  Borrowed: {t.total_borrowed:>12,.2f}  (outstanding {t.outstanding_borrowed:,.2f})")
        click.echo(f"  Active: {t.active_count}  Overdue: {t.overdue_count}  Settled: {t.settled_count}")


def register_commands(cli):
    """Register lend/borrow commands with main CLI."""
    cli.add_command(loan_group, name="loan")
