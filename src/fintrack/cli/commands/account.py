"""Account management commands."""

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.entities import AccountType, DPSAmountType, DPSType, RowFilter, SortDirection
from fintrack.domain.errors import DomainError
from fintrack.domain.ledger import compute_account_stats, filter_rows, sort_rows
from fintrack.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]
SORT_KEYS = ["name", "type", "currency", "balance", "created_at"]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="checking", show_default=True)
@click.option("--currency", default="USD", show_default=True, help="Currency code")
@click.option("--initial-balance", default="0", help="Opening balance")
@click.option("--description", help="Optional description")
@click.option("--dps", "has_dps", is_flag=True, help="Attach a DPS savings plan")
@click.option("--dps-type", type=click.Choice([t.value for t in DPSType]), help="DPS schedule")
@click.option(
    "--dps-amount-type", type=click.Choice([t.value for t in DPSAmountType]), help="Fixed or custom deposits"
)
@click.option("--dps-fixed-amount", help="Deposit amount of a fixed plan")
@click.option("--dps-initial-balance", default="0", help="Opening balance of the DPS account")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    currency: str,
    initial_balance: str,
    description: str | None,
    has_dps: bool,
    dps_type: str | None,
    dps_amount_type: str | None,
    dps_fixed_amount: str | None,
    dps_initial_balance: str,
):
    """Create a new account.

    Examples:
        fintrack account create "Checking" --currency USD --initial-balance 1000
        fintrack account create "Salary" --dps --dps-type monthly \\
            --dps-amount-type fixed --dps-fixed-amount 200
    """
    service = AccountService(ctx.obj["db"])

    try:
        account_id = service.create_account(
            name=name,
            account_type=AccountType(account_type),
            currency=currency,
            initial_balance=parse_amount(initial_balance, allow_zero=True),
            description=description,
            has_dps=has_dps,
            dps_type=DPSType(dps_type) if dps_type else None,
            dps_amount_type=DPSAmountType(dps_amount_type) if dps_amount_type else None,
            dps_fixed_amount=parse_amount(dps_fixed_amount) if dps_fixed_amount else None,
            dps_initial_balance=parse_amount(dps_initial_balance, allow_zero=True),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created account '{name.strip()}' (ID: {account_id})")
    created = service.get_account(account_id)
    if created.dps_savings_account_id is not None:
        click.echo(f"Created DPS account '{name.strip()} (DPS)' (ID: {created.dps_savings_account_id})")


@account_group.command("list")
@click.option("--search", default="", help="Search name and description")
@click.option("--type", "account_type", type=click.Choice(["all"] + ACCOUNT_TYPES), default="all")
@click.option("--currency", default="all", help="Currency code or 'all'")
@click.option("--status", type=click.Choice(["all", "active", "inactive"]), default="all")
@click.option("--sort", "sort_key", type=click.Choice(SORT_KEYS), default="created_at", show_default=True)
@click.option("--desc", is_flag=True, help="Sort descending")
@click.pass_context
def list_accounts(
    ctx, search: str, account_type: str, currency: str, status: str, sort_key: str, desc: bool
):
    """List accounts with their current balances."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    row_filter = RowFilter(
        search=search,
        search_fields=("name", "description"),
        exact={"type": account_type, "currency": currency.upper() if currency != "all" else currency},
        status=status,
    )
    rows = filter_rows(accounts, row_filter)
    rows = sort_rows(rows, sort_key, SortDirection.DESC if desc else SortDirection.ASC)
    if not rows:
        click.echo("No accounts match the filters.")
        return

    dps_ids = service.find_dps_subaccount_ids()
    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in rows:
        flags = []
        if acc.has_dps:
            flags.append("DPS")
        if acc.id in dps_ids:
            flags.append("DPS savings")
        if not acc.is_active:
            flags.append("inactive")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:24s} | {acc.type.value:10s} | "
            f"{acc.calculated_balance:>12,.2f} {acc.currency}{suffix}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show an account with its activity numbers.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_obj = resolve_account_or_exit(ctx, service, account)
    stats = compute_account_stats(account_obj, db.list_transactions(account_id=account_obj.id))

    click.echo(f"{account_obj.name} (ID: {account_obj.id})")
    click.echo(f"  Type:            {account_obj.type.value}")
    click.echo(f"  Currency:        {account_obj.currency}")
    click.echo(f"  Initial balance: {account_obj.initial_balance:,.2f}")
    click.echo(f"  Balance:         {account_obj.calculated_balance:,.2f}")
    click.echo(f"  Status:          {'active' if account_obj.is_active else 'inactive'}")
    if account_obj.description:
        click.echo(f"  Description:     {account_obj.description}")
    if account_obj.has_dps:
        plan = f"{account_obj.dps_type.value}, {account_obj.dps_amount_type.value}"
        if account_obj.dps_fixed_amount is not None:
            plan += f" {account_obj.dps_fixed_amount:,.2f}"
        click.echo(f"  DPS plan:        {plan}")
    if account_obj.dps_savings_account_id is not None:
        click.echo(f"  DPS account ID:  {account_obj.dps_savings_account_id}")
    click.echo(
        f"  Transactions:    {stats.total_transactions} "
        f"({stats.income_transactions} income, {stats.expense_transactions} expense)"
    )
    click.echo(f"  Saved:           {stats.total_saved:,.2f}")
    click.echo(f"  Donated:         {stats.total_donated:,.2f}")
    if stats.last_transaction_date is not None:
        click.echo(f"  Last activity:   {stats.last_transaction_date.isoformat()}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New type")
@click.option("--currency", help="New currency code")
@click.option("--description", help="New description")
@click.pass_context
def update_account(
    ctx, account: str, name: str | None, account_type: str | None, currency: str | None, description: str | None
) -> None:
    """Update account fields. Options not given are left unchanged.

    Examples:
        fintrack account update "Checking" --name "Main Checking"
        fintrack account update 3 --description "Joint account"
    """
    service = AccountService(ctx.obj["db"])
    account_obj = resolve_account_or_exit(ctx, service, account)

    changes = {
        key: value
        for key, value in (
            ("name", name),
            ("type", account_type),
            ("currency", currency),
            ("description", description),
        )
        if value is not None
    }
    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        service.update_account(account_obj.id, changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account '{account_obj.name}' (ID: {account_obj.id})")


@account_group.command("activate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def activate_account(ctx, account: str) -> None:
    """Mark an account active."""
    service = AccountService(ctx.obj["db"])
    account_obj = resolve_account_or_exit(ctx, service, account)
    service.set_active(account_obj.id, True)
    click.echo(f"Account '{account_obj.name}' is active")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Mark an account inactive, keeping its history."""
    service = AccountService(ctx.obj["db"])
    account_obj = resolve_account_or_exit(ctx, service, account)
    service.set_active(account_obj.id, False)
    click.echo(f"Account '{account_obj.name}' is inactive")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account and all of its transactions.

    ACCOUNT can be an account name or ID. To close a DPS savings account
    and keep its balance, use 'fintrack dps close' instead.
    """
    service = AccountService(ctx.obj["db"])
    account_obj = resolve_account_or_exit(ctx, service, account)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_obj.id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_obj.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
