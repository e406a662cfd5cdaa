"""DPS savings plan commands."""

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.error_handling import handle_closure_error, handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.dps_closure import DPSClosureWorkflow
from fintrack.domain.entities import ClosureDestination
from fintrack.domain.errors import DomainError, DPSClosureError
from fintrack.domain.transfer import TransferService
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.transaction_id import create_success_message

DESTINATION_CHOICES = {
    "primary": ClosureDestination.PRIMARY,
    "cash-wallet": ClosureDestination.CASH_WALLET,
}


@click.group()
def dps_group():
    """Manage DPS savings plans."""
    pass


@dps_group.command("deposit")
@click.argument("account", metavar="ACCOUNT")
@click.option("--amount", help="Deposit amount (defaults to the plan's fixed amount)")
@click.pass_context
def deposit(ctx, account: str, amount: str | None):
    """Move a DPS deposit from ACCOUNT to its DPS savings account."""
    db = ctx.obj["db"]
    primary = resolve_account_or_exit(ctx, AccountService(db), account)
    try:
        transaction_id = TransferService(db).dps_transfer(
            primary.id, amount=parse_amount(amount) if amount else None
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(create_success_message("DPS deposit", transaction_id))


@dps_group.command("disable")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def disable(ctx, account: str):
    """Switch off the DPS plan of ACCOUNT. The savings account is kept."""
    service = AccountService(ctx.obj["db"])
    primary = resolve_account_or_exit(ctx, service, account)
    service.disable_dps(primary.id)
    click.echo(f"DPS plan of '{primary.name}' disabled")


@dps_group.command("close")
@click.argument("account", metavar="ACCOUNT")
@click.option(
    "--to",
    "destination",
    type=click.Choice(list(DESTINATION_CHOICES)),
    help="Where the DPS balance goes (asked for when omitted)",
)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def close(ctx, account: str, destination: str | None, yes: bool):
    """Close the DPS savings account of ACCOUNT.

    The DPS balance is moved to ACCOUNT itself or to a cash wallet in the
    same currency (created when missing), the plan is detached and the DPS
    account is deleted. The confirmation prompt is the last point at which
    the closure can be cancelled.

    Examples:
        fintrack dps close Salary --to primary
        fintrack dps close 4 --to cash-wallet --yes
    """
    db = ctx.obj["db"]
    primary = resolve_account_or_exit(ctx, AccountService(db), account)
    workflow = DPSClosureWorkflow(db)

    try:
        closure = workflow.begin(primary.id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"DPS account '{closure.subaccount_name}' holds {closure.amount:,.2f} {closure.currency}."
    )
    if destination is None:
        destination = click.prompt(
            "Move the balance to",
            type=click.Choice(list(DESTINATION_CHOICES)),
            default="primary",
        )

    target = primary.name if destination == "primary" else f"a {closure.currency} cash wallet"
    if not yes and not click.confirm(
        f"Close '{closure.subaccount_name}' and move its balance to {target}?"
    ):
        workflow.cancel(closure.id)
        click.echo("Closure cancelled.")
        return

    try:
        done = workflow.confirm(closure.id, DESTINATION_CHOICES[destination])
    except DPSClosureError as e:
        handle_closure_error(ctx, e)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Closed DPS account '{done.subaccount_name}'")
    if done.transfer_transaction_id is not None:
        click.echo(
            create_success_message(
                "Balance transfer",
                done.transfer_transaction_id,
                f"{done.amount:,.2f} {done.currency} to account {done.destination_account_id}",
            )
        )


@dps_group.command("status")
@click.pass_context
def status(ctx):
    """List DPS closures that did not finish."""
    closures = DPSClosureWorkflow(ctx.obj["db"]).list_unfinished()
    if not closures:
        click.echo("No unfinished DPS closures.")
        return

    click.echo("\nUnfinished DPS closures:")
    click.echo("-" * 78)
    for closure in closures:
        line = (
            f"ID: {closure.id:3d} | {closure.subaccount_name:24s} | "
            f"{closure.amount:>10,.2f} {closure.currency} | {closure.state.value}"
        )
        if closure.failed_step is not None:
            line += f" at {closure.failed_step.value}"
        click.echo(line)
        if closure.error:
            click.echo(f"       {closure.error}")


@dps_group.command("resume")
@click.argument("closure_id", type=int, metavar="CLOSURE_ID")
@click.pass_context
def resume(ctx, closure_id: int):
    """Continue a DPS closure that stopped part way."""
    workflow = DPSClosureWorkflow(ctx.obj["db"])
    try:
        done = workflow.resume(closure_id)
    except DPSClosureError as e:
        handle_closure_error(ctx, e)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Closed DPS account '{done.subaccount_name}'")


def register_commands(cli):
    """Register DPS commands with main CLI."""
    cli.add_command(dps_group, name="dps")
