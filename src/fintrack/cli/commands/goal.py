"""Savings goal commands."""

import click

from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.errors import DomainError
from fintrack.domain.savings_goal import SavingsGoalService
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date
from fintrack.utils.transaction_id import create_success_message


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("add")
@click.argument("name")
@click.argument("target", metavar="TARGET_AMOUNT")
@click.option("--from", "source", required=True, help="Account the savings come from")
@click.option("--description", help="Optional description")
@click.pass_context
def add_goal(ctx, name: str, target: str, source: str, description: str | None):
    """Create a savings goal and its savings account.

    Examples:
        fintrack goal add "New bike" 1200 --from Checking
    """
    db = ctx.obj["db"]
    source_account = resolve_account_or_exit(ctx, AccountService(db), source)
    try:
        goal_id = SavingsGoalService(db).create_goal(
            name=name,
            target_amount=parse_amount(target),
            source_account_id=source_account.id,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created savings goal '{name.strip()}' (ID: {goal_id})")


@goal_group.command("list")
@click.pass_context
def list_goals(ctx):
    """List savings goals with their progress."""
    goals = SavingsGoalService(ctx.obj["db"]).list_goals()
    if not goals:
        click.echo("No savings goals found.")
        return

    click.echo("\nSavings goals:")
    click.echo("-" * 78)
    for g in goals:
        click.echo(
            f"ID: {g.id:3d} | {g.name[:24]:24s} | {g.current_amount:>10,.2f} / {g.target_amount:>10,.2f}"
            f" | {g.progress:5.1f}%"
        )


@goal_group.command("save")
@click.argument("goal_id", type=int, metavar="ID")
@click.argument("amount")
@click.option("--date", "txn_date", default="today", show_default=True, help="Transfer date")
@click.pass_context
def save_to_goal(ctx, goal_id: int, amount: str, txn_date: str):
    """Move AMOUNT from the goal's source account into its savings account."""
    try:
        on_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    service = SavingsGoalService(ctx.obj["db"])
    try:
        transaction_id = service.save_to_goal(goal_id, parse_amount(amount), on_date=on_date)
        goal = service.require_goal(goal_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(create_success_message("Savings", transaction_id, goal.name))
    click.echo(f"Saved {goal.current_amount:,.2f} of {goal.target_amount:,.2f}")


@goal_group.command("update")
@click.argument("goal_id", type=int, metavar="ID")
@click.option("--name", help="New name")
@click.option("--target", help="New target amount")
@click.option("--description", help="New description")
@click.pass_context
def update_goal(ctx, goal_id: int, name: str | None, target: str | None, description: str | None):
    """Change the name, target or description of a goal."""
    changes = {}
    try:
        if name is not None:
            changes["name"] = name
        if target is not None:
            changes["target_amount"] = parse_amount(target)
        if description is not None:
            changes["description"] = description
        if not changes:
            click.echo("Nothing to update.")
            return
        SavingsGoalService(ctx.obj["db"]).update_goal(goal_id, changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated savings goal {goal_id}")


@goal_group.command("delete")
@click.argument("goal_id", type=int, metavar="ID")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_goal(ctx, goal_id: int, yes: bool):
    """Delete a goal. Its savings account and transfers are kept."""
    if not yes and not click.confirm(f"Delete savings goal {goal_id}?"):
        click.echo("Cancelled.")
        return
    try:
        SavingsGoalService(ctx.obj["db"]).delete_goal(goal_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted savings goal {goal_id}")


def register_commands(cli):
    """Register savings goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
