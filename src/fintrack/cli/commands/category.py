"""Category management commands."""

import click

from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.category import DEFAULT_COLOR, CategoryService
from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import DomainError

TRANSACTION_TYPES = [t.value for t in TransactionType]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("add")
@click.argument("name")
@click.option("--type", "category_type", type=click.Choice(TRANSACTION_TYPES), required=True)
@click.option("--color", default=DEFAULT_COLOR, show_default=True)
@click.option("--currency", help="Currency the category is meant for")
@click.pass_context
def add_category(ctx, name: str, category_type: str, color: str, currency: str | None):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"])
    try:
        category_id = service.create_category(
            name=name, type=TransactionType(category_type), color=color, currency=currency
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {category_type} category '{name.strip()}' (ID: {category_id})")


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(["all"] + TRANSACTION_TYPES), default="all")
@click.pass_context
def list_categories(ctx, category_type: str):
    """List categories."""
    service = CategoryService(ctx.obj["db"])
    categories = service.list_categories(
        type=None if category_type == "all" else TransactionType(category_type)
    )
    if not categories:
        click.echo("No categories found. Run 'fintrack category init' to create the defaults.")
        return

    current_type = None
    for cat in categories:
        if cat.type != current_type:
            current_type = cat.type
            click.echo(f"\n{current_type.value.capitalize()}:")
        currency = f" ({cat.currency})" if cat.currency else ""
        click.echo(f"  {cat.id:3d}  {cat.name}{currency}")


@category_group.command("update")
@click.argument("category_id", type=int)
@click.option("--name", help="New name")
@click.option("--color", help="New display color")
@click.option("--currency", help="New currency")
@click.pass_context
def update_category(ctx, category_id: int, name: str | None, color: str | None, currency: str | None):
    """Rename or recolor a category. Existing transactions keep the old name."""
    changes = {
        field: value
        for field, value in (("name", name), ("color", color), ("currency", currency))
        if value is not None
    }
    if not changes:
        click.echo("Nothing to update.")
        return
    try:
        CategoryService(ctx.obj["db"]).update_category(category_id, changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated category {category_id}")


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.pass_context
def delete_category(ctx, category_id: int):
    """Delete a category that no transaction uses."""
    service = CategoryService(ctx.obj["db"])
    try:
        service.delete_category(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category {category_id}")


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default income and expense categories."""
    added = CategoryService(ctx.obj["db"]).ensure_default_categories()
    if added:
        click.echo(f"Created {added} default categories")
    else:
        click.echo("Default categories already exist")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
