"""CLI helpers for date range resolution."""

from datetime import date

import click

from fintrack.utils.date_parser import parse_date, period_range


def period_options(command):
    """Attach the --this-month/--last-month/--this-year/--last-year flags."""
    for flag in ("--last-year", "--this-year", "--last-month", "--this-month"):
        command = click.option(flag, is_flag=True, help=f"Limit to {flag[2:].replace('-', ' ')}")(command)
    return command


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    chosen = [period for period, is_set in period_flags.items() if is_set]

    if len(chosen) > 1:
        click.echo("Error: Only one period option can be specified at a time.", err=True)
        ctx.exit(1)

    if chosen and (start_date or end_date):
        click.echo(
            "Error: Period options cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if chosen:
        return period_range(chosen[0])

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)
    return start, end


def period_flags_from(this_month: bool, last_month: bool, this_year: bool, last_year: bool) -> dict[str, bool]:
    return {
        "this-month": this_month,
        "last-month": last_month,
        "this-year": this_year,
        "last-year": last_year,
    }
