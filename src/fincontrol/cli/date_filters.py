"""CLI helpers for date range resolution."""

from datetime import date

import click

from fincontrol.utils.date_parser import PERIODS, get_date_range, parse_date


def period_options(func):
    """Attach --start-date, --end-date and the period flags to a command."""
    for period in reversed(PERIODS):
        label = period.replace("-", " ")
        func = click.option(f"--{period}", is_flag=True, help=f"Filter to {label}")(func)
    func = click.option(
        "--end-date", help="End date (DD/MM/YYYY, YYYY-MM-DD or relative like 'today')"
    )(func)
    func = click.option(
        "--start-date",
        help="Start date (DD/MM/YYYY, YYYY-MM-DD or relative like 'last month')",
    )(func)
    return func


def pop_period_flags(kwargs: dict) -> dict[str, bool]:
    """Remove period flags from command kwargs, keyed by period name."""
    return {period: kwargs.pop(period.replace("-", "_"), False) for period in PERIODS}


def _fail(ctx, message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def _parse_bound(ctx, value: str | None, label: str) -> date | None:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        _fail(ctx, f"Invalid {label} date: {e}")


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve the date window for a report or listing command.

    A single period flag wins; otherwise explicit bounds are parsed, and
    ``default_range`` applies when neither bound is given. Conflicting
    options exit the command with status 1.
    """
    selected = [period for period, is_set in period_flags.items() if is_set]

    if len(selected) > 1:
        flag_names = ", ".join(f"--{period}" for period in PERIODS)
        _fail(ctx, f"Only one period option ({flag_names}) can be specified at a time.")
    if selected and (start_date or end_date):
        _fail(ctx, "Period options cannot be combined with --start-date or --end-date.")
    if selected:
        return get_date_range(selected[0])

    start = _parse_bound(ctx, start_date, "start")
    end = _parse_bound(ctx, end_date, "end")
    if start is None and end is None and default_range is not None:
        return default_range
    return start, end
