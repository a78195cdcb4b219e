"""Calendar command."""

import click
from finrecon.domain.calendar_index import summarize_window
from finrecon.domain.entities import ProjectedOccurrence
from finrecon.domain.errors import DomainError
from finrecon.domain.schedule import ScheduleService
from finrecon.cli.error_handling import handle_domain_error, parse_date_or_exit
from finrecon.utils.date_parser import get_window


@click.command("calendar")
@click.option(
    "--period",
    default="this-month",
    show_default=True,
    help="Named window: this-week, next-week, this-month, last-month, next-month, this-year, next-year",
)
@click.option("--start-date", help="First day of the window (overrides --period)")
@click.option("--end-date", help="Last day of the window (overrides --period)")
@click.pass_context
def calendar(ctx, period: str, start_date: str | None, end_date: str | None):
    """Show records and scheduled occurrences day by day.

    Projected occurrences of recurring items are computed for the window and
    never stored. Use their ID with 'schedule materialize' to edit one.

    Examples:
        finrecon calendar
        finrecon calendar --period next-month
        finrecon calendar --start-date 2024-01-01 --end-date 2024-03-31
    """
    db = ctx.obj["db"]
    service = ScheduleService(db)

    try:
        window_start, window_end = get_window(period)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    if start_date:
        window_start = parse_date_or_exit(ctx, start_date, "start date")
    if end_date:
        window_end = parse_date_or_exit(ctx, end_date, "end date")

    try:
        index = service.build_calendar(window_start, window_end)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nCalendar {window_start} to {window_end}")
    click.echo("=" * 70)
    if not index:
        click.echo("Nothing scheduled or recorded in this window.")
        return

    for day, entry in index.items():
        click.echo(f"\n{day.strftime('%a %Y-%m-%d')}")
        for rec in entry.records:
            marker = "  ↳" if rec.parent_id is not None else "  $"
            click.echo(f"{marker} {f'${rec.amount:,.2f}':>12}  {rec.description[:40]}")
        for occurrence in entry.occurrences:
            item = occurrence.item
            amount = f"${item.amount:,.2f}" if item.amount is not None else ""
            if isinstance(occurrence, ProjectedOccurrence):
                click.echo(f"  ~ {amount:>12}  {item.title[:40]}  [projected {occurrence.id}]")
            else:
                done = "x" if item.is_completed else " "
                click.echo(f"  [{done}] {amount:>10}  {item.title[:40]}  (item {occurrence.id})")

    summary = summarize_window(index)
    if summary:
        click.echo("\n" + "-" * 70)
        click.echo("Totals:")
        for effect, amount in sorted(summary.items(), key=lambda pair: pair[0].value):
            click.echo(f"  {effect.value.capitalize():<10} ${amount:,.2f}")


def register_commands(cli: click.Group) -> None:
    """Register calendar command with main CLI."""
    cli.add_command(calendar)
