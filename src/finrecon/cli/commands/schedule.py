"""Scheduled item commands."""

import click
from finrecon.domain.entities import Frequency, RecurrenceRule
from finrecon.domain.errors import DomainError
from finrecon.domain.record_type import RecordTypeService
from finrecon.domain.schedule import ScheduleService
from finrecon.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
)

WEEKDAY_NAMES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


def describe_rule(rule: RecurrenceRule) -> str:
    """Render a recurrence rule for display, e.g. 'every 2 weeks until 2024-12-31'."""
    if rule.frequency == Frequency.NONE:
        return "once"

    unit = {
        Frequency.DAILY: "day",
        Frequency.WEEKLY: "week",
        Frequency.MONTHLY: "month",
        Frequency.YEARLY: "year",
    }[rule.frequency]
    text = f"every {unit}" if rule.interval == 1 else f"every {rule.interval} {unit}s"
    if rule.by_week_days:
        text += " on " + ",".join(WEEKDAY_NAMES[day] for day in rule.by_week_days)
    if rule.by_month_day == -1:
        text += " on the last day"
    elif rule.by_month_day:
        text += f" on day {rule.by_month_day}"
    if rule.end_date:
        text += f" until {rule.end_date}"
    return text


def parse_weekdays(ctx, value: str | None) -> tuple[int, ...]:
    """Parse 'mon,wed,fri' into weekday numbers, or exit with a CLI error."""
    if not value:
        return ()
    days = []
    for part in value.split(","):
        name = part.strip().lower()[:3]
        if name not in WEEKDAY_NAMES:
            click.echo(f"Error: Unknown weekday '{part.strip()}'", err=True)
            ctx.exit(1)
        days.append(WEEKDAY_NAMES.index(name))
    return tuple(sorted(set(days)))


@click.group()
def schedule_group():
    """Manage scheduled and recurring items."""
    pass


@schedule_group.command("add")
@click.argument("title")
@click.option("--date", required=True, help="First occurrence (YYYY-MM-DD or 'today')")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in Frequency]),
    default=Frequency.NONE.value,
    show_default=True,
    help="How often the item repeats",
)
@click.option("--interval", type=int, default=1, show_default=True, help="Repeat every N periods")
@click.option("--end-date", help="Last possible occurrence (inclusive)")
@click.option("--month-day", type=int, help="Day of month for monthly items (-1 for the last day)")
@click.option("--weekdays", help="Weekdays for weekly items, e.g. 'mon,wed,fri'")
@click.option("--amount", help="Expected amount as a positive magnitude")
@click.option("--type", "type_ref", help="Record type name or ID")
@click.option("--description", help="Description")
@click.pass_context
def add_item(
    ctx,
    title: str,
    date: str,
    frequency: str,
    interval: int,
    end_date: str | None,
    month_day: int | None,
    weekdays: str | None,
    amount: str | None,
    type_ref: str | None,
    description: str | None,
):
    """Add a scheduled item, optionally recurring.

    Examples:
        finrecon schedule add "Rent" --date 2024-01-01 --frequency monthly --amount 1500 --type "Bill Payment"
        finrecon schedule add "Review budget" --date 2024-01-31 --frequency monthly --month-day -1
        finrecon schedule add "Gym" --date 2024-01-01 --frequency weekly --weekdays mon,thu
    """
    db = ctx.obj["db"]
    service = ScheduleService(db)

    anchor = parse_date_or_exit(ctx, date)
    until = parse_date_or_exit(ctx, end_date, "end date") if end_date else None
    expected = parse_amount_or_exit(ctx, amount) if amount else None

    try:
        type_id = RecordTypeService(db).resolve(type_ref).id if type_ref else None
        rule = RecurrenceRule(
            frequency=Frequency(frequency),
            interval=interval,
            end_date=until,
            by_month_day=month_day,
            by_week_days=parse_weekdays(ctx, weekdays),
        )
        item_id = service.create_item(
            title=title,
            date=anchor,
            rule=rule,
            amount=expected,
            description=description,
            type_id=type_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created scheduled item {item_id}: {title} ({describe_rule(rule)}, from {anchor})")


@schedule_group.command("list")
@click.pass_context
def list_items(ctx):
    """List scheduled items."""
    db = ctx.obj["db"]
    service = ScheduleService(db)

    items = service.list_items()
    if not items:
        click.echo("No scheduled items found.")
        return

    click.echo("\nScheduled items:")
    click.echo("-" * 90)
    for item in items:
        done = "x" if item.is_completed else " "
        amount = f"${item.amount:,.2f}" if item.amount is not None else ""
        click.echo(
            f"[{done}] ID: {item.id:3d} | {str(item.date):<10} | {item.title[:24]:<24} | "
            f"{amount:>10} | {describe_rule(item.rule)}"
        )


@schedule_group.command("complete")
@click.argument("item_id", type=int)
@click.option("--undo", is_flag=True, help="Mark as not completed")
@click.pass_context
def complete_item(ctx, item_id: int, undo: bool):
    """Mark a scheduled item as completed."""
    db = ctx.obj["db"]
    service = ScheduleService(db)

    try:
        service.set_completed(item_id, not undo)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Item {item_id} marked as {'not completed' if undo else 'completed'}")


@schedule_group.command("materialize")
@click.argument("occurrence_id")
@click.option("--title", help="Title for the new item")
@click.pass_context
def materialize_occurrence(ctx, occurrence_id: str, title: str | None):
    """Turn a projected occurrence into a real item so it can be edited.

    OCCURRENCE_ID is shown by the calendar, e.g. 3@2024-05-01.
    """
    db = ctx.obj["db"]
    service = ScheduleService(db)

    try:
        occurrence = service.find_occurrence(occurrence_id)
        item_id = service.materialize(occurrence, title=title)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created scheduled item {item_id} on {occurrence.date} from {occurrence.id}")


@schedule_group.command("delete")
@click.argument("item_id", type=int)
@click.pass_context
def delete_item(ctx, item_id: int):
    """Delete a scheduled item and all of its projected occurrences."""
    db = ctx.obj["db"]
    service = ScheduleService(db)

    try:
        service.delete_item(item_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted scheduled item {item_id}")


def register_commands(cli: click.Group) -> None:
    """Register schedule commands with main CLI."""
    cli.add_command(schedule_group, name="schedule")
