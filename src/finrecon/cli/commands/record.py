"""Record management commands."""

import click
from finrecon.domain.errors import DomainError
from finrecon.domain.record import RecordService
from finrecon.domain.record_type import RecordTypeService
from finrecon.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
)


@click.group()
def record_group():
    """Manage ledger records."""
    pass


@record_group.command("add")
@click.option(
    "--date",
    required=True,
    help="Record date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Amount as a positive magnitude (e.g., 123.45)")
@click.option("--type", "type_ref", required=True, help="Record type name or ID")
@click.option("--description", default="", help="Record description")
@click.option("--category", help="Category label")
@click.pass_context
def add_record(
    ctx,
    date: str,
    amount: str,
    type_ref: str,
    description: str,
    category: str | None,
):
    """Add a record manually.

    The direction of the amount comes from the record type, so amounts are
    always entered as positive magnitudes.

    Examples:
        finrecon record add --date 2024-01-15 --amount 50.00 --type Purchase --description "Grocery store"
        finrecon record add --date today --amount 2500 --type Paycheck
    """
    db = ctx.obj["db"]
    record_service = RecordService(db)
    type_service = RecordTypeService(db)

    record_date = parse_date_or_exit(ctx, date)
    record_amount = parse_amount_or_exit(ctx, amount)

    try:
        record_type = type_service.resolve(type_ref)
        record_id = record_service.create_record(
            date=record_date,
            amount=record_amount,
            type_id=record_type.id,
            description=description,
            category=category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created record {record_id}")
    click.echo(f"  Date: {record_date}")
    click.echo(f"  Amount: ${record_amount:,.2f}")
    click.echo(f"  Type: {record_type.name} ({record_type.balance_effect.value})")
    if description:
        click.echo(f"  Description: {description}")
    if category:
        click.echo(f"  Category: {category}")


@record_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--group", "link_group_id", help="Only records in this link group")
@click.pass_context
def list_records(ctx, start_date: str | None, end_date: str | None, link_group_id: str | None):
    """List records with optional filters."""
    db = ctx.obj["db"]
    service = RecordService(db)
    type_service = RecordTypeService(db)

    start = parse_date_or_exit(ctx, start_date, "start date") if start_date else None
    end = parse_date_or_exit(ctx, end_date, "end date") if end_date else None

    records = service.list_records(start_date=start, end_date=end, link_group_id=link_group_id)
    if not records:
        click.echo("No records found.")
        return

    type_names = {record_type.id: record_type.name for record_type in type_service.list_record_types()}

    click.echo(f"\nFound {len(records)} record(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Type':<20} {'Category':<18} {'Description':<30} Link"
    )
    click.echo("-" * 110)
    for rec in records:
        description = rec.description[:30]
        if rec.parent_id is not None:
            description = f"↳ {description}"[:30]
        click.echo(
            f"{rec.id:<6} {str(rec.date):<12} {f'${rec.amount:,.2f}':>12}  "
            f"{type_names.get(rec.type_id, 'Unknown'):<20} {(rec.category or ''):<18} "
            f"{description:<30} {(rec.link_group_id or '')[:8]}"
        )


@record_group.command("categorize")
@click.argument("record_id", type=int)
@click.argument("category", required=False)
@click.pass_context
def categorize_record(ctx, record_id: int, category: str | None):
    """Set the category of a record, or clear it when CATEGORY is omitted."""
    db = ctx.obj["db"]
    service = RecordService(db)

    try:
        service.update_category(record_id, category)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if category:
        click.echo(f"Record {record_id} categorized as '{category}'")
    else:
        click.echo(f"Category cleared for record {record_id}")


@record_group.command("split")
@click.argument("record_id", type=int)
@click.option(
    "--part",
    "parts",
    multiple=True,
    required=True,
    help="Split part as AMOUNT or AMOUNT:CATEGORY (repeat for each part)",
)
@click.pass_context
def split_record(ctx, record_id: int, parts: tuple[str, ...]):
    """Split a record into parts that add up to its amount.

    Examples:
        finrecon record split 12 --part 60:Groceries --part 40:Household
    """
    db = ctx.obj["db"]
    service = RecordService(db)

    parsed = []
    for part in parts:
        amount_text, _, category = part.partition(":")
        parsed.append((parse_amount_or_exit(ctx, amount_text), None, category or None))

    try:
        child_ids = service.split_record(record_id, parsed)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Split record {record_id} into {len(child_ids)} records: "
        f"{', '.join(str(child_id) for child_id in child_ids)}"
    )


@record_group.command("delete")
@click.argument("record_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_record(ctx, record_id: int, yes: bool) -> None:
    """Delete a record.

    Examples:
        finrecon record delete 1
    """
    db = ctx.obj["db"]
    service = RecordService(db)

    if service.get_record(record_id) is None:
        click.echo(f"Error: Record {record_id} not found", err=True)
        ctx.exit(1)

    # Confirm deletion
    if not yes and not click.confirm(f"Are you sure you want to delete record {record_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_record(record_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted record {record_id}")


def register_commands(cli: click.Group) -> None:
    """Register record commands with main CLI."""
    cli.add_command(record_group, name="record")
