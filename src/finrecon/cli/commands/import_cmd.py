"""CSV import command."""

import click
from finrecon.domain.entities import ConflictKind
from finrecon.domain.errors import DomainError
from finrecon.domain.import_session import ColumnMap, ImportService
from finrecon.cli.error_handling import handle_domain_error

CONFLICT_LABELS = {
    ConflictKind.NONE: "new",
    ConflictKind.DATABASE: "in ledger",
    ConflictKind.BATCH_INTERNAL: "repeated in file",
}


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--date-column", default="Date", show_default=True, help="Column holding the date")
@click.option("--amount-column", default="Amount", show_default=True, help="Column holding the signed amount")
@click.option(
    "--description-column", default="Description", show_default=True, help="Column holding the description"
)
@click.option("--id-column", help="Optional column holding the source's own transaction ID")
@click.option("--include-duplicates", is_flag=True, help="Import possible duplicates as well")
@click.option("--dry-run", is_flag=True, help="Classify only, do not save anything")
@click.pass_context
def import_csv(
    ctx,
    csv_file: str,
    date_column: str,
    amount_column: str,
    description_column: str,
    id_column: str | None,
    include_duplicates: bool,
    dry_run: bool,
):
    """Import records from a CSV file, skipping likely duplicates.

    Rows that match a ledger record or an earlier row of the same file on
    date, amount and description are skipped unless --include-duplicates is
    given. Negative amounts are imported as expenses, positive as income.

    Examples:
        finrecon import statement.csv
        finrecon import statement.csv --dry-run
        finrecon import export.csv --date-column "Posted" --id-column "Ref"
    """
    db = ctx.obj["db"]
    service = ImportService(db)
    columns = ColumnMap(
        date=date_column,
        amount=amount_column,
        description=description_column,
        source_id=id_column,
    )

    try:
        result = service.import_csv(
            csv_file_path=csv_file,
            columns=columns,
            include_duplicates=include_duplicates,
            dry_run=dry_run,
        )
    except (DomainError, ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    conflicts = [item for item in result["classified"] if item.conflict_kind != ConflictKind.NONE]
    if conflicts:
        click.echo(f"\nPossible duplicates ({len(conflicts)}):")
        click.echo("-" * 80)
        for item in conflicts:
            raw = item.record
            status = "included" if not item.excluded else "skipped"
            match = f" (record {item.matched_record_id})" if item.matched_record_id else ""
            click.echo(
                f"{str(raw.date):<12} {raw.amount:>12,.2f}  {raw.description[:30]:<30} "
                f"{CONFLICT_LABELS[item.conflict_kind]}{match}, {status}"
            )

    click.echo("\nDry run complete:" if dry_run else "\nImport complete:")
    click.echo(f"  Imported: {result['imported']} records")
    click.echo(f"  Skipped: {result['skipped']} duplicates")
    if result["dropped"]:
        click.echo(f"  Ignored: {result['dropped']} zero-amount rows")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
