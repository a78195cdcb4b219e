"""Initialize default record types."""

import click
from finrecon.domain.entities import BalanceEffect
from finrecon.domain.record_type import RecordTypeService


# Default record type catalogue; the first type of each effect is the default
# used for imports and link re-typing
INITIAL_RECORD_TYPES = [
    # Expenses
    ("Purchase", BalanceEffect.EXPENSE),
    ("Bill Payment", BalanceEffect.EXPENSE),
    ("Fee", BalanceEffect.EXPENSE),
    ("Interest Charge", BalanceEffect.EXPENSE),
    ("Withdrawal", BalanceEffect.EXPENSE),
    ("Other Expense", BalanceEffect.EXPENSE),
    # Income
    ("Direct Deposit", BalanceEffect.INCOME),
    ("Interest Earned", BalanceEffect.INCOME),
    ("Paycheck", BalanceEffect.INCOME),
    ("Refund", BalanceEffect.INCOME),
    ("Sales", BalanceEffect.INCOME),
    ("Other Income", BalanceEffect.INCOME),
    # Transfers
    ("Transfer", BalanceEffect.TRANSFER),
    ("Credit Card Payment", BalanceEffect.TRANSFER),
    ("Other Transfer", BalanceEffect.TRANSFER),
    # Donations
    ("Charitable Donation", BalanceEffect.DONATION),
    ("Gift", BalanceEffect.DONATION),
    # Tax
    ("Tax Payment", BalanceEffect.TAX),
    # Other
    ("Other", BalanceEffect.OTHER),
]


@click.command("init-types")
@click.pass_context
def init_types(ctx):
    """Initialize database with the default record types.

    Types that already exist are left alone, so this is safe to run again.
    """
    db = ctx.obj["db"]
    service = RecordTypeService(db)

    existing = {record_type.name for record_type in service.list_record_types()}
    created = 0
    for name, effect in INITIAL_RECORD_TYPES:
        if name in existing:
            continue
        service.create_record_type(name=name, balance_effect=effect)
        created += 1

    if created == 0:
        click.echo("Record types already exist.")
    else:
        click.echo(f"Successfully created {created} record types.")


@click.command("types")
@click.pass_context
def list_types(ctx):
    """List record types and their balance effect."""
    db = ctx.obj["db"]
    service = RecordTypeService(db)

    record_types = service.list_record_types()
    if not record_types:
        click.echo("No record types found. Run 'finrecon init-types' first.")
        return

    click.echo("\nRecord types:")
    click.echo("-" * 60)
    for record_type in record_types:
        click.echo(
            f"ID: {record_type.id:3d} | {record_type.name:24s} | {record_type.balance_effect.value}"
        )


def register_commands(cli):
    """Register record type commands with main CLI."""
    cli.add_command(init_types)
    cli.add_command(list_types)
