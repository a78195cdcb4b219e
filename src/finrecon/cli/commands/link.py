"""Link group commands."""

import click
from finrecon.domain.entities import LinkResult, LinkRole
from finrecon.domain.errors import DomainError
from finrecon.domain.linking import LinkService
from finrecon.cli.error_handling import handle_domain_error


def _print_result(result: LinkResult) -> None:
    for rec in result.records:
        role = result.roles[rec.id]
        label = "source" if role == LinkRole.SOURCE else "allocation"
        click.echo(
            f"  {rec.id:<6} {label:<11} {f'${rec.amount:,.2f}':>12}  "
            f"{(rec.category or ''):<16} {rec.description[:30]}"
        )
    balance = result.balance
    click.echo(f"  Sources:     ${balance.source_total:,.2f}")
    click.echo(f"  Allocations: ${balance.allocation_total:,.2f}")
    if result.balanced:
        click.echo("  Balanced")
    else:
        click.echo(f"  Out of balance by ${balance.difference:,.2f}")


@click.command("link")
@click.argument("record_ids", type=int, nargs=-1, required=True)
@click.option("--source", "source_ids", type=int, multiple=True, help="Record ID to mark as source")
@click.option(
    "--allocation", "allocation_ids", type=int, multiple=True, help="Record ID to mark as allocation"
)
@click.option(
    "--category",
    "category_overrides",
    multiple=True,
    help="Category override as RECORD_ID:CATEGORY (repeatable)",
)
@click.option("--dry-run", is_flag=True, help="Show the group without saving it")
@click.option("--relink", is_flag=True, help="Move records that already belong to a group")
@click.pass_context
def link(
    ctx,
    record_ids: tuple[int, ...],
    source_ids: tuple[int, ...],
    allocation_ids: tuple[int, ...],
    category_overrides: tuple[str, ...],
    dry_run: bool,
    relink: bool,
):
    """Link records that belong to the same transfer or split.

    The largest record is suggested as the source of funds and the rest as
    allocations; --source and --allocation override the suggestion. Groups
    that do not balance are still saved, with a warning.

    Examples:
        finrecon link 12 13 14
        finrecon link 12 13 --source 13 --dry-run
    """
    db = ctx.obj["db"]
    service = LinkService(db)

    roles = {record_id: LinkRole.SOURCE for record_id in source_ids}
    roles.update({record_id: LinkRole.ALLOCATION for record_id in allocation_ids})

    categories = {}
    for override in category_overrides:
        id_text, _, category = override.partition(":")
        try:
            categories[int(id_text)] = category or None
        except ValueError:
            click.echo(f"Error: Invalid category override '{override}'", err=True)
            ctx.exit(1)

    try:
        if dry_run:
            result = service.preview(record_ids, roles=roles, categories=categories)
        else:
            result = service.link_records(
                record_ids, roles=roles, categories=categories, allow_relink=relink
            )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    heading = "Preview of link group" if dry_run else "Linked records into group"
    click.echo(f"{heading} {result.link_group_id}:")
    _print_result(result)


@click.command("unlink")
@click.argument("link_group_id")
@click.pass_context
def unlink(ctx, link_group_id: str):
    """Dissolve a link group, keeping its records."""
    db = ctx.obj["db"]
    service = LinkService(db)

    try:
        count = service.unlink_group(link_group_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Unlinked {count} records from group {link_group_id}")


@click.command("group")
@click.argument("link_group_id")
@click.pass_context
def show_group(ctx, link_group_id: str):
    """Show the members of a link group."""
    db = ctx.obj["db"]
    service = LinkService(db)

    members = service.get_group(link_group_id)
    if not members:
        click.echo(f"Error: Link group {link_group_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"Link group {link_group_id}:")
    for rec in members:
        click.echo(
            f"  {rec.id:<6} {str(rec.date):<12} {f'${rec.amount:,.2f}':>12}  "
            f"{(rec.category or ''):<16} {rec.description[:30]}"
        )


def register_commands(cli: click.Group) -> None:
    """Register link commands with main CLI."""
    cli.add_command(link)
    cli.add_command(unlink)
    cli.add_command(show_group)
