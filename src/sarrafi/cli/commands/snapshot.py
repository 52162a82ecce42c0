"""Balance snapshot commands."""

import click
from sarrafi.cli.resolution import resolve_entity_or_exit
from sarrafi.domain.entity import EntityService
from sarrafi.domain.snapshot import BalanceSnapshotService


@click.group()
def snapshot_group():
    """Record and review balance snapshots."""
    pass


@snapshot_group.command("create")
@click.argument("entity", metavar="ENTITY")
@click.option("--notes", help="Notes stored with the snapshot")
@click.pass_context
def create_snapshot(ctx, entity: str, notes: str | None) -> None:
    """Capture the current balances of a customer or partner."""
    db = ctx.obj["db"]
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity)
    service = BalanceSnapshotService(db)

    try:
        snapshot_id = service.create_snapshot(entity_id, notes=notes, created_by=ctx.obj.get("user"))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    snapshot = service.list_snapshots(entity_id)[0]
    click.echo(f"Recorded snapshot {snapshot_id}: {snapshot.summary_text}")


@snapshot_group.command("list")
@click.option("--entity", help="Only snapshots of this customer/partner")
@click.pass_context
def list_snapshots(ctx, entity: str | None) -> None:
    """List balance snapshots, newest first."""
    db = ctx.obj["db"]
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity) if entity else None
    snapshots = BalanceSnapshotService(db).list_snapshots(entity_id)
    if not snapshots:
        click.echo("No snapshots found.")
        return

    click.echo("\nBalance snapshots:")
    click.echo("-" * 80)
    for snap in snapshots:
        by = f" by {snap.created_by}" if snap.created_by else ""
        click.echo(f"ID: {snap.id:3d} | {snap.created_at:%Y-%m-%d %H:%M} | entity {snap.entity_id}{by} | {snap.summary_text}")
        if snap.notes:
            click.echo(f"      Notes: {snap.notes}")


def register_commands(cli):
    """Register snapshot commands with main CLI."""
    cli.add_command(snapshot_group, name="snapshot")
