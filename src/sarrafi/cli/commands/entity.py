"""Customer and partner management commands."""

import click
from sarrafi.domain.entities import OwnerKind
from sarrafi.domain.entity import EntityService

KIND_CHOICES = {"customer": OwnerKind.CUSTOMER, "partner": OwnerKind.PARTNER}


@click.group()
def entity_group():
    """Manage customers and partners."""
    pass


@entity_group.command("create")
@click.argument("name", metavar="NAME")
@click.option(
    "--kind",
    type=click.Choice(list(KIND_CHOICES)),
    default="customer",
    show_default=True,
    help="Customer or partner",
)
@click.option("--code", help="Unique customer code")
@click.pass_context
def create_entity(ctx, name: str, kind: str, code: str | None):
    """Create a customer or partner.

    Examples:
        sarrafi entity create "Ahmad Karimi" --code C-100
        sarrafi entity create "Kabul Exchange" --kind partner
    """
    db = ctx.obj["db"]
    service = EntityService(db)

    try:
        entity_id = service.create_entity(kind=KIND_CHOICES[kind], name=name, code=code)
        click.echo(f"Created {kind} '{name}' (ID: {entity_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@entity_group.command("list")
@click.option("--kind", type=click.Choice(list(KIND_CHOICES)), help="Only list this kind")
@click.pass_context
def list_entities(ctx, kind: str | None):
    """List customers and partners."""
    db = ctx.obj["db"]
    service = EntityService(db)

    entities = service.list_entities(kind=KIND_CHOICES[kind] if kind else None)
    if not entities:
        click.echo("No customers or partners found.")
        return

    click.echo("\nCustomers and partners:")
    click.echo("-" * 60)
    for ent in entities:
        code = ent.code or "-"
        click.echo(f"ID: {ent.id:3d} | {ent.name:24s} | {ent.kind.value:8s} | Code: {code}")


def register_commands(cli):
    """Register entity commands with main CLI."""
    cli.add_command(entity_group, name="entity")
