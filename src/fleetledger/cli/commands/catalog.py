"""Catalog management commands: brands, vehicle types and models."""

import click
from fleetledger.cli.error_handling import handle_domain_error
from fleetledger.domain.catalog import CatalogService, KIND_LABELS
from fleetledger.domain.entities import CatalogKind
from fleetledger.domain.errors import DomainError, NotFoundError

KIND_CHOICE = click.Choice([kind.value for kind in CatalogKind], case_sensitive=False)


def resolve_catalog_id(
    service: CatalogService, kind: CatalogKind, value: str, brand_id: int | None = None
) -> int:
    """Resolve a catalog name or ID to an ID.

    Raises:
        NotFoundError: If no entry matches
    """
    try:
        entry_id = int(value)
    except ValueError:
        entry_id = None
    if entry_id is not None:
        return service.get(kind, entry_id).id

    entry = service.db.find_catalog_entry(kind, value, brand_id=brand_id)
    if entry is None:
        raise NotFoundError(f"{KIND_LABELS[kind]} '{value}' not found", field="name", value=value)
    return entry.id


def _describe(entry) -> str:
    parts = [f"ID: {entry.id:3d} | {entry.name:20s}"]
    if hasattr(entry, "brand_id"):
        parts.append(f"Brand: {entry.brand_id}")
        if entry.type_id is not None:
            parts.append(f"Type: {entry.type_id}")
        if entry.year is not None:
            parts.append(f"Year: {entry.year}")
    elif entry.description:
        parts.append(entry.description)
    if not entry.enabled:
        parts.append("(disabled)")
    return " | ".join(parts)


@click.group()
def catalog_group():
    """Manage brands, vehicle types and models."""
    pass


@catalog_group.group("brand")
def brand_group():
    """Manage brands."""
    pass


@brand_group.command("create")
@click.argument("name")
@click.option("--description", help="Brand description")
@click.pass_context
def create_brand(ctx, name: str, description: str | None):
    """Create a brand.

    Examples:
        fleetledger catalog brand create "Toyota"
        fleetledger catalog brand create "Nissan" --description "Japanese maker"
    """
    service = CatalogService(ctx.obj["db"], ctx.obj["config"])
    try:
        brand = service.create_brand(name, description=description)
        click.echo(f"Created brand '{brand.name}' (ID: {brand.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@catalog_group.group("type")
def type_group():
    """Manage vehicle types."""
    pass


@type_group.command("create")
@click.argument("name")
@click.option("--description", required=True, help="Vehicle type description")
@click.pass_context
def create_type(ctx, name: str, description: str):
    """Create a vehicle type.

    Examples:
        fleetledger catalog type create "Pickup" --description "Light truck"
    """
    service = CatalogService(ctx.obj["db"], ctx.obj["config"])
    try:
        vehicle_type = service.create_type(name, description)
        click.echo(f"Created vehicle type '{vehicle_type.name}' (ID: {vehicle_type.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@catalog_group.group("model")
def model_group():
    """Manage models."""
    pass


@model_group.command("create")
@click.argument("name")
@click.option("--brand", "brand", required=True, help="Brand name or ID")
@click.option("--type", "vehicle_type", help="Vehicle type name or ID")
@click.option("--year", type=int, help="Model year")
@click.pass_context
def create_model(ctx, name: str, brand: str, vehicle_type: str | None, year: int | None):
    """Create a model under a brand.

    Examples:
        fleetledger catalog model create "Hilux" --brand "Toyota"
        fleetledger catalog model create "NP300" --brand 2 --type "Pickup" --year 2022
    """
    service = CatalogService(ctx.obj["db"], ctx.obj["config"])
    try:
        brand_id = resolve_catalog_id(service, CatalogKind.BRAND, brand)
        type_id = None
        if vehicle_type is not None:
            type_id = resolve_catalog_id(service, CatalogKind.TYPE, vehicle_type)
        model = service.create_model(name, brand_id, type_id=type_id, year=year)
        click.echo(f"Created model '{model.name}' (ID: {model.id}) for brand {brand_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@catalog_group.command("list")
@click.argument("kind", type=KIND_CHOICE)
@click.option("--all", "include_disabled", is_flag=True, help="Include disabled entries")
@click.option("--brand", help="Only models of this brand (name or ID)")
@click.pass_context
def list_entries(ctx, kind: str, include_disabled: bool, brand: str | None):
    """List catalog entries of KIND (brand, type or model).

    Examples:
        fleetledger catalog list brand
        fleetledger catalog list model --brand "Toyota" --all
    """
    service = CatalogService(ctx.obj["db"], ctx.obj["config"])
    kind = CatalogKind(kind.lower())
    try:
        if brand is not None:
            if kind != CatalogKind.MODEL:
                click.echo("Error: --brand only applies to models", err=True)
                ctx.exit(2)
            brand_id = resolve_catalog_id(service, CatalogKind.BRAND, brand)
            entries = service.models_by_brand(brand_id)
            if not include_disabled:
                entries = [entry for entry in entries if entry.enabled]
        elif include_disabled:
            entries = service.list_all(kind)
        else:
            entries = service.list_enabled(kind)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo(f"No {KIND_LABELS[kind].lower()} entries found.")
        return

    click.echo(f"\n{KIND_LABELS[kind]} entries:")
    click.echo("-" * 60)
    for entry in entries:
        click.echo(_describe(entry))


@catalog_group.command("disable")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("entry", metavar="NAME_OR_ID")
@click.pass_context
def disable_entry(ctx, kind: str, entry: str):
    """Disable a catalog entry.

    Vehicles already pointing at it keep the reference; it can no longer be
    assigned to new vehicles or models.

    Examples:
        fleetledger catalog disable brand "Datsun"
        fleetledger catalog disable model 7
    """
    service = CatalogService(ctx.obj["db"], ctx.obj["config"])
    kind = CatalogKind(kind.lower())
    try:
        entry_id = resolve_catalog_id(service, kind, entry)
        service.disable(kind, entry_id)
        click.echo(f"Disabled {KIND_LABELS[kind].lower()} {entry_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@catalog_group.command("resolve")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("name")
@click.option("--brand", help="Brand name or ID (required for models)")
@click.option("--description", help="Description used if the entry is created")
@click.pass_context
def resolve_entry(ctx, kind: str, name: str, brand: str | None, description: str | None):
    """Find a catalog entry by name, creating it if it does not exist.

    Examples:
        fleetledger catalog resolve brand "toyota"
        fleetledger catalog resolve model "Hilux" --brand "Toyota"
    """
    service = CatalogService(ctx.obj["db"], ctx.obj["config"])
    kind = CatalogKind(kind.lower())
    try:
        brand_id = None
        if brand is not None:
            brand_id = resolve_catalog_id(service, CatalogKind.BRAND, brand)
        entry = service.find_or_create(kind, name, brand_id=brand_id, description=description)
        click.echo(f"{KIND_LABELS[kind]} '{entry.name}' (ID: {entry.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register catalog commands with main CLI."""
    cli.add_command(catalog_group, name="catalog")
