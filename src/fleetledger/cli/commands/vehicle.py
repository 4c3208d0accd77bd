"""Vehicle management commands."""

import click
from fleetledger.cli.commands.catalog import resolve_catalog_id
from fleetledger.cli.error_handling import handle_domain_error
from fleetledger.domain.entities import (
    CatalogKind,
    OdometerUnit,
    VehicleCondition,
    VehicleStatus,
)
from fleetledger.domain.errors import DomainError
from fleetledger.domain.vehicle import VehicleService
from fleetledger.utils.amount_parser import parse_amount
from fleetledger.utils.date_parser import parse_date
from fleetledger.utils.vehicle_resolver import resolve_vehicle

STATUS_CHOICE = click.Choice([s.value for s in VehicleStatus], case_sensitive=False)
CONDITION_CHOICE = click.Choice([c.value for c in VehicleCondition], case_sensitive=False)
UNIT_CHOICE = click.Choice([u.value for u in OdometerUnit], case_sensitive=False)


def vehicle_options(func):
    """Options shared by create and update."""
    options = [
        click.option("--brand", help="Brand name or ID"),
        click.option("--model", help="Model name or ID"),
        click.option("--type", "vehicle_type", help="Vehicle type name or ID"),
        click.option("--vin", help="Vehicle identification number"),
        click.option("--year", type=int, help="Model year"),
        click.option("--color", help="Color"),
        click.option("--acquired", help="Acquisition date (YYYY-MM-DD or 'today', 'yesterday')"),
        click.option("--cost", help="Acquisition cost (e.g., 350000 or $350,000.00)"),
        click.option("--mileage", type=int, help="Mileage at acquisition"),
        click.option("--unit", type=UNIT_CHOICE, help="Odometer unit"),
        click.option("--status", type=STATUS_CHOICE, help="Vehicle status"),
        click.option("--condition", type=CONDITION_CHOICE, help="Vehicle condition"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _collect_fields(ctx, service: VehicleService, options: dict) -> dict:
    """Turn CLI option values into service keyword arguments, skipping unset ones."""
    fields = {}
    brand_id = None
    if options["brand"] is not None:
        brand_id = resolve_catalog_id(service.catalog, CatalogKind.BRAND, options["brand"])
        fields["brand_id"] = brand_id
    if options["model"] is not None:
        fields["model_id"] = resolve_catalog_id(
            service.catalog, CatalogKind.MODEL, options["model"], brand_id=brand_id
        )
    if options["vehicle_type"] is not None:
        fields["type_id"] = resolve_catalog_id(service.catalog, CatalogKind.TYPE, options["vehicle_type"])

    for name in ("vin", "year", "color", "mileage", "status", "condition"):
        if options[name] is not None:
            fields[name] = options[name]
    if options["unit"] is not None:
        fields["odometer_unit"] = options["unit"]

    if options["acquired"] is not None:
        try:
            fields["acquisition_date"] = parse_date(options["acquired"])
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(2)
    if options["cost"] is not None:
        try:
            fields["cost"] = parse_amount(options["cost"])
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(2)
    return fields


def _show(vehicle) -> None:
    click.echo(f"Vehicle {vehicle.id}: {vehicle.plate}")
    click.echo(f"  Company:   {vehicle.company_id}")
    click.echo(f"  Brand:     {vehicle.brand_id or '-'}")
    click.echo(f"  Model:     {vehicle.model_id or '-'}")
    click.echo(f"  Type:      {vehicle.type_id or '-'}")
    if vehicle.vin:
        click.echo(f"  VIN:       {vehicle.vin}")
    if vehicle.year:
        click.echo(f"  Year:      {vehicle.year}")
    if vehicle.color:
        click.echo(f"  Color:     {vehicle.color}")
    if vehicle.acquisition_date:
        click.echo(f"  Acquired:  {vehicle.acquisition_date.isoformat()}")
    if vehicle.cost is not None:
        click.echo(f"  Cost:      {vehicle.cost:,.2f}")
    if vehicle.mileage is not None:
        click.echo(f"  Mileage:   {vehicle.mileage} {vehicle.odometer_unit.value}")
    click.echo(f"  Status:    {vehicle.status.value}")
    click.echo(f"  Condition: {vehicle.condition.value}")
    if not vehicle.enabled:
        click.echo("  (disabled)")


@click.group()
def vehicle_group():
    """Manage vehicles."""
    pass


@vehicle_group.command("create")
@click.argument("plate")
@click.option("--company", "company_id", required=True, help="Owning company ID")
@vehicle_options
@click.pass_context
def create_vehicle(ctx, plate: str, company_id: str, **options):
    """Create a vehicle.

    If only --model is given, the brand is taken from the model.

    Examples:
        fleetledger vehicle create "ABC-123" --company acme --brand Toyota --model Hilux
        fleetledger vehicle create "XYZ-987" --company acme --year 2021 --cost "$350,000"
    """
    service = VehicleService(ctx.obj["db"], ctx.obj["config"])
    try:
        fields = _collect_fields(ctx, service, options)
        vehicle = service.create_vehicle(company_id, plate, **fields)
        click.echo(f"Created vehicle '{vehicle.plate}' (ID: {vehicle.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@vehicle_group.command("update")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.option("--plate", help="New plate")
@click.option("--company", "company_id", help="New owning company ID")
@vehicle_options
@click.pass_context
def update_vehicle(ctx, vehicle: str, plate: str | None, company_id: str | None, **options):
    """Update a vehicle.

    Updates only the fields that are provided.

    Examples:
        fleetledger vehicle update "ABC-123" --status maintenance
        fleetledger vehicle update 3 --model "Tacoma" --brand "Toyota"
    """
    service = VehicleService(ctx.obj["db"], ctx.obj["config"])
    try:
        vehicle_id = resolve_vehicle(service, vehicle)
        fields = _collect_fields(ctx, service, options)
        if plate is not None:
            fields["plate"] = plate
        if company_id is not None:
            fields["company_id"] = company_id
        if not fields:
            click.echo("Nothing to update.")
            return
        service.update_vehicle(vehicle_id, **fields)
        click.echo(f"Updated vehicle {vehicle_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@vehicle_group.command("list")
@click.option("--company", "company_id", help="Only vehicles of this company")
@click.option("--status", type=STATUS_CHOICE, help="Only vehicles with this status")
@click.option("--condition", type=CONDITION_CHOICE, help="Only vehicles in this condition")
@click.option("--all", "include_disabled", is_flag=True, help="Include disabled vehicles")
@click.pass_context
def list_vehicles(ctx, company_id: str | None, status: str | None, condition: str | None, include_disabled: bool):
    """List vehicles."""
    service = VehicleService(ctx.obj["db"], ctx.obj["config"])
    try:
        vehicles = service.list_vehicles(
            company_id=company_id, status=status, condition=condition, include_disabled=include_disabled
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not vehicles:
        click.echo("No vehicles found.")
        return

    click.echo("\nVehicles:")
    click.echo("-" * 70)
    for v in vehicles:
        suffix = "" if v.enabled else " (disabled)"
        click.echo(
            f"ID: {v.id:3d} | {v.plate:12s} | {v.company_id:12s} | "
            f"{v.status.value:11s} | {v.condition.value}{suffix}"
        )


@vehicle_group.command("show")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.pass_context
def show_vehicle(ctx, vehicle: str):
    """Show a vehicle's details."""
    service = VehicleService(ctx.obj["db"], ctx.obj["config"])
    try:
        vehicle_id = resolve_vehicle(service, vehicle)
        _show(service.get_vehicle(vehicle_id))
    except DomainError as e:
        handle_domain_error(ctx, e)


@vehicle_group.command("disable")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.pass_context
def disable_vehicle(ctx, vehicle: str):
    """Disable a vehicle. Its odometer history is kept."""
    service = VehicleService(ctx.obj["db"], ctx.obj["config"])
    try:
        vehicle_id = resolve_vehicle(service, vehicle)
        service.disable_vehicle(vehicle_id)
        click.echo(f"Disabled vehicle {vehicle_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@vehicle_group.command("stats")
@click.option("--company", "company_id", help="Only vehicles of this company")
@click.pass_context
def fleet_stats(ctx, company_id: str | None):
    """Show fleet totals by status."""
    service = VehicleService(ctx.obj["db"], ctx.obj["config"])
    try:
        stats = service.compute_fleet_stats(service.list_vehicles(company_id=company_id))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Total vehicles: {stats.total}")
    for status, count in stats.by_status.items():
        click.echo(f"  {status.value:12s} {count}")
    click.echo(f"Active: {stats.active_percentage}%")


def register_commands(cli):
    """Register vehicle commands with main CLI."""
    cli.add_command(vehicle_group, name="vehicle")
