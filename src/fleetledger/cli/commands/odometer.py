"""Odometer reading commands."""

from itertools import islice

import click
from fleetledger.cli.error_handling import handle_domain_error
from fleetledger.domain.entities import ReadingSource
from fleetledger.domain.errors import DomainError
from fleetledger.domain.odometer import OdometerService
from fleetledger.domain.vehicle import VehicleService
from fleetledger.utils.date_parser import parse_timestamp
from fleetledger.utils.vehicle_resolver import resolve_vehicle

SOURCE_CHOICE = click.Choice([s.value for s in ReadingSource], case_sensitive=False)


def _format_reading(reading) -> str:
    line = (
        f"#{reading.sequence:<4d} | {reading.at.strftime('%Y-%m-%d %H:%M')} | "
        f"{reading.value:>10d} | {reading.source.value}"
    )
    if reading.note:
        line += f" | {reading.note}"
    return line


@click.group()
def odometer_group():
    """Record and inspect odometer readings."""
    pass


@odometer_group.command("add")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.argument("value", type=int)
@click.option("--source", type=SOURCE_CHOICE, default="manual", show_default=True, help="Reading source")
@click.option("--at", "at", help="When the reading was taken (ISO timestamp, 'now', 'yesterday')")
@click.option("--note", help="Note")
@click.pass_context
def add_reading(ctx, vehicle: str, value: int, source: str, at: str | None, note: str | None):
    """Record an odometer reading.

    The value may not be lower than the vehicle's latest reading.

    Examples:
        fleetledger odometer add "ABC-123" 15200
        fleetledger odometer add 3 15420 --source trip --at "2024-03-01T18:00"
    """
    db = ctx.obj["db"]
    config = ctx.obj["config"]
    odometer_service = OdometerService(db, config)

    taken_at = None
    if at is not None:
        try:
            taken_at = parse_timestamp(at)
        except ValueError as e:
            click.echo(f"Error: Invalid timestamp: {e}", err=True)
            ctx.exit(2)

    try:
        vehicle_id = resolve_vehicle(VehicleService(db, config), vehicle)
        reading = odometer_service.add_reading(
            vehicle_id, value, source=source, at=taken_at, note=note
        )
        click.echo(f"Recorded reading {reading.value} for vehicle {vehicle_id} (#{reading.sequence})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@odometer_group.command("latest")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.pass_context
def latest_reading(ctx, vehicle: str):
    """Show a vehicle's latest reading."""
    db = ctx.obj["db"]
    config = ctx.obj["config"]
    try:
        vehicle_id = resolve_vehicle(VehicleService(db, config), vehicle)
        reading = OdometerService(db, config).latest(vehicle_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if reading is None:
        click.echo("No readings recorded.")
        return
    click.echo(_format_reading(reading))


@odometer_group.command("history")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.option("--source", type=SOURCE_CHOICE, help="Only readings from this source")
@click.option("--limit", type=int, default=20, show_default=True, help="Maximum readings to show")
@click.pass_context
def reading_history(ctx, vehicle: str, source: str | None, limit: int):
    """Show a vehicle's readings, newest first."""
    db = ctx.obj["db"]
    config = ctx.obj["config"]
    try:
        vehicle_id = resolve_vehicle(VehicleService(db, config), vehicle)
        history = OdometerService(db, config).history(vehicle_id, source=source)
        readings = list(islice(history, limit))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not readings:
        click.echo("No readings recorded.")
        return
    for reading in readings:
        click.echo(_format_reading(reading))


@odometer_group.command("stats")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.option("--days", type=int, help="Window length in days (defaults to FLEET_STATS_PERIOD_DAYS)")
@click.pass_context
def reading_stats(ctx, vehicle: str, days: int | None):
    """Show distance travelled over a recent window."""
    db = ctx.obj["db"]
    config = ctx.obj["config"]
    try:
        vehicle_id = resolve_vehicle(VehicleService(db, config), vehicle)
        stats = OdometerService(db, config).compute_stats(vehicle_id, period_days=days)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Period:         {stats.period} days")
    click.echo(f"Readings:       {stats.readings_count}")
    click.echo(f"Total distance: {stats.total_distance}")
    click.echo(f"Average daily:  {stats.average_daily:.2f}")
    if stats.first_reading is not None:
        click.echo(f"First / last:   {stats.first_reading} / {stats.last_reading}")


@odometer_group.command("rebuild")
@click.argument("vehicle", metavar="PLATE_OR_ID")
@click.pass_context
def rebuild_head(ctx, vehicle: str):
    """Recompute a vehicle's latest reading from its full history."""
    db = ctx.obj["db"]
    config = ctx.obj["config"]
    try:
        vehicle_id = resolve_vehicle(VehicleService(db, config), vehicle)
        latest = OdometerService(db, config).rebuild_projection(vehicle_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if latest is None:
        click.echo(f"Vehicle {vehicle_id} has no readings.")
    else:
        click.echo(f"Latest reading for vehicle {vehicle_id} is {latest.value}")


def register_commands(cli):
    """Register odometer commands with main CLI."""
    cli.add_command(odometer_group, name="odometer")
