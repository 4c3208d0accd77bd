"""Main CLI entry point."""

import click
from fleetledger.config import load_config
from fleetledger.database.factories import create_sqlite_database
from fleetledger.domain.errors import ValidationError
from fleetledger.utils.logger import configure_logging

# Import and register all commands at module level
from fleetledger.cli.commands import (
    catalog,
    vehicle,
    odometer,
    card,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FLEET_DB_PATH environment variable)",
    envvar="FLEET_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (overrides FLEET_LOG_LEVEL environment variable)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Fleetledger - Fleet catalog, odometer and recharge card ledgers.

    Keep the vehicle catalog consistent, record odometer readings that never
    go backwards, and track recharge card balances movement by movement.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            config = load_config()
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(2)
        configure_logging(log_level or config.log_level)

        db = create_sqlite_database(
            database_path=db_path or config.db_path, timeout=config.store_timeout
        )
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["config"] = config


# Register all commands
catalog.register_commands(cli)
vehicle.register_commands(cli)
odometer.register_commands(cli)
card.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
