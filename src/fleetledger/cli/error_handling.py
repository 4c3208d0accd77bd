"""CLI error handling helpers."""

import click

from fleetledger.domain.errors import (
    CardNotActiveError,
    ConflictError,
    CrossReferenceError,
    DomainError,
    InsufficientBalanceError,
    MonotonicityViolation,
    NotFoundError,
    ReferentialIntegrityError,
    StoreUnavailableError,
    ValidationError,
)

EXIT_CODES: dict[type[DomainError], int] = {
    ValidationError: 2,
    NotFoundError: 3,
    ReferentialIntegrityError: 4,
    CrossReferenceError: 4,
    MonotonicityViolation: 5,
    CardNotActiveError: 5,
    InsufficientBalanceError: 5,
    ConflictError: 6,
    StoreUnavailableError: 7,
}


def exit_code_for(error: ValueError) -> int:
    """Map an error to its exit code; the most specific class wins."""
    for cls in type(error).__mro__:
        if cls in EXIT_CODES:
            return EXIT_CODES[cls]
    return 1


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with its code."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, DomainError) and error.retryable:
        click.echo("The operation can be retried.", err=True)
    ctx.exit(exit_code_for(error))
