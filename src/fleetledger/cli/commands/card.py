"""Recharge card commands."""

import click
from fleetledger.cli.error_handling import handle_domain_error
from fleetledger.domain.entities import CardProvider, CardStatus, MovementType
from fleetledger.domain.errors import DomainError, NotFoundError, ValidationError
from fleetledger.domain.recharge import RechargeCardService
from fleetledger.utils.amount_parser import parse_amount
from fleetledger.utils.date_parser import parse_timestamp

PROVIDER_CHOICE = click.Choice([p.value for p in CardProvider], case_sensitive=False)
STATUS_CHOICE = click.Choice([s.value for s in CardStatus], case_sensitive=False)
TYPE_CHOICE = click.Choice([t.value for t in MovementType], case_sensitive=False)


def resolve_card(service: RechargeCardService, card: str, company_id: str | None = None) -> int:
    """Resolve a card code or ID to a card ID.

    Codes are unique per company only, so a code shared by several
    companies needs ``company_id``.

    Raises:
        NotFoundError: If the card is not found
        ValidationError: If the code matches cards of more than one company
    """
    try:
        card_id = int(card)
    except ValueError:
        card_id = None
    if card_id is not None:
        return service.get_card(card_id).id

    if company_id is None:
        code = card.strip()
        matches = [c for c in service.list_cards() if c.code == code]
        if len(matches) > 1:
            companies = ", ".join(sorted(c.company_id for c in matches))
            raise ValidationError(
                f"Card code '{card}' is used by several companies ({companies}); pass --company",
                field="code",
                value=card,
            )
        found = matches[0] if matches else None
    else:
        found = service.get_by_code(card, company_id=company_id)
    if found is None:
        raise NotFoundError(f"Card '{card}' not found", field="code", value=card)
    return found.id


def _record(ctx, card: str, amount: str, movement_type: MovementType, at, reference, note, company_id) -> None:
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])

    try:
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(2)

    occurred_at = None
    if at is not None:
        try:
            occurred_at = parse_timestamp(at)
        except ValueError as e:
            click.echo(f"Error: Invalid timestamp: {e}", err=True)
            ctx.exit(2)

    try:
        card_id = resolve_card(service, card, company_id)
        service.add_movement(
            card_id, value, movement_type, at=occurred_at, reference=reference, note=note
        )
        balance = service.get_balance(card_id)
        click.echo(
            f"Recorded {movement_type.value} of {value:,.2f} on card {card_id}; "
            f"balance {balance.balance:,.2f} {balance.currency}"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


def movement_options(func):
    """Options shared by topup and spend."""
    options = [
        click.option("--at", "at", help="When the movement happened (ISO timestamp, 'now', 'yesterday')"),
        click.option("--reference", help="External reference"),
        click.option("--note", help="Note"),
        click.option("--company", "company_id", help="Company, to disambiguate card codes"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def card_group():
    """Manage recharge cards and their movements."""
    pass


@card_group.command("create")
@click.argument("code")
@click.option("--company", "company_id", required=True, help="Owning company ID")
@click.option("--provider", type=PROVIDER_CHOICE, default="other", show_default=True, help="Card provider")
@click.option("--status", type=STATUS_CHOICE, default="active", show_default=True, help="Initial status")
@click.option("--allow-negative", is_flag=True, help="Allow the balance to go below zero")
@click.pass_context
def create_card(ctx, code: str, company_id: str, provider: str, status: str, allow_negative: bool):
    """Create a recharge card with a zero balance.

    Examples:
        fleetledger card create "TAG-0001" --company acme --provider rfid
        fleetledger card create "PK-77" --company acme --provider parkia --allow-negative
    """
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    try:
        card = service.create_card(
            company_id, code, provider=provider, status=status, allow_negative=allow_negative
        )
        click.echo(f"Created card '{card.code}' (ID: {card.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("list")
@click.option("--company", "company_id", help="Only cards of this company")
@click.option("--status", type=STATUS_CHOICE, help="Only cards with this status")
@click.option("--provider", type=PROVIDER_CHOICE, help="Only cards from this provider")
@click.option("--all", "include_disabled", is_flag=True, help="Include disabled cards")
@click.pass_context
def list_cards(ctx, company_id: str | None, status: str | None, provider: str | None, include_disabled: bool):
    """List recharge cards."""
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    try:
        cards = service.list_cards(
            company_id=company_id, status=status, provider=provider, include_disabled=include_disabled
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not cards:
        click.echo("No cards found.")
        return

    click.echo("\nCards:")
    click.echo("-" * 70)
    for c in cards:
        suffix = "" if c.enabled else " (disabled)"
        click.echo(
            f"ID: {c.id:3d} | {c.code:12s} | {c.provider.value:7s} | "
            f"{c.status.value:7s} | {c.balance:>12,.2f}{suffix}"
        )


@card_group.command("update")
@click.argument("card", metavar="CODE_OR_ID")
@click.option("--code", "new_code", help="New card code")
@click.option("--provider", type=PROVIDER_CHOICE, help="Card provider")
@click.option("--status", type=STATUS_CHOICE, help="Card status")
@click.option("--allow-negative/--no-allow-negative", default=None, help="Negative balance policy")
@click.option("--company", "company_id", help="Company, to disambiguate card codes")
@click.pass_context
def update_card(
    ctx,
    card: str,
    new_code: str | None,
    provider: str | None,
    status: str | None,
    allow_negative: bool | None,
    company_id: str | None,
):
    """Update a card's code, provider, status or negative balance policy.

    Examples:
        fleetledger card update "TAG-0001" --status blocked
        fleetledger card update 4 --allow-negative
    """
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    fields = {}
    if new_code is not None:
        fields["code"] = new_code
    if provider is not None:
        fields["provider"] = provider
    if status is not None:
        fields["status"] = status
    if allow_negative is not None:
        fields["allow_negative"] = allow_negative
    if not fields:
        click.echo("Nothing to update.")
        return

    try:
        card_id = resolve_card(service, card, company_id)
        service.update_card(card_id, **fields)
        click.echo(f"Updated card {card_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("disable")
@click.argument("card", metavar="CODE_OR_ID")
@click.option("--company", "company_id", help="Company, to disambiguate card codes")
@click.pass_context
def disable_card(ctx, card: str, company_id: str | None):
    """Disable and block a card. Its movements are kept."""
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    try:
        card_id = resolve_card(service, card, company_id)
        service.disable_card(card_id)
        click.echo(f"Disabled card {card_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("topup")
@click.argument("card", metavar="CODE_OR_ID")
@click.argument("amount")
@movement_options
@click.pass_context
def top_up(ctx, card: str, amount: str, at, reference, note, company_id):
    """Credit AMOUNT to a card.

    Examples:
        fleetledger card topup "TAG-0001" 500
        fleetledger card topup 4 "$1,250.00" --reference "INV-88"
    """
    _record(ctx, card, amount, MovementType.CREDIT, at, reference, note, company_id)


@card_group.command("spend")
@click.argument("card", metavar="CODE_OR_ID")
@click.argument("amount")
@movement_options
@click.pass_context
def spend(ctx, card: str, amount: str, at, reference, note, company_id):
    """Debit AMOUNT from a card.

    Fails if the balance would go below zero and the card does not allow it.

    Examples:
        fleetledger card spend "TAG-0001" 85.50 --note "Toll Mexico-Puebla"
    """
    _record(ctx, card, amount, MovementType.DEBIT, at, reference, note, company_id)


@card_group.command("balance")
@click.argument("card", metavar="CODE_OR_ID")
@click.option("--company", "company_id", help="Company, to disambiguate card codes")
@click.pass_context
def show_balance(ctx, card: str, company_id: str | None):
    """Show a card's balance."""
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    try:
        card_id = resolve_card(service, card, company_id)
        balance = service.get_balance(card_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Balance:   {balance.balance:,.2f} {balance.currency}")
    click.echo(f"Movements: {balance.total_movements}")
    if balance.last_movement is not None:
        last = balance.last_movement
        click.echo(
            f"Last:      {last.type.value} {last.amount:,.2f} at {last.at.strftime('%Y-%m-%d %H:%M')}"
        )


@card_group.command("movements")
@click.argument("card", metavar="CODE_OR_ID")
@click.option("--type", "movement_type", type=TYPE_CHOICE, help="Only credits or debits")
@click.option("--limit", type=int, default=20, show_default=True, help="Maximum movements to show")
@click.option("--company", "company_id", help="Company, to disambiguate card codes")
@click.pass_context
def list_movements(ctx, card: str, movement_type: str | None, limit: int, company_id: str | None):
    """List a card's movements, newest first."""
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    try:
        card_id = resolve_card(service, card, company_id)
        movements = service.movements(card_id, type=movement_type, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not movements:
        click.echo("No movements recorded.")
        return
    for m in movements:
        line = (
            f"#{m.sequence:<4d} | {m.at.strftime('%Y-%m-%d %H:%M')} | "
            f"{m.type.value:6s} | {m.signed_amount:>12,.2f}"
        )
        if m.reference:
            line += f" | {m.reference}"
        if m.note:
            line += f" | {m.note}"
        click.echo(line)


@card_group.command("stats")
@click.option("--company", "company_id", help="Only cards of this company")
@click.pass_context
def card_stats(ctx, company_id: str | None):
    """Show card totals by status."""
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    try:
        stats = service.compute_card_stats(service.list_cards(company_id=company_id))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Total cards: {stats.total}")
    click.echo(f"  active   {stats.active}")
    click.echo(f"  blocked  {stats.blocked}")
    click.echo(f"  lost     {stats.lost}")
    click.echo(f"Active: {stats.active_percentage}%")


@card_group.command("rebuild")
@click.argument("card", metavar="CODE_OR_ID")
@click.option("--company", "company_id", help="Company, to disambiguate card codes")
@click.pass_context
def rebuild_balance(ctx, card: str, company_id: str | None):
    """Recompute a card's balance from its full movement history."""
    service = RechargeCardService(ctx.obj["db"], ctx.obj["config"])
    try:
        card_id = resolve_card(service, card, company_id)
        balance = service.rebuild_balance(card_id)
        click.echo(f"Balance for card {card_id} is {balance:,.2f} {ctx.obj['config'].currency}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
