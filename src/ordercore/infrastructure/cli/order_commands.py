"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from ordercore.application.dto import CartItemSpec, CheckoutDetails, ItemChange
from ordercore.domain.exceptions import DomainException
from ordercore.domain.model.order import ClientType, DeliveryMethod, PaymentMethod
from ordercore.domain.model.status import ChangeSource, OrderStatus
from ordercore.domain.repository.order_repository import OrderFilter


def _parse_pair(pair: str, what: str) -> tuple[int, int]:
    """Parse 'ID:QTY' into a pair of ints."""
    pair = pair.strip()
    if ":" not in pair:
        raise click.BadParameter(f"Invalid {what} format '{pair}'. Expected 'ID:Quantity'.")
    raw_id, raw_qty = pair.split(":", 1)
    try:
        return int(raw_id), int(raw_qty)
    except ValueError:
        raise click.BadParameter(f"Invalid {what} '{pair}': ID and quantity must be integers.")


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse '1:3,2:5' into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        product_id, qty = _parse_pair(pair, "item")
        specs.append(CartItemSpec(product_id=product_id, quantity=qty))
    return specs


def _parse_date(raw: str | None, end_of_day: bool = False) -> datetime | None:
    if raw is None:
        return None
    try:
        value = datetime.strptime(raw, "%Y-%m-%d")
    except ValueError:
        raise click.BadParameter(f"Invalid date '{raw}'. Expected YYYY-MM-DD.")
    if end_of_day:
        value = value.replace(hour=23, minute=59, second=59, microsecond=999999)
    return value.replace(tzinfo=timezone.utc)


def _display_order(dto) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number} (#{dto.id})  status={dto.status}")
    click.echo(f"Client:   {dto.contact_name} <{dto.contact_email}> {dto.contact_phone} [{dto.client_type}]")
    click.echo(f"Delivery: {dto.delivery_method} {dto.delivery_city or ''}".rstrip())
    click.echo(f"Payment:  {dto.payment_method} ({dto.payment_status})")
    click.echo(f"Created:  {dto.created_at}")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number}")
    if dto.cancelled_reason:
        click.echo(f"Cancelled by {dto.cancelled_by}: {dto.cancelled_reason}")
    click.echo()

    click.echo(f"  {'Item':<6} {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*54}")
    for item in dto.items:
        click.echo(
            f"  {item.id or '':<6} {item.product_name:<20} {item.quantity:>5} "
            f"{item.price_at_order:>10} {item.subtotal:>10}"
        )
    click.echo(f"  {'-'*54}")
    click.echo(f"  {'Order Total':<27} {dto.items_count:>5} {dto.total_amount:>21}")

    click.echo()
    click.echo("History:")
    for entry in dto.history:
        old = entry.old_status or "-"
        line = f"  {entry.created_at}  {old} -> {entry.new_status}  [{entry.change_source}]"
        if entry.comment:
            line += f"  {entry.comment}"
        click.echo(line)


@click.command("create")
@click.option("--user-id", type=int, default=None, help="Buyer; omit for guest checkout.")
@click.option("--items", default=None, help="Items as 'ProductID:Qty,ProductID:Qty'. Defaults to the user's cart.")
@click.option("--client-type", type=click.Choice([c.value for c in ClientType]), default="retail")
@click.option("--name", required=True, help="Contact name.")
@click.option("--phone", required=True, help="Contact phone.")
@click.option("--email", required=True, help="Contact email.")
@click.option("--delivery", type=click.Choice([d.value for d in DeliveryMethod]), default="nova_poshta")
@click.option("--city", default=None, help="Delivery city.")
@click.option("--warehouse-ref", default=None, help="Carrier warehouse reference.")
@click.option("--address", default=None, help="Delivery address.")
@click.option("--payment", type=click.Choice([p.value for p in PaymentMethod]), default="cod")
@click.option("--comment", default=None, help="Order comment.")
@click.pass_obj
def order_create(
    container,
    user_id: int | None,
    items: str | None,
    client_type: str,
    name: str,
    phone: str,
    email: str,
    delivery: str,
    city: str | None,
    warehouse_ref: str | None,
    address: str | None,
    payment: str,
    comment: str | None,
) -> None:
    """Place an order from a guest item list or the user's cart."""
    if items is None and user_id is None:
        raise click.UsageError("Guest checkout needs --items")

    handler = container.create_order()
    checkout = CheckoutDetails(
        contact_name=name,
        contact_phone=phone,
        contact_email=email,
        delivery_method=DeliveryMethod(delivery),
        payment_method=PaymentMethod(payment),
        delivery_city=city,
        delivery_warehouse_ref=warehouse_ref,
        delivery_address=address,
        comment=comment,
    )

    try:
        if items is not None:
            lines = handler.lines_from_specs(_parse_items(items))
        else:
            lines = handler.lines_for_user(user_id)
        dto = handler.handle(user_id, checkout, lines, ClientType(client_type))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} created (id={dto.id}, status={dto.status})")
    click.echo(f"Total: {dto.total_amount} for {dto.items_count} item(s)")


@click.command("show")
@click.option("--id", "order_id", type=int, default=None, help="Order ID to display.")
@click.option("--number", "order_number", default=None, help="Order number to display.")
@click.option("--user-id", type=int, default=None, help="Only show if owned by this user.")
@click.pass_obj
def order_show(container, order_id: int | None, order_number: str | None, user_id: int | None) -> None:
    """Show details of an existing order."""
    if (order_id is None) == (order_number is None):
        raise click.UsageError("Give exactly one of --id or --number")

    queries = container.order_queries()
    try:
        if order_id is not None:
            dto = queries.get_order_by_id(order_id, user_id=user_id)
        else:
            dto = queries.get_order_by_number(order_number)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--user-id", type=int, default=None, help="Only this user's orders.")
@click.option("--status", type=click.Choice([s.value for s in OrderStatus]), default=None)
@click.option("--from", "date_from", default=None, help="Created on or after (YYYY-MM-DD).")
@click.option("--to", "date_to", default=None, help="Created on or before (YYYY-MM-DD).")
@click.option("--search", default=None, help="Order number, contact name or phone.")
@click.option("--page", default=1, type=int)
@click.option("--limit", default=20, type=int)
@click.pass_obj
def order_list(
    container,
    user_id: int | None,
    status: str | None,
    date_from: str | None,
    date_to: str | None,
    search: str | None,
    page: int,
    limit: int,
) -> None:
    """List orders, newest first."""
    queries = container.order_queries()
    try:
        filters = OrderFilter(
            page=page,
            limit=limit,
            status=OrderStatus(status) if status else None,
            date_from=_parse_date(date_from),
            date_to=_parse_date(date_to, end_of_day=True),
            search=search,
        )
        if user_id is not None:
            result = queries.get_user_orders(user_id, filters)
        else:
            result = queries.get_all_orders(filters)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Number':<15} {'Status':<12} {'Items':>6} {'Total':>12}  {'Contact'}")
    click.echo("-" * 70)
    for o in result.orders:
        click.echo(
            f"{o.id:<6} {o.order_number:<15} {o.status:<12} {o.items_count:>6} "
            f"{o.total_amount:>12}  {o.contact_name}"
        )
    click.echo(f"Page {page}: {len(result.orders)} of {result.total} order(s)")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "target", required=True, type=click.Choice([s.value for s in OrderStatus]))
@click.option("--actor-id", type=int, default=None, help="Who requests the change.")
@click.option(
    "--as",
    "role",
    type=click.Choice([ChangeSource.MANAGER.value, ChangeSource.CLIENT_ACTION.value]),
    default=ChangeSource.MANAGER.value,
    help="Actor role.",
)
@click.option("--comment", default=None, help="Comment (becomes the reason on cancel).")
@click.pass_obj
def order_status(
    container, order_id: int, target: str, actor_id: int | None, role: str, comment: str | None
) -> None:
    """Move an order to another status."""
    try:
        dto = container.update_order_status().handle(
            order_id, OrderStatus(target), actor_id, ChangeSource(role), comment
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}.")


@click.command("edit")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--actor-id", type=int, default=None, help="Manager making the change.")
@click.option("--set", "resize", multiple=True, help="Resize a line: 'ItemID:Qty'.")
@click.option("--remove", multiple=True, type=int, help="Remove a line by item ID.")
@click.option("--add", multiple=True, help="Add a product: 'ProductID:Qty'.")
@click.pass_obj
def order_edit(
    container,
    order_id: int,
    actor_id: int | None,
    resize: tuple[str, ...],
    remove: tuple[int, ...],
    add: tuple[str, ...],
) -> None:
    """Edit the items of an order (restores or reserves stock)."""
    changes: list[ItemChange] = []
    for pair in resize:
        item_id, qty = _parse_pair(pair, "--set")
        changes.append(ItemChange(item_id=item_id, quantity=qty))
    for item_id in remove:
        changes.append(ItemChange(item_id=item_id, remove=True, quantity=0))
    for pair in add:
        product_id, qty = _parse_pair(pair, "--add")
        changes.append(ItemChange(product_id=product_id, quantity=qty))

    try:
        dto = container.edit_order_items().handle(order_id, changes, actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} updated: {dto.items_count} item(s), total {dto.total_amount}")


@click.command("track")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--number", "tracking_number", required=True, help="Carrier tracking number.")
@click.pass_obj
def order_track(container, order_id: int, tracking_number: str) -> None:
    """Attach a tracking number to an order."""
    try:
        container.set_tracking_number().handle(order_id, tracking_number)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} tracking number set to {tracking_number}")


@click.command("auto-cancel")
@click.pass_obj
def order_auto_cancel(container) -> None:
    """Cancel orders stuck in new_order for too long."""
    count = container.auto_cancel().handle()
    click.echo(f"{count} stale order(s) cancelled.")
