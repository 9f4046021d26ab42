"""CLI commands for staging server-side carts."""

from __future__ import annotations

import click

from ordercore.domain.exceptions import DomainException


@click.command("add")
@click.option("--user-id", required=True, type=int, help="Cart owner.")
@click.option("--product-id", required=True, type=int, help="Product to add.")
@click.option("--quantity", default=1, type=int, help="Units to add.")
@click.pass_obj
def cart_add(container, user_id: int, product_id: int, quantity: int) -> None:
    """Add a product to a user's cart."""
    try:
        container.add_to_cart().handle(user_id, product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added {quantity} x product #{product_id} to cart of user {user_id}")


@click.command("show")
@click.option("--user-id", required=True, type=int, help="Cart owner.")
@click.pass_obj
def cart_show(container, user_id: int) -> None:
    """Show a user's cart."""
    lines = container.create_order().lines_for_user(user_id)

    if not lines:
        click.echo("Cart is empty.")
        return

    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for line in lines:
        click.echo(
            f"  {line.product_name:<20} {line.quantity.value:>5} "
            f"{str(line.price):>10} {str(line.subtotal):>10}"
        )
