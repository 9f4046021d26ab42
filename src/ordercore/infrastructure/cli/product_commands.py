"""CLI commands for the product catalog and stock levels."""

from __future__ import annotations

import click

from ordercore.domain.exceptions import DomainException


@click.command("add")
@click.option("--code", required=True, help="Catalog code (unique).")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Retail price (e.g. 15.00).")
@click.option("--quantity", default=0, type=int, help="Initial stock.")
@click.pass_obj
def product_add(container, code: str, name: str, price: str, quantity: int) -> None:
    """Add a new product to the catalog."""
    try:
        product = container.add_product().handle(code=code, name=name, price=price, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added at {product.price_retail} "
        f"({product.quantity} in stock)"
    )


@click.command("list")
@click.pass_obj
def product_list(container) -> None:
    """List all products in the catalog."""
    with container.uow() as uow:
        products = uow.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Code':<12} {'Name':<20} {'Price':>10} {'Stock':>8}")
    click.echo("-" * 60)
    for p in products:
        click.echo(f"{p.id:<6} {p.code:<12} {p.name:<20} {str(p.price_retail):>10} {p.quantity:>8}")


@click.command("set-stock")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units in stock.")
@click.pass_obj
def product_set_stock(container, product_id: int, quantity: int) -> None:
    """Set the stock level of a product."""
    try:
        container.set_stock().handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for product #{product_id} set to {quantity}")
