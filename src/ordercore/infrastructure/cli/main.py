from __future__ import annotations

import logging

import click
from pydantic import ValidationError

from ordercore.infrastructure.bootstrap import build_container
from ordercore.infrastructure.cli.cart_commands import cart_add, cart_show
from ordercore.infrastructure.cli.order_commands import (
    order_auto_cancel,
    order_create,
    order_edit,
    order_list,
    order_show,
    order_status,
    order_track,
)
from ordercore.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_set_stock,
)
from ordercore.infrastructure.cli.rule_commands import rule_add, rule_list
from ordercore.infrastructure.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override ORDERCORE_LOG_LEVEL.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """ordercore: order lifecycle and stock consistency"""
    try:
        settings = Settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"ORDERCORE_{str(error['loc'][0]).upper()}: {error['msg']}" for error in exc.errors()
        )
        raise click.ClickException(f"Invalid configuration: {problems}") from exc
    logging.basicConfig(level=(log_level or settings.log_level).upper(), format=LOG_FORMAT)
    ctx.obj = build_container(settings)


@cli.group()
def db() -> None:
    """Manage the database."""


@db.command("init")
@click.pass_obj
def db_init(container) -> None:
    """Create all tables."""
    container.init_schema()
    click.echo("Database schema created.")


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products and stock."""


@cli.group()
def rule() -> None:
    """Manage wholesale rules."""


@cli.group()
def cart() -> None:
    """Stage server-side carts."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_show)
order.add_command(order_list)
order.add_command(order_status)
order.add_command(order_edit)
order.add_command(order_track)
order.add_command(order_auto_cancel)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_set_stock)
rule.add_command(rule_add)
rule.add_command(rule_list)
cart.add_command(cart_add)
cart.add_command(cart_show)
