"""CLI commands for wholesale rules."""

from __future__ import annotations

import click

from ordercore.domain.exceptions import DomainException
from ordercore.domain.model.wholesale_rule import RuleType


@click.command("add")
@click.option(
    "--type",
    "rule_type",
    required=True,
    type=click.Choice([t.value for t in RuleType]),
    help="Rule type.",
)
@click.option("--value", required=True, help="Minimum amount, minimum quantity or multiple.")
@click.option("--product-id", type=int, default=None, help="Product the rule applies to.")
@click.pass_obj
def rule_add(container, rule_type: str, value: str, product_id: int | None) -> None:
    """Add an active wholesale rule."""
    try:
        rule = container.add_wholesale_rule().handle(RuleType(rule_type), value, product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    scope = f"product #{rule.product_id}" if rule.product_id else "all products"
    click.echo(f"Rule #{rule.id} {rule.rule_type.value}={rule.value} for {scope}")


@click.command("list")
@click.pass_obj
def rule_list(container) -> None:
    """List wholesale rules."""
    with container.uow() as uow:
        rules = uow.rules.list_all()

    if not rules:
        click.echo("No wholesale rules.")
        return

    click.echo(f"{'ID':<6} {'Type':<18} {'Product':>8} {'Value':>10} {'Active':>7}")
    click.echo("-" * 53)
    for r in rules:
        product = str(r.product_id) if r.product_id is not None else "*"
        click.echo(
            f"{r.id:<6} {r.rule_type.value:<18} {product:>8} {str(r.value):>10} "
            f"{'yes' if r.is_active else 'no':>7}"
        )
