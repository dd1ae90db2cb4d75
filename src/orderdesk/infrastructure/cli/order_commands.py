"""CLI commands for the Order aggregate and its product links."""

from __future__ import annotations

import click

from orderdesk.application.dto import OrderDTO
from orderdesk.application.link_products import (
    AddProductToOrderHandler,
    ProductsForOrderHandler,
    RemoveProductFromOrderHandler,
)
from orderdesk.application.manage_orders import (
    CreateOrderHandler,
    DeleteOrderHandler,
    ListOrdersHandler,
    ShowOrderHandler,
    UpdateOrderHandler,
)
from orderdesk.config.settings import OrderDeskSettings
from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.filters import OrderFilter
from orderdesk.infrastructure.bootstrap import build_services


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order with its lines."""
    click.echo(f"Order #{dto.id}")
    click.echo(f"Description: {dto.description}")
    click.echo(f"Created:     {dto.created_at}")
    click.echo()

    if not dto.lines:
        click.echo("  (no products)")
        return

    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.lines:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("create")
@click.option("--description", required=True, help="Order description (3-255 characters).")
@click.pass_obj
def order_create(settings: OrderDeskSettings, description: str) -> None:
    """Create a new order."""
    try:
        dto = CreateOrderHandler(build_services(settings).orders).handle(description)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created.")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(settings: OrderDeskSettings, order_id: int) -> None:
    """Show an order with its linked products."""
    try:
        services = build_services(settings)
        dto = ShowOrderHandler(services.manager).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--description", default=None, help="Description contains this text.")
@click.option("--product-id", type=int, default=None, help="Only orders containing this product.")
@click.option("--with-products", is_flag=True, default=False, help="Include linked products.")
@click.pass_obj
def order_list(
    settings: OrderDeskSettings,
    description: str | None,
    product_id: int | None,
    with_products: bool,
) -> None:
    """List orders, optionally filtered (all filters must match)."""
    criteria = OrderFilter(
        description=description,
        product_id=product_id,
        include_products=with_products,
    )
    try:
        orders = ListOrdersHandler(build_services(settings).engine).handle(criteria)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return
    for o in orders:
        click.echo(f"#{o.id:<5} {o.description}")
        if o.products is not None:
            for p in o.products:
                click.echo(f"{'':<6} -> product #{p.id} {p.name}")


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--description", required=True, help="New description.")
@click.pass_obj
def order_update(settings: OrderDeskSettings, order_id: int, description: str) -> None:
    """Change an order's description."""
    try:
        UpdateOrderHandler(build_services(settings).orders).handle(order_id, description)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} updated.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.pass_obj
def order_delete(settings: OrderDeskSettings, order_id: int) -> None:
    """Delete an order (its product links are kept)."""
    try:
        DeleteOrderHandler(build_services(settings).orders).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")


@click.command("add-product")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units to take from stock.")
@click.pass_obj
def order_add_product(
    settings: OrderDeskSettings, order_id: int, product_id: int, quantity: int
) -> None:
    """Link a product to an order (takes the units out of stock)."""
    try:
        handler = AddProductToOrderHandler(build_services(settings).manager)
        dto = handler.handle(order_id, product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{dto.product_id} added to order #{dto.order_id}: "
        f"{dto.quantity} x {dto.unit_price} = {dto.line_total}"
    )


@click.command("remove-product")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.pass_obj
def order_remove_product(settings: OrderDeskSettings, order_id: int, product_id: int) -> None:
    """Unlink a product from an order (stock is NOT restored)."""
    try:
        RemoveProductFromOrderHandler(build_services(settings).manager).handle(order_id, product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} removed from order #{order_id}.")


@click.command("products")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.pass_obj
def order_products(settings: OrderDeskSettings, order_id: int) -> None:
    """List the products linked to an order."""
    try:
        products = ProductsForOrderHandler(build_services(settings).manager).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo(f"Order #{order_id} has no products.")
        return
    for p in products:
        click.echo(f"#{p.id:<5} {p.name:<20} {p.price:>10}")
