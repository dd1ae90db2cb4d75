"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from orderdesk.application.dto import ProductDTO
from orderdesk.application.link_products import OrdersForProductHandler
from orderdesk.application.manage_products import (
    AdjustStockHandler,
    CreateProductHandler,
    DeleteProductHandler,
    ListProductsHandler,
    ShowProductHandler,
    UpdateProductHandler,
)
from orderdesk.config.settings import OrderDeskSettings
from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.filters import ProductFilter
from orderdesk.infrastructure.bootstrap import build_services


def _display_product(dto: ProductDTO) -> None:
    click.echo(f"Product #{dto.id}  {dto.name}")
    if dto.description:
        click.echo(f"  {dto.description}")
    click.echo(f"Price:   {dto.price}")
    click.echo(f"Stock:   {dto.stock}")
    click.echo(f"Created: {dto.created_at}")


def _product_table(products: list[ProductDTO]) -> None:
    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>10} {'Stock':>7}")
    click.echo("-" * 46)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<20} {p.price:>10} {p.stock:>7}")
        if p.orders is not None:
            for o in p.orders:
                click.echo(f"{'':<6} -> order #{o.id} {o.description}")


@click.command("create")
@click.option("--name", required=True, help="Product name.")
@click.option("--description", default="", help="Free-text description.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=int, show_default=True, help="Units in stock.")
@click.pass_obj
def product_create(
    settings: OrderDeskSettings, name: str, description: str, price: str, stock: int
) -> None:
    """Add a new product to the catalog."""
    try:
        handler = CreateProductHandler(build_services(settings).products)
        dto = handler.handle(name=name, description=description, price=price, stock=stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{dto.id} '{dto.name}' added at {dto.price} ({dto.stock} in stock)")


@click.command("show")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.pass_obj
def product_show(settings: OrderDeskSettings, product_id: int) -> None:
    """Show details of a product."""
    try:
        dto = ShowProductHandler(build_services(settings).products).handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_product(dto)


@click.command("list")
@click.option("--name", default=None, help="Name contains this text.")
@click.option("--description", default=None, help="Description contains this text.")
@click.option("--min-price", type=float, default=None)
@click.option("--max-price", type=float, default=None)
@click.option("--min-stock", type=int, default=None)
@click.option("--max-stock", type=int, default=None)
@click.option("--with-orders", is_flag=True, default=False, help="Include linked orders.")
@click.pass_obj
def product_list(
    settings: OrderDeskSettings,
    name: str | None,
    description: str | None,
    min_price: float | None,
    max_price: float | None,
    min_stock: int | None,
    max_stock: int | None,
    with_orders: bool,
) -> None:
    """List products, optionally filtered (all filters must match)."""
    criteria = ProductFilter(
        name=name,
        description=description,
        min_price=min_price,
        max_price=max_price,
        min_stock=min_stock,
        max_stock=max_stock,
        include_orders=with_orders,
    )
    try:
        products = ListProductsHandler(build_services(settings).engine).handle(criteria)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return
    _product_table(products)


@click.command("update")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--description", default="", help="Free-text description.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
@click.option("--stock", required=True, type=int, help="Units in stock.")
@click.pass_obj
def product_update(
    settings: OrderDeskSettings,
    product_id: int,
    name: str,
    description: str,
    price: str,
    stock: int,
) -> None:
    """Replace every field of a product."""
    try:
        handler = UpdateProductHandler(build_services(settings).products)
        dto = handler.handle(product_id, name, description, price, stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{dto.id} updated.")
    _display_product(dto)


@click.command("stock")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--delta", required=True, type=int, help="Units to add (negative to remove).")
@click.pass_obj
def product_stock(settings: OrderDeskSettings, product_id: int, delta: int) -> None:
    """Add or remove stock atomically."""
    try:
        dto = AdjustStockHandler(build_services(settings).products).handle(product_id, delta)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{dto.id} stock is now {dto.stock}")


@click.command("delete")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.pass_obj
def product_delete(settings: OrderDeskSettings, product_id: int) -> None:
    """Delete a product (its order links are kept)."""
    try:
        DeleteProductHandler(build_services(settings).products).handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} deleted.")


@click.command("orders")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.pass_obj
def product_orders(settings: OrderDeskSettings, product_id: int) -> None:
    """List the orders a product is linked to."""
    try:
        orders = OrdersForProductHandler(build_services(settings).manager).handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo(f"Product #{product_id} is not linked to any order.")
        return
    for o in orders:
        click.echo(f"#{o.id:<5} {o.description}")
