from pathlib import Path

import click

from orderdesk.config.logging import configure_logging
from orderdesk.config.settings import OrderDeskSettings
from orderdesk.infrastructure.cli.order_commands import (
    order_add_product,
    order_create,
    order_delete,
    order_list,
    order_products,
    order_remove_product,
    order_show,
    order_update,
)
from orderdesk.infrastructure.cli.product_commands import (
    product_create,
    product_delete,
    product_list,
    product_orders,
    product_show,
    product_stock,
    product_update,
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the store file.",
)
@click.option(
    "--store",
    type=click.Choice(["json", "memory"]),
    default=None,
    help="Storage backend.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_json: bool,
    data_dir: Path | None,
    store: str | None,
) -> None:
    """orderdesk -- orders, products and the stock that links them"""
    settings = OrderDeskSettings.from_cli(
        verbose=verbose or None,
        log_json=log_json or None,
        data_dir=data_dir,
        store=store,
    )
    configure_logging(verbose=settings.verbose, log_json=settings.log_json)
    ctx.obj = settings


@cli.group()
def order() -> None:
    """Manage orders and their linked products."""


@cli.group()
def product() -> None:
    """Manage products and stock."""


# Register subcommands
order.add_command(order_add_product)
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_products)
order.add_command(order_remove_product)
order.add_command(order_show)
order.add_command(order_update)
product.add_command(product_create)
product.add_command(product_delete)
product.add_command(product_list)
product.add_command(product_orders)
product.add_command(product_show)
product.add_command(product_stock)
product.add_command(product_update)
