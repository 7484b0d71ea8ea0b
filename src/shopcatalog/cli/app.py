"""Main Click application root."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable

import click
from pydantic import BaseModel

from shopcatalog.core.config import get_core_config, set_core_config
from shopcatalog.core.config.main import Config
from shopcatalog.core.exceptions import ShopCatalogError
from shopcatalog.modules.catalog import ARCHIVE_TYPES, ProductCatalog, build_catalog
from shopcatalog.modules.catalog.weeks import current_week_token, previous_token

logger = logging.getLogger(__name__)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


def _echo(value: Any) -> None:
    click.echo(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False))


def _catalog() -> ProductCatalog:
    try:
        return build_catalog(get_core_config())
    except ShopCatalogError as e:
        raise click.ClickException(str(e)) from e


def _run(coro: Awaitable[Any]) -> None:
    _echo(asyncio.run(coro))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to settings.toml",
)
@click.pass_context
def cli(ctx, verbose, config_path):
    """Shopcatalog CLI - query the aggregated product catalog."""
    ctx.ensure_object(dict)
    config = Config.load(config_path)
    level = logging.DEBUG if verbose or config.debug else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    set_core_config(config)


@cli.command()
@click.option("--limit", default=10, show_default=True, help="Number of products")
def featured(limit):
    """Featured, in-stock products."""
    _run(_catalog().get_featured_products(limit))


@cli.command()
@click.option("--limit", default=12, show_default=True, help="Number of products")
@click.option("--max-weeks", default=8, show_default=True, help="Drop weeks to look back")
@click.option("--exclude", multiple=True, help="Product id to skip (repeatable)")
@click.option("--optimized", is_flag=True, help="Single-query in-stock variant")
def new(limit, max_weeks, exclude, optimized):
    """New arrivals with the per-week breakdown."""
    catalog = _catalog()
    if optimized:
        _run(catalog.get_new_products_optimized(limit))
    else:
        _run(catalog.get_new_products_with_breakdown(limit, list(exclude), max_weeks))


@cli.command()
@click.argument("facet", type=click.Choice(ARCHIVE_TYPES))
@click.argument("slug")
@click.option("--page", default=1, show_default=True)
@click.option("--limit", default=20, show_default=True)
@click.option("--include-out-of-stock", is_flag=True, help="List sold-out products too")
def archive(facet, slug, page, limit, include_out_of_stock):
    """One page of an artist/label/genre/format/week/tag archive."""
    _run(_catalog().get_products_by_archive(facet, slug, page, limit, include_out_of_stock))


@cli.command()
@click.argument("term")
@click.option("--page", default=1, show_default=True)
@click.option("--limit", default=20, show_default=True)
def search(term, page, limit):
    """Free-text search over in-stock products."""
    _run(_catalog().search_products(term, page, limit))


@cli.command()
@click.argument("handle")
def product(handle):
    """Single product by slug, commerce slug or SKU."""
    result = asyncio.run(_catalog().get_product(handle))
    if result is None:
        raise click.ClickException(f"Product not found: {handle}")
    _echo(result)


@cli.command()
@click.option("--previous", "-n", default=0, show_default=True, help="Also list N earlier weeks")
def week(previous):
    """Print the current drop-week token (WWYY)."""
    token = current_week_token()
    tokens = [token]
    for _ in range(previous):
        token = previous_token(token)
        tokens.append(token)
    _echo(tokens)


__all__ = ["cli"]
