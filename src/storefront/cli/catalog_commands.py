"""Catalog cache CLI commands."""

import asyncio
import json
from decimal import Decimal
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from src.storefront.core.errors import StorefrontError, user_message
from src.storefront.core.mapping import dtos_from_documents
from src.storefront.core.models.dto import BrandDTO, CategoryDTO, ProductDTO
from src.storefront.core.remote.http_source import HttpCatalogSource
from src.storefront.core.repositories.catalog_repository import CatalogRepository
from src.storefront.core.services.database.db_manage import DbManageService
from src.storefront.core.storage.catalog_store import CatalogStore, ProductFilter
from src.storefront.runtime.context import get_config

from .utils import console, open_database

# Create the catalog command group
catalog_app = typer.Typer(help="📦 Local catalog cache commands")

DatabaseOption = typer.Option(
    None, "--database", "-d", help="Cache database URL (defaults to the configured one)"
)


def _load_dump(path: Path) -> dict[str, list[tuple[str | None, dict]]]:
    """Read ``{"products": [...], "categories": [...], "brands": [...]}``.

    Each collection is either a list of documents with an ``id`` field or an
    object mapping ids to documents.
    """
    try:
        payload = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        raise typer.Exit(1) from e
    if not isinstance(payload, dict):
        console.print("[red]Expected a JSON object keyed by collection name[/red]")
        raise typer.Exit(1)

    collections: dict[str, list[tuple[str | None, dict]]] = {}
    for name in ("products", "categories", "brands"):
        docs = payload.get(name) or []
        if isinstance(docs, dict):
            collections[name] = [(str(doc_id), doc) for doc_id, doc in docs.items()]
        else:
            collections[name] = [(None, doc) for doc in docs]
    return collections


@catalog_app.command("import")
def import_catalog(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON document dump"),
    database: str | None = DatabaseOption,
) -> None:
    """Load a JSON document dump into the local cache."""
    collections = _load_dump(file)

    with open_database(database) as db:
        store = CatalogStore(db)
        # Categories first so product visibility is derived in the same run
        results = {
            "categories": store.upsert_categories(dtos_from_documents(CategoryDTO, collections["categories"])),
            "brands": store.upsert_brands(dtos_from_documents(BrandDTO, collections["brands"])),
            "products": store.upsert_products(dtos_from_documents(ProductDTO, collections["products"])),
        }

    table = Table(title=f"Imported {file.name}")
    table.add_column("Collection", style="cyan")
    for column in ("Documents", "Inserted", "Updated", "Skipped", "Stale"):
        table.add_column(column, justify="right")
    for name, stats in results.items():
        table.add_row(
            name,
            str(len(collections[name])),
            str(stats.inserted),
            str(stats.updated),
            str(stats.skipped),
            str(stats.stale),
        )
    console.print(table)


@catalog_app.command("products")
def list_products(
    query: str | None = typer.Option(None, "--query", "-q", help="Search in names and keywords"),
    category: list[str] | None = typer.Option(None, "--category", "-c", help="Category id (repeatable)"),
    brand: list[str] | None = typer.Option(None, "--brand", "-b", help="Brand id (repeatable)"),
    min_price: float | None = typer.Option(None, "--min-price", help="Inclusive lower price bound"),
    max_price: float | None = typer.Option(None, "--max-price", help="Inclusive upper price bound"),
    include_inactive: bool = typer.Option(False, "--all", help="Include inactive products"),
    database: str | None = DatabaseOption,
) -> None:
    """List cached products matching a filter."""
    product_filter = ProductFilter(
        query=query,
        category_ids=category or None,
        brand_ids=brand or None,
        min_price=Decimal(str(min_price)) if min_price is not None else None,
        max_price=Decimal(str(max_price)) if max_price is not None else None,
        active_only=not include_inactive,
    )
    with open_database(database) as db:
        products = CatalogStore(db).products(product_filter)

    table = Table(title=f"Products ({len(products)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Brand")
    table.add_column("Price", justify="right")
    table.add_column("Active")
    for product in products:
        table.add_row(
            product.id,
            product.name,
            product.category_id,
            product.brand_id,
            f"{product.price:.2f}",
            "✓" if product.is_active else "✗",
        )
    console.print(table)


@catalog_app.command("categories")
def list_categories(database: str | None = DatabaseOption) -> None:
    """List cached categories."""
    with open_database(database) as db:
        categories = CatalogStore(db).categories()

    table = Table(title=f"Categories ({len(categories)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Brands")
    table.add_column("Active")
    for category in categories:
        table.add_row(
            category.id,
            category.name,
            ", ".join(category.brand_ids),
            "✓" if category.is_active else "✗",
        )
    console.print(table)


@catalog_app.command("brands")
def list_brands(database: str | None = DatabaseOption) -> None:
    """List cached brands."""
    with open_database(database) as db:
        brands = CatalogStore(db).brands()

    table = Table(title=f"Brands ({len(brands)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Active")
    for brand in brands:
        table.add_row(brand.id, brand.name, "✓" if brand.is_active else "✗")
    console.print(table)


@catalog_app.command("refresh")
def refresh_catalog(
    base_url: str | None = typer.Option(None, "--base-url", help="Document service URL"),
    database: str | None = DatabaseOption,
) -> None:
    """Pull the whole catalog from the document service into the cache."""
    remote_config = get_config().remote
    if base_url:
        remote_config = remote_config.model_copy(update={"base_url": base_url})

    async def _refresh(store: CatalogStore):
        source = HttpCatalogSource(remote_config)
        try:
            return await CatalogRepository(source, store).refresh_all()
        finally:
            await source.aclose()

    with open_database(database) as db:
        store = CatalogStore(db)
        try:
            results = asyncio.run(_refresh(store))
        except StorefrontError as e:
            console.print(Panel.fit(user_message(e), title="Refresh failed", border_style="red"))
            console.print(f"[dim]{e}[/dim]")
            raise typer.Exit(1) from e
        counts = {
            "products": store.count_products(),
            "categories": store.count_categories(),
            "brands": store.count_brands(),
        }

    lines = [
        f"[cyan]{name}[/cyan]: {counts[name]} cached, "
        f"{stats.inserted} inserted, {stats.updated} updated"
        for name, stats in results.items()
    ]
    console.print(Panel.fit("\n".join(lines), title="Catalog refreshed", border_style="green"))


@catalog_app.command("status")
def cache_status(database: str | None = DatabaseOption) -> None:
    """Check the cache database and show how much is cached."""
    with open_database(database) as db:
        if not db.health_check():
            console.print("[red]❌ Cache database is not reachable[/red]")
            raise typer.Exit(1)
        store = CatalogStore(db)
        counts = {name: store.count(name) for name in ("products", "categories", "brands")}

    lines = [f"[cyan]{name}[/cyan]: {count}" for name, count in counts.items()]
    console.print(Panel.fit("\n".join(lines), title="✅ Cache database healthy", border_style="green"))


@catalog_app.command("reset")
def reset_cache(
    force: bool = typer.Option(False, "--force", help="Drop the cached tables without asking"),
    database: str | None = DatabaseOption,
) -> None:
    """Drop and recreate every cache table."""
    if not force and not typer.confirm("Drop every cached table?"):
        raise typer.Abort()
    with open_database(database) as db:
        manager = DbManageService(db.engine)
        manager.drop_all()
        manager.create_all()
    console.print("[green]Cache reset[/green]")
