"""Developer CLI for the local catalog cache."""

import typer

from src.storefront.runtime.logging import configure_logging

from .catalog_commands import catalog_app

app = typer.Typer(
    help="🛒 Storefront CLI - inspect and fill the local catalog cache",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(catalog_app, name="catalog")


def main() -> None:
    """Main entry point for the CLI."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
