"""Tests for the catalog CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from src.storefront.cli import app
from tests.utils import brand_doc, category_doc, product_doc

runner = CliRunner()


@pytest.fixture
def database_url(tmp_path, test_config) -> str:
    return f"sqlite:///{tmp_path / 'cache.db'}"


@pytest.fixture
def dump_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "categories": [category_doc("c1"), category_doc("c2", isActive=False)],
                "brands": {"b1": {"name": "Acme"}},
                "products": [
                    product_doc("p1", name="Chair", price=120),
                    product_doc("p2", name="Lamp", price=40, categoryId="c2"),
                    product_doc("p3", name="Stool", price=60, isActive=False),
                ],
            }
        )
    )
    return path


def invoke(*args: str):
    return runner.invoke(app, list(args))


class TestCatalogCommands:
    def test_import_and_list(self, dump_file, database_url):
        result = invoke("catalog", "import", str(dump_file), "--database", database_url)
        assert result.exit_code == 0, result.output
        assert "products" in result.output

        result = invoke("catalog", "products", "-d", database_url)
        assert result.exit_code == 0, result.output
        assert "p1" in result.output
        assert "p2" not in result.output
        assert "p3" not in result.output

        result = invoke("catalog", "products", "-d", database_url, "--all", "--min-price", "50")
        assert "p1" in result.output
        assert "p3" in result.output
        assert "p2" not in result.output

    def test_list_categories_and_brands(self, dump_file, database_url):
        invoke("catalog", "import", str(dump_file), "-d", database_url)

        categories = invoke("catalog", "categories", "-d", database_url)
        brands = invoke("catalog", "brands", "-d", database_url)

        assert "c1" in categories.output and "c2" in categories.output
        assert "Acme" in brands.output

    def test_import_rejects_invalid_json(self, tmp_path, database_url):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        result = invoke("catalog", "import", str(path), "-d", database_url)

        assert result.exit_code == 1

    def test_status_and_reset(self, dump_file, database_url):
        invoke("catalog", "import", str(dump_file), "-d", database_url)

        status = invoke("catalog", "status", "-d", database_url)
        assert status.exit_code == 0, status.output
        assert "products: 3" in status.output

        reset = invoke("catalog", "reset", "--force", "-d", database_url)
        assert reset.exit_code == 0, reset.output

        status = invoke("catalog", "status", "-d", database_url)
        assert "products: 0" in status.output

    def test_reset_asks_first(self, database_url):
        result = runner.invoke(app, ["catalog", "reset", "-d", database_url], input="n\n")
        assert result.exit_code != 0

    def test_refresh_reports_unreachable_service(self, database_url):
        result = invoke("catalog", "refresh", "--base-url", "http://127.0.0.1:9", "-d", database_url)

        assert result.exit_code == 1
        assert "Refresh failed" in result.output
