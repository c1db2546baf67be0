"""Tests for the mise CLI."""

from typer.testing import CliRunner

from mise import __version__
from mise.main import app
from mise.recipe_import import FetchError, ScrapedRecipe

runner = CliRunner()


def fake_extract(result):
    async def extract(url, client=None):
        if isinstance(result, Exception):
            raise result
        return result

    return extract


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_scale():
    result = runner.invoke(app, ["scale", "1 1/2 cups [flour]", "--by", "2"])
    assert result.exit_code == 0
    assert result.output.strip() == "3 cups [flour]"


def test_scale_clamps():
    result = runner.invoke(app, ["scale", "1 cup rice", "--by", "100"])
    assert result.output.strip() == "10 cup rice"


def test_scrape_summary(monkeypatch):
    scraped = ScrapedRecipe(
        title="Soup",
        source_host="food.test",
        servings=4,
        servings_text="4 servings",
        ingredients=["2 cups stock"],
        instructions=["1. Simmer."],
    )
    monkeypatch.setattr("mise.recipe_import.extract_recipe", fake_extract(scraped))

    result = runner.invoke(app, ["scrape", "https://food.test/soup", "--scale", "2"])

    assert result.exit_code == 0
    assert "Serves 8" in result.output
    assert "4 cups stock" in result.output
    assert "1. Simmer." in result.output


def test_scrape_json(monkeypatch):
    scraped = ScrapedRecipe(title="Soup", source_host="food.test")
    monkeypatch.setattr("mise.recipe_import.extract_recipe", fake_extract(scraped))

    result = runner.invoke(app, ["scrape", "https://food.test/soup", "--json"])

    assert result.exit_code == 0
    assert '"source_host": "food.test"' in result.output


def test_scrape_failure(monkeypatch):
    monkeypatch.setattr("mise.recipe_import.extract_recipe", fake_extract(FetchError("Fetch failed (404)")))

    result = runner.invoke(app, ["scrape", "https://food.test/soup"])

    assert result.exit_code == 1
    assert "Fetch failed (404)" in result.output


def test_health_memory_backend():
    result = runner.invoke(app, ["health"])
    assert result.exit_code == 0
    assert "Supabase not in use" in result.output
