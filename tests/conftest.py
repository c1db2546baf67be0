"""
Pytest configuration and fixtures for Mise tests.
"""

import json
import os
from unittest.mock import MagicMock

import pytest

# Set test environment before importing mise modules
os.environ["MISE_ENV"] = "development"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["AUTH_ENABLED"] = "false"
os.environ["DEV_USER_ID"] = "test-user"

from mise.db.recipes import InMemoryRecipeStore  # noqa: E402


def make_page(*json_ld_blocks, head: str = "", body: str = "") -> str:
    """Build an HTML page with the given JSON-LD blocks (dicts or raw strings)."""
    scripts = []
    for block in json_ld_blocks:
        raw = block if isinstance(block, str) else json.dumps(block)
        scripts.append(f'<script type="application/ld+json">{raw}</script>')
    return (
        "<!doctype html><html><head>"
        f"{head}{''.join(scripts)}"
        f"</head><body>{body}</body></html>"
    )


@pytest.fixture
def recipe_node():
    """A typical schema.org Recipe node."""
    return {
        "@context": "https://schema.org",
        "@type": "Recipe",
        "name": "Mac &amp; Cheese",
        "description": "  Creamy,\n baked   mac and cheese. ",
        "image": ["//cdn.example.com/mac.jpg", "https://cdn.example.com/mac-2.jpg"],
        "recipeYield": ["6", "6 servings"],
        "recipeIngredient": [
            "1 lb elbow macaroni",
            "  2 ½ cups   milk ",
            "",
            "salt, to taste",
        ],
        "recipeInstructions": [
            {"@type": "HowToStep", "text": "Boil the macaroni."},
            {
                "@type": "HowToSection",
                "name": "Sauce",
                "itemListElement": [
                    {"@type": "HowToStep", "text": "Melt the butter."},
                    {"@type": "HowToStep", "text": "Whisk in the milk."},
                ],
            },
            "Bake until bubbly.",
        ],
    }


@pytest.fixture
def recipe_page(recipe_node):
    """Page with a Recipe node inside a @graph wrapper, after a broken block."""
    return make_page(
        "{ this is not json",
        {"@context": "https://schema.org", "@graph": [{"@type": "WebSite", "name": "Example"}, recipe_node]},
        head="<title>Mac and Cheese | Example Kitchen</title>",
    )


@pytest.fixture
def plain_page():
    """Page without any linked data."""
    return make_page(
        head=(
            '<title>  Grandma&#39;s Pie </title>'
            '<meta name="twitter:image" content="/images/pie.jpg">'
        ),
        body="<p>Just a story about pie.</p>",
    )


@pytest.fixture
def store():
    """Fresh in-memory recipe store."""
    return InMemoryRecipeStore()


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.delete.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.order.return_value = mock_table
    mock_table.limit.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def page_builder():
    """The make_page helper, for tests that need a custom page."""
    return make_page
