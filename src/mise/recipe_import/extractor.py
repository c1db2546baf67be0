"""Main recipe extraction orchestration."""

import logging
import re
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from .errors import ValidationError
from .fetcher import fetch_page
from .json_ld import extract_json_ld_nodes, find_recipe_node
from .models import ScrapedRecipe
from .normalizer import (
    first_string,
    normalize_text,
    parse_instructions,
    pick_image_url,
    to_string_list,
)
from .page_meta import html_title, meta_image_url
from mise.tools.quantities import parse_first_quantity

logger = logging.getLogger(__name__)

# Checked in order; the first non-empty value is the yield label.
YIELD_FIELDS = ("recipeYield", "yield", "recipeServings", "servings")


def validate_source_url(url: str | None) -> str:
    """
    Validate a submitted source URL.

    Returns the trimmed URL.

    Raises:
        ValidationError: If the URL is missing or not http(s)
    """
    if not url or not url.strip():
        raise ValidationError("URL is required")

    url = url.strip()

    if not re.match(r"^https?://", url, re.IGNORECASE):
        raise ValidationError("URL must start with http:// or https://")

    try:
        parsed = urlparse(url)
    except ValueError:
        raise ValidationError("Invalid URL format")

    if not parsed.hostname:
        raise ValidationError("Invalid URL format")

    return url


def source_host(url: str) -> str:
    """Hostname of a source URL ("" if it has none)."""
    return urlparse(url).hostname or ""


def parse_recipe_html(html: str, source_url: str, page_url: str | None = None) -> ScrapedRecipe:
    """
    Turn a fetched page into a ScrapedRecipe.

    Never raises for missing or malformed data: pages without a Recipe
    node still produce a title, the hostname and possibly an image.

    Args:
        html: Page markup
        source_url: URL the user submitted (gives source_host)
        page_url: Final URL after redirects, used to resolve relative links
    """
    base = page_url or source_url
    host = source_host(source_url)
    soup = BeautifulSoup(html, "html.parser")

    title_from_html = html_title(soup, fallback=host or "Untitled recipe")
    recipe = find_recipe_node(extract_json_ld_nodes(soup))

    if recipe is None:
        logger.info(f"No Recipe JSON-LD found for {source_url}, using page metadata")
        return ScrapedRecipe(
            title=title_from_html,
            source_host=host,
            image_url=meta_image_url(soup, base),
        )

    name = recipe.get("name")
    title = normalize_text(name) if isinstance(name, str) else ""

    description = recipe.get("description")
    description = normalize_text(description) if isinstance(description, str) else None

    servings_raw = None
    for field in YIELD_FIELDS:
        servings_raw = first_string(recipe.get(field))
        if servings_raw:
            break
    servings_text = normalize_text(servings_raw) if servings_raw else None

    return ScrapedRecipe(
        title=title or title_from_html,
        source_host=host,
        description=description or None,
        image_url=pick_image_url(recipe.get("image"), base) or meta_image_url(soup, base),
        servings=parse_first_quantity(servings_text) if servings_text else None,
        servings_text=servings_text or None,
        ingredients=to_string_list(recipe.get("recipeIngredient")),
        instructions=parse_instructions(recipe.get("recipeInstructions")),
    )


async def extract_recipe(source_url: str, client: httpx.AsyncClient | None = None) -> ScrapedRecipe:
    """
    Fetch a recipe page and extract structured recipe data.

    Extraction pipeline:
    1. Validate URL format
    2. Fetch the page (browser headers, redirects followed)
    3. Find the Recipe node in the page's JSON-LD blocks
    4. Fall back to page metadata when there is none

    Args:
        source_url: The URL of the recipe page
        client: Optional httpx client to reuse

    Returns:
        ScrapedRecipe (possibly title/host only)

    Raises:
        ValidationError: Malformed URL
        FetchError: Non-2xx response or network failure
    """
    url = validate_source_url(source_url)

    logger.info(f"Scraping {url}")
    page = await fetch_page(url, client=client)

    scraped = parse_recipe_html(page.html, url, page_url=page.url)
    logger.info(
        f"Scraped {url}: {len(scraped.ingredients or [])} ingredients, "
        f"{len(scraped.instructions or [])} steps"
    )
    return scraped
