"""Recipe import module for extracting recipes from external URLs."""

from .errors import FetchError, ParseError, RecipeImportError, ValidationError
from .extractor import extract_recipe, parse_recipe_html, validate_source_url
from .models import ScrapedRecipe

__all__ = [
    "FetchError",
    "ParseError",
    "RecipeImportError",
    "ValidationError",
    "extract_recipe",
    "parse_recipe_html",
    "validate_source_url",
    "ScrapedRecipe",
]
