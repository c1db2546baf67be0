"""
Recipe display formatting.

The rendering layer calls in here with a stored Recipe plus the reader's
local state (checked ingredient indexes and a scale multiplier). Nothing
here is persisted; every function is a pure function of its inputs.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel

from mise.models.entities import Recipe, ScrapeStatus
from mise.tools.normalize import normalize_lines, strip_leading_step_number
from mise.tools.quantities import clamp_multiplier, scale_leading_quantity, scale_servings_label

STATUS_TEXT: dict[ScrapeStatus, str] = {
    ScrapeStatus.PENDING: "Scraping",
    ScrapeStatus.OK: "Ready",
    ScrapeStatus.ERROR: "Scrape error",
}


class IngredientLine(BaseModel):
    index: int
    text: str
    checked: bool = False


class RecipeView(BaseModel):
    """Everything the recipe detail screen shows."""

    id: int
    title: str
    source_url: str
    source_host: str | None = None
    image_url: str | None = None
    description: str | None = None
    multiplier: float
    servings_label: str | None = None
    ingredients: list[IngredientLine]
    instructions: list[str]
    scrape_status: ScrapeStatus
    status_text: str
    scrape_error: str | None = None
    notes: str | None = None
    tags: list[str]


def format_ingredients(value, multiplier: float, checked: Iterable[int] = ()) -> list[IngredientLine]:
    """Normalize stored ingredients and scale each line's leading quantity."""
    checked_set = set(checked)
    return [
        IngredientLine(
            index=index,
            text=scale_leading_quantity(line, multiplier),
            checked=index in checked_set,
        )
        for index, line in enumerate(normalize_lines(value))
    ]


def format_instructions(value) -> list[str]:
    """Normalize stored steps and drop their embedded numbering."""
    return [strip_leading_step_number(line) for line in normalize_lines(value)]


def build_recipe_view(
    recipe: Recipe,
    multiplier: float | None = 1.0,
    checked: Iterable[int] = (),
) -> RecipeView:
    """
    Build the display model for one recipe.

    The multiplier is clamped to [0.1, 10]. Scrape errors are passed
    through verbatim so the reader can decide to retry or keep the link.
    """
    factor = clamp_multiplier(multiplier)

    return RecipeView(
        id=recipe.id,
        title=recipe.title,
        source_url=recipe.source_url,
        source_host=recipe.source_host,
        image_url=recipe.image_url,
        description=recipe.description,
        multiplier=factor,
        servings_label=scale_servings_label(recipe, factor),
        ingredients=format_ingredients(recipe.ingredients, factor, checked),
        instructions=format_instructions(recipe.instructions),
        scrape_status=recipe.scrape_status,
        status_text=STATUS_TEXT[recipe.scrape_status],
        scrape_error=recipe.scrape_error,
        notes=recipe.notes,
        tags=normalize_lines(recipe.tags),
    )
