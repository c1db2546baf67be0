"""
Mise - Database Entity Models.

These models map to the recipes table defined in migrations/001_recipes.sql.
They are used for:
- Type-safe store operations
- API request/response validation
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ScrapeStatus(str, Enum):
    """Lifecycle of the extraction attempt for a saved recipe."""

    PENDING = "pending"
    OK = "ok"
    ERROR = "error"


class Recipe(BaseModel):
    """
    A saved recipe link and whatever was extracted from it.

    Created as PENDING when the link is submitted; moves to OK or ERROR
    when the scrape finishes. A failed scrape only touches the status
    fields, so previously scraped content survives.
    """

    id: int
    owner_id: str | None = None
    title: str
    source_url: str
    source_host: str | None = None
    image_url: str | None = None
    description: str | None = None
    servings: float | None = None
    servings_text: str | None = None
    ingredients: list[str] | str | None = None  # legacy rows hold one text blob
    instructions: list[str] | str | None = None
    scrape_status: ScrapeStatus = ScrapeStatus.PENDING
    scrape_error: str | None = None
    last_scraped_at: datetime | None = None
    notes: str | None = None
    tags: list[str] | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class RecipeSummary(BaseModel):
    """Row shape for the recipe list."""

    id: int
    title: str
    source_url: str
    source_host: str | None = None
    image_url: str | None = None
    scrape_status: ScrapeStatus
    last_scraped_at: datetime | None = None
    updated_at: datetime

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeSummary":
        return cls(**recipe.model_dump(include=set(cls.model_fields)))
