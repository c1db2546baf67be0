"""Data models for recipe import."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ScrapedRecipe:
    """
    Result of one scrape attempt.

    Optional fields are None when the page did not provide them;
    ingredients and instructions are never empty lists.
    """

    title: str
    source_host: str
    description: str | None = None
    image_url: str | None = None
    servings: float | None = None
    servings_text: str | None = None
    ingredients: list[str] | None = None
    instructions: list[str] | None = None

    @property
    def has_recipe_data(self) -> bool:
        """True when structured recipe content was found."""
        return bool(self.ingredients or self.instructions)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def scraped_fields(self) -> dict[str, Any]:
        """Fields that were actually found, for patching a stored record."""
        return {key: value for key, value in asdict(self).items() if value is not None}
