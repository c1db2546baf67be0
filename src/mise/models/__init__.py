"""Pydantic models for stored entities."""

from .entities import Recipe, RecipeSummary, ScrapeStatus

__all__ = ["Recipe", "RecipeSummary", "ScrapeStatus"]
