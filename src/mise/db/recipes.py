"""
Recipe store.

Records are keyed by numeric id and scoped by owner; source_url is unique
per owner. Two backends share one interface:
- InMemoryRecipeStore: development and tests
- SupabaseRecipeStore: the `recipes` table (migrations/001_recipes.sql)
"""

import itertools
import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from enum import Enum
from functools import lru_cache
from typing import Any

from postgrest.exceptions import APIError

from mise.config import settings
from mise.models.entities import Recipe

logger = logging.getLogger(__name__)

TABLE = "recipes"

# Postgres unique_violation, raised by the (owner_id, source_url) index
UNIQUE_VIOLATION = "23505"

# Columns a caller may never patch
IMMUTABLE_FIELDS = frozenset({"id", "owner_id", "source_url", "created_at"})


class DuplicateSourceUrlError(Exception):
    """The owner already saved this source URL."""

    def __init__(self, source_url: str, existing_id: int | None = None):
        super().__init__(f"Recipe already exists for {source_url}")
        self.source_url = source_url
        self.existing_id = existing_id


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _clean_patch(patch: dict[str, Any]) -> dict[str, Any]:
    ignored = IMMUTABLE_FIELDS.intersection(patch)
    if ignored:
        logger.warning(f"Ignoring immutable fields in recipe patch: {sorted(ignored)}")
    return {key: value for key, value in patch.items() if key not in IMMUTABLE_FIELDS}


class RecipeStore(ABC):
    """Abstract record store for recipes."""

    @abstractmethod
    async def list_recipes(self, owner_id: str) -> list[Recipe]:
        """All of an owner's recipes, most recently updated first."""

    @abstractmethod
    async def get_recipe(self, owner_id: str, recipe_id: int) -> Recipe | None:
        """A single recipe, or None if missing or owned by someone else."""

    @abstractmethod
    async def find_by_source_url(self, owner_id: str, source_url: str) -> Recipe | None:
        """The owner's recipe for a source URL, if saved."""

    @abstractmethod
    async def create_recipe(self, owner_id: str, data: dict[str, Any]) -> Recipe:
        """
        Insert a recipe.

        Raises:
            DuplicateSourceUrlError: If the owner already saved data["source_url"]
        """

    @abstractmethod
    async def update_recipe(self, owner_id: str, recipe_id: int, patch: dict[str, Any]) -> Recipe | None:
        """Partially update a recipe. Returns None if it does not exist."""

    @abstractmethod
    async def delete_recipe(self, owner_id: str, recipe_id: int) -> bool:
        """Delete a recipe. Returns False if it did not exist."""


class InMemoryRecipeStore(RecipeStore):
    """Dict-backed store. Everything is lost on restart."""

    def __init__(self) -> None:
        self._recipes: dict[int, Recipe] = {}
        self._ids = itertools.count(1)

    async def list_recipes(self, owner_id: str) -> list[Recipe]:
        owned = [r for r in self._recipes.values() if r.owner_id == owner_id]
        return sorted(owned, key=lambda r: (r.updated_at, r.id), reverse=True)

    async def get_recipe(self, owner_id: str, recipe_id: int) -> Recipe | None:
        recipe = self._recipes.get(recipe_id)
        if recipe is None or recipe.owner_id != owner_id:
            return None
        return recipe

    async def find_by_source_url(self, owner_id: str, source_url: str) -> Recipe | None:
        for recipe in self._recipes.values():
            if recipe.owner_id == owner_id and recipe.source_url == source_url:
                return recipe
        return None

    async def create_recipe(self, owner_id: str, data: dict[str, Any]) -> Recipe:
        existing = await self.find_by_source_url(owner_id, data["source_url"])
        if existing is not None:
            raise DuplicateSourceUrlError(data["source_url"], existing.id)

        now = _utc_now()
        recipe = Recipe(
            **{**data, "id": next(self._ids), "owner_id": owner_id, "created_at": now, "updated_at": now}
        )
        self._recipes[recipe.id] = recipe
        return recipe

    async def update_recipe(self, owner_id: str, recipe_id: int, patch: dict[str, Any]) -> Recipe | None:
        recipe = await self.get_recipe(owner_id, recipe_id)
        if recipe is None:
            return None

        merged = {**recipe.model_dump(), **_clean_patch(patch), "updated_at": _utc_now()}
        updated = Recipe(**merged)
        self._recipes[recipe_id] = updated
        return updated

    async def delete_recipe(self, owner_id: str, recipe_id: int) -> bool:
        if await self.get_recipe(owner_id, recipe_id) is None:
            return False
        del self._recipes[recipe_id]
        return True


def _to_row(data: dict[str, Any]) -> dict[str, Any]:
    """Make a patch JSON-safe for PostgREST."""
    row = {}
    for key, value in data.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        row[key] = value
    return row


class SupabaseRecipeStore(RecipeStore):
    """
    Store backed by the Supabase `recipes` table.

    The supabase-py client is synchronous; calls are short PostgREST
    round trips, made inline like the rest of the data layer.
    """

    def __init__(self, client=None) -> None:
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from mise.db.client import get_client

            self._client = get_client()
        return self._client

    async def list_recipes(self, owner_id: str) -> list[Recipe]:
        response = (
            self.client.table(TABLE)
            .select("*")
            .eq("owner_id", owner_id)
            .order("updated_at", desc=True)
            .execute()
        )
        return [Recipe(**row) for row in response.data or []]

    async def get_recipe(self, owner_id: str, recipe_id: int) -> Recipe | None:
        response = (
            self.client.table(TABLE)
            .select("*")
            .eq("id", recipe_id)
            .eq("owner_id", owner_id)  # Security: ensure user owns item
            .execute()
        )
        return Recipe(**response.data[0]) if response.data else None

    async def find_by_source_url(self, owner_id: str, source_url: str) -> Recipe | None:
        response = (
            self.client.table(TABLE)
            .select("*")
            .eq("owner_id", owner_id)
            .eq("source_url", source_url)
            .limit(1)
            .execute()
        )
        return Recipe(**response.data[0]) if response.data else None

    async def create_recipe(self, owner_id: str, data: dict[str, Any]) -> Recipe:
        existing = await self.find_by_source_url(owner_id, data["source_url"])
        if existing is not None:
            raise DuplicateSourceUrlError(data["source_url"], existing.id)

        row = _to_row({**data, "owner_id": owner_id})
        try:
            response = self.client.table(TABLE).insert(row).execute()
        except APIError as e:
            if e.code != UNIQUE_VIOLATION:
                raise
            # A concurrent submission inserted the same link first
            winner = await self.find_by_source_url(owner_id, data["source_url"])
            raise DuplicateSourceUrlError(data["source_url"], winner.id if winner else None) from e
        if not response.data:
            raise RuntimeError(f"Failed to create recipe for {data['source_url']}")
        return Recipe(**response.data[0])

    async def update_recipe(self, owner_id: str, recipe_id: int, patch: dict[str, Any]) -> Recipe | None:
        row = _to_row({**_clean_patch(patch), "updated_at": _utc_now()})
        response = (
            self.client.table(TABLE)
            .update(row)
            .eq("id", recipe_id)
            .eq("owner_id", owner_id)
            .execute()
        )
        return Recipe(**response.data[0]) if response.data else None

    async def delete_recipe(self, owner_id: str, recipe_id: int) -> bool:
        response = (
            self.client.table(TABLE)
            .delete()
            .eq("id", recipe_id)
            .eq("owner_id", owner_id)
            .execute()
        )
        return bool(response.data)


@lru_cache
def get_recipe_store() -> RecipeStore:
    """Store for the configured backend (one per process)."""
    if settings.storage_backend == "supabase":
        logger.info("Using Supabase recipe store")
        return SupabaseRecipeStore()
    logger.info("Using in-memory recipe store")
    return InMemoryRecipeStore()
