"""Storage collaborator: recipe records keyed by id, scoped by owner."""

from .recipes import (
    DuplicateSourceUrlError,
    InMemoryRecipeStore,
    RecipeStore,
    SupabaseRecipeStore,
    get_recipe_store,
)

__all__ = [
    "DuplicateSourceUrlError",
    "InMemoryRecipeStore",
    "RecipeStore",
    "SupabaseRecipeStore",
    "get_recipe_store",
]
