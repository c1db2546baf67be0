"""API endpoints for saved recipes."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field, StringConstraints

from mise.db.recipes import DuplicateSourceUrlError, RecipeStore, get_recipe_store
from mise.domain.formatters import RecipeView, build_recipe_view
from mise.models.entities import Recipe, RecipeSummary, ScrapeStatus
from mise.recipe_import import FetchError, ScrapedRecipe, ValidationError, extract_recipe, validate_source_url
from mise.recipe_import.extractor import source_host
from mise.web.auth import AuthenticatedUser, get_current_user
from mise.web.jobs import get_scrape_runner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["recipes"])

Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32)]


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateRequest(BaseModel):
    """Save a recipe link."""

    source_url: str
    title: str | None = Field(default=None, min_length=1, max_length=180)


class CreateResponse(BaseModel):
    id: int
    already_exists: bool = False


class UpdateRequest(BaseModel):
    """User edits. Omitted fields are left alone; null clears notes/tags."""

    title: str | None = Field(default=None, min_length=1, max_length=180)
    notes: str | None = Field(default=None, max_length=5000)
    tags: list[Tag] | None = Field(default=None, max_length=25)


class RecipeResponse(BaseModel):
    recipe: Recipe


class RecipeListResponse(BaseModel):
    recipes: list[RecipeSummary]


class PreviewRequest(BaseModel):
    url: str


class PreviewResponse(BaseModel):
    """Extraction result without saving anything."""

    title: str
    source_host: str
    description: str | None = None
    image_url: str | None = None
    servings: float | None = None
    servings_text: str | None = None
    ingredients: list[str] | None = None
    instructions: list[str] | None = None

    @classmethod
    def from_scraped(cls, scraped: ScrapedRecipe) -> "PreviewResponse":
        return cls(**scraped.to_dict())


# =============================================================================
# Helpers
# =============================================================================


async def _get_or_404(store: RecipeStore, user: AuthenticatedUser, recipe_id: int) -> Recipe:
    recipe = await store.get_recipe(user.id, recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=RecipeListResponse)
async def list_recipes(
    user: AuthenticatedUser = Depends(get_current_user),
    store: RecipeStore = Depends(get_recipe_store),
) -> RecipeListResponse:
    """List saved recipes, most recently updated first."""
    recipes = await store.list_recipes(user.id)
    return RecipeListResponse(recipes=[RecipeSummary.from_recipe(r) for r in recipes])


@router.post("", response_model=CreateResponse, status_code=201)
async def create_recipe(
    req: CreateRequest,
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RecipeStore = Depends(get_recipe_store),
) -> CreateResponse:
    """
    Save a recipe link and start scraping it in the background.

    Returns at once with the record PENDING; poll the recipe for the
    outcome. Submitting a link the user already saved returns its id.
    """
    try:
        source_url = validate_source_url(req.source_url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    title = req.title.strip() if req.title else None

    existing = await store.find_by_source_url(user.id, source_url)
    if existing is not None:
        response.status_code = 200
        return CreateResponse(id=existing.id, already_exists=True)

    host = source_host(source_url)
    try:
        recipe = await store.create_recipe(
            user.id,
            {
                "title": title or host,
                "source_url": source_url,
                "source_host": host,
                "scrape_status": ScrapeStatus.PENDING,
            },
        )
    except DuplicateSourceUrlError as e:
        # Lost a race with a concurrent submission of the same link
        if e.existing_id is None:
            raise HTTPException(status_code=409, detail=str(e))
        response.status_code = 200
        return CreateResponse(id=e.existing_id, already_exists=True)

    logger.info(f"Created recipe {recipe.id} for {source_url}, scraping in background")
    get_scrape_runner().submit(store, user.id, recipe.id, source_url, title_override=title)

    return CreateResponse(id=recipe.id)


@router.post("/import/preview", response_model=PreviewResponse)
async def preview_import(
    req: PreviewRequest,
    user: AuthenticatedUser = Depends(get_current_user),
) -> PreviewResponse:
    """Extract a recipe from a URL without saving it."""
    logger.info(f"Preview request from user {user.id} for URL: {req.url}")
    try:
        scraped = await extract_recipe(req.url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FetchError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return PreviewResponse.from_scraped(scraped)


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RecipeStore = Depends(get_recipe_store),
) -> RecipeResponse:
    """Get a single recipe (poll this while it is PENDING)."""
    return RecipeResponse(recipe=await _get_or_404(store, user, recipe_id))


@router.get("/{recipe_id}/view", response_model=RecipeView)
async def view_recipe(
    recipe_id: int,
    multiplier: float = Query(1.0),
    checked: list[int] = Query(default=[]),
    user: AuthenticatedUser = Depends(get_current_user),
    store: RecipeStore = Depends(get_recipe_store),
) -> RecipeView:
    """
    Display model for a recipe, scaled by `multiplier`.

    The multiplier (clamped to 0.1-10) and checked ingredient indexes
    are the reader's local state and are never stored.
    """
    recipe = await _get_or_404(store, user, recipe_id)
    return build_recipe_view(recipe, multiplier=multiplier, checked=checked)


@router.put("/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: int,
    req: UpdateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RecipeStore = Depends(get_recipe_store),
) -> RecipeResponse:
    """Edit title, notes or tags."""
    await _get_or_404(store, user, recipe_id)

    patch: dict[str, Any] = {}
    fields = req.model_fields_set
    if req.title and req.title.strip():
        patch["title"] = req.title.strip()
    if "notes" in fields:
        patch["notes"] = req.notes.strip() if req.notes is not None else None
    if "tags" in fields:
        patch["tags"] = req.tags

    recipe = await store.update_recipe(user.id, recipe_id, patch)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return RecipeResponse(recipe=recipe)


@router.delete("/{recipe_id}")
async def delete_recipe(
    recipe_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RecipeStore = Depends(get_recipe_store),
) -> dict[str, bool]:
    """Delete a recipe. There is no undo."""
    if not await store.delete_recipe(user.id, recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"ok": True}


@router.post("/{recipe_id}/rescrape", response_model=RecipeResponse)
async def rescrape_recipe(
    recipe_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    store: RecipeStore = Depends(get_recipe_store),
) -> RecipeResponse:
    """
    Scrape a recipe again and wait for the result.

    Responds 200 either way; a failed scrape shows up as
    scrape_status=error with the message in scrape_error.
    """
    recipe = await _get_or_404(store, user, recipe_id)

    updated = await get_scrape_runner().run_now(store, recipe)
    if updated is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return RecipeResponse(recipe=updated)
