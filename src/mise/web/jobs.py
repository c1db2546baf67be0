"""
Scrape job lifecycle.

Creating a recipe returns immediately with the record in PENDING; the
extraction runs as a supervised background task and moves the record to
OK or ERROR. Re-scrape awaits the same routine inline. All scrape status
mutations go through run_scrape().
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from mise.db.recipes import RecipeStore
from mise.models.entities import Recipe, ScrapeStatus
from mise.recipe_import import FetchError, extract_recipe

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _ok_patch(scraped_fields: dict[str, Any], title_override: str | None) -> dict[str, Any]:
    patch = {
        **scraped_fields,
        "scrape_status": ScrapeStatus.OK,
        "scrape_error": None,
        "last_scraped_at": _utc_now(),
    }
    if title_override:
        patch["title"] = title_override
    return patch


def _error_patch(message: str) -> dict[str, Any]:
    # Status fields only: content from the last good scrape stays.
    return {
        "scrape_status": ScrapeStatus.ERROR,
        "scrape_error": message,
        "last_scraped_at": _utc_now(),
    }


async def run_scrape(
    store: RecipeStore,
    owner_id: str,
    recipe_id: int,
    source_url: str,
    title_override: str | None = None,
) -> Recipe | None:
    """
    Scrape a recipe's source URL and record the outcome.

    Never raises for scrape failures: a FetchError (or any unexpected
    error) is written to the record as scrape_error.

    Returns the updated record, or None if it was deleted meanwhile.
    """
    try:
        scraped = await extract_recipe(source_url)
    except FetchError as e:
        logger.info(f"Scrape failed for recipe {recipe_id}: {e}")
        return await store.update_recipe(owner_id, recipe_id, _error_patch(str(e)))
    except Exception as e:
        logger.exception(f"Unexpected scrape failure for recipe {recipe_id}")
        return await store.update_recipe(owner_id, recipe_id, _error_patch(str(e) or "Unknown scrape error"))

    return await store.update_recipe(owner_id, recipe_id, _ok_patch(scraped.scraped_fields(), title_override))


async def rescrape(store: RecipeStore, recipe: Recipe) -> Recipe | None:
    """Reset a recipe to PENDING, then scrape it again and wait for the result."""
    owner_id = recipe.owner_id or ""
    await store.update_recipe(
        owner_id,
        recipe.id,
        {"scrape_status": ScrapeStatus.PENDING, "scrape_error": None},
    )
    return await run_scrape(store, owner_id, recipe.id, recipe.source_url)


class ScrapeJobRunner:
    """
    Supervises background scrape tasks.

    At most one task per recipe id is in flight; a second submit for the
    same record returns the running task, and run_now() waits for it.
    Task handles are kept until the task finishes so they are never
    garbage-collected mid-flight.
    """

    def __init__(self) -> None:
        self._tasks: dict[int, asyncio.Task] = {}

    @property
    def active(self) -> int:
        return len(self._tasks)

    def submit(
        self,
        store: RecipeStore,
        owner_id: str,
        recipe_id: int,
        source_url: str,
        title_override: str | None = None,
    ) -> asyncio.Task:
        """Start a background scrape for a recipe (must be called inside the event loop)."""
        running = self._tasks.get(recipe_id)
        if running is not None and not running.done():
            logger.info(f"Scrape already running for recipe {recipe_id}")
            return running

        task = asyncio.create_task(
            run_scrape(store, owner_id, recipe_id, source_url, title_override),
            name=f"scrape-recipe-{recipe_id}",
        )
        self._tasks[recipe_id] = task
        task.add_done_callback(lambda t: self._on_done(recipe_id, t))
        return task

    async def run_now(self, store: RecipeStore, recipe: Recipe) -> Recipe | None:
        """
        Re-scrape a recipe inline and return the updated record.

        Waits for any scrape already in flight for the record first, so its
        result can never land after this one.
        """
        while True:
            running = self._tasks.get(recipe.id)
            if running is None or running.done():
                break
            logger.info(f"Waiting for in-flight scrape of recipe {recipe.id} before re-scraping")
            await asyncio.wait({running})

        task = asyncio.create_task(rescrape(store, recipe), name=f"rescrape-recipe-{recipe.id}")
        self._tasks[recipe.id] = task
        task.add_done_callback(lambda t: self._on_done(recipe.id, t))
        # A dropped request must not abandon the status update
        return await asyncio.shield(task)

    def _on_done(self, recipe_id: int, task: asyncio.Task) -> None:
        if self._tasks.get(recipe_id) is task:
            del self._tasks[recipe_id]

        if task.cancelled():
            logger.warning(f"Scrape task for recipe {recipe_id} was cancelled")
            return

        exc = task.exception()
        if exc is not None:
            # run_scrape records scrape failures itself; this is the store failing.
            logger.error(f"Scrape task for recipe {recipe_id} failed to record its outcome: {exc!r}")

    async def drain(self) -> None:
        """Wait for every in-flight scrape (used at shutdown and in tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)


_runner: ScrapeJobRunner | None = None


def get_scrape_runner() -> ScrapeJobRunner:
    """Process-wide job runner."""
    global _runner
    if _runner is None:
        _runner = ScrapeJobRunner()
    return _runner
