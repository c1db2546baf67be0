"""
Mise Web API - FastAPI application.

The React client talks to /api/recipes; /health is for the platform's
health checks.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mise import __version__
from mise.config import settings
from mise.web.jobs import get_scrape_runner
from mise.web.recipe_routes import router as recipe_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Mise", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    logger.info("Mise starting up...")
    logger.info(f"  Environment: {settings.mise_env}")
    logger.info(f"  Storage backend: {settings.storage_backend}")
    logger.info(f"  Auth enabled: {settings.auth_enabled}")
    logger.info(f"  Scrape timeout: {settings.scrape_timeout_seconds}")


@app.on_event("shutdown")
async def shutdown_event():
    """Let in-flight scrapes record their outcome before exiting."""
    runner = get_scrape_runner()
    if runner.active:
        logger.info(f"Waiting for {runner.active} in-flight scrape(s)")
    await runner.drain()


# CORS middleware for the web client dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipe_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
