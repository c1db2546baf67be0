"""Web layer: FastAPI app, routes, background scrape jobs."""
