"""Page fetching for recipe import."""

import logging
from dataclasses import dataclass

import httpx

from mise.config import settings

from .errors import FetchError

logger = logging.getLogger(__name__)


def browser_headers(user_agent: str | None = None) -> dict[str, str]:
    """Request headers that look like a desktop browser.

    Many recipe sites block default HTTP client user agents.
    """
    return {
        "User-Agent": user_agent or settings.scrape_user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


@dataclass
class FetchedPage:
    """Raw page returned by the network collaborator."""

    html: str
    url: str  # final URL after redirects
    status_code: int


async def fetch_page(url: str, client: httpx.AsyncClient | None = None) -> FetchedPage:
    """
    GET a page, following redirects.

    Args:
        url: Page to fetch
        client: Optional client to reuse (tests inject a mock transport)

    Raises:
        FetchError: On any non-2xx response or transport failure
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=settings.scrape_timeout_seconds,
        )

    try:
        response = await client.get(url, headers=browser_headers(), follow_redirects=True)
    except httpx.TimeoutException as e:
        logger.info(f"Fetch timed out for {url}")
        raise FetchError("Fetch failed (timed out)") from e
    except httpx.HTTPError as e:
        logger.info(f"Fetch failed for {url}: {e}")
        raise FetchError(f"Fetch failed ({e.__class__.__name__})") from e
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        raise FetchError(f"Fetch failed ({response.status_code})", status_code=response.status_code)

    logger.debug(f"Fetched {len(response.content)} bytes from {response.url}")
    return FetchedPage(html=response.text, url=str(response.url), status_code=response.status_code)
