"""Page metadata fallbacks: <title>, Open Graph and Twitter card tags."""

from bs4 import BeautifulSoup

from .normalizer import normalize_text, normalize_url

# Tried in order; the first one that yields a usable URL wins.
META_IMAGE_SELECTORS: tuple[tuple[str, dict[str, str], str], ...] = (
    ("meta", {"property": "og:image:secure_url"}, "content"),
    ("meta", {"property": "og:image"}, "content"),
    ("meta", {"name": "og:image"}, "content"),
    ("meta", {"name": "twitter:image"}, "content"),
    ("meta", {"property": "twitter:image"}, "content"),
    ("link", {"rel": "image_src"}, "href"),
)


def _attr(soup: BeautifulSoup, tag: str, attrs: dict[str, str], attr: str) -> str | None:
    element = soup.find(tag, attrs=attrs)
    if element is None:
        return None
    value = element.get(attr)
    return value if isinstance(value, str) else None


def html_title(soup: BeautifulSoup, fallback: str) -> str:
    """
    Best page title: og:title, then <title>, then the fallback.

    The result is never empty.
    """
    candidates = [
        _attr(soup, "meta", {"property": "og:title"}, "content"),
        soup.title.get_text() if soup.title else None,
    ]
    for candidate in candidates:
        if candidate:
            title = normalize_text(candidate)
            if title:
                return title
    return fallback


def meta_image_url(soup: BeautifulSoup, base: str) -> str | None:
    """Pick the share image from meta tags in fixed preference order."""
    for tag, attrs, attr in META_IMAGE_SELECTORS:
        picked = normalize_url(_attr(soup, tag, attrs, attr), base)
        if picked:
            return picked
    return None
