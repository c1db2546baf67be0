"""
Normalization utilities for scraped recipe data.

Linked-data values are untyped JSON: every field can be a string, a
number, a list, or an object depending on the site. Each function here
walks one field shape and returns clean Python values, never raising on
unexpected input.
"""

import html
import math
import re
from typing import Any
from urllib.parse import urljoin, urlparse

# Step boundaries inside a single instructions blob: line breaks, bullet
# glyphs, or "2." / "3)" markers at the start or right after a sentence end.
_LINE_BREAKS = re.compile(r"\r?\n|\r|[•▪◦]")
_NUMBERED_MARKER = re.compile(r"(?:^|(?<=[.!?]))\s*\d{1,2}[.)]\s+")

IMAGE_OBJECT_KEYS = ("url", "contentUrl", "thumbnailUrl")


def normalize_text(value: str) -> str:
    """
    Decode HTML entities and collapse whitespace (including NBSP).

    Examples:
        "Mac &amp; Cheese" -> "Mac & Cheese"
        "  two\\n  lines " -> "two lines"
    """
    return " ".join(html.unescape(value).split())


def normalize_url(raw: Any, base: str) -> str | None:
    """
    Resolve a raw URL value against the page URL.

    Handles:
        - Protocol-relative "//cdn/x.jpg" -> "https://cdn/x.jpg"
        - Relative "/img/x.jpg" -> resolved against base
        - Anything that is not an http(s) URL -> None
    """
    if not isinstance(raw, str):
        return None

    trimmed = raw.strip()
    if not trimmed:
        return None

    if trimmed.startswith("//"):
        resolved = f"https:{trimmed}"
    else:
        try:
            resolved = urljoin(base, trimmed)
        except ValueError:
            return None

    try:
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None

    return resolved


def pick_image_url(image: Any, base: str) -> str | None:
    """
    Extract an image URL from the linked-data image field.

    Handles:
        - Plain URL string
        - List of images (first usable one wins)
        - ImageObject dict with url, contentUrl or thumbnailUrl
    """
    if isinstance(image, str):
        return normalize_url(image, base)

    if isinstance(image, list):
        for item in image:
            picked = pick_image_url(item, base)
            if picked:
                return picked
        return None

    if isinstance(image, dict):
        for key in IMAGE_OBJECT_KEYS:
            picked = normalize_url(image.get(key), base)
            if picked:
                return picked

    return None


def first_string(value: Any) -> str | None:
    """
    Return the first non-empty string (or finite number, as text).

    Yield fields show up as "4", 4, ["4", "4 servings"] or nested lists.
    """
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, str):
        return value if value.strip() else None

    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value == 0:
            return None
        return str(int(value)) if float(value).is_integer() else str(value)

    if isinstance(value, list):
        for item in value:
            found = first_string(item)
            if found:
                return found

    return None


def to_string_list(value: Any) -> list[str] | None:
    """
    Normalize a string-or-list-of-strings field.

    Non-string items are dropped; an empty result is None, not [].
    """
    if isinstance(value, str):
        single = normalize_text(value)
        return [single] if single else None

    if isinstance(value, list):
        out = [normalize_text(item) for item in value if isinstance(item, str)]
        out = [item for item in out if item]
        return out or None

    return None


def split_instruction_blob(text: str) -> list[str]:
    """
    Split one instructions string into steps.

    Some sites put every step in a single blob separated by newlines,
    bullets or "1." style numbering.
    """
    steps: list[str] = []
    for chunk in _LINE_BREAKS.split(html.unescape(text)):
        for piece in _NUMBERED_MARKER.split(chunk):
            step = normalize_text(piece)
            if step:
                steps.append(step)
    return steps


def _collect_instructions(value: Any, out: list[str]) -> None:
    if isinstance(value, str):
        out.extend(split_instruction_blob(value))
        return

    if isinstance(value, list):
        for item in value:
            if isinstance(item, str):
                step = normalize_text(item)
                if step:
                    out.append(step)
            elif isinstance(item, dict):
                _collect_instructions(item, out)
        return

    if isinstance(value, dict):
        # HowToStep
        text = value.get("text")
        if isinstance(text, str):
            step = normalize_text(text)
            if step:
                out.append(step)
            return
        # HowToSection nests its steps
        _collect_instructions(value.get("itemListElement"), out)


def parse_instructions(value: Any) -> list[str] | None:
    """
    Extract instruction steps from the various linked-data shapes.

    Handles:
        - Plain string (split into steps)
        - List of strings
        - List of HowToStep dicts with 'text'
        - HowToSection dicts nesting 'itemListElement', to any depth
    """
    out: list[str] = []
    _collect_instructions(value, out)
    return out or None
