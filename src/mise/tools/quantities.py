"""
Mise - Quantity parsing and scaling.

Ingredient and servings lines are opaque text. Scaling rewrites the
leading quantity of a line in place instead of parsing the line into
{quantity, unit, name}, so anything after the leading quantity (units,
names, mid-line numbers) is left exactly as written.
"""

import math
import re
from collections.abc import Mapping
from typing import Any

MIN_MULTIPLIER = 0.1
MAX_MULTIPLIER = 10.0

UNICODE_FRACTIONS: dict[str, str] = {
    "¼": "1/4",
    "½": "1/2",
    "¾": "3/4",
    "⅐": "1/7",
    "⅑": "1/9",
    "⅒": "1/10",
    "⅓": "1/3",
    "⅔": "2/3",
    "⅕": "1/5",
    "⅖": "2/5",
    "⅗": "3/5",
    "⅘": "4/5",
    "⅙": "1/6",
    "⅚": "5/6",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
}

_GLYPH = "[" + "".join(UNICODE_FRACTIONS) + "]"
_FRACTION_GLYPHS = re.compile(_GLYPH)

# Alternation order matters: whole number plus glyph, mixed fraction, simple
# fraction, decimal, then a bare glyph. Matches raw text, glyphs included.
_QUANTITY = (
    rf"\d+\s*{_GLYPH}"
    r"|\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:\.\d+)?"
    rf"|{_GLYPH}"
)

_MIXED = re.compile(r"(\d+)\s+(\d+)\s*/\s*(\d+)")
_FRACTION = re.compile(r"(\d+)\s*/\s*(\d+)")
_DECIMAL = re.compile(r"(\d+(?:\.\d+)?)")

_LEADING_QUANTITY = re.compile(
    rf"^(?P<lead>\s*)(?P<first>{_QUANTITY})"
    rf"(?:\s*(?:-|–|\bto\b)\s*(?P<second>{_QUANTITY}))?"
    r"(?P<rest>.*)$",
    re.DOTALL | re.IGNORECASE,
)
_ANY_QUANTITY = re.compile(_QUANTITY)
_SERVING_WORD = re.compile(r"\bservings?\b", re.IGNORECASE)


def normalize_fractions(text: str) -> str:
    """
    Rewrite unicode vulgar fractions as ASCII fractions.

    Each glyph becomes " n/d " so that "1½" reads as the mixed
    fraction "1 1/2".
    """
    return _FRACTION_GLYPHS.sub(lambda m: f" {UNICODE_FRACTIONS[m.group(0)]} ", text)


def _match_value(text: str) -> float | None:
    """Try mixed fraction, simple fraction, then decimal at the start of text."""
    mixed = re.match(_MIXED, text)
    if mixed:
        whole, num, den = (int(g) for g in mixed.groups())
        if den != 0:
            return whole + num / den

    frac = re.match(_FRACTION, text)
    if frac:
        num, den = (int(g) for g in frac.groups())
        if den != 0:
            return num / den

    dec = re.match(_DECIMAL, text)
    if dec:
        return float(dec.group(1))

    return None


def parse_quantity(token: str) -> float | None:
    """
    Parse the numeric quantity at the start of a string.

    Examples:
        "1 1/2 cups" -> 1.5
        "3/4" -> 0.75
        "2.5" -> 2.5
        "¾" -> 0.75
        "a pinch" -> None
    """
    if not token:
        return None
    return _match_value(normalize_fractions(token).strip())


def parse_first_quantity(text: str) -> float | None:
    """
    Parse the first quantity found anywhere in a string.

    Used for yield labels such as "Serves 4" or "Makes 1½ loaves".
    The leftmost quantity wins: "Serves 4 (about 1 1/2 cups each)" is 4.
    """
    if not text:
        return None
    match = _ANY_QUANTITY.search(text)
    return parse_quantity(match.group(0)) if match else None


def format_quantity(value: float) -> str:
    """
    Render a quantity for reading, not for precision.

    Whole numbers render as integers, values near an eighth render as
    fractions, anything else as a trimmed 2-place decimal. Nonzero values
    too small for two places keep two significant digits.

    Examples:
        3.0 -> "3"
        1.5 -> "1 1/2"
        0.375 -> "3/8"
        1/3 -> "0.33"
        0.01 -> "0.01"
    """
    if not math.isfinite(value):
        return str(value)

    nearest = round(value)
    if abs(value - nearest) < 1e-9:
        return str(int(nearest))

    # Never snap a real quantity down to zero
    eighths = math.floor(value * 8 + 0.5)
    if eighths != 0 and abs(value - eighths / 8) <= 0.02:
        sign = "-" if eighths < 0 else ""
        whole, num = divmod(abs(eighths), 8)
        if num == 0:
            return f"{sign}{whole}"
        divisor = math.gcd(num, 8)
        fraction = f"{num // divisor}/{8 // divisor}"
        return f"{sign}{whole} {fraction}" if whole else f"{sign}{fraction}"

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    if text in ("0", "-0"):
        return f"{value:.2g}"
    return text


def _is_identity(multiplier: float) -> bool:
    return multiplier == 1 or not math.isfinite(multiplier)


def scale_leading_quantity(line: str, multiplier: float) -> str:
    """
    Scale the quantity (or quantity range) at the start of a line.

    Examples:
        ("2 cups flour", 2) -> "4 cups flour"
        ("1-2 eggs", 2) -> "2 - 4 eggs"
        ("a pinch of salt", 3) -> "a pinch of salt"

    Lines without a leading quantity, or whose quantities cannot all be
    parsed, come back unchanged.
    """
    if _is_identity(multiplier):
        return line

    match = _LEADING_QUANTITY.match(line)
    if not match:
        return line

    first = parse_quantity(match.group("first"))
    if first is None:
        return line

    scaled = format_quantity(first * multiplier)

    second_text = match.group("second")
    if second_text is not None:
        second = parse_quantity(second_text)
        if second is None:
            return line
        scaled = f"{scaled} - {format_quantity(second * multiplier)}"

    return f"{match.group('lead')}{scaled}{match.group('rest')}"


def _field(recipe: Any, name: str) -> Any:
    if isinstance(recipe, Mapping):
        return recipe.get(name)
    return getattr(recipe, name, None)


def _scale_first_quantities(text: str, multiplier: float, limit: int = 2) -> str:
    """Scale up to `limit` quantities in free text, leaving the rest alone."""

    def scale(match: re.Match) -> str:
        value = parse_quantity(match.group(0))
        if value is None:
            return match.group(0)
        return format_quantity(value * multiplier)

    return _ANY_QUANTITY.sub(scale, text, count=limit)


def scale_servings_label(recipe: Any, multiplier: float) -> str | None:
    """
    Build the scaled servings label for a recipe.

    Accepts anything exposing `servings` and `servings_text` (a Recipe,
    a ScrapedRecipe, or a plain dict).

    Examples:
        ({"servings": 4}, 2) -> "Serves 8"
        ({"servings_text": "4-6 servings"}, 2) -> "Serves 8-12"
        ({"servings_text": "Makes 12 cookies"}, 0.5) -> "Makes 6 cookies"
    """
    servings = _field(recipe, "servings")
    text = _field(recipe, "servings_text")

    if servings is None and not text:
        return None

    if text:
        label = text if _is_identity(multiplier) else _scale_first_quantities(text, multiplier)
        label = " ".join(label.split())

        if label[:1].isdigit() or _SERVING_WORD.search(label):
            stripped = " ".join(_SERVING_WORD.sub("", label).split())
            return f"Serves {stripped}" if stripped else label
        return label

    factor = 1 if _is_identity(multiplier) else multiplier
    return f"Serves {format_quantity(float(servings) * factor)}"


def clamp_multiplier(value: float | None) -> float:
    """Clamp a user-chosen multiplier to [0.1, 10]; junk becomes 1."""
    if value is None or not math.isfinite(value):
        return 1.0
    return min(max(float(value), MIN_MULTIPLIER), MAX_MULTIPLIER)
