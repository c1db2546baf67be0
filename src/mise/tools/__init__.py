"""Text tools for recipe lines: list normalization and quantity scaling."""

from .normalize import normalize_lines, strip_leading_step_number
from .quantities import (
    clamp_multiplier,
    format_quantity,
    normalize_fractions,
    parse_first_quantity,
    parse_quantity,
    scale_leading_quantity,
    scale_servings_label,
)

__all__ = [
    "normalize_lines",
    "strip_leading_step_number",
    "clamp_multiplier",
    "format_quantity",
    "normalize_fractions",
    "parse_first_quantity",
    "parse_quantity",
    "scale_leading_quantity",
    "scale_servings_label",
]
