"""
Mise - Line Normalization.

Stored ingredient and instruction lists arrive either already split into
lists or as one multi-line text blob. These helpers turn both into clean
ordered lines.
"""

import re
from typing import Any

# "1.", "2)", "Step 3:", "4 -" ... a "." followed by a digit is a decimal.
_STEP_NUMBER = re.compile(r"^\s*(?:step\s*)?\d+\s*(?:[):\-]|\.(?!\d))\s*", re.IGNORECASE)


def normalize_lines(value: Any) -> list[str]:
    """
    Normalize a stored list value into clean lines.

    Handles:
        - None -> []
        - Text blob (any line endings) -> one entry per non-blank line
        - List/tuple -> stringified, stripped, blanks dropped

    Examples:
        normalize_lines(["  a  ", "", "b"]) -> ["a", "b"]
        normalize_lines("a\\r\\nb\\n\\nc") -> ["a", "b", "c"]
    """
    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        lines = (str(item).strip() for item in value if item is not None)
        return [line for line in lines if line]

    text = value if isinstance(value, str) else str(value)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = (line.strip() for line in text.split("\n"))
    return [line for line in lines if line]


def strip_leading_step_number(line: str) -> str:
    """
    Remove embedded step numbering so ordered lists don't double-number.

    Examples:
        "1. Preheat oven" -> "Preheat oven"
        "Step 2: Mix" -> "Mix"
        "1.5 cups water" -> "1.5 cups water"
        "Preheat oven" -> "Preheat oven"
    """
    stripped = _STEP_NUMBER.sub("", line, count=1)
    return stripped if stripped.strip() else line.strip()
