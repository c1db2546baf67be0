"""JSON-LD/Schema.org recipe node discovery."""

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from .errors import ParseError

logger = logging.getLogger(__name__)

LINKED_DATA_TYPE = "application/ld+json"


def collect_json_ld_blocks(soup: BeautifulSoup) -> list[str]:
    """Return the raw text of every linked-data script block, in page order."""
    blocks = []
    for script in soup.find_all("script"):
        declared = (script.get("type") or "").split(";")[0].strip().lower()
        if declared != LINKED_DATA_TYPE:
            continue
        text = script.string if script.string is not None else script.get_text()
        if text and text.strip():
            blocks.append(text.strip())
    return blocks


def parse_json_ld_block(raw: str) -> Any:
    """Parse one block, raising ParseError for malformed JSON."""
    try:
        return json.loads(raw, strict=False)
    except ValueError as e:
        raise ParseError(f"Malformed JSON-LD block: {e}") from e


def flatten_json_ld(data: Any) -> list[dict]:
    """
    Flatten linked data into a list of candidate nodes.

    Top-level arrays and @graph wrappers are unwrapped recursively;
    scalars are dropped.
    """
    if not data:
        return []

    if isinstance(data, list):
        return [node for item in data for node in flatten_json_ld(item)]

    if isinstance(data, dict):
        graph = data.get("@graph")
        if isinstance(graph, list):
            return flatten_json_ld(graph)
        return [data]

    return []


def is_recipe_type(type_value: Any) -> bool:
    """Check whether an @type value names a Recipe (case-insensitive)."""
    if isinstance(type_value, str):
        return type_value.lower() == "recipe"

    if isinstance(type_value, list):
        return any(isinstance(t, str) and t.lower() == "recipe" for t in type_value)

    return False


def extract_json_ld_nodes(soup: BeautifulSoup) -> list[dict]:
    """Parse every linked-data block on the page, skipping malformed ones."""
    nodes: list[dict] = []
    for index, raw in enumerate(collect_json_ld_blocks(soup)):
        try:
            parsed = parse_json_ld_block(raw)
        except ParseError as e:
            logger.debug(f"Skipping JSON-LD block {index}: {e}")
            continue
        nodes.extend(flatten_json_ld(parsed))
    return nodes


def find_recipe_node(nodes: list[dict]) -> dict | None:
    """Return the first Recipe node, if any."""
    for node in nodes:
        if isinstance(node, dict) and is_recipe_type(node.get("@type")):
            return node
    return None
