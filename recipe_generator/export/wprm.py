"""Export a Recipe in the WP Recipe Maker JSON import format.

Pure data transform; nothing here talks to WordPress. Ingredients and
instructions go into a single unnamed group each, using WPRM's `raw`/`text`
entries so the plugin does its own amount/unit parsing on import.
"""

import re
from typing import Any, Optional

from recipe_generator.models.models import Recipe


_MINUTES_RE = re.compile(r"\d+(?:\.\d+)?")


def parse_minutes(value: Any) -> Optional[int]:
    """Pull a whole number of minutes out of "15", "15 mins", 15 or 1.5.

    Returns None when the value carries no number. Hours are not converted:
    the prompt asks for minutes.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(round(value))
    if isinstance(value, str):
        match = _MINUTES_RE.search(value)
        if match:
            return int(round(float(match.group())))
    return None


def _servings(value: Any) -> tuple[Optional[int], str]:
    """Split "4 people" into (4, "people")."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value), ""
    text = str(value).strip()
    match = re.match(r"(\d+)\s*(.*)", text)
    if match:
        return int(match.group(1)), match.group(2).strip()
    return None, text


def to_wprm(recipe: Recipe) -> dict[str, Any]:
    """Convert a Recipe into a WPRM import document.

    Args:
        recipe: Validated recipe.

    Returns:
        dict: JSON-serializable WPRM recipe.
    """
    prep_time = parse_minutes(recipe.prep_time)
    cook_time = parse_minutes(recipe.cook_time)
    total_time = None
    if prep_time is not None or cook_time is not None:
        total_time = (prep_time or 0) + (cook_time or 0)

    servings, servings_unit = _servings(recipe.servings)

    return {
        "type": "food",
        "name": str(recipe.name),
        "summary": "",
        "servings": servings,
        "servings_unit": servings_unit,
        "prep_time": prep_time,
        "cook_time": cook_time,
        "total_time": total_time,
        "tags": {},
        "ingredients": [
            {
                "name": "",
                "ingredients": [{"raw": line} for line in recipe.ingredients],
            }
        ],
        "instructions": [
            {
                "name": "",
                "instructions": [{"text": step} for step in recipe.instructions],
            }
        ],
        "notes": "",
    }
