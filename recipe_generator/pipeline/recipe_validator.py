"""Parse sanitized completion text into a validated Recipe.

Three stages, each with its own failure kind so callers and logs can tell them apart:
1. JSON parse            -> MalformedJson (NaN, Infinity and overflowing numbers included)
2. required fields       -> MissingFields (every missing field, in schema order)
3. non-empty list fields -> EmptyRequiredList
A final type check (FieldTypeMismatch) refuses values that would need coercion.
Values are never repaired: a successful parse returns exactly what the model sent.
"""

import json
import math
from typing import Any

from pydantic import ValidationError

from recipe_generator.models.models import Recipe
from recipe_generator.pipeline.errors import (
    EmptyRequiredList,
    FieldTypeMismatch,
    MalformedJson,
    MissingFields,
)


REQUIRED_FIELDS = ("name", "servings", "prepTime", "cookTime", "ingredients", "instructions")
SCALAR_FIELDS = ("name", "servings", "prepTime", "cookTime")
LIST_FIELDS = ("ingredients", "instructions")
OPTIONAL_LIST_FIELDS = ("titleVariations",)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_scalar(value: Any) -> bool:
    # bool is an int subclass but "true" servings is not a recipe value
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Out of range float value: {text}")
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Out of range float value: {name}")


def find_missing_fields(data: dict[str, Any]) -> list[str]:
    """Return every required field that is absent, null or blank."""
    return [field for field in REQUIRED_FIELDS if _is_missing(data.get(field))]


def parse_recipe(candidate: str) -> Recipe:
    """Parse and validate sanitized completion text.

    Args:
        candidate: Output of sanitizer.clean().

    Returns:
        Recipe: The validated recipe, values unchanged.

    Raises:
        MalformedJson: Text is not JSON, holds a non-finite number, or is not an object.
        MissingFields: One or more required fields absent.
        EmptyRequiredList: A list field is empty or not a list.
        FieldTypeMismatch: A value has a type the schema cannot hold without coercion.
    """
    try:
        data = json.loads(candidate, parse_float=_finite_float, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise MalformedJson(str(e), candidate) from e

    if not isinstance(data, dict):
        raise MalformedJson(f"Expected a JSON object, got {type(data).__name__}", candidate)

    missing = find_missing_fields(data)
    if missing:
        raise MissingFields(missing)

    for field in LIST_FIELDS:
        value = data[field]
        if not isinstance(value, list) or not value:
            raise EmptyRequiredList(field)

    for field in OPTIONAL_LIST_FIELDS:
        if data.get(field) is not None:
            value = data[field]
            if not isinstance(value, list) or not value:
                raise EmptyRequiredList(field)

    for field in SCALAR_FIELDS:
        if not _is_scalar(data[field]):
            raise FieldTypeMismatch(field, "a string or number")

    for field in LIST_FIELDS + OPTIONAL_LIST_FIELDS:
        if data.get(field) is not None and not all(isinstance(item, str) for item in data[field]):
            raise FieldTypeMismatch(field, "an array of strings")

    try:
        return Recipe.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "recipe"
        raise FieldTypeMismatch(field, "a valid recipe value") from e
