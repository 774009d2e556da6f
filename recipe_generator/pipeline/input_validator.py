"""Request payload validation: shape, emptiness and size bounds."""

from typing import Any

from pydantic import ValidationError

from recipe_generator.models.models import GenerationRequest, Tone
from recipe_generator.pipeline.errors import BadRequest, EmptyInput, InputTooLarge


class InputValidator:
    """Check a generation request before any prompt is built."""

    def __init__(self, max_input_chars: int = 30000) -> None:
        self.max_input_chars = max_input_chars

    def validate(self, ingredients: str, steps: str) -> None:
        """Reject empty or oversized input.

        Raises:
            EmptyInput: If either field is empty after trimming whitespace.
            InputTooLarge: If len(ingredients) + len(steps) exceeds the maximum.
        """
        if not ingredients.strip():
            raise EmptyInput("ingredients")
        if not steps.strip():
            raise EmptyInput("steps")

        total = len(ingredients) + len(steps)
        if total > self.max_input_chars:
            raise InputTooLarge(total, self.max_input_chars)

    def validate_payload(self, payload: Any) -> GenerationRequest:
        """Turn a decoded JSON body into a GenerationRequest.

        Raises:
            BadRequest: If the body is not an object, a field is missing or not a
                string, or the tone is unknown. EmptyInput / InputTooLarge as in validate().
        """
        if not isinstance(payload, dict):
            raise BadRequest("Request body must be a JSON object with ingredients, steps and tone")

        for field in ("ingredients", "steps"):
            value = payload.get(field)
            if value is None:
                raise EmptyInput(field)
            if not isinstance(value, str):
                raise BadRequest(f"{field} must be a string")

        tone = payload.get("tone")
        if not tone:
            raise BadRequest("Please select a tone")
        allowed = [t.value for t in Tone]
        if tone not in allowed:
            raise BadRequest(f"tone must be one of: {', '.join(allowed)}")

        self.validate(payload["ingredients"], payload["steps"])

        try:
            return GenerationRequest.model_validate(payload)
        except ValidationError as e:
            raise BadRequest(f"Invalid request: {e.errors()[0]['msg']}") from e
