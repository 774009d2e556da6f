"""Error taxonomy for the recipe generation pipeline.

Every failure the pipeline can surface is a RecipeServiceError carrying the
human-readable message that crosses the HTTP boundary and the status code it
maps to. Diagnostic detail (offending text, parser position) stays on the
exception for logging and is never put in the message.
"""

from typing import Optional


class RecipeServiceError(Exception):
    """Base class for failures surfaced to the caller as {"error": message}."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class RateLimited(RecipeServiceError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later.") -> None:
        super().__init__(message)


class BadRequest(RecipeServiceError):
    status_code = 400


class EmptyInput(BadRequest):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field.capitalize()} are required")


class InputTooLarge(BadRequest):
    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"Input too long: {length} characters (maximum {limit}). "
            "Please shorten the ingredients or steps."
        )


class ProviderError(Exception):
    """Raised by generation clients when the model call fails."""


class UpstreamError(RecipeServiceError):
    status_code = 500


class InvalidRecipeFormat(RecipeServiceError):
    """The completion could not be turned into a Recipe.

    `detail` is the validator diagnostic; the public message embeds it.
    """

    status_code = 500

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid recipe format: {detail}")


class MalformedJson(InvalidRecipeFormat):
    def __init__(self, parser_message: str, text: str) -> None:
        self.parser_message = parser_message
        self.text = text
        super().__init__(parser_message)


class MissingFields(InvalidRecipeFormat):
    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class EmptyRequiredList(InvalidRecipeFormat):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} must be a non-empty array")


class FieldTypeMismatch(InvalidRecipeFormat):
    def __init__(self, field: str, expected: str) -> None:
        self.field = field
        self.expected = expected
        super().__init__(f"{field} must be {expected}")


class RequestCancelled(RecipeServiceError):
    # 499: client closed request (nginx convention); never actually delivered
    status_code = 499

    def __init__(self, message: str = "Request cancelled by client") -> None:
        super().__init__(message)
