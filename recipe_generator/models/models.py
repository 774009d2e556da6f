"""Data models and schemas for the recipe generator.

Defines Pydantic models for the request body, the generated recipe and the
saved-recipe record the browser keeps in its history list.
All models use Pydantic v2; recipe fields keep the camelCase wire names as aliases.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Bumped whenever the required recipe fields change
RECIPE_SCHEMA_VERSION = 1


class Tone(str, Enum):
    """Narrative tone used for the generated instructions."""

    NEUTRAL = "neutral"
    PLAYFUL = "playful"
    FRIENDLY = "friendly"
    CONCISE = "concise"


class GenerationRequest(BaseModel):
    """Input schema for POST /generate.

    Text is stored exactly as submitted (no whitespace stripping); emptiness and the
    combined length limit are enforced by InputValidator, not here, so the
    errors map onto the pipeline's own taxonomy.
    """

    model_config = ConfigDict(extra="ignore")

    ingredients: Annotated[str, Field(description="Free-text ingredient list")]
    steps: Annotated[str, Field(description="Free-text preparation steps")]
    tone: Annotated[Tone, Field(description="Narrative tone for the instructions")]


# Scalars are passed through exactly as the model returned them ("4" or 4)
Scalar = Union[str, int, float]


class Recipe(BaseModel):
    """Structured recipe parsed from a model completion.

    Required: name, servings, prepTime, cookTime, ingredients, instructions.
    Optional: titleVariations. Unknown keys returned by the model are kept as sent,
    including snake_case spellings of the fields (only the camelCase names populate them).
    """

    model_config = ConfigDict(extra="allow")

    name: Annotated[Scalar, Field(description="Recipe name")]
    title_variations: Annotated[
        Optional[List[str]],
        Field(None, alias="titleVariations", description="Alternative titles (SEO, social, question, how-to)"),
    ]
    servings: Annotated[Scalar, Field(description="Number of servings")]
    prep_time: Annotated[Scalar, Field(alias="prepTime", description="Preparation time in minutes")]
    cook_time: Annotated[Scalar, Field(alias="cookTime", description="Cooking time in minutes")]
    ingredients: Annotated[List[str], Field(min_length=1, description="Formatted ingredient lines")]
    instructions: Annotated[List[str], Field(min_length=1, description="Formatted instruction steps")]

    def to_dict(self) -> dict[str, Any]:
        """Wire representation: camelCase keys, only the keys that were actually set."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class SavedRecipe(Recipe):
    """Recipe entry in the client-side history list."""

    id: Annotated[str, Field(description="Unique id derived from the generation timestamp (ms)")]
    created_at: Annotated[datetime, Field(alias="createdAt", description="Generation timestamp (UTC)")]

    @classmethod
    def from_recipe(cls, recipe: Recipe, now: Optional[datetime] = None) -> "SavedRecipe":
        """Stamp a freshly generated recipe with its history id and creation time."""
        now = now or datetime.now(timezone.utc)
        data = recipe.to_dict()
        data["id"] = str(int(now.timestamp() * 1000))
        data["createdAt"] = now
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class ErrorResponse(BaseModel):
    """Body of every non-200 response."""

    error: Annotated[str, Field(description="Human-readable error message")]
