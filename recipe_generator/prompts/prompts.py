"""Prompt template for recipe generation.

The model is told to answer with a bare JSON object. User text is embedded
verbatim (no escaping), so everything downstream must tolerate whatever the model
makes of adversarial or malformed input.
"""

from recipe_generator.models.models import Tone


RECIPE_JSON_SHAPE = """{
  "name": "Recipe name (make it catchy and SEO-friendly)",
  "titleVariations": [
    "Original title",
    "SEO-optimized variation 1",
    "Social media friendly variation 2",
    "Question-based variation 3",
    "How-to variation 4"
  ],
  "servings": "number of servings as string",
  "prepTime": "prep time in minutes as string",
  "cookTime": "cook time in minutes as string",
  "ingredients": [
    "formatted ingredient 1",
    "formatted ingredient 2",
    ...etc
  ],
  "instructions": [
    "formatted step 1",
    "formatted step 2",
    ...etc
  ]
}"""


def build_prompt(ingredients: str, steps: str, tone: Tone | str) -> str:
    """Render the generation prompt.

    Args:
        ingredients: Raw ingredient text as submitted.
        steps: Raw preparation steps as submitted.
        tone: Narrative tone for the instructions.

    Returns:
        str: Prompt asking for ONLY a JSON object in RECIPE_JSON_SHAPE.
    """
    tone_value = tone.value if isinstance(tone, Tone) else tone
    return f"""Generate a recipe in JSON format based on these ingredients and steps.

IMPORTANT: You must respond with ONLY valid JSON. No other text or explanation.
The JSON must exactly match this structure:
{RECIPE_JSON_SHAPE}

Use {tone_value} tone for instructions.

Ingredients:
{ingredients}

Steps:
{steps}"""
