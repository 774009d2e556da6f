#!/usr/bin/env python3
"""Ad hoc recipe generation runner.

Generate a recipe directly without starting the API server.

Usage:
    python query.py --ingredients "2 eggs, 1 cup flour" --steps "mix, bake"
    python query.py --tone playful --ingredients ingredients.txt --steps steps.txt
    python query.py --debug ...   # Show full JSON response
    python query.py --wprm ...    # Show WP Recipe Maker export JSON

--ingredients and --steps accept either literal text or a path to a text file.

Features:
- Runs the same pipeline as POST /generate (validation, prompt, Gemini, parsing)
- Formatted recipe output with rich
- Clean exit code 1 on any pipeline error
"""

import asyncio
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown

from recipe_generator.clients.gemini import GeminiGenerationClient
from recipe_generator.export.wprm import to_wprm
from recipe_generator.models.models import Recipe, Tone
from recipe_generator.pipeline.errors import RecipeServiceError
from recipe_generator.pipeline.handler import RecipeRequestHandler
from recipe_generator.pipeline.input_validator import InputValidator
from recipe_generator.pipeline.rate_limiter import RateLimiter
from recipe_generator.utils.config import config
from recipe_generator.utils.logger import logger

console = Console()

USAGE = 'Usage: python query.py [--debug] [--wprm] [--tone TONE] --ingredients TEXT|FILE --steps TEXT|FILE'


def read_text_argument(value: str) -> str:
    """Return the file contents if `value` names an existing file, else `value` itself."""
    path = Path(value)
    try:
        if path.is_file():
            return path.read_text(encoding="utf-8")
    except OSError:
        # Too long or otherwise invalid as a path: it is literal text
        return value
    return value


def recipe_to_markdown(recipe: Recipe) -> str:
    """Render a recipe the way the web UI lays it out."""
    lines = [f"# {recipe.name}", ""]
    lines.append(
        f"**Servings:** {recipe.servings} | **Prep Time:** {recipe.prep_time} mins | "
        f"**Cook Time:** {recipe.cook_time} mins"
    )
    lines.append("")
    if recipe.title_variations:
        lines.append("## Title Variations")
        lines.extend(f"- {title}" for title in recipe.title_variations)
        lines.append("")
    lines.append("## Ingredients")
    lines.extend(f"- {ingredient}" for ingredient in recipe.ingredients)
    lines.append("")
    lines.append("## Instructions")
    lines.extend(f"{i}. {step}" for i, step in enumerate(recipe.instructions, start=1))
    return "\n".join(lines)


def run_query(ingredients: str, steps: str, tone: str = "neutral", debug: bool = False, wprm: bool = False) -> int:
    """Generate a single recipe and print it.

    Args:
        ingredients: Ingredient text.
        steps: Preparation steps text.
        tone: One of the Tone values.
        debug: If True, display the full recipe JSON.
        wprm: If True, display the WP Recipe Maker export JSON.

    Returns:
        int: Process exit code (0 on success, 1 on failure).
    """
    try:
        config.validate()
        handler = RecipeRequestHandler(
            rate_limiter=RateLimiter(
                max_requests=config.RATE_LIMIT_MAX_REQUESTS,
                window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
            ),
            generation_client=GeminiGenerationClient.from_config(config),
            input_validator=InputValidator(max_input_chars=config.MAX_INPUT_CHARS),
        )

        logger.info(f"Generating recipe with {config.GEMINI_MODEL} (tone={tone})...")
        payload = {"ingredients": ingredients, "steps": steps, "tone": tone}
        recipe = asyncio.run(handler.handle(payload, client_key="cli"))

        console.print()

        if debug:
            console.print("[bold cyan]Debug Mode: Full Response[/bold cyan]")
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print_json(data=recipe.to_dict())
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print()

        if wprm:
            console.print("[bold cyan]WP Recipe Maker Export[/bold cyan]")
            console.print_json(json.dumps(to_wprm(recipe)))
            console.print()

        console.print(Markdown(recipe_to_markdown(recipe)))
        return 0

    except RecipeServiceError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        return 1
    except ValueError as e:
        console.print(f"[red]✗ Configuration error: {e}[/red]")
        return 1
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        return 0


def parse_args(argv: list[str]) -> dict:
    """Parse command line flags into run_query keyword arguments.

    Raises:
        ValueError: On unknown flags, missing flag values or missing required input.
    """
    options = {"tone": Tone.NEUTRAL.value, "debug": False, "wprm": False}
    i = 0
    while i < len(argv):
        flag = argv[i]
        if flag == "--debug":
            options["debug"] = True
        elif flag == "--wprm":
            options["wprm"] = True
        elif flag in ("--tone", "--ingredients", "--steps"):
            i += 1
            if i >= len(argv):
                raise ValueError(f"{flag} flag requires a value")
            key = flag[2:]
            options[key] = argv[i] if key == "tone" else read_text_argument(argv[i])
        else:
            raise ValueError(f"Unknown flag: {flag}")
        i += 1

    if "ingredients" not in options or "steps" not in options:
        raise ValueError("Both --ingredients and --steps are required")
    return options


if __name__ == "__main__":
    try:
        options = parse_args(sys.argv[1:])
    except ValueError as e:
        print(f"Error: {e}")
        print(USAGE)
        print("")
        print("Examples:")
        print('  python query.py --ingredients "2 eggs, 1 cup flour" --steps "mix, bake"')
        print("  python query.py --tone playful --ingredients ingredients.txt --steps steps.txt")
        print('  python query.py --debug --wprm --ingredients "..." --steps "..."')
        sys.exit(1)

    sys.exit(run_query(**options))
