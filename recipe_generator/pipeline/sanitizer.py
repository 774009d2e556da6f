"""Best-effort cleanup of model completions before JSON parsing.

This is a text normalizer, not a parser: it never rejects input. Whatever it
cannot fix is left for the RecipeValidator to report.
"""

import re


# ```json (any case) with an optional trailing newline, or ``` with an optional leading newline
_FENCE_RE = re.compile(r"```json\n?|\n?```", re.IGNORECASE)
_LEADING_RE = re.compile(r"^\s*\{")
_TRAILING_RE = re.compile(r"\}\s*$")


def clean(raw_text: str) -> str:
    """Strip Markdown code fences and surrounding whitespace from a completion.

    Example:
        >>> clean('```json\\n{"name": "Soup"}\\n```')
        '{"name": "Soup"}'
    """
    if not raw_text:
        return ""

    # Removing one delimiter can join stray backticks into a new one
    text = raw_text
    while True:
        stripped = _FENCE_RE.sub("", text)
        if stripped == text:
            break
        text = stripped

    text = _LEADING_RE.sub("{", text, count=1)
    text = _TRAILING_RE.sub("}", text, count=1)
    return text.strip()
