"""System and user prompt construction for recipe adjustment.

The model receives the original recipe and the user's dietary preferences
and must answer with a JSON object holding the adjusted title and content.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """\
You are a culinary assistant. You receive a recipe and a list of dietary preferences. Rewrite the recipe so it respects every preference and return JSON only.

Keep the spirit of the dish. Replace or remove ingredients that conflict with a preference and adjust quantities, steps and cooking times to match. Do not invent preferences the user did not state.

Output format:
{"title":"...","content":"..."}

Rules:
1. title is at most 50 characters.
2. content is plain text: an ingredient list followed by numbered steps.
3. Write in the language of the original recipe.
4. Return valid JSON only. No markdown or commentary.
"""

NO_PREFERENCES = "none (make the recipe healthier in general)"


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


# ---------------------------------------------------------------------------
# User prompt
# ---------------------------------------------------------------------------

def format_preferences(preferences: list[str]) -> str:
    """Join preferences into one line, e.g. ``"vegan, gluten-free"``."""
    cleaned = [p.strip() for p in preferences if p and p.strip()]
    if not cleaned:
        return NO_PREFERENCES
    return ", ".join(cleaned)


def build_user_prompt(title: str, content: str, preferences: list[str]) -> str:
    """Build the user message for one adjustment request.

    Returns:
        A prompt with DIETARY PREFERENCES, RECIPE TITLE and RECIPE sections.
    """
    sections = [
        f"DIETARY PREFERENCES: {format_preferences(preferences)}",
        f"RECIPE TITLE: {title}",
        "RECIPE:",
        content,
    ]
    return "\n\n".join(sections)
