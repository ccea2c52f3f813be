"""Recipe adjustment called from the POST /generations endpoint.

Builds the prompt, asks the gateway for a structured ``AdjustedRecipe`` and
returns it as a ``RecipeProposal`` tagged with the model that produced it.
"""

from __future__ import annotations

import logging
import os

from llm.client import DEFAULT_MODEL, OpenRouterClient
from models.chat import ChatMessage
from models.recipe import TITLE_MAX_LENGTH, AdjustedRecipe, RecipeProposal
from recipes.prompts import build_system_prompt, build_user_prompt

logger = logging.getLogger("recipe_ai")

# Module-level singleton for the gateway client (lazy init).
_llm_client: OpenRouterClient | None = None


def get_llm_client() -> OpenRouterClient:
    """Return the module-level client, creating it on first use.

    ``OPENROUTER_MODEL`` overrides the default model.
    """
    global _llm_client  # noqa: PLW0603
    if _llm_client is None:
        _llm_client = OpenRouterClient(os.getenv("OPENROUTER_MODEL") or DEFAULT_MODEL)
    return _llm_client


async def close_llm_client() -> None:
    """Close and drop the module-level client, if one was created."""
    global _llm_client  # noqa: PLW0603
    if _llm_client is not None:
        await _llm_client.aclose()
        _llm_client = None


def build_messages(title: str, content: str, preferences: list[str]) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=build_system_prompt()),
        ChatMessage(role="user", content=build_user_prompt(title, content, preferences)),
    ]


async def generate_recipe_proposal(
    client: OpenRouterClient,
    title: str,
    content: str,
    preferences: list[str],
) -> RecipeProposal:
    """Ask the model to adjust a recipe to the given dietary preferences.

    Gateway errors propagate unchanged so the HTTP layer can map them.
    """
    title = title.strip()
    content = content.strip()
    # Captured before the call so a concurrent set_model does not mislabel it.
    model = client.get_model()

    adjusted = await client.generate_structured(
        build_messages(title, content, preferences), AdjustedRecipe
    )

    logger.info(
        "recipe proposal generated",
        extra={"model": model},
    )
    return RecipeProposal(
        title=adjusted.title.strip()[:TITLE_MAX_LENGTH],
        content=adjusted.content.strip(),
        model=model,
    )
