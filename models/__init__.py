"""Public re-exports of all model types."""

from models.chat import (
    VALID_ROLES,
    ChatMessage,
    DefaultModelParams,
    GenerationOptions,
    Role,
)
from models.payload import JsonSchemaSpec, RequestPayload, ResponseFormat
from models.recipe import (
    AdjustedRecipe,
    GenerationRequest,
    GenerationResponse,
    RecipeProposal,
)
from models.response import Choice, CompletionMessage, ResponseEnvelope, Usage

__all__ = [
    # Chat
    "Role",
    "VALID_ROLES",
    "ChatMessage",
    "DefaultModelParams",
    "GenerationOptions",
    # Outbound payload
    "JsonSchemaSpec",
    "ResponseFormat",
    "RequestPayload",
    # Response envelope
    "CompletionMessage",
    "Choice",
    "Usage",
    "ResponseEnvelope",
    # Recipes
    "GenerationRequest",
    "AdjustedRecipe",
    "RecipeProposal",
    "GenerationResponse",
]
