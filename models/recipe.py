"""Recipe generation request/response models for the POST /generations endpoint."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 50
CONTENT_MAX_LENGTH = 10_000


class GenerationRequest(BaseModel):
    """Incoming request body for POST /generations.

    Title and content are trimmed before their length limits are checked.
    Extra fields are rejected with a 422 response.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    preferences: list[str] = []

    @field_validator("preferences")
    @classmethod
    def drop_blank_preferences(cls, v: list[str]) -> list[str]:
        return [p.strip() for p in v if p and p.strip()]


class AdjustedRecipe(BaseModel):
    """Shape the LLM must return for a recipe adjustment."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)


class RecipeProposal(BaseModel):
    """Adjusted recipe plus the model that produced it."""

    title: str
    content: str
    model: str


class GenerationResponse(BaseModel):
    recipe_proposal: RecipeProposal
