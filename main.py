"""FastAPI application for the recipe AI gateway.

Exports ``app`` for use with ``uvicorn main:app``.
"""

import json
import logging
import os
import traceback
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Load .env next to this file so OPENROUTER_API_KEY / OPENROUTER_MODEL are set
load_dotenv(Path(__file__).resolve().parent / ".env")

from llm.errors import ErrorKind, OpenRouterError
from models.recipe import GenerationRequest, GenerationResponse
from recipes.service import close_llm_client, generate_recipe_proposal, get_llm_client


# ---------------------------------------------------------------------------
# Structured JSON logging
# ---------------------------------------------------------------------------

LOG_EXTRA_FIELDS = (
    "request_id",
    "model",
    "latency_ms",
    "tokens",
    "error_kind",
    "error_message",
    "attempt",
    "status",
    "path",
)


class StructuredFormatter(logging.Formatter):
    """JSON-lines formatter for structured log output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Include optional extra fields when present
        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_data[key] = val
        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


_handler = logging.StreamHandler()
_handler.setFormatter(StructuredFormatter())

logger = logging.getLogger("recipe_ai")
logger.addHandler(_handler)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
# Prevent propagation to root logger to avoid duplicate output
logger.propagate = False


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_llm_client()


app = FastAPI(title="Recipe AI Gateway", lifespan=lifespan)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.RATE_LIMIT: 429,
    ErrorKind.HTTP: 502,
    ErrorKind.PARSE: 502,
    ErrorKind.VALIDATION: 502,
    ErrorKind.NETWORK: 503,
}


@app.exception_handler(OpenRouterError)
async def openrouter_error_handler(request: Request, exc: OpenRouterError) -> JSONResponse:
    """Map a classified gateway failure to an HTTP status code."""
    status_code = ERROR_STATUS_CODES.get(exc.kind, 502)
    logger.error(
        "generation failed",
        extra={
            "path": request.url.path,
            "error_kind": exc.kind.value,
            "error_message": exc.message,
            "status": status_code,
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={"message": exc.message, "kind": exc.kind.value},
    )


@app.exception_handler(Exception)
async def catch_all_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions and return a generic 500."""
    logger.error(
        "Unhandled exception: %s: %s\n%s",
        type(exc).__name__,
        exc,
        traceback.format_exc(),
        extra={"path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
async def health() -> dict:
    """Health check -- must respond without touching the LLM provider."""
    return {"status": "healthy"}


@app.post("/generations", response_model=GenerationResponse)
async def create_generation(request: GenerationRequest) -> GenerationResponse:
    """Adjust a recipe to the caller's dietary preferences.

    Delegates to the recipe service, which prompts the LLM for a structured
    proposal. Gateway errors are mapped by ``openrouter_error_handler``.
    """
    logger.info(
        "generation request",
        extra={"path": "/generations"},
    )

    proposal = await generate_recipe_proposal(
        get_llm_client(),
        request.title,
        request.content,
        request.preferences,
    )
    return GenerationResponse(recipe_proposal=proposal)
