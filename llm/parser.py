"""JSON parsing and schema validation for structured LLM output.

The model is asked for bare JSON, but some models still wrap it in a
markdown code fence. A single surrounding fence is stripped; anything else
that is not valid JSON is a parse failure.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar, get_origin

from pydantic import TypeAdapter, ValidationError

from llm.errors import OpenRouterParseError, OpenRouterValidationError

T = TypeVar("T")


def _strip_code_fence(raw: str) -> str | None:
    """Return the fenced body if ``raw`` is wrapped in ``` fences."""
    if not (raw.startswith("```") and raw.endswith("```") and len(raw) >= 6):
        return None
    body = raw[3:-3]
    if body.startswith("json"):
        body = body[4:]
    return body.strip()


def parse_llm_json(content: str) -> Any:
    """Parse a JSON value from LLM response text.

    Two-phase approach:
      1. Fast path -- ``json.loads`` on the stripped text.
      2. Fence stripping -- remove a surrounding ```json / ``` wrapper.

    Raises:
        OpenRouterParseError: If no valid JSON can be extracted.
    """
    raw = content.strip()
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        first_error = exc

    fenced = _strip_code_fence(raw)
    if fenced is not None:
        try:
            return json.loads(fenced)
        except json.JSONDecodeError:
            pass

    raise OpenRouterParseError(
        "Failed to parse JSON response from LLM", first_error
    ) from first_error


def schema_adapter(schema: Any) -> TypeAdapter:
    """Wrap a pydantic model class (or any supported type) in a TypeAdapter."""
    return TypeAdapter(schema)


def validate_against_schema(data: Any, schema: type[T]) -> T:
    """Validate ``data`` against ``schema`` and return the typed value.

    Raises:
        OpenRouterValidationError: On mismatch; the message embeds the
            pydantic error detail.
    """
    try:
        return schema_adapter(schema).validate_python(data)
    except ValidationError as exc:
        raise OpenRouterValidationError(
            f"Schema validation failed: {exc}", exc
        ) from exc


def json_schema_name(schema: Any) -> str:
    """Name used in the ``response_format`` directive."""
    name = getattr(schema, "__name__", None)
    # Parametrized generics such as list[str] proxy __name__ to their origin
    if get_origin(schema) is None and isinstance(name, str) and name.replace("_", "").isalnum():
        return name
    return "schema"
