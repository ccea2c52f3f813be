"""Outbound message validation and sensitive-data redaction.

Redaction is pattern based and best effort: it catches the obvious
credential shapes (Bearer tokens, JWTs, ``password=...`` style pairs and
long opaque keys mentioned next to the word "key") before they leave the
process. It is not a security boundary.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Union

from models.chat import VALID_ROLES, ChatMessage

MAX_MESSAGE_LENGTH = 50_000

MessageLike = Union[ChatMessage, Mapping[str, str]]


# ---------------------------------------------------------------------------
# Redaction patterns
# ---------------------------------------------------------------------------

_BEARER_RE = re.compile(r"Bearer\s+[A-Za-z0-9_.\-]+", re.IGNORECASE)
_JWT_RE = re.compile(r"eyJ[A-Za-z0-9_\-]*\.eyJ[A-Za-z0-9_\-]*\.[A-Za-z0-9_\-]*")

# Optionally quoted key, ``:`` or ``=``, then a quoted value or a bare value
# running up to the next comma, brace or whitespace. A bare value that is
# already a placeholder is left alone so re-sanitizing is a no-op.
_KV_VALUE = r"""(['"][^'"]*['"]|(?!\[REDACTED_)[^\s,}]+)"""
_PASSWORD_RE = re.compile(r"""(['"]?password['"]?\s*[:=]\s*)""" + _KV_VALUE, re.IGNORECASE)
_TOKEN_RE = re.compile(r"""(['"]?token['"]?\s*[:=]\s*)""" + _KV_VALUE, re.IGNORECASE)
_SECRET_RE = re.compile(r"""(['"]?secret['"]?\s*[:=]\s*)""" + _KV_VALUE, re.IGNORECASE)

_KEY_CONTEXT_RE = re.compile(r"(api[_\-]?key|apikey|key)", re.IGNORECASE)
# ASCII boundaries: a token right after a non-ASCII letter still counts.
_LONG_TOKEN_RE = re.compile(r"(?<![A-Za-z0-9_\-])[A-Za-z0-9_\-]{20,}(?![A-Za-z0-9_\-])")

_NEWLINE_RE = re.compile(r"\r+\n")

_UNCONDITIONAL_PASSES: tuple[tuple[re.Pattern[str], str], ...] = (
    (_BEARER_RE, "Bearer [REDACTED_TOKEN]"),
    (_JWT_RE, "[REDACTED_JWT]"),
    (_PASSWORD_RE, r"\1[REDACTED_PASSWORD]"),
    (_TOKEN_RE, r"\1[REDACTED_TOKEN]"),
    (_SECRET_RE, r"\1[REDACTED_SECRET]"),
)


def redact_sensitive_data(content: str) -> str:
    """Replace credential-looking substrings with placeholders.

    The long-token pass only runs when the text mentions a key, and it runs
    after the Bearer/JWT passes so it never splits their placeholders.
    """
    mentions_key = _KEY_CONTEXT_RE.search(content) is not None

    filtered = content
    for pattern, replacement in _UNCONDITIONAL_PASSES:
        filtered = pattern.sub(replacement, filtered)

    if mentions_key:
        filtered = _LONG_TOKEN_RE.sub("[REDACTED_KEY]", filtered)

    return filtered


def sanitize_content(content: str) -> str:
    """Trim, normalize CRLF (and stray CRs before LF) to LF and redact a single message body."""
    return redact_sensitive_data(_NEWLINE_RE.sub("\n", content.strip()))


# ---------------------------------------------------------------------------
# Message list validation
# ---------------------------------------------------------------------------

def _unpack(message: MessageLike) -> tuple[str | None, str | None]:
    if isinstance(message, ChatMessage):
        return message.role, message.content
    if isinstance(message, Mapping):
        return message.get("role"), message.get("content")
    raise ValueError(f"Unsupported message type: {type(message).__name__}")


def sanitize_messages(
    messages: Sequence[MessageLike],
    max_length: int = MAX_MESSAGE_LENGTH,
) -> list[ChatMessage]:
    """Validate and sanitize an outbound message list.

    Accepts ``ChatMessage`` instances or plain ``{"role", "content"}``
    mappings. Order and roles are preserved; only content is transformed.

    Raises:
        ValueError: If the list is empty, a message lacks role or content
            (whitespace-only content counts as missing), a role is unknown,
            or a content exceeds ``max_length``.
    """
    if isinstance(messages, (str, bytes)) or not messages:
        raise ValueError("Messages must be a non-empty list")

    sanitized: list[ChatMessage] = []
    for message in messages:
        role, content = _unpack(message)
        if not role or not content:
            raise ValueError("Each message must have 'role' and 'content'")
        if role not in VALID_ROLES:
            raise ValueError(f"Invalid role: {role}")
        if not isinstance(content, str):
            raise ValueError("Message content must be a string")
        if not content.strip():
            raise ValueError("Message content must not be blank")
        if len(content) > max_length:
            raise ValueError(
                f"Message content exceeds maximum length of {max_length} characters"
            )
        sanitized.append(ChatMessage(role=role, content=sanitize_content(content)))
    return sanitized
