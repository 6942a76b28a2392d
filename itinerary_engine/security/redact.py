"""Helpers for redacting routing credentials in logs and error strings."""

from __future__ import annotations

import re

_REDACTED = "***REDACTED***"

_QUERY_VALUE_RE = re.compile(
    r"(?i)(?P<prefix>\b(?:key|api[_-]?key|access[_-]?token|token|secret|signature|sig)\s*=\s*)(?P<value>[^&\s\"']+)"
)
_JSON_KV_RE = re.compile(
    r"(?i)(?P<prefix>(?:[\"']?(?:api[_-]?key|access[_-]?token|accessToken|token|secret)[\"']?\s*[:=]\s*[\"']?))(?P<value>[^\"',\s}&]+)"
)
_AUTH_HEADER_RE = re.compile(
    r"(?i)(?P<prefix>\bauthorization\s*:\s*(?:bearer|basic|token)\s+)(?P<value>[^\s,;\"']+)"
)
_BEARER_RE = re.compile(
    r"(?i)(?P<prefix>\bbearer\s+)(?P<value>[A-Za-z0-9._~+/=-]+)"
)
_JWT_RE = re.compile(r"\beyJ[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}\b")
# Mapbox-style public/secret tokens.
_MAPBOX_TOKEN_RE = re.compile(r"\b(?:pk|sk)\.[A-Za-z0-9_-]{20,}\.[A-Za-z0-9_-]{8,}\b")


def _replace_value(pattern: re.Pattern[str], text: str) -> str:
    def repl(match: re.Match[str]) -> str:
        return f"{match.group('prefix')}{_REDACTED}"

    return pattern.sub(repl, text)


def redact_sensitive(text: str, *, secrets: tuple[str, ...] = ()) -> str:
    """Redact common secret patterns while preserving surrounding context.

    ``secrets`` are literal values (e.g. the configured routing token) that
    are always replaced, whatever their shape.
    """
    if not text:
        return text

    redacted = str(text)
    for secret in secrets:
        if secret:
            redacted = redacted.replace(secret, _REDACTED)

    for pattern in (_QUERY_VALUE_RE, _JSON_KV_RE, _AUTH_HEADER_RE, _BEARER_RE):
        redacted = _replace_value(pattern, redacted)

    for pattern in (_JWT_RE, _MAPBOX_TOKEN_RE):
        redacted = pattern.sub(_REDACTED, redacted)
    return redacted


__all__ = ["redact_sensitive"]
