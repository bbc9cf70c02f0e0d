"""Response error extraction for load test observability.

Parses storefront API error responses into human-readable messages.
Every error shares one envelope:

    {"success": false, "message": "...", "reason": "...", **context}

Request validation failures (400) additionally carry
``"errors": [{"field": "...", "message": "..."}]``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        return " | ".join(f"{e.get('field')}: {e.get('message')}" for e in errors if isinstance(e, dict))

    if "message" in body:
        reason = body.get("reason")
        return f"{body['message']} ({reason})" if reason else str(body["message"])

    return str(body)[:300]


def error_reason(response: Response) -> str | None:
    """Return the machine-readable ``reason`` of an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("reason") if isinstance(body, dict) else None
