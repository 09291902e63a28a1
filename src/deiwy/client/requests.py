"""HTTP helper shared by the page controllers.

Every call returns a :class:`RequestResult`; callers check ``redirect``
first, then ``error``, then ``message``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class ErrorDetails:
    message: str


@dataclass
class RequestError:
    """Failure reported by the server, normalized to one shape."""

    name: str
    details: ErrorDetails = field(default_factory=lambda: ErrorDetails(message=""))


@dataclass
class RequestResult:
    message: Any = None
    error: RequestError | None = None
    redirect: str | None = None


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _normalize_error(response: httpx.Response, body: dict[str, Any]) -> tuple[RequestError, str | None]:
    """Build a RequestError from any error body and pull out its redirect."""
    raw = body.get("error")
    redirect: str | None = None
    message: str | None = None
    name = "RequestError"

    if isinstance(raw, dict):
        name = str(raw.get("name") or name)
        redirect = raw.get("redirect")
        details = raw.get("details")
        if isinstance(details, dict) and details.get("message"):
            message = str(details["message"])
        elif raw.get("message"):
            message = str(raw["message"])
    elif isinstance(raw, str):
        message = raw

    if message is None and body.get("detail"):
        detail = body["detail"]
        message = detail if isinstance(detail, str) else str(detail)
    if redirect is None and isinstance(body.get("redirect"), str):
        redirect = body["redirect"]

    return RequestError(name=name, details=ErrorDetails(message=message or response.reason_phrase)), redirect


async def normal_request(
    client: httpx.AsyncClient,
    path: str,
    method: str = "GET",
    body: dict[str, Any] | None = None,
) -> RequestResult:
    """Send one JSON request and normalize the reply.

    Transport failures (``httpx.HTTPError``) are not caught.
    """
    response = await client.request(method, path, json=body)

    # An unfollowed 3xx is a navigation instruction, not a failure.
    if response.is_redirect:
        return RequestResult(redirect=httpx.URL(response.headers["location"]).path)

    if response.is_success:
        if response.history:
            return RequestResult(redirect=response.url.path)
        payload = _json_body(response)
        error = payload.get("error")
        return RequestResult(
            message=payload.get("message"),
            error=_normalize_error(response, payload)[0] if error else None,
            redirect=payload.get("redirect"),
        )

    payload = _json_body(response)
    error, redirect = _normalize_error(response, payload)
    logger.debug("%s %s failed with %s: %s", method, path, response.status_code, error.details.message)
    return RequestResult(error=error, redirect=redirect)
