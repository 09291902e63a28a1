# mypy: ignore-errors
"""Tests for the shared request helper."""

import json

import httpx
import pytest

from deiwy.client.requests import RequestResult, normal_request


def _client(handler, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test", **kwargs)


@pytest.mark.asyncio
async def test_success_message_is_lifted() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"message": "Code sent"})

    async with _client(handler) as http:
        result = await normal_request(http, "/auth/request-email-verification", "POST", {"Email": "a@b.c"})

    assert result == RequestResult(message="Code sent")
    assert seen == {"method": "POST", "body": {"Email": "a@b.c"}}


@pytest.mark.asyncio
async def test_followed_redirect_reports_final_path() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/sign-out":
            return httpx.Response(303, headers={"Location": "/"})
        return httpx.Response(200, text="<html></html>")

    async with _client(handler, follow_redirects=True) as http:
        result = await normal_request(http, "/auth/sign-out", "POST")

    assert result.redirect == "/"
    assert result.error is None
    assert result.message is None


@pytest.mark.asyncio
async def test_unfollowed_redirect_is_reported_not_an_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": "/sign-in"})

    async with _client(handler) as http:
        result = await normal_request(http, "/auth/verify-email", "POST", {"VerificationCode": "123456"})

    assert result == RequestResult(redirect="/sign-in")


@pytest.mark.asyncio
async def test_absolute_redirect_location_keeps_only_the_path() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(303, headers={"Location": "http://test/chat?tab=1"})

    async with _client(handler) as http:
        result = await normal_request(http, "/auth/sign-in", "POST")

    assert result.redirect == "/chat"
    assert result.error is None


@pytest.mark.asyncio
async def test_redirect_in_success_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"redirect": "/chat"})

    async with _client(handler) as http:
        result = await normal_request(http, "/auth/verify-email", "POST", {"VerificationCode": "123456"})

    assert result.redirect == "/chat"
    assert result.error is None


@pytest.mark.asyncio
async def test_error_details_are_normalized() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": {"name": "VerificationCodeError", "details": {"message": "Wrong code"}}},
        )

    async with _client(handler) as http:
        result = await normal_request(http, "/auth/verify-email", "POST", {"VerificationCode": "000000"})

    assert result.redirect is None
    assert result.error.name == "VerificationCodeError"
    assert result.error.details.message == "Wrong code"


@pytest.mark.asyncio
async def test_error_redirect_is_hoisted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401,
            json={"error": {"name": "AuthenticationError", "details": {"message": "Sign in"}, "redirect": "/sign-in"}},
        )

    async with _client(handler) as http:
        result = await normal_request(http, "/auth/info/email-verification")

    assert result.redirect == "/sign-in"
    assert result.error.name == "AuthenticationError"


@pytest.mark.asyncio
async def test_framework_detail_and_plain_errors() -> None:
    responses = iter(
        [
            httpx.Response(404, json={"detail": "Not Found"}),
            httpx.Response(500, json={"error": "boom"}),
            httpx.Response(502, text="bad gateway"),
        ]
    )

    async with _client(lambda request: next(responses)) as http:
        detail = await normal_request(http, "/missing")
        plain = await normal_request(http, "/broken")
        empty = await normal_request(http, "/gateway")

    assert detail.error.details.message == "Not Found"
    assert plain.error.details.message == "boom"
    assert empty.error.name == "RequestError"
    assert empty.error.details.message == "Bad Gateway"


@pytest.mark.asyncio
async def test_transport_errors_propagate() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as http:
        with pytest.raises(httpx.ConnectError):
            await normal_request(http, "/health")
