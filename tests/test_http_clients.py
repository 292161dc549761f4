"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from diet_planner.adapters.macro_optimization_client import (
    FUNCTION_PATH,
    HttpxMacroOptimizationClient,
)


def test_macro_optimization_client_posts_payload() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["authorization"] = request.headers["Authorization"]
        seen["apikey"] = request.headers["apikey"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True})

    transport = httpx.MockTransport(handler)
    client = HttpxMacroOptimizationClient(
        base_url="https://example.supabase.co",
        api_key="service-key",
        http_client=httpx.AsyncClient(transport=transport),
    )

    async def scenario() -> dict[str, object]:
        try:
            return await client.optimize({"meal_name": "Obiad"})
        finally:
            await client.close()

    result = asyncio.run(scenario())

    assert result == {"success": True}
    assert seen == {
        "path": FUNCTION_PATH,
        "authorization": "Bearer service-key",
        "apikey": "service-key",
        "body": {"meal_name": "Obiad"},
    }


def test_macro_optimization_client_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"success": False})

    transport = httpx.MockTransport(handler)
    client = HttpxMacroOptimizationClient(
        base_url="https://example.supabase.co",
        api_key="service-key",
        http_client=httpx.AsyncClient(transport=transport),
    )

    async def scenario() -> None:
        try:
            await client.optimize({})
        finally:
            await client.close()

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(scenario())


def test_macro_optimization_client_create_strips_trailing_slash() -> None:
    client = HttpxMacroOptimizationClient.create(
        "https://example.supabase.co/", "service-key", timeout_seconds=30
    )

    assert client.base_url == "https://example.supabase.co"
    assert client.timeout_seconds == 30
    asyncio.run(client.close())
