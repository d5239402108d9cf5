"""Tests for ModelResolver against a mocked Gemini model listing."""

import httpx
import pytest
import respx

from curator_discovery.inference.providers import GeminiAdapter, gemini_resolver
from curator_discovery.inference.providers.gemini import FALLBACK_MODEL
from curator_discovery.inference.resolver import ResolvedModel

GEMINI_BASE = "https://generativelanguage.googleapis.com"


def _listing(*names):
    return httpx.Response(200, json={"models": [{"name": n} for n in names]})


@pytest.mark.asyncio
@respx.mock
async def test_priority_order_wins():
    respx.get(f"{GEMINI_BASE}/v1beta/models").mock(
        return_value=_listing("models/gemini-1.5-pro", "models/gemini-2.0-flash", "models/gemini-1.5-flash")
    )
    resolver = gemini_resolver(GeminiAdapter())

    async with httpx.AsyncClient() as http:
        model = await resolver.resolve(http, "key")

    assert model == ResolvedModel("gemini", "gemini-2.0-flash", "v1beta")
    assert str(model) == "gemini-2.0-flash (v1beta)"


@pytest.mark.asyncio
@respx.mock
async def test_marker_match_when_no_priority_listed():
    respx.get(f"{GEMINI_BASE}/v1beta/models").mock(
        return_value=_listing("models/embedding-001", "models/gemini-3.0-flash-exp")
    )
    resolver = gemini_resolver(GeminiAdapter())

    async with httpx.AsyncClient() as http:
        model = await resolver.resolve(http, "key")

    assert model.name == "gemini-3.0-flash-exp"


@pytest.mark.asyncio
@respx.mock
async def test_falls_through_to_next_version():
    respx.get(f"{GEMINI_BASE}/v1beta/models").mock(return_value=httpx.Response(403))
    respx.get(f"{GEMINI_BASE}/v1/models").mock(return_value=_listing("models/gemini-1.5-flash"))
    resolver = gemini_resolver(GeminiAdapter())

    async with httpx.AsyncClient() as http:
        model = await resolver.resolve(http, "key")

    assert model == ResolvedModel("gemini", "gemini-1.5-flash", "v1")


@pytest.mark.asyncio
@respx.mock
async def test_fallback_when_listing_unavailable():
    respx.get(f"{GEMINI_BASE}/v1beta/models").mock(side_effect=httpx.ConnectError("down"))
    respx.get(f"{GEMINI_BASE}/v1/models").mock(return_value=_listing("models/embedding-001"))
    resolver = gemini_resolver(GeminiAdapter())

    async with httpx.AsyncClient() as http:
        model = await resolver.resolve(http, "key")

    assert model == FALLBACK_MODEL


@pytest.mark.asyncio
@respx.mock
async def test_resolution_cached_until_invalidated():
    route = respx.get(f"{GEMINI_BASE}/v1beta/models").mock(return_value=_listing("models/gemini-2.5-flash"))
    resolver = gemini_resolver(GeminiAdapter())
    lines = []

    async with httpx.AsyncClient() as http:
        await resolver.resolve(http, "key", lines.append)
        await resolver.resolve(http, "key", lines.append)
        assert route.call_count == 1

        resolver.invalidate()
        assert resolver.resolved is None
        await resolver.resolve(http, "key")

    assert route.call_count == 2
    assert lines == ["🔍 Connecting to gemini..."]

