"""Tests for GeographyResolver.

Tests cover:
- ZIP extraction and validation
- Declared state short-circuits the lookup
- ZIP to state lookup with memoization of definitive answers
- Lookup failures resolve to None and are retried on the next call
"""

from typing import Optional

import httpx
import pytest

from story_verifier.adapters.geography_resolver import (
    GeographyResolver,
    extract_zip_code,
    is_valid_zip,
)
from story_verifier.data_management.schemas.story_schema import Location


# ── Fixtures ──────────────────────────────────────────────────────────────


async def no_sleep(seconds: float) -> None:
    return None


def make_resolver(requests: list, status: int = 200, state: Optional[str] = "TX"):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if status != 200:
            return httpx.Response(status)
        places = [{"place name": "Houston", "state abbreviation": state}] if state else []
        return httpx.Response(200, json={"post code": "77001", "places": places})

    return GeographyResolver(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=no_sleep,
        base_url="https://zip.test/us",
    )


# ── Helper Tests ──────────────────────────────────────────────────────────


class TestZipHelpers:
    def test_extract(self) -> None:
        assert extract_zip_code("We live near 77001 in Houston") == "77001"
        assert extract_zip_code("Call 5551234567") is None
        assert extract_zip_code(None) is None

    def test_valid(self) -> None:
        assert is_valid_zip("48201")
        assert not is_valid_zip("4820")
        assert not is_valid_zip("48201-1234")
        assert not is_valid_zip(None)


# ── Resolution Tests ──────────────────────────────────────────────────────


class TestResolve:
    @pytest.mark.asyncio
    async def test_declared_state_wins(self) -> None:
        requests: list[httpx.Request] = []
        resolver = make_resolver(requests)

        geography = await resolver.resolve(Location(state="mi", zip="48201"))

        assert geography.state == "MI"
        assert geography.zip == "48201"
        assert requests == []

    @pytest.mark.asyncio
    async def test_invalid_zip_dropped(self) -> None:
        resolver = make_resolver([])

        geography = await resolver.resolve(Location(state="MI", zip="482"))

        assert geography.zip is None

    @pytest.mark.asyncio
    async def test_zip_lookup(self) -> None:
        requests: list[httpx.Request] = []
        resolver = make_resolver(requests)

        geography = await resolver.resolve(Location(zip="77001"))

        assert geography.state == "TX"
        assert geography.zip == "77001"
        assert requests[0].url.path == "/us/77001"

    @pytest.mark.asyncio
    async def test_lookup_is_memoized(self) -> None:
        requests: list[httpx.Request] = []
        resolver = make_resolver(requests)

        await resolver.lookup_state("77001")
        await resolver.lookup_state("77001")

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_failure_not_memoized(self) -> None:
        requests: list[httpx.Request] = []
        resolver = make_resolver(requests, status=404)

        assert await resolver.resolve(Location(zip="00000")) is None
        assert await resolver.resolve(Location(zip="00000")) is None
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_no_location(self) -> None:
        requests: list[httpx.Request] = []
        resolver = make_resolver(requests)

        assert await resolver.resolve(Location(city="Springfield")) is None
        assert requests == []
