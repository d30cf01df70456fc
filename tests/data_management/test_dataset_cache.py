"""Tests for DatasetCache.

Tests cover:
- Hit/miss accounting keyed by adapter, state and ZIP
- TTL expiry against an injected clock
- Degraded datasets are never stored
- TTL of zero disables caching
- get_or_fetch only fetches on a miss
"""

import pytest

from story_verifier.adapters.fallback.economic import fallback_energy
from story_verifier.data_management.dataset_cache import DatasetCache
from story_verifier.data_management.schemas.dataset_schema import EnergyDataset, Geography


# ── Fixtures ──────────────────────────────────────────────────────────────


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def live_energy(state: str = "TX", zip: str | None = None) -> EnergyDataset:
    return EnergyDataset(
        geography=Geography(state=state, zip=zip),
        vintage="2024",
        provenance="EIA Electric Power Monthly",
        electricity_residential_cents=15.0,
        electricity_commercial_cents=10.0,
        electricity_industrial_cents=7.0,
        natural_gas_residential=10.0,
        gasoline_price=3.0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> DatasetCache:
    return DatasetCache(ttl_seconds=60, clock=clock)


# ── Store and Retrieve ────────────────────────────────────────────────────


class TestStoreAndRetrieve:
    @pytest.mark.asyncio
    async def test_hit_after_put(self, cache: DatasetCache) -> None:
        dataset = live_energy()

        assert await cache.put(dataset)
        assert await cache.get("energy", Geography(state="TX")) is dataset
        assert cache.stats()["hits"] == 1

    @pytest.mark.asyncio
    async def test_key_includes_zip(self, cache: DatasetCache) -> None:
        await cache.put(live_energy(zip="77001"))

        assert await cache.get("energy", Geography(state="TX")) is None
        assert await cache.get("energy", Geography(state="TX", zip="77001")) is not None

    @pytest.mark.asyncio
    async def test_key_includes_adapter(self, cache: DatasetCache) -> None:
        await cache.put(live_energy())

        assert await cache.get("climate", Geography(state="TX")) is None

    @pytest.mark.asyncio
    async def test_expiry(self, cache: DatasetCache, clock: FakeClock) -> None:
        await cache.put(live_energy())

        clock.now += 59
        assert await cache.get("energy", Geography(state="TX")) is not None
        clock.now += 1
        assert await cache.get("energy", Geography(state="TX")) is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_degraded_never_stored(self, cache: DatasetCache) -> None:
        assert not await cache.put(fallback_energy(Geography(state="TX")))
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_zero_ttl_disables(self, clock: FakeClock) -> None:
        cache = DatasetCache(ttl_seconds=0, clock=clock)

        assert not cache.enabled
        assert not await cache.put(live_energy())
        assert await cache.get("energy", Geography(state="TX")) is None

    @pytest.mark.asyncio
    async def test_clear(self, cache: DatasetCache) -> None:
        await cache.put(live_energy())
        await cache.clear()

        assert len(cache) == 0


# ── get_or_fetch ──────────────────────────────────────────────────────────


class TestGetOrFetch:
    @pytest.mark.asyncio
    async def test_fetches_once(self, cache: DatasetCache) -> None:
        calls: list[Geography] = []

        async def fetch(geography: Geography) -> EnergyDataset:
            calls.append(geography)
            return live_energy()

        first = await cache.get_or_fetch("energy", Geography(state="TX"), fetch)
        second = await cache.get_or_fetch("energy", Geography(state="TX"), fetch)

        assert first is second
        assert len(calls) == 1
        assert cache.stats()["hit_rate"] == 0.5
