"""Tests for EnergyAdapter.

Tests cover:
- Three sequential EIA queries parsed into one dataset
- Sector selection from the most recent electricity rows
- Fallback when a later sub-request fails
- Scoring of electricity, natural gas, gasoline and dollar amounts
"""

import httpx
import pytest

from story_verifier.adapters.energy import EnergyAdapter
from story_verifier.data_management.schemas.dataset_schema import EnergyDataset, Geography
from story_verifier.data_management.schemas.story_schema import Story
from story_verifier.transport.errors import FailureReason

ELECTRICITY_ROWS = [
    {"period": "2024", "sectorid": "RES", "price": "15.1"},
    {"period": "2024", "sectorid": "COM", "price": "10.4"},
    {"period": "2024", "sectorid": "IND", "price": "7.2"},
    {"period": "2023", "sectorid": "RES", "price": "14.6"},
]


# ── Fixtures ──────────────────────────────────────────────────────────────


async def no_sleep(seconds: float) -> None:
    return None


def eia_handler(gasoline_status: int = 200):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path.endswith("/electricity/retail-sales/data/"):
            return httpx.Response(200, json={"response": {"data": ELECTRICITY_ROWS}})
        if path.endswith("/natural-gas/pri/sum/data/"):
            return httpx.Response(200, json={"response": {"data": [{"value": "12.5"}]}})
        if path.endswith("/petroleum/pri/gnd/data/"):
            if gasoline_status != 200:
                return httpx.Response(gasoline_status)
            return httpx.Response(200, json={"response": {"data": [{"value": "3.10"}]}})
        return httpx.Response(404)

    return handler, requests


def make_adapter(handler) -> EnergyAdapter:
    return EnergyAdapter(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=no_sleep,
        api_key="eia-key",
        base_url="https://eia.test/v2",
    )


def texas_energy() -> EnergyDataset:
    return EnergyDataset(
        geography=Geography(state="TX"),
        vintage="2024",
        provenance="EIA Electric Power Monthly",
        electricity_residential_cents=15.0,
        electricity_commercial_cents=10.0,
        electricity_industrial_cents=7.0,
        natural_gas_residential=10.0,
        gasoline_price=3.0,
    )


def story(body: str) -> Story:
    return Story(id="s", body=body, policy_area="energy", location={"state": "TX"})


# ── Fetch Tests ───────────────────────────────────────────────────────────


class TestFetch:
    @pytest.mark.asyncio
    async def test_parses_three_queries(self) -> None:
        handler, requests = eia_handler()

        dataset = await make_adapter(handler).fetch(Geography(state="TX"))

        assert not dataset.degraded
        assert dataset.vintage == "2024"
        assert dataset.electricity_residential_cents == 15.1
        assert dataset.electricity_industrial_cents == 7.2
        assert dataset.natural_gas_residential == 12.5
        assert dataset.gasoline_price == 3.10
        assert len(requests) == 3
        assert requests[0].url.params["facets[stateid][]"] == "TX"
        assert requests[0].url.params.get_list("facets[sectorid][]") == ["RES", "COM", "IND"]
        assert requests[1].url.params["facets[duoarea][]"] == "STX"

    @pytest.mark.asyncio
    async def test_late_failure_falls_back(self) -> None:
        handler, requests = eia_handler(gasoline_status=401)

        dataset = await make_adapter(handler).fetch(Geography(state="TX"))

        assert dataset.degraded
        assert dataset.failure_reason == FailureReason.UNAUTHORIZED
        assert dataset.electricity_residential_cents == 14.2


# ── Scoring Tests ─────────────────────────────────────────────────────────


class TestScore:
    def test_electric_bill_with_amount(self) -> None:
        record = EnergyAdapter(api_key="k").score(
            story("My electric bill hit $250 this summer"), texas_energy()
        )

        assert record.confidence == 85
        assert record.metrics["monthly_electric_bill"] == 133.95
        assert record.metrics["mentioned_amounts"] == [250.0]

    def test_all_fuels(self) -> None:
        record = EnergyAdapter(api_key="k").score(
            story("Power, heating and gasoline costs all rose"), texas_energy()
        )

        assert record.confidence == 95
        assert record.metrics["signals"] == ["electricity", "natural_gas", "gasoline"]

    def test_context_insight_always_present(self) -> None:
        record = EnergyAdapter(api_key="k").score(story("Energy policy changed"), texas_energy())

        assert record.confidence == 70
        assert record.insights[0].type == "state_energy_context"
