"""Tests for EmergencyAdapter.

Tests cover:
- De-duplication of county-level declaration rows by disaster number
- Recent-declaration window and housing assistance totals
- Scoring per mentioned disaster type on record for the state
- Assistance and recent activity credits
"""

from datetime import date

import httpx
import pytest

from story_verifier.adapters.emergency import EmergencyAdapter
from story_verifier.data_management.schemas.dataset_schema import EmergencyDataset, Geography
from story_verifier.data_management.schemas.story_schema import Story

THIS_YEAR = date.today().year


# ── Fixtures ──────────────────────────────────────────────────────────────


async def no_sleep(seconds: float) -> None:
    return None


def fema_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/DisasterDeclarationsSummaries"):
        return httpx.Response(200, json={"DisasterDeclarationsSummaries": [
            {"disasterNumber": 4800, "incidentType": "Flood",
             "declarationDate": f"{THIS_YEAR}-01-15T00:00:00.000Z"},
            {"disasterNumber": 4800, "incidentType": "Flood",
             "declarationDate": f"{THIS_YEAR}-01-15T00:00:00.000Z"},
            {"disasterNumber": 4332, "incidentType": "Hurricane",
             "declarationDate": "2017-08-25T00:00:00.000Z"},
        ]})
    if request.url.path.endswith("/HousingAssistanceOwners"):
        return httpx.Response(200, json={"HousingAssistanceOwners": [
            {"approvedForFemaAssistance": 10, "totalApprovedIhpAmount": 5000.0},
            {"approvedForFemaAssistance": 5, "totalApprovedIhpAmount": 2500.0},
        ]})
    return httpx.Response(404)


def make_adapter() -> EmergencyAdapter:
    return EmergencyAdapter(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(fema_handler)),
        sleep=no_sleep,
        base_url="https://fema.test/api/open/v2",
    )


def emergency_dataset(recent: int = 3) -> EmergencyDataset:
    return EmergencyDataset(
        geography=Geography(state="TX"),
        vintage="2024",
        provenance="OpenFEMA Disaster Declarations",
        total_declarations=40,
        declarations_last_5_years=recent,
        disaster_types={"Tornado": 3, "Flood": 9},
        most_recent_declaration="2024-07-09",
        housing_assistance_applicants=1200,
        housing_assistance_amount=9_000_000.0,
    )


def story(body: str) -> Story:
    return Story(id="s", body=body, policy_area="environment", location={"state": "TX"})


# ── Fetch Tests ───────────────────────────────────────────────────────────


class TestFetch:
    @pytest.mark.asyncio
    async def test_deduplicates_declarations(self) -> None:
        dataset = await make_adapter().fetch(Geography(state="TX"))

        assert not dataset.degraded
        assert dataset.total_declarations == 2
        assert dataset.declarations_last_5_years == 1
        assert dataset.disaster_types == {"Flood": 1, "Hurricane": 1}
        assert dataset.most_recent_declaration == f"{THIS_YEAR}-01-15"
        assert dataset.vintage == str(THIS_YEAR)

    @pytest.mark.asyncio
    async def test_assistance_totals(self) -> None:
        dataset = await make_adapter().fetch(Geography(state="TX"))

        assert dataset.housing_assistance_applicants == 15
        assert dataset.housing_assistance_amount == 7500.0


# ── Scoring Tests ─────────────────────────────────────────────────────────


class TestScore:
    def test_single_disaster_type(self) -> None:
        record = EmergencyAdapter().score(story("A tornado hit our town"), emergency_dataset(recent=0))

        assert record.confidence == 75
        messages = [i.message for i in record.insights]
        assert "Tornado disasters: 3 federal declarations in Texas" in messages

    def test_disaster_assistance_and_recent_activity(self) -> None:
        record = EmergencyAdapter().score(
            story("The flood and hurricane wrecked homes and FEMA assistance was delayed"),
            emergency_dataset(),
        )

        assert record.confidence == 95
        assert record.metrics["signals"] == [
            "disaster_type_match", "assistance", "recent_declarations",
        ]
        assert "assistance_issue" in [i.type for i in record.insights]
        assert record.flags[0].code == "red_flag"

    def test_type_absent_from_history_earns_nothing(self) -> None:
        dataset = emergency_dataset(recent=0).model_copy(update={"disaster_types": {"Flood": 9}})

        generic = EmergencyAdapter().score(story("A disaster hit us"), dataset)
        hurricane = EmergencyAdapter().score(story("A hurricane disaster hit us"), dataset)

        assert generic.confidence == 70
        assert hurricane.confidence == 70
        assert "disaster_type_match" not in hurricane.metrics["signals"]
        assert "disaster_type_match" not in [i.type for i in hurricane.insights]

    def test_credits_each_type_on_record(self) -> None:
        record = EmergencyAdapter().score(
            story("The tornado and then the flood"), emergency_dataset(recent=0)
        )

        assert record.confidence == 80
        assert [i.type for i in record.insights].count("disaster_type_match") == 2

    def test_most_common_type_metric(self) -> None:
        record = EmergencyAdapter().score(story("Another storm came through"), emergency_dataset())

        assert record.metrics["most_common_type"] == "Flood"
