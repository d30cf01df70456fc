"""Tests for the civic adapters.

Tests cover:
- HigherEducationAdapter: Scorecard averages, missing Pell data, scoring
- VeteransAdapter: facility status counts, apikey header, scoring
- FederalSpendingAdapter: FIPS-keyed profile, agency and misuse handling
- RegulatoryAdapter: document type counts, top agencies, burden flag
"""

from datetime import date, timedelta

import httpx
import pytest

from story_verifier.adapters.fallback.civic import REGULATORY_WINDOW_DAYS
from story_verifier.adapters.federal_spending import FederalSpendingAdapter
from story_verifier.adapters.higher_education import FIELDS, HigherEducationAdapter
from story_verifier.adapters.regulatory import RegulatoryAdapter
from story_verifier.adapters.veterans import VeteransAdapter
from story_verifier.data_management.schemas.dataset_schema import (
    FederalSpendingDataset,
    Geography,
    HigherEducationDataset,
    RegulatoryDataset,
    VeteransDataset,
)
from story_verifier.data_management.schemas.story_schema import Story
from story_verifier.transport.errors import FailureReason


# ── Fixtures ──────────────────────────────────────────────────────────────


async def no_sleep(seconds: float) -> None:
    return None


def json_client(payload, requests: list) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=payload)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def story(body: str, policy_area: str = "other", state: str = "TX") -> Story:
    return Story(id="s", body=body, policy_area=policy_area, location={"state": state})


def scorecard_row(size: int, pell, debt, net_price: float, repayment: float) -> dict:
    return {
        FIELDS["name"]: "Example University",
        FIELDS["size"]: size,
        FIELDS["pell"]: pell,
        FIELDS["debt"]: debt,
        FIELDS["net_price"]: net_price,
        FIELDS["repayment"]: repayment,
    }


# ── Higher Education ──────────────────────────────────────────────────────


class TestHigherEducation:
    @pytest.mark.asyncio
    async def test_averages_ignore_missing_fields(self) -> None:
        requests: list[httpx.Request] = []
        payload = {
            "metadata": {"total": 42},
            "results": [
                scorecard_row(30000, 0.3, 20000.0, 15000.0, 0.6),
                scorecard_row(10000, 0.6, None, 12000.0, 0.5),
            ],
        }
        adapter = HigherEducationAdapter(
            http_client=json_client(payload, requests),
            sleep=no_sleep,
            api_key="data-gov",
            base_url="https://ed.test/v1",
        )

        dataset = await adapter.fetch(Geography(state="TX"))

        assert not dataset.degraded
        assert dataset.schools_count == 42
        assert dataset.total_students == 40000
        assert dataset.avg_pell_grant_rate == 0.45
        assert dataset.high_pell_schools == 1
        assert dataset.avg_median_debt == 20000.0
        assert dataset.avg_net_price == 13500.0
        assert dataset.avg_repayment_rate == 0.55
        assert requests[0].url.params["school.state"] == "TX"
        assert requests[0].url.params["_sort"] == "latest.student.size:desc"

    @pytest.mark.asyncio
    async def test_missing_pell_rates_fall_back(self) -> None:
        payload = {"results": [scorecard_row(1000, None, 1.0, 1.0, 0.5)]}
        adapter = HigherEducationAdapter(
            http_client=json_client(payload, []),
            sleep=no_sleep,
            api_key="data-gov",
            base_url="https://ed.test/v1",
        )

        dataset = await adapter.fetch(Geography(state="TX"))

        assert dataset.degraded
        assert dataset.failure_reason == FailureReason.UNKNOWN_ERROR

    def test_pell_debt_and_tuition(self) -> None:
        dataset = HigherEducationDataset(
            geography=Geography(state="TX"),
            vintage="latest",
            provenance="College Scorecard",
            schools_count=210,
            avg_pell_grant_rate=0.4,
            high_pell_schools=48,
            avg_median_debt=22800.0,
            avg_net_price=14900.0,
            avg_repayment_rate=0.52,
        )

        record = HigherEducationAdapter(api_key="k").score(
            story("My Pell grant no longer covers tuition and my student loan debt keeps growing",
                  "education"),
            dataset,
        )

        assert record.confidence == 95
        assert record.metrics["signals"] == [
            "pell", "high_pell_schools", "student_debt", "affordability",
        ]
        assert record.insights[0].type == "higher_education_context"


# ── Veterans ──────────────────────────────────────────────────────────────


def facility(name: str, facility_type: str, status: str) -> dict:
    return {"attributes": {
        "name": name,
        "facilityType": facility_type,
        "operatingStatus": {"code": status},
    }}


class TestVeterans:
    @pytest.mark.asyncio
    async def test_counts_statuses(self) -> None:
        requests: list[httpx.Request] = []
        payload = {"data": [
            facility("Houston VA Medical Center", "va_health_facility", "NORMAL"),
            facility("Austin Vet Center", "vet_center", "LIMITED"),
            facility("Beaumont VA Clinic", "va_health_facility", "CLOSED"),
        ]}
        adapter = VeteransAdapter(
            http_client=json_client(payload, requests),
            sleep=no_sleep,
            api_key="va-key",
            base_url="https://va.test/services/va_facilities/v1",
        )

        dataset = await adapter.fetch(Geography(state="TX"))

        assert dataset.total_facilities == 3
        assert dataset.operating_facilities == 2
        assert dataset.closed_facilities == 1
        assert dataset.health_facilities == 2
        assert dataset.facility_names[0] == "Houston VA Medical Center"
        assert requests[0].headers["apikey"] == "va-key"

    @pytest.mark.asyncio
    async def test_missing_key_degrades(self) -> None:
        requests: list[httpx.Request] = []
        adapter = VeteransAdapter(
            http_client=json_client({"data": []}, requests),
            sleep=no_sleep,
            api_key="",
            base_url="https://va.test",
        )

        dataset = await adapter.fetch(Geography(state="TX"))

        assert dataset.failure_reason == FailureReason.UNAUTHORIZED
        assert requests == []

    def test_closure_and_access(self) -> None:
        dataset = VeteransDataset(
            geography=Geography(state="TX"),
            vintage="current",
            provenance="VA Facilities API",
            total_facilities=120,
            operating_facilities=118,
            closed_facilities=2,
            health_facilities=101,
        )

        record = VeteransAdapter(api_key="k").score(
            story("The VA clinic near me closed and appointment wait times doubled", "healthcare"),
            dataset,
        )

        assert record.confidence == 95
        assert record.metrics["signals"] == ["facility_claim", "closures", "access"]


# ── Federal Spending ──────────────────────────────────────────────────────


def spending_dataset() -> FederalSpendingDataset:
    return FederalSpendingDataset(
        geography=Geography(state="TX"),
        vintage="FY2024",
        provenance="USAspending.gov",
        fiscal_year=2024,
        total_awards=1_000_000_000.0,
        total_contracts=400_000_000.0,
        total_grants=300_000_000.0,
        total_loans=10_000_000.0,
    )


class TestFederalSpending:
    @pytest.mark.asyncio
    async def test_state_profile_by_fips(self) -> None:
        requests: list[httpx.Request] = []
        payload = {
            "fiscal_year": 2024,
            "total_prime_amount": 1_000_000_000,
            "award_amount_contracts": 400_000_000,
            "award_amount_grants": 300_000_000,
            "award_amount_loans": 10_000_000,
        }
        adapter = FederalSpendingAdapter(
            http_client=json_client(payload, requests),
            sleep=no_sleep,
            base_url="https://usa.test/api/v2",
        )

        dataset = await adapter.fetch(Geography(state="TX"))

        expected = spending_dataset().model_dump(exclude={"retrieved_at"})
        assert dataset.model_dump(exclude={"retrieved_at"}) == expected
        assert requests[0].url.path == "/api/v2/recipient/state/48/"

    def test_contract_misuse_flag(self) -> None:
        record = FederalSpendingAdapter().score(
            story("A federal contract went to a contractor accused of waste"), spending_dataset()
        )

        assert record.confidence == 80
        assert record.has_flag("spending_misuse_claim")

    def test_agencies_counted(self) -> None:
        record = FederalSpendingAdapter().score(
            story("The USDA and HHS cut grants to our county"), spending_dataset()
        )

        assert record.confidence == 90
        assert "Story names: hhs, usda" in [i.message for i in record.insights]


# ── Regulatory ────────────────────────────────────────────────────────────


class TestRegulatory:
    @pytest.mark.asyncio
    async def test_document_counts(self) -> None:
        requests: list[httpx.Request] = []
        epa = {"name": "Environmental Protection Agency"}
        payload = {
            "count": 1234,
            "results": [
                {"type": "Rule", "subtype": None, "agencies": [epa]},
                {"type": "Presidential Document", "subtype": "Executive Order",
                 "agencies": [{"raw_name": "Executive Office of the President"}]},
                {"type": "Proposed Rule", "agencies": [epa]},
            ],
        }
        adapter = RegulatoryAdapter(
            http_client=json_client(payload, requests),
            sleep=no_sleep,
            base_url="https://fr.test/api/v1",
        )

        dataset = await adapter.fetch(Geography(state="TX"))

        since = (date.today() - timedelta(days=REGULATORY_WINDOW_DAYS)).isoformat()
        assert dataset.since_date == since
        assert dataset.recent_documents == 1234
        assert dataset.final_rules == 1
        assert dataset.proposed_rules == 1
        assert dataset.executive_orders == 1
        assert dataset.top_agencies == [
            "Environmental Protection Agency", "Executive Office of the President",
        ]
        assert requests[0].url.params["conditions[publication_date][gte]"] == since
        assert requests[0].url.params.get_list("fields[]") == ["type", "subtype", "agencies"]

    def test_executive_order_and_burden(self) -> None:
        dataset = RegulatoryDataset(
            geography=Geography(state="TX"),
            vintage="2026-01-01",
            provenance="Federal Register",
            since_date="2025-12-02",
            recent_documents=2150,
            final_rules=245,
            proposed_rules=190,
            executive_orders=6,
        )

        record = RegulatoryAdapter().score(
            story("A new executive order from the EPA adds red tape"), dataset
        )

        assert record.confidence == 85
        assert record.metrics["signals"] == ["executive_order", "agency"]
        assert record.has_flag("regulatory_burden_claim")
