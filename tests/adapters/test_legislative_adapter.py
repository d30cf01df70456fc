"""Tests for LegislativeAdapter.

Tests cover:
- Congress number computation
- Per-policy-area title counts for current and baseline Congresses
- Scoring of matching bills, increasing activity and bill references
"""

from datetime import date

import httpx
import pytest

from story_verifier.adapters.legislative import LegislativeAdapter, congress_for, count_by_policy
from story_verifier.data_management.schemas.dataset_schema import Geography, LegislativeDataset
from story_verifier.data_management.schemas.story_schema import Story


# ── Fixtures ──────────────────────────────────────────────────────────────


async def no_sleep(seconds: float) -> None:
    return None


def congress_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith(f"/bill/{congress_for()}"):
        return httpx.Response(200, json={"bills": [
            {"title": "Border Security Enhancement Act"},
            {"title": "Asylum Processing Reform Act"},
            {"title": "Student Loan Relief Act"},
        ]})
    return httpx.Response(200, json={"bills": [{"title": "Visa Integrity Act"}]})


def legislative_dataset(current: int = 6, baseline: int = 4) -> LegislativeDataset:
    return LegislativeDataset(
        geography=Geography(state="CA"),
        vintage="119th Congress",
        provenance="Congress.gov",
        bills_sampled=250,
        current_policy_counts={"immigration": current},
        baseline_policy_counts={"immigration": baseline},
    )


def story(body: str) -> Story:
    return Story(id="s", body=body, policy_area="immigration", location={"state": "CA"})


# ── Helper Tests ──────────────────────────────────────────────────────────


class TestHelpers:
    def test_congress_number(self) -> None:
        assert congress_for(date(2025, 1, 3)) == 119
        assert congress_for(date(2026, 6, 1)) == 119
        assert congress_for(date(2027, 1, 3)) == 120

    def test_count_by_policy(self) -> None:
        counts = count_by_policy(["Border Security Act", "Student Loan Relief Act"])

        assert counts["immigration"] == 1
        assert counts["education"] == 1
        assert counts["housing"] == 0


# ── Fetch Tests ───────────────────────────────────────────────────────────


class TestFetch:
    @pytest.mark.asyncio
    async def test_counts_current_and_baseline(self) -> None:
        adapter = LegislativeAdapter(
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(congress_handler)),
            sleep=no_sleep,
            api_key="congress-key",
            base_url="https://congress.test/v3",
        )

        dataset = await adapter.fetch(Geography(state="CA"))

        assert not dataset.degraded
        assert dataset.bills_sampled == 3
        assert dataset.current_congress == congress_for()
        assert dataset.bill_count("immigration") == 2
        assert dataset.baseline_policy_counts["immigration"] == 1
        assert dataset.activity_trend("immigration") == "increasing"
        assert dataset.recent_titles[0] == "Border Security Enhancement Act"


# ── Scoring Tests ─────────────────────────────────────────────────────────


class TestScore:
    def test_increasing_activity_with_bill_reference(self) -> None:
        record = LegislativeAdapter(api_key="k").score(
            story("Congress is debating H.R. 1234 on asylum"), legislative_dataset()
        )

        assert record.confidence == 95
        assert record.metrics["activity_trend"] == "increasing"
        assert record.metrics["signals"] == ["matching_bills", "activity_increasing", "bill_reference"]

    def test_stable_activity(self) -> None:
        record = LegislativeAdapter(api_key="k").score(
            story("Congress keeps talking about asylum"), legislative_dataset(5, 5)
        )

        assert record.confidence == 75
        assert record.metrics["activity_trend"] == "stable"

    def test_no_matching_bills(self) -> None:
        record = LegislativeAdapter(api_key="k").score(
            story("Congress keeps talking about asylum"), legislative_dataset(0, 0)
        )

        assert record.confidence == 65
        assert record.metrics["current_bill_count"] == 0
