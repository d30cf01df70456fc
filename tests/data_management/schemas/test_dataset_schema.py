"""Tests for normalized source dataset models.

Tests cover:
- Derived housing metrics (affordable rent, burden ratio and level)
- Percent helpers with zero denominators
- Legislative per-area trend computation
- Tagged-union round trip through JSON
"""

import pytest
from pydantic import TypeAdapter

from story_verifier.data_management.schemas.dataset_schema import (
    AnySourceDataset,
    CrimeDataset,
    EnergyDataset,
    Geography,
    HousingDataset,
    LegislativeDataset,
    pct_change,
    percentage,
)


# ── Fixtures ──────────────────────────────────────────────────────────────


def housing(median_income: int, fmr_2br: int) -> HousingDataset:
    return HousingDataset(
        geography=Geography(state="TX"),
        vintage="FY2024",
        provenance="HUD Fair Market Rents",
        fmr_efficiency=700,
        fmr_one_bedroom=800,
        fmr_two_bedroom=fmr_2br,
        fmr_three_bedroom=1200,
        fmr_four_bedroom=1400,
        median_family_income=median_income,
        very_low_income_limit=40000,
        low_income_limit=64000,
    )


# ── Helper Tests ──────────────────────────────────────────────────────────


class TestPercentHelpers:
    def test_percentage(self) -> None:
        assert percentage(1, 3) == 25.0

    def test_percentage_zero_denominator(self) -> None:
        assert percentage(0, 0) == 0.0

    def test_pct_change(self) -> None:
        assert pct_change(100, 130) == pytest.approx(30.0)

    def test_pct_change_zero_baseline(self) -> None:
        assert pct_change(0, 50) == 0.0


# ── Housing Tests ─────────────────────────────────────────────────────────


class TestHousingDataset:
    def test_low_burden(self) -> None:
        dataset = housing(85000, 893)

        assert dataset.affordable_monthly_rent == 2125.0
        assert dataset.rent_burden_ratio == 42.0
        assert dataset.burden_level == "Low"

    def test_high_burden(self) -> None:
        dataset = housing(48000, 1500)

        assert dataset.affordable_monthly_rent == 1200.0
        assert dataset.rent_burden_ratio == 125.0
        assert dataset.burden_level == "High"

    def test_moderate_burden(self) -> None:
        assert housing(48000, 1000).burden_level == "Moderate"

    def test_zero_income(self) -> None:
        assert housing(0, 900).rent_burden_ratio == 0.0


# ── Other Variant Tests ───────────────────────────────────────────────────


class TestDerivedMetrics:
    def test_energy_bills(self) -> None:
        dataset = EnergyDataset(
            geography=Geography(state="CA"),
            vintage="2024",
            provenance="EIA",
            electricity_residential_cents=30.0,
            electricity_commercial_cents=22.0,
            electricity_industrial_cents=18.0,
            natural_gas_residential=20.0,
            gasoline_price=4.5,
        )

        assert dataset.monthly_electric_bill == 267.9
        assert dataset.monthly_gas_bill == 116.0
        assert dataset.monthly_gasoline_cost == 225.0

    def test_crime_reporting_rate(self) -> None:
        dataset = CrimeDataset(
            geography=Geography(state="US"),
            vintage="2023",
            provenance="BJS",
            total_victimizations=100,
            reported_to_police=40,
            not_reported=60,
            violent=30,
            serious_violent=10,
        )

        assert dataset.reporting_rate == 40.0

    def test_legislative_trend(self) -> None:
        dataset = LegislativeDataset(
            geography=Geography(state="TX"),
            vintage="119th Congress",
            provenance="Congress.gov",
            bills_sampled=250,
            current_policy_counts={"housing": 13, "energy": 7, "justice": 10},
            baseline_policy_counts={"housing": 10, "energy": 10, "justice": 10},
        )

        assert dataset.activity_trend("housing") == "increasing"
        assert dataset.activity_trend("energy") == "decreasing"
        assert dataset.activity_trend("justice") == "stable"
        assert dataset.bill_count("immigration") == 0


# ── Union Tests ───────────────────────────────────────────────────────────


class TestTaggedUnion:
    def test_round_trip_selects_variant(self) -> None:
        original = housing(85000, 893)
        adapter = TypeAdapter(AnySourceDataset)

        restored = adapter.validate_json(original.model_dump_json())

        assert isinstance(restored, HousingDataset)
        assert restored.rent_burden_ratio == 42.0

    def test_geography_state_upper_cased(self) -> None:
        assert Geography(state=" ny ").state == "NY"
