"""Tests for verification output models.

Tests cover:
- Record fired semantics and flag lookup
- Confidence bounds
- Aggregated view helpers (fired adapters, degraded detection)
"""

import pytest
from pydantic import ValidationError

from story_verifier.data_management.schemas.verification_schema import (
    AggregatedVerification,
    Flag,
    Severity,
    VerificationRecord,
)


class TestVerificationRecord:
    def test_not_relevant_record_has_not_fired(self) -> None:
        assert not VerificationRecord(adapter="energy").fired

    def test_scored_record_has_fired(self) -> None:
        assert VerificationRecord(adapter="energy", confidence=0).fired

    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            VerificationRecord(adapter="energy", confidence=101)

    def test_has_flag(self) -> None:
        record = VerificationRecord(
            adapter="housing",
            confidence=70,
            flags=[Flag(severity=Severity.HIGH, message="x", code="data_implausible")],
        )
        assert record.has_flag("data_implausible")
        assert not record.has_flag("red_flag")


class TestAggregatedVerification:
    def test_fired_adapters_in_invocation_order(self) -> None:
        result = AggregatedVerification(
            story_id="s",
            confidence=80,
            adapters_invoked=["energy", "climate", "emergency"],
            per_adapter={
                "emergency": VerificationRecord(adapter="emergency", confidence=80),
                "climate": VerificationRecord(adapter="climate"),
                "energy": VerificationRecord(adapter="energy", confidence=70),
            },
        )

        assert result.fired_adapters == ["energy", "emergency"]

    def test_degraded_detected_from_provenance(self) -> None:
        result = AggregatedVerification(
            story_id="s",
            confidence=50,
            data_source="EIA + NOAA Climate Data (fallback)",
        )
        assert result.degraded

    def test_default_data_source_is_none(self) -> None:
        result = AggregatedVerification(story_id="s", confidence=50)
        assert result.data_source == "none"
        assert not result.degraded
