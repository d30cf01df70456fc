"""Verification output schemas.

Per-adapter VerificationRecords are merged by the aggregator into one
AggregatedVerification per story. Records are immutable once produced so the
aggregator can reorder and share them freely.

Record semantics:
- confidence None: adapter decided the story is not in its scope
- confidence 50 + data_unavailable insight: upstream failed, fallback scored
- verified: confidence >= 60 and no data_implausible flag
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from story_verifier.data_management.schemas.dataset_schema import AnySourceDataset


class Severity(str, Enum):
    """Flag severity, ordered low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Insight(BaseModel):
    """Short factual context line produced by an adapter."""

    type: str = Field(..., description="Insight category, e.g. 'rent_context'")
    message: str = Field(..., description="Human-readable insight")

    model_config = {"frozen": True}


class Flag(BaseModel):
    """Warning attached to a record. High flags never block the pipeline."""

    severity: Severity
    message: str
    code: str = Field("red_flag", description="Machine-readable flag code")

    model_config = {"frozen": True}


class VerificationRecord(BaseModel):
    """One adapter's verdict on one story."""

    adapter: str = Field(..., description="Adapter name")
    verified: bool = False
    confidence: Optional[int] = Field(
        None,
        ge=0,
        le=100,
        description="0-100 confidence, None when the story is out of scope",
    )
    insights: list[Insight] = Field(default_factory=list)
    flags: list[Flag] = Field(default_factory=list)
    metrics: dict[str, Any] = Field(
        default_factory=dict,
        description="Domain metrics backing the verdict (rent burden, bill counts, ...)",
    )
    data_source: str = Field("", description="Dataset provenance")

    @property
    def fired(self) -> bool:
        """True when the adapter found the story relevant."""
        return self.confidence is not None

    def has_flag(self, code: str) -> bool:
        return any(flag.code == code for flag in self.flags)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "adapter": "housing",
                    "verified": True,
                    "confidence": 75,
                    "insights": [
                        {"type": "rent_burden", "message": "Rent burden in Texas is 42.0% of affordable rent"}
                    ],
                    "flags": [],
                    "metrics": {"rent_burden_ratio": 42.0},
                    "data_source": "HUD Fair Market Rents",
                }
            ]
        },
    }


class AggregatedVerification(BaseModel):
    """Merged verdict for one story across every invoked adapter.

    Invariants:
    - confidence is the max over fired adapters, or 50 when none fired
    - insights and flags keep adapter invocation order
    - per_adapter holds every record whose adapter completed, fired or not
    """

    story_id: str
    verified: bool = False
    confidence: int = Field(..., ge=0, le=100)
    data_source: str = Field("none", description="Provenances joined with ' + '")
    insights: list[Insight] = Field(default_factory=list)
    flags: list[Flag] = Field(default_factory=list)
    per_adapter: dict[str, VerificationRecord] = Field(default_factory=dict)
    adapters_invoked: list[str] = Field(default_factory=list)
    verified_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def fired_adapters(self) -> list[str]:
        return [name for name in self.adapters_invoked
                if name in self.per_adapter and self.per_adapter[name].fired]

    @property
    def degraded(self) -> bool:
        """True when any contributing dataset came from a fallback provider."""
        return "(fallback)" in self.data_source


class StoryContext(BaseModel):
    """Raw datasets for a state and policy area, fetched without scoring."""

    state: str
    policy_area: str
    zip: Optional[str] = None
    datasets: dict[str, AnySourceDataset] = Field(default_factory=dict)
    degraded_sources: list[str] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
