"""Shared scoring helpers for source adapters.

Every adapter scores the same way:
1. Start from the adapter baseline
2. Add a fixed increment per corroborating signal found in story + dataset
3. Append red-flag phrases as flags
4. Clamp to [0, MAX_ADAPTER_CONFIDENCE]
5. verified = confidence >= VERIFIED_THRESHOLD and no data_implausible flag

ScoreCard accumulates those steps so adapters only describe their signals.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from story_verifier.config.keywords import RED_FLAG_PHRASES, contains_term
from story_verifier.config.scoring_weights import (
    DEGRADED_CONFIDENCE,
    MAX_ADAPTER_CONFIDENCE,
    VERIFIED_THRESHOLD,
)
from story_verifier.data_management.schemas.dataset_schema import SourceDataset
from story_verifier.data_management.schemas.verification_schema import (
    Flag,
    Insight,
    Severity,
    VerificationRecord,
)

DATA_IMPLAUSIBLE = "data_implausible"

_DOLLAR_PATTERN = re.compile(r"\$\s?(\d[\d,]*(?:\.\d+)?)\s*([kKmM]\b)?")


def extract_dollar_amounts(text: str) -> List[float]:
    """Dollar figures mentioned in text, e.g. "$1,200" or "$45k"."""
    amounts = []
    for number, suffix in _DOLLAR_PATTERN.findall(text):
        value = float(number.replace(",", ""))
        if suffix.lower() == "k":
            value *= 1_000
        elif suffix.lower() == "m":
            value *= 1_000_000
        amounts.append(value)
    return amounts


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, round(value))))


def red_flags(
    text: str,
    phrases: Mapping[str, Tuple[str, str]] = RED_FLAG_PHRASES,
) -> List[Flag]:
    """Flags for every red-flag phrase present in text, in table order."""
    return [
        Flag(severity=Severity(severity), message=message, code="red_flag")
        for phrase, (severity, message) in phrases.items()
        if contains_term(text, phrase)
    ]


@dataclass
class ScoreCard:
    """Mutable accumulator for one adapter's verdict on one story.

    Attributes:
        adapter: Adapter name written to the record
        weights: Resolved weight table (must contain "baseline")
        confidence: Running score, starts at the baseline
        signals: Names of the weights that fired, in order
    """

    adapter: str
    weights: Mapping[str, int]
    confidence: int = 0
    signals: List[str] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)
    flags: List[Flag] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.confidence = self.weights["baseline"]

    def add(self, signal: str, times: int = 1) -> None:
        """Credit a corroborating signal (times > 1 for per-item weights)."""
        if times <= 0:
            return
        self.confidence += self.weights[signal] * times
        self.signals.append(signal)

    def insight(self, type_: str, message: str) -> None:
        self.insights.append(Insight(type=type_, message=message))

    def flag(self, severity: str, message: str, code: str = "red_flag") -> None:
        self.flags.append(Flag(severity=Severity(severity), message=message, code=code))

    def check_population(
        self,
        claimed: Optional[int],
        population: Optional[int],
        where: str,
    ) -> Optional[bool]:
        """Compare a claimed affected population with the geography's population.

        Returns:
            True when plausible, False when implausible (a high data_implausible
            flag is added), None when either figure is unknown
        """
        if claimed is None or population is None:
            return None
        if claimed > population:
            self.flag(
                "high",
                f"Claimed affected population ({claimed:,}) exceeds the population "
                f"of {where} ({population:,})",
                code=DATA_IMPLAUSIBLE,
            )
            return False
        return True

    @property
    def implausible(self) -> bool:
        return any(flag.code == DATA_IMPLAUSIBLE for flag in self.flags)

    def record(self, data_source: str) -> VerificationRecord:
        confidence = clamp(self.confidence, 0, MAX_ADAPTER_CONFIDENCE)
        metrics = dict(self.metrics)
        metrics["signals"] = list(self.signals)
        return VerificationRecord(
            adapter=self.adapter,
            verified=confidence >= VERIFIED_THRESHOLD and not self.implausible,
            confidence=confidence,
            insights=list(self.insights),
            flags=list(self.flags),
            metrics=metrics,
            data_source=data_source,
        )


def not_relevant_record(adapter: str, display_name: str) -> VerificationRecord:
    return VerificationRecord(
        adapter=adapter,
        verified=False,
        confidence=None,
        insights=[
            Insight(
                type="not_relevant",
                message=f"Story does not reference {display_name} topics",
            )
        ],
    )


def degraded_record(
    adapter: str,
    display_name: str,
    dataset: SourceDataset,
    flags: Sequence[Flag] = (),
) -> VerificationRecord:
    """Neutral record for a story checked against fallback data.

    Confidence stays at DEGRADED_CONFIDENCE; flags raised from the story text
    or the reference population are kept.
    """
    reason = dataset.failure_reason.value if dataset.failure_reason else "unavailable"
    return VerificationRecord(
        adapter=adapter,
        verified=False,
        confidence=DEGRADED_CONFIDENCE,
        insights=[
            Insight(
                type="data_unavailable",
                message=(
                    f"{display_name} data temporarily unavailable ({reason}); "
                    "confidence held neutral"
                ),
            )
        ],
        flags=list(flags),
        metrics={"degraded": True, "failure_reason": reason},
        data_source=dataset.provenance,
    )
