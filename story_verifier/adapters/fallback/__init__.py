"""Deterministic fallback datasets used when an upstream is unavailable.

Every provider returns a dataset with degraded=True and a provenance ending
in " (fallback)". FALLBACK_PROVIDERS maps adapter name to its provider.
"""

from typing import Callable, Dict

from story_verifier.adapters.fallback.civic import (
    fallback_campaign_finance,
    fallback_crime,
    fallback_federal_spending,
    fallback_higher_education,
    fallback_legislative,
    fallback_regulatory,
    fallback_veterans,
)
from story_verifier.adapters.fallback.economic import (
    fallback_demographics,
    fallback_energy,
    fallback_housing,
)
from story_verifier.adapters.fallback.environment import fallback_climate, fallback_emergency
from story_verifier.adapters.fallback.infrastructure import fallback_infrastructure
from story_verifier.data_management.schemas.dataset_schema import Geography, SourceDataset

FALLBACK_PROVIDERS: Dict[str, Callable[[Geography], SourceDataset]] = {
    "demographics": fallback_demographics,
    "energy": fallback_energy,
    "climate": fallback_climate,
    "housing": fallback_housing,
    "infrastructure": fallback_infrastructure,
    "emergency": fallback_emergency,
    "crime": fallback_crime,
    "campaign_finance": fallback_campaign_finance,
    "legislative": fallback_legislative,
    "higher_education": fallback_higher_education,
    "veterans": fallback_veterans,
    "federal_spending": fallback_federal_spending,
    "regulatory": fallback_regulatory,
}

__all__ = [
    "FALLBACK_PROVIDERS",
    "fallback_demographics",
    "fallback_energy",
    "fallback_climate",
    "fallback_housing",
    "fallback_infrastructure",
    "fallback_emergency",
    "fallback_crime",
    "fallback_campaign_finance",
    "fallback_legislative",
    "fallback_higher_education",
    "fallback_veterans",
    "fallback_federal_spending",
    "fallback_regulatory",
]
