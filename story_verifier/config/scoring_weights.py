"""Default confidence weights per adapter.

Baselines and increments are empirically chosen heuristics, not calibrated
probabilities. They are kept as data so they can be tuned per deployment
through SCORING_WEIGHT_OVERRIDES without touching adapter code.

Shared limits:
- Relevant records are clamped to [0, MAX_ADAPTER_CONFIDENCE]
- A record is verified at VERIFIED_THRESHOLD or above
- Degraded (fallback) datasets score DEGRADED_CONFIDENCE
"""

from typing import Dict, Mapping, Optional

MAX_ADAPTER_CONFIDENCE = 95
VERIFIED_THRESHOLD = 60
DEGRADED_CONFIDENCE = 50
NEUTRAL_CONFIDENCE = 50

DEFAULT_WEIGHTS: Dict[str, Dict[str, int]] = {
    "demographics": {
        "baseline": 50,
        "income_match": 25,
        "population_plausible": 25,
        "economic_hardship": 5,
    },
    "energy": {
        "baseline": 70,
        "electricity": 10,
        "natural_gas": 10,
        "gasoline": 10,
        "dollar_amount": 5,
    },
    "climate": {
        "baseline": 65,
        "heat": 10,
        "precipitation": 10,
        "severe_weather": 10,
        "named_event": 5,
    },
    "housing": {
        "baseline": 70,
        "severe_burden": 15,
        "moderate_burden": 10,
        "affordability_language": 5,
        "dollar_amount": 10,
        "eviction": 5,
        "voucher": 10,
    },
    "infrastructure": {
        "baseline": 70,
        "bridge": 15,
        "road": 10,
        "transit": 10,
        "funding": 5,
        "safety": 5,
    },
    "emergency": {
        "baseline": 70,
        "disaster_type_match": 5,
        "assistance": 10,
        "recent_declarations": 10,
    },
    "crime": {
        "baseline": 65,
        "unreported": 15,
        "violent": 10,
        "serious_violent": 5,
    },
    "campaign_finance": {
        "baseline": 60,
        "candidate_named": 15,
        "committee_named": 15,
        "contributions": 10,
        "state_match": 10,
    },
    "legislative": {
        "baseline": 65,
        "matching_bills": 10,
        "activity_increasing": 10,
        "bill_reference": 10,
    },
    "higher_education": {
        "baseline": 65,
        "pell": 10,
        "student_debt": 10,
        "affordability": 5,
        "high_pell_schools": 5,
    },
    "veterans": {
        "baseline": 60,
        "facility_claim": 15,
        "closures": 10,
        "access": 10,
    },
    "federal_spending": {
        "baseline": 70,
        "contracts": 10,
        "grants": 10,
        "infrastructure": 5,
        "agency": 5,
    },
    "regulatory": {
        "baseline": 70,
        "executive_order": 10,
        "agency": 5,
    },
}


class AdapterConfigurationError(ValueError):
    """Raised at adapter construction when configuration is malformed."""


def resolve_weights(
    adapter_name: str,
    overrides: Optional[Mapping[str, int]] = None,
) -> Dict[str, int]:
    """
    Merge weight overrides over the defaults for one adapter.

    Args:
        adapter_name: Adapter whose defaults to start from
        overrides: Optional per-weight overrides

    Returns:
        New dict of weights

    Raises:
        AdapterConfigurationError: Unknown adapter, unknown weight key,
            negative increment or baseline outside [0, 95]
    """
    if adapter_name not in DEFAULT_WEIGHTS:
        raise AdapterConfigurationError(f"No default weights for adapter '{adapter_name}'")

    weights = dict(DEFAULT_WEIGHTS[adapter_name])
    for key, value in (overrides or {}).items():
        if key not in weights:
            raise AdapterConfigurationError(
                f"Unknown weight '{key}' for adapter '{adapter_name}'"
            )
        if not isinstance(value, int) or value < 0:
            raise AdapterConfigurationError(
                f"Weight '{adapter_name}.{key}' must be a non-negative integer"
            )
        weights[key] = value

    if weights["baseline"] > MAX_ADAPTER_CONFIDENCE:
        raise AdapterConfigurationError(
            f"Baseline for '{adapter_name}' exceeds {MAX_ADAPTER_CONFIDENCE}"
        )
    return weights
