"""Declarative keyword tables for topic relevance, routing and red flags.

All matching is case-insensitive and anchored at a word start over headline +
body, so stems such as "evict" or "evacuat" cover their inflections while
"ice" does not fire on "price". Tables here are data: adapters and the
router read them, nothing here calls back into code.

Table overview:
- RELEVANCE_KEYWORDS: adapter name -> vocabulary that makes a story in scope
- DISASTER_KEYWORDS: cross-cutting trigger for the emergency adapter
- EXTENDED_TRIGGERS: optional cross-cutting triggers for the extended profile
- RED_FLAG_PHRASES: phrase -> (severity, message) appended as flags
"""

import re
from typing import Dict, FrozenSet, Iterable, Tuple

RELEVANCE_KEYWORDS: Dict[str, FrozenSet[str]] = {
    "demographics": frozenset({
        "income", "population", "poverty", "unemploy", "jobless", "wage",
        "household", "census", "neighborhood", "community", "residents",
        "layoff", "laid off", "salary",
    }),
    "energy": frozenset({
        "energy", "electric", "utility", "utilities", "gas", "gasoline",
        "fuel", "power", "heating", "cooling", "kwh",
    }),
    "climate": frozenset({
        "climate", "weather", "temperature", "heat", "cold", "rain", "flood",
        "drought", "storm", "hurricane", "tornado", "snow", "ice",
        "precipitation",
    }),
    "housing": frozenset({
        "rent", "housing", "apartment", "evict", "afford", "homeless",
        "section 8", "public housing", "landlord", "lease", "mortgage",
        "burden",
    }),
    "infrastructure": frozenset({
        "road", "bridge", "highway", "transit", "bus", "train", "subway",
        "infrastructure", "pothole", "traffic", "construction", "commute",
    }),
    "emergency": frozenset({
        "disaster", "emergency", "fema", "flood", "hurricane", "tornado",
        "wildfire", "earthquake", "storm", "evacuat", "relief", "recovery",
    }),
    "crime": frozenset({
        "crime", "violence", "violent", "assault", "robbery", "theft",
        "burglary", "victim", "police", "safety", "dangerous", "unsafe",
        "unreported", "stolen", "break-in", "attack",
    }),
    "campaign_finance": frozenset({
        "campaign", "donation", "donor", "contribution", "pac", "super pac",
        "fundrais", "candidate", "election", "dark money", "lobby",
    }),
    "legislative": frozenset({
        "congress", "bill", "legislation", "senate", "house of representatives",
        "lawmaker", "vote", "voted", "representative", "senator", "act of",
        "schedule f",
    }),
    "higher_education": frozenset({
        "college", "university", "tuition", "student loan", "student debt",
        "pell", "financial aid", "campus", "fafsa", "pslf", "scholarship",
    }),
    "veterans": frozenset({
        "veteran", "va clinic", "va hospital", "va facility", "va closed",
        "va benefits", "va form", "military service", "gi bill",
    }),
    "federal_spending": frozenset({
        "spending", "contract", "grant", "federal fund", "government fund",
        "budget", "appropriation", "subsidy", "award", "stimulus",
        "infrastructure bill", "federal money", "taxpayer",
    }),
    "regulatory": frozenset({
        "regulation", "rule", "executive order", "federal register",
        "compliance", "regulatory", "policy change", "new law", "requirement",
        "mandate",
    }),
}

DISASTER_KEYWORDS: FrozenSet[str] = frozenset({
    "disaster", "emergency", "fema", "flood", "hurricane", "tornado",
    "wildfire", "earthquake", "storm", "evacuat",
})

# Cross-cutting triggers active only under the "extended" routing profile
EXTENDED_TRIGGERS: Dict[str, FrozenSet[str]] = {
    "veterans": RELEVANCE_KEYWORDS["veterans"],
    "campaign_finance": frozenset({
        "campaign donation", "campaign contribution", "super pac", "dark money",
        "fec", "campaign finance",
    }),
    "federal_spending": frozenset({
        "federal fund", "federal grant", "federal contract", "federal money",
        "usaspending", "appropriation", "taxpayer",
    }),
    "regulatory": frozenset({
        "executive order", "federal register", "new regulation", "new rule",
        "regulatory",
    }),
    "legislative": frozenset({
        "congress", "legislation", "senate bill", "house bill", "schedule f",
    }),
}

RED_FLAG_PHRASES: Dict[str, Tuple[str, str]] = {
    "denied": ("high", "Story reports denied assistance or benefits"),
    "fraud": ("high", "Story alleges fraud"),
    "delay": ("medium", "Story reports delays"),
    "waiting": ("medium", "Story reports long waiting periods"),
    "evict": ("medium", "Story reports an eviction"),
}

# Disaster vocabulary -> FEMA incident type names present in declarations
DISASTER_TYPE_TERMS: Dict[str, Tuple[str, ...]] = {
    "flood": ("Flood",),
    "hurricane": ("Hurricane",),
    "tornado": ("Tornado",),
    "wildfire": ("Fire",),
    "earthquake": ("Earthquake",),
    "severe storm": ("Severe Storm", "Severe Storms"),
    "winter storm": ("Winter Storm", "Snowstorm"),
}

# Policy keyword sets used to filter Congress.gov bill titles
POLICY_BILL_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "economy": ("schedule f", "federal workforce", "civil service", "government employee", "opm"),
    "immigration": ("immigration", "border", "asylum", "deportation", "visa"),
    "education": ("education", "student", "school", "pell", "loan forgiveness"),
    "healthcare": ("health", "medicaid", "medicare", "affordable care", "insurance"),
    "environment": ("environment", "epa", "climate", "emission", "clean water"),
    "energy": ("energy", "oil", "gas", "drilling", "renewable"),
    "housing": ("housing", "rent", "mortgage", "homeless", "hud"),
    "infrastructure": ("infrastructure", "highway", "bridge", "transit", "broadband"),
    "justice": ("justice", "crime", "police", "court", "judicial"),
    "employment": ("labor", "wage", "worker", "employment", "union"),
}

FEDERAL_AGENCY_TERMS: Tuple[str, ...] = (
    "epa", "fda", "fcc", "sec", "department of", "agency", "administration",
)

SPENDING_AGENCY_TERMS: Tuple[str, ...] = (
    "department of defense", "dod", "hhs", "health and human services",
    "department of transportation", "dot", "education", "energy",
    "agriculture", "usda", "homeland security",
)


def contains_term(text: str, term: str) -> bool:
    """True when term occurs in text starting at a word boundary."""
    return re.search(r"\b" + re.escape(term.lower()), text.lower()) is not None


def matches_any(text: str, terms: Iterable[str]) -> bool:
    """Case-insensitive keyword membership test."""
    return any(contains_term(text, term) for term in terms)


def matching_terms(text: str, terms: Iterable[str]) -> list[str]:
    """Return the terms present in text, in sorted order for determinism."""
    return sorted(term for term in terms if contains_term(text, term))
