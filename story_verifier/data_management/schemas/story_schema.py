"""Citizen story input schema.

A Story is produced upstream (submission form, story generator) and is never
mutated by the verification pipeline, so every model here is frozen.

Upstream JSON uses camelCase (policyArea, affectedPopulation) and calls the
body "story"; aliases accept that shape while Python code uses snake_case.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class PolicyArea(str, Enum):
    """Closed set of story policy categories.

    Unrecognized values coerce to OTHER rather than failing validation.
    """

    HOUSING = "housing"
    ENERGY = "energy"
    ENVIRONMENT = "environment"
    INFRASTRUCTURE = "infrastructure"
    EDUCATION = "education"
    HEALTHCARE = "healthcare"
    EMPLOYMENT = "employment"
    IMMIGRATION = "immigration"
    JUSTICE = "justice"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> "PolicyArea":
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return cls.OTHER


class Location(BaseModel):
    """Where the story happened. Every field is optional."""

    zip: Optional[str] = Field(None, description="5-digit ZIP code")
    city: Optional[str] = None
    state: Optional[str] = Field(None, description="Two-letter state code")
    county: Optional[str] = None
    district: Optional[str] = Field(None, description="Congressional district")

    @field_validator("state")
    @classmethod
    def normalize_state(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().upper()
        return value or None

    @field_validator("zip", mode="before")
    @classmethod
    def normalize_zip(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    model_config = {"frozen": True}


class Demographics(BaseModel):
    """Optional self-reported demographics of the storyteller."""

    income_bracket: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("income_bracket", "incomeBracket", "income"),
        description="Bracket label such as '45-60k'",
    )
    age_range: Optional[str] = Field(
        None, validation_alias=AliasChoices("age_range", "ageRange", "age")
    )
    household_size: Optional[int] = Field(
        None, ge=1, validation_alias=AliasChoices("household_size", "householdSize")
    )

    model_config = {"frozen": True, "extra": "ignore"}


class Impact(BaseModel):
    """Claimed scale of the policy impact."""

    affected_population: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("affected_population", "affectedPopulation"),
        description="Number of people the story claims are affected",
    )
    economic_amount: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("economic_amount", "economicAmount"),
        description="Claimed dollar impact",
    )
    timeframe: Optional[str] = None

    model_config = {"frozen": True}


class Story(BaseModel):
    """Citizen-submitted account of a policy impact.

    Attributes:
        id: Story identifier assigned upstream.
        headline: Short free-text headline.
        body: Free-text story body.
        policy_area: Declared policy category.
        location: Geographic location of the story.
        demographics: Optional storyteller demographics.
        impact: Optional claimed impact figures.
    """

    id: str = Field(..., description="Story identifier")
    headline: str = Field("", description="Story headline")
    body: str = Field(
        "",
        validation_alias=AliasChoices("body", "story"),
        description="Story body text",
    )
    policy_area: PolicyArea = Field(
        PolicyArea.OTHER,
        validation_alias=AliasChoices("policy_area", "policyArea"),
    )
    location: Location = Field(default_factory=Location)
    demographics: Optional[Demographics] = None
    impact: Optional[Impact] = None

    @field_validator("policy_area", mode="before")
    @classmethod
    def coerce_policy_area(cls, value: Any) -> PolicyArea:
        if isinstance(value, PolicyArea):
            return value
        if value is None:
            return PolicyArea.OTHER
        return PolicyArea(str(value))

    @property
    def text(self) -> str:
        """Headline and body joined, the input to every keyword test."""
        return f"{self.headline} {self.body}".strip()

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "story-001",
                    "headline": "Rent keeps climbing",
                    "story": "Our rent is unaffordable and the burden is high.",
                    "policyArea": "housing",
                    "location": {"zip": "77001", "city": "Houston", "state": "TX"},
                    "impact": {"affectedPopulation": 1200},
                }
            ]
        },
    }
