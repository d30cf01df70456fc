"""Normalized source datasets, one variant per adapter.

Every adapter parses its upstream response into exactly one of these models at
the adapter boundary, so raw upstream shapes never reach scoring or
aggregation. The `adapter` literal on each variant makes AnySourceDataset a
tagged union that round-trips through JSON.

Common fields:
- geography: the state/ZIP key the dataset describes
- vintage: data-year marker (e.g. "2022" for ACS 2022 5-year)
- provenance: upstream source name, suffixed " (fallback)" when degraded
- degraded / failure_reason: set when the fallback provider produced the data
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from story_verifier.transport.errors import FailureReason

FALLBACK_SUFFIX = " (fallback)"


def percentage(part: float, other: float) -> float:
    """part / (part + other) * 100, or 0.0 when the denominator is zero."""
    total = part + other
    if total <= 0:
        return 0.0
    return part / total * 100.0


def pct_change(baseline: float, current: float) -> float:
    """Relative change in percent, 0.0 when the baseline is zero."""
    if baseline == 0:
        return 0.0
    return (current - baseline) / baseline * 100.0


class Geography(BaseModel):
    """Geographic key passed to adapter fetch()."""

    state: str = Field(..., description="Two-letter state code")
    zip: Optional[str] = Field(None, description="5-digit ZIP code")

    @field_validator("state")
    @classmethod
    def upper_state(cls, value: str) -> str:
        return value.strip().upper()

    def cache_key(self) -> tuple[str, Optional[str]]:
        return (self.state, self.zip)

    model_config = {"frozen": True}


class SourceDataset(BaseModel):
    """Fields shared by every adapter dataset."""

    adapter: str
    geography: Geography
    vintage: str = Field(..., description="Data year or release marker")
    provenance: str = Field(..., description="Upstream source that produced the data")
    degraded: bool = Field(False, description="True when fallback data stands in for upstream")
    failure_reason: Optional[FailureReason] = None
    retrieved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class DemographicsDataset(SourceDataset):
    adapter: Literal["demographics"] = "demographics"
    geography_level: Literal["state", "zip"] = "state"
    total_population: int = Field(..., ge=0)
    median_household_income: int = Field(..., ge=0)
    median_age: float = Field(..., ge=0)
    poverty_rate: float = Field(..., ge=0, le=100, description="Percent below poverty line")
    unemployment_rate: float = Field(..., ge=0, le=100, description="Percent of labor force")
    median_gross_rent: Optional[int] = Field(None, ge=0)


class EnergyDataset(SourceDataset):
    """EIA retail prices. Household usage constants follow EIA averages."""

    adapter: Literal["energy"] = "energy"
    electricity_residential_cents: float = Field(..., ge=0, description="cents/kWh")
    electricity_commercial_cents: float = Field(..., ge=0)
    electricity_industrial_cents: float = Field(..., ge=0)
    natural_gas_residential: float = Field(..., ge=0, description="USD per thousand cubic feet")
    gasoline_price: float = Field(..., ge=0, description="USD per gallon, regular")

    household_kwh_per_month: float = 893.0
    household_mcf_per_month: float = 5.8
    household_gallons_per_month: float = 50.0

    @property
    def monthly_electric_bill(self) -> float:
        return round(self.household_kwh_per_month * self.electricity_residential_cents / 100, 2)

    @property
    def monthly_gas_bill(self) -> float:
        return round(self.household_mcf_per_month * self.natural_gas_residential, 2)

    @property
    def monthly_gasoline_cost(self) -> float:
        return round(self.household_gallons_per_month * self.gasoline_price, 2)


class ClimateDataset(SourceDataset):
    adapter: Literal["climate"] = "climate"
    avg_temperature_f: float
    annual_precipitation_in: float = Field(..., ge=0)
    days_above_90: int = Field(..., ge=0, le=366)
    days_below_32: int = Field(..., ge=0, le=366)
    severe_events: int = Field(..., ge=0)
    temperature_trend: str = "+1.2°F since 1980"
    precipitation_trend: str = "+5% since 1980"


class HousingDataset(SourceDataset):
    """HUD Fair Market Rents (ZIP) joined with state income limits."""

    adapter: Literal["housing"] = "housing"
    area_name: str = "Statewide"
    fmr_efficiency: int = Field(..., ge=0)
    fmr_one_bedroom: int = Field(..., ge=0)
    fmr_two_bedroom: int = Field(..., ge=0)
    fmr_three_bedroom: int = Field(..., ge=0)
    fmr_four_bedroom: int = Field(..., ge=0)
    median_family_income: int = Field(..., ge=0, description="Annual area median income")
    very_low_income_limit: int = Field(..., ge=0, description="50% AMI, family of four")
    low_income_limit: int = Field(..., ge=0, description="80% AMI, family of four")
    population: Optional[int] = Field(None, ge=0, description="Population of the geography")

    @property
    def affordable_monthly_rent(self) -> float:
        """HUD standard: housing should cost at most 30% of income."""
        return round(self.median_family_income / 12 * 0.30, 2)

    @property
    def rent_burden_ratio(self) -> float:
        """2BR Fair Market Rent as a percent of the affordable rent."""
        affordable = self.affordable_monthly_rent
        if affordable <= 0:
            return 0.0
        return round(self.fmr_two_bedroom / affordable * 100, 1)

    @property
    def burden_level(self) -> str:
        ratio = self.rent_burden_ratio
        if ratio > 100:
            return "High"
        if ratio > 80:
            return "Moderate"
        return "Low"


class InfrastructureDataset(SourceDataset):
    adapter: Literal["infrastructure"] = "infrastructure"
    total_bridges: int = Field(..., ge=0)
    deficient_bridges: int = Field(..., ge=0)
    avg_bridge_age: float = Field(..., ge=0)
    road_condition: str = "Fair"
    poor_road_percentage: float = Field(..., ge=0, le=100)
    transit_systems: int = Field(..., ge=0)
    annual_transit_riders: int = Field(..., ge=0)
    federal_funding: int = Field(..., ge=0, description="Annual federal transportation funding, USD")

    @property
    def deficient_percentage(self) -> float:
        return round(percentage(self.deficient_bridges, self.total_bridges - self.deficient_bridges), 1)


class EmergencyDataset(SourceDataset):
    adapter: Literal["emergency"] = "emergency"
    total_declarations: int = Field(..., ge=0)
    declarations_last_5_years: int = Field(..., ge=0)
    disaster_types: dict[str, int] = Field(default_factory=dict)
    most_recent_declaration: Optional[str] = Field(None, description="ISO date")
    housing_assistance_applicants: int = Field(0, ge=0)
    housing_assistance_amount: float = Field(0.0, ge=0)

    @property
    def most_common_type(self) -> Optional[str]:
        if not self.disaster_types:
            return None
        return sorted(self.disaster_types.items(), key=lambda item: (-item[1], item[0]))[0][0]


class CrimeDataset(SourceDataset):
    """BJS NCVS victimization counts (national survey, weighted records)."""

    adapter: Literal["crime"] = "crime"
    total_victimizations: int = Field(..., ge=0)
    reported_to_police: int = Field(..., ge=0)
    not_reported: int = Field(..., ge=0)
    violent: int = Field(..., ge=0)
    serious_violent: int = Field(..., ge=0)
    with_injury: int = Field(0, ge=0)
    with_weapon: int = Field(0, ge=0)
    household_reported: int = Field(0, ge=0)
    household_not_reported: int = Field(0, ge=0)

    @property
    def reporting_rate(self) -> float:
        return round(percentage(self.reported_to_police, self.not_reported), 1)

    @property
    def household_reporting_rate(self) -> float:
        return round(percentage(self.household_reported, self.household_not_reported), 1)

    @property
    def violent_share(self) -> float:
        return round(percentage(self.violent, self.total_victimizations - self.violent), 1)


class FinanceEntity(BaseModel):
    """Candidate or committee summary from OpenFEC."""

    name: str
    identifier: str = ""
    party: Optional[str] = None
    office: Optional[str] = None
    receipts: float = 0.0

    model_config = {"frozen": True}


class CampaignFinanceDataset(SourceDataset):
    adapter: Literal["campaign_finance"] = "campaign_finance"
    cycle: int
    candidates: list[FinanceEntity] = Field(default_factory=list)
    committees: list[FinanceEntity] = Field(default_factory=list)
    total_receipts: float = Field(0.0, ge=0)


class LegislativeDataset(SourceDataset):
    """Bill activity in the current Congress against the previous one.

    Congress.gov is national, so geography is recorded but does not change
    the data. Counts are keyed by policy area using POLICY_BILL_KEYWORDS over
    the sampled bill titles.
    """

    adapter: Literal["legislative"] = "legislative"
    current_congress: int = 119
    baseline_congress: int = 118
    bills_sampled: int = Field(..., ge=0)
    current_policy_counts: dict[str, int] = Field(default_factory=dict)
    baseline_policy_counts: dict[str, int] = Field(default_factory=dict)
    recent_titles: list[str] = Field(default_factory=list)

    def bill_count(self, policy_area: str) -> int:
        return self.current_policy_counts.get(policy_area, 0)

    def change_pct(self, policy_area: str) -> float:
        return round(
            pct_change(
                self.baseline_policy_counts.get(policy_area, 0),
                self.current_policy_counts.get(policy_area, 0),
            ),
            1,
        )

    def activity_trend(self, policy_area: str) -> str:
        change = self.change_pct(policy_area)
        if change > 20:
            return "increasing"
        if change < -20:
            return "decreasing"
        return "stable"


class HigherEducationDataset(SourceDataset):
    adapter: Literal["higher_education"] = "higher_education"
    schools_count: int = Field(..., ge=0)
    total_students: int = Field(0, ge=0)
    avg_pell_grant_rate: float = Field(..., ge=0, le=1, description="Fraction of students on Pell")
    high_pell_schools: int = Field(0, ge=0, description="Schools with > 50% Pell recipients")
    avg_median_debt: float = Field(0.0, ge=0)
    avg_net_price: float = Field(0.0, ge=0)
    avg_repayment_rate: float = Field(0.0, ge=0, le=1)


class VeteransDataset(SourceDataset):
    adapter: Literal["veterans"] = "veterans"
    total_facilities: int = Field(..., ge=0)
    operating_facilities: int = Field(..., ge=0)
    closed_facilities: int = Field(0, ge=0)
    health_facilities: int = Field(0, ge=0)
    facility_names: list[str] = Field(default_factory=list)


class FederalSpendingDataset(SourceDataset):
    adapter: Literal["federal_spending"] = "federal_spending"
    fiscal_year: int
    total_awards: float = Field(..., ge=0)
    total_contracts: float = Field(0.0, ge=0)
    total_grants: float = Field(0.0, ge=0)
    total_loans: float = Field(0.0, ge=0)


class RegulatoryDataset(SourceDataset):
    adapter: Literal["regulatory"] = "regulatory"
    since_date: str = Field(..., description="ISO date lower bound of the document window")
    recent_documents: int = Field(..., ge=0)
    final_rules: int = Field(0, ge=0)
    proposed_rules: int = Field(0, ge=0)
    executive_orders: int = Field(0, ge=0)
    top_agencies: list[str] = Field(default_factory=list)


AnySourceDataset = Annotated[
    Union[
        DemographicsDataset,
        EnergyDataset,
        ClimateDataset,
        HousingDataset,
        InfrastructureDataset,
        EmergencyDataset,
        CrimeDataset,
        CampaignFinanceDataset,
        LegislativeDataset,
        HigherEducationDataset,
        VeteransDataset,
        FederalSpendingDataset,
        RegulatoryDataset,
    ],
    Field(discriminator="adapter"),
]
