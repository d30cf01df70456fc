"""HUD housing affordability adapter.

Joins HUD USER Fair Market Rents with state income limits and measures the
rent burden: 2-bedroom FMR as a share of the rent a median-income family can
afford at 30% of income. Above 100% is a high burden, above 80% moderate.

Endpoints (bearer token HUD_API_TOKEN):
- /fmr/statedata/{state}: FMRs for every metro area in the state
- /il/statedata/{state}: income limits for a family of four
"""

from statistics import mean
from typing import Any, Dict, List, Optional, Tuple

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard, extract_dollar_amounts
from story_verifier.config.geography import state_name, state_population
from story_verifier.config.keywords import contains_term, matches_any
from story_verifier.data_management.schemas.dataset_schema import Geography, HousingDataset
from story_verifier.data_management.schemas.story_schema import Story

_FMR_FIELDS = ("Efficiency", "One-Bedroom", "Two-Bedroom", "Three-Bedroom", "Four-Bedroom")

AFFORDABILITY_TERMS = ("afford", "unaffordable", "burden", "cost of living", "too expensive")
ASSISTANCE_TERMS = ("section 8", "housing assistance", "voucher")


class HousingAdapter(SourceAdapter):
    name = "housing"
    display_name = "housing"
    upstream = "hud"
    source_label = "HUD Fair Market Rents"
    api_key_setting = "hud_api_token"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def _fetch(self, geography: Geography) -> HousingDataset:
        fmr_payload = await self._call(
            f"/fmr/statedata/{geography.state}", headers=self._auth_headers()
        )
        il_payload = await self._call(
            f"/il/statedata/{geography.state}", headers=self._auth_headers()
        )

        rows = self._fmr_rows(fmr_payload, geography.zip)
        rents = [round(mean(float(row[field]) for row in rows)) for field in _FMR_FIELDS]
        area_name = rows[0].get("metro_name") if len(rows) == 1 else None

        limits = il_payload["data"]
        return HousingDataset(
            geography=geography,
            vintage=str(fmr_payload["data"].get("year", "FY2024")),
            provenance=self.source_label,
            area_name=area_name or f"{state_name(geography.state)} metro average",
            fmr_efficiency=rents[0],
            fmr_one_bedroom=rents[1],
            fmr_two_bedroom=rents[2],
            fmr_three_bedroom=rents[3],
            fmr_four_bedroom=rents[4],
            median_family_income=int(limits["median_income"]),
            very_low_income_limit=int(limits["very_low"]["il50_p4"]),
            low_income_limit=int(limits["low"]["il80_p4"]),
            population=state_population(geography.state),
        )

    @staticmethod
    def _fmr_rows(payload: Dict[str, Any], zip_code: str | None) -> List[Dict[str, Any]]:
        """Metro rows to average; a row listing the ZIP wins when present."""
        rows = payload["data"].get("metroareas") or payload["data"].get("counties") or []
        if not rows:
            raise ValueError("HUD FMR response contained no areas")
        if zip_code:
            for row in rows:
                if zip_code in (row.get("zip_codes") or []):
                    return [row]
        return rows

    def population_bound(self, dataset: HousingDataset) -> Optional[Tuple[int, str]]:
        # State-wide even for ZIP stories; HUD has no ZIP population
        population = dataset.population or state_population(dataset.geography.state)
        if population is None:
            return None
        return population, state_name(dataset.geography.state)

    def _score(self, story: Story, dataset: HousingDataset, card: ScoreCard) -> None:
        text = story.text
        where = state_name(dataset.geography.state)
        ratio = dataset.rent_burden_ratio

        card.metrics.update({
            "fair_market_rent_2br": dataset.fmr_two_bedroom,
            "affordable_monthly_rent": dataset.affordable_monthly_rent,
            "median_family_income": dataset.median_family_income,
            "rent_burden_ratio": ratio,
            "burden_level": dataset.burden_level,
        })

        card.insight(
            "state_housing_context",
            f"In {where}, the median family income is ${dataset.median_family_income:,}/year "
            f"(${dataset.median_family_income / 12:,.0f}/month)",
        )
        card.insight(
            "rent_burden",
            f"Fair Market Rent (2BR) is ${dataset.fmr_two_bedroom:,}/month against an affordable "
            f"rent of ${dataset.affordable_monthly_rent:,.0f}/month: rent burden {ratio}%",
        )

        if ratio > 100:
            card.add("severe_burden")
            card.insight(
                "affordability_crisis",
                f"Housing cost burden is HIGH ({ratio}%). Fair market rents exceed what "
                "median-income families can afford.",
            )
        elif ratio > 80:
            card.add("moderate_burden")
            card.insight(
                "affordability_concern",
                f"Housing cost burden is MODERATE ({ratio}%). Rents are approaching "
                "unaffordable levels.",
            )

        if matches_any(text, AFFORDABILITY_TERMS):
            card.add("affordability_language")

        if extract_dollar_amounts(story.body):
            card.add("dollar_amount")
            card.insight(
                "rent_comparison",
                f"Story mentions specific costs. Fair Market Rents: Studio ${dataset.fmr_efficiency:,}, "
                f"1BR ${dataset.fmr_one_bedroom:,}, 2BR ${dataset.fmr_two_bedroom:,}, "
                f"3BR ${dataset.fmr_three_bedroom:,}",
            )

        if contains_term(text, "evict"):
            card.add("eviction")
            card.insight(
                "eviction_context",
                "Story mentions eviction, a critical housing instability indicator.",
            )

        if matches_any(text, ASSISTANCE_TERMS):
            card.add("voucher")
            card.insight(
                "housing_assistance",
                f"Very Low Income limit (50% AMI) for a family of four: "
                f"${dataset.very_low_income_limit:,}/year",
            )

        self._check_plausibility(story, dataset, card)
