"""Census ACS demographics adapter.

Pulls ACS 5-year estimates for the story's ZIP code tabulation area when a
ZIP is known, otherwise for the whole state, and checks the storyteller's
income bracket and claimed affected population against them.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.geography import STATE_FIPS, state_name
from story_verifier.config.keywords import matches_any
from story_verifier.data_management.schemas.dataset_schema import (
    DemographicsDataset,
    Geography,
    percentage,
)
from story_verifier.data_management.schemas.story_schema import Story

ACS_VARIABLES: Dict[str, str] = {
    "total_population": "B01001_001E",
    "median_age": "B01002_001E",
    "median_household_income": "B19013_001E",
    "poverty_count": "B17001_002E",
    "poverty_universe": "B17001_001E",
    "labor_force": "B23025_002E",
    "unemployed": "B23025_005E",
    "median_gross_rent": "B25064_001E",
}

# Slack around a self-reported bracket before it counts as a mismatch
BRACKET_TOLERANCE = 5_000

HARDSHIP_TERMS = ("poverty", "unemploy", "jobless", "laid off", "layoff", "lost my job")

_RANGE = re.compile(r"(\d+)\s*k?\s*-\s*(\d+)\s*k", re.IGNORECASE)
_OVER = re.compile(r"(\d+)\s*k\s*\+|(?:over|above|more than)\s*(\d+)\s*k", re.IGNORECASE)
_UNDER = re.compile(r"(?:under|below|less than)\s*(\d+)\s*k", re.IGNORECASE)
_VINTAGE = re.compile(r"/(\d{4})/")


def parse_income_bracket(bracket: str) -> Optional[Tuple[float, float]]:
    """Bracket label to an inclusive dollar range, e.g. "45-60k" -> (45000, 60000)."""
    match = _RANGE.search(bracket)
    if match:
        return float(match.group(1)) * 1_000, float(match.group(2)) * 1_000
    match = _UNDER.search(bracket)
    if match:
        return 0.0, float(match.group(1)) * 1_000
    match = _OVER.search(bracket)
    if match:
        return float(match.group(1) or match.group(2)) * 1_000, float("inf")
    return None


def income_matches(bracket: str, median_income: float) -> Optional[bool]:
    """None when the bracket label cannot be parsed."""
    bounds = parse_income_bracket(bracket)
    if bounds is None:
        return None
    low, high = bounds
    return low - BRACKET_TOLERANCE <= median_income <= high + BRACKET_TOLERANCE


class DemographicsAdapter(SourceAdapter):
    name = "demographics"
    display_name = "demographic"
    upstream = "census"
    source_label = "U.S. Census Bureau ACS 5-Year"
    api_key_setting = "census_api_key"
    api_key_required = False

    async def _fetch(self, geography: Geography) -> DemographicsDataset:
        params: Dict[str, Any] = {
            "get": ",".join(["NAME", *ACS_VARIABLES.values()]),
            "key": self.api_key,
        }
        if geography.zip:
            params["for"] = f"zip code tabulation area:{geography.zip}"
            level = "zip"
        else:
            params["for"] = f"state:{STATE_FIPS[geography.state]}"
            level = "state"

        rows = await self._call("", params)
        values = self._row_as_dict(rows)

        def number(key: str) -> float:
            value = float(values[ACS_VARIABLES[key]])
            # ACS uses large negative sentinels (-666666666) for missing estimates
            return value if value >= 0 else 0.0

        rent = number("median_gross_rent")
        return DemographicsDataset(
            geography=geography,
            vintage=self._vintage(),
            provenance=self.source_label,
            geography_level=level,
            total_population=int(number("total_population")),
            median_household_income=int(number("median_household_income")),
            median_age=number("median_age"),
            poverty_rate=round(
                percentage(
                    number("poverty_count"),
                    number("poverty_universe") - number("poverty_count"),
                ),
                1,
            ),
            unemployment_rate=round(
                percentage(number("unemployed"), number("labor_force") - number("unemployed")),
                1,
            ),
            median_gross_rent=int(rent) if rent else None,
        )

    def _vintage(self) -> str:
        match = _VINTAGE.search(self.base_url)
        return match.group(1) if match else "2022"

    @staticmethod
    def _row_as_dict(rows: List[List[Any]]) -> Dict[str, Any]:
        """Census answers with [header_row, value_row, ...]."""
        if not rows or len(rows) < 2:
            raise ValueError("Census response contained no data rows")
        return dict(zip(rows[0], rows[1]))

    def population_bound(self, dataset: DemographicsDataset) -> Optional[Tuple[int, str]]:
        return dataset.total_population, self._place(dataset)

    @staticmethod
    def _place(dataset: DemographicsDataset) -> str:
        if dataset.geography_level == "zip":
            return f"ZIP {dataset.geography.zip}"
        return state_name(dataset.geography.state)

    def _score(self, story: Story, dataset: DemographicsDataset, card: ScoreCard) -> None:
        where = self._place(dataset)
        card.metrics.update({
            "total_population": dataset.total_population,
            "median_household_income": dataset.median_household_income,
            "poverty_rate": dataset.poverty_rate,
            "unemployment_rate": dataset.unemployment_rate,
        })

        bracket = story.demographics.income_bracket if story.demographics else None
        if bracket:
            matched = income_matches(bracket, dataset.median_household_income)
            if matched:
                card.add("income_match")
                card.insight(
                    "income_verified",
                    f"Income claim matches Census median of ${dataset.median_household_income:,}",
                )
            elif matched is False:
                card.flag(
                    "low",
                    f'Claimed income "{bracket}" differs from Census median '
                    f"${dataset.median_household_income:,}",
                    code="income_mismatch",
                )

        claimed = story.impact.affected_population if story.impact else None
        plausible = self._check_plausibility(story, dataset, card)
        if plausible:
            card.add("population_plausible")
            card.insight(
                "population_plausible",
                f"Affected population ({claimed:,}) is within the {where} total "
                f"({dataset.total_population:,})",
            )

        if matches_any(story.text, HARDSHIP_TERMS):
            card.add("economic_hardship")

        card.insight(
            "demographic_context",
            f"{where}: {dataset.total_population:,} residents, {dataset.unemployment_rate}% "
            f"unemployment, {dataset.poverty_rate}% below poverty, "
            f"${dataset.median_household_income:,} median income",
        )
