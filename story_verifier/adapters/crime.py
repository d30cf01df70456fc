"""BJS National Crime Victimization Survey adapter.

NCVS is a national household survey, so the dataset describes the country,
not the story's state. Each record is one victimization; the survey weight
(wgtviccy) scales it to a national estimate when present.

Record codes:
- notify: 1 = reported to police, 2 = not reported
- newcrime: 1 or 2 = violent victimization
- seriousviolent: 1 = serious violent victimization
- injury: > 0 = victim injured
- weapon: 1/2/3 = firearm, knife, other weapon
"""

from datetime import date
from typing import Any, Dict, Iterable

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.keywords import matches_any
from story_verifier.data_management.schemas.dataset_schema import CrimeDataset, Geography
from story_verifier.data_management.schemas.story_schema import Story

PERSONAL_VICTIMIZATION = "gcuy-rt5g"
HOUSEHOLD_VICTIMIZATION = "gkck-euys"

VIOLENT_TERMS = (
    "violence", "violent", "murder", "assault", "attacked", "beaten", "rape",
    "sexual", "mugged", "killed",
)
SERIOUS_TERMS = ("murder", "killed", "rape", "serious")
UNREPORTED_TERMS = (
    "didn't report", "not report", "unreported", "never reported",
    "police don't care", "police didn't", "didn't call police",
)

# NCVS public files trail the calendar by about two years
RELEASE_LAG_YEARS = 2
RECORD_LIMIT = 50_000


def _weight(record: Dict[str, Any]) -> float:
    try:
        return float(record.get("wgtviccy") or 1.0)
    except (TypeError, ValueError):
        return 1.0


def _tally(records: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    totals = {
        "total": 0.0, "reported": 0.0, "not_reported": 0.0, "violent": 0.0,
        "serious_violent": 0.0, "with_injury": 0.0, "with_weapon": 0.0,
    }
    for record in records:
        weight = _weight(record)
        totals["total"] += weight
        notify = str(record.get("notify", ""))
        if notify == "1":
            totals["reported"] += weight
        elif notify == "2":
            totals["not_reported"] += weight
        if str(record.get("newcrime", "")) in ("1", "2"):
            totals["violent"] += weight
        if str(record.get("seriousviolent", "")) == "1":
            totals["serious_violent"] += weight
        try:
            if int(record.get("injury") or 0) > 0:
                totals["with_injury"] += weight
        except (TypeError, ValueError):
            pass
        if str(record.get("weapon", "")) in ("1", "2", "3"):
            totals["with_weapon"] += weight
    return totals


class CrimeAdapter(SourceAdapter):
    name = "crime"
    display_name = "crime victimization"
    upstream = "bjs"
    source_label = "BJS National Crime Victimization Survey"

    async def _fetch(self, geography: Geography) -> CrimeDataset:
        year = date.today().year - RELEASE_LAG_YEARS
        personal = await self._call(
            f"/{PERSONAL_VICTIMIZATION}.json", {"year": year, "$limit": RECORD_LIMIT}
        )
        household = await self._call(
            f"/{HOUSEHOLD_VICTIMIZATION}.json", {"year": year, "$limit": RECORD_LIMIT}
        )
        if not personal:
            raise ValueError(f"NCVS returned no personal victimization records for {year}")

        person = _tally(personal)
        house = _tally(household or [])
        return CrimeDataset(
            geography=geography,
            vintage=str(year),
            provenance=self.source_label,
            total_victimizations=round(person["total"]),
            reported_to_police=round(person["reported"]),
            not_reported=round(person["not_reported"]),
            violent=round(person["violent"]),
            serious_violent=round(person["serious_violent"]),
            with_injury=round(person["with_injury"]),
            with_weapon=round(person["with_weapon"]),
            household_reported=round(house["reported"]),
            household_not_reported=round(house["not_reported"]),
        )

    def _score(self, story: Story, dataset: CrimeDataset, card: ScoreCard) -> None:
        text = story.text
        rate = dataset.reporting_rate
        card.metrics.update({
            "reporting_rate": rate,
            "household_reporting_rate": dataset.household_reporting_rate,
            "violent_share": dataset.violent_share,
        })
        card.insight(
            "ncvs_data_available",
            f"NCVS {dataset.vintage}: {dataset.total_victimizations:,} personal victimizations "
            f"nationally, {rate}% reported to police",
        )

        if matches_any(text, UNREPORTED_TERMS) and rate < 50:
            card.add("unreported")
            card.insight(
                "unreported_crime_context",
                f"Only {rate}% of victimizations are reported to police, consistent with "
                "the story's account of an unreported crime",
            )

        if matches_any(text, VIOLENT_TERMS) and dataset.violent > 0:
            card.add("violent")
            card.insight(
                "violent_crime_context",
                f"{dataset.violent:,} violent victimizations recorded ({dataset.violent_share}% of total)",
            )

        if dataset.serious_violent > 0 and matches_any(text, SERIOUS_TERMS):
            card.add("serious_violent")
            card.insight(
                "serious_violent_context",
                f"{dataset.serious_violent:,} serious violent victimizations recorded",
            )
