"""Congress.gov legislative activity adapter.

Samples the most recently updated bills of the current and previous
Congress and counts, per policy area, the titles that match the area's
keyword set. The story's declared policy area then selects which counts to
compare. Congress.gov allows 5,000 requests per hour per key; the shared
"congress" quota enforces that locally.
"""

import re
from datetime import date
from typing import Any, Dict, List

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.keywords import POLICY_BILL_KEYWORDS, matches_any
from story_verifier.data_management.schemas.dataset_schema import Geography, LegislativeDataset
from story_verifier.data_management.schemas.story_schema import Story

BILL_SAMPLE_SIZE = 250
MAX_RECENT_TITLES = 10

_BILL_REFERENCE = re.compile(r"\b(?:H\.\s?R\.|S\.|HR|H\.R)\s?\d{1,5}\b")


def congress_for(today: date | None = None) -> int:
    """Congress number in session; the 1st Congress convened in 1789."""
    year = (today or date.today()).year
    return (year - 1789) // 2 + 1


def count_by_policy(titles: List[str]) -> Dict[str, int]:
    return {
        area: sum(1 for title in titles if matches_any(title, keywords))
        for area, keywords in POLICY_BILL_KEYWORDS.items()
    }


class LegislativeAdapter(SourceAdapter):
    name = "legislative"
    display_name = "legislative"
    upstream = "congress"
    source_label = "Congress.gov"
    api_key_setting = "congress_api_key"

    async def _bill_titles(self, congress: int) -> List[str]:
        payload: Dict[str, Any] = await self._call(
            f"/bill/{congress}",
            {
                "api_key": self.api_key,
                "format": "json",
                "limit": BILL_SAMPLE_SIZE,
                "offset": 0,
                "sort": "updateDate desc",
            },
        )
        return [bill.get("title") or "" for bill in payload.get("bills") or []]

    async def _fetch(self, geography: Geography) -> LegislativeDataset:
        current = congress_for()
        current_titles = await self._bill_titles(current)
        baseline_titles = await self._bill_titles(current - 1)
        if not current_titles:
            raise ValueError(f"Congress.gov returned no bills for the {current}th Congress")

        return LegislativeDataset(
            geography=geography,
            vintage=f"{current}th Congress",
            provenance=self.source_label,
            current_congress=current,
            baseline_congress=current - 1,
            bills_sampled=len(current_titles),
            current_policy_counts=count_by_policy(current_titles),
            baseline_policy_counts=count_by_policy(baseline_titles),
            recent_titles=current_titles[:MAX_RECENT_TITLES],
        )

    def _score(self, story: Story, dataset: LegislativeDataset, card: ScoreCard) -> None:
        area = story.policy_area.value
        count = dataset.bill_count(area)
        trend = dataset.activity_trend(area)
        card.metrics.update({
            "policy_area": area,
            "current_bill_count": count,
            "baseline_bill_count": dataset.baseline_policy_counts.get(area, 0),
            "activity_change_pct": dataset.change_pct(area),
            "activity_trend": trend,
        })

        if count > 0:
            card.add("matching_bills")
            card.insight(
                "legislative_activity",
                f"{count} recently updated bills in the {dataset.current_congress}th Congress "
                f"concern {area} ({trend} vs the {dataset.baseline_congress}th)",
            )
            if trend == "increasing":
                card.add("activity_increasing")

        if _BILL_REFERENCE.search(story.text):
            card.add("bill_reference")
            card.insight(
                "bill_reference",
                "Story cites a specific bill number that can be traced on Congress.gov",
            )
