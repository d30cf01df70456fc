"""OpenFEC campaign finance adapter.

Fetches the state's candidates and committees for the current two-year
cycle plus a page of itemized individual contributions from state donors,
then looks for those names in the story.
"""

from datetime import date
from typing import Any, Dict, List

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard, extract_dollar_amounts
from story_verifier.config.geography import state_name
from story_verifier.config.keywords import contains_term, matches_any
from story_verifier.data_management.schemas.dataset_schema import (
    CampaignFinanceDataset,
    FinanceEntity,
    Geography,
)
from story_verifier.data_management.schemas.story_schema import Story

CONTRIBUTION_TERMS = ("contribution", "donation", "donor", "donated", "fundrais", "pac")
PER_PAGE = 50
MIN_SURNAME_LENGTH = 4


def current_cycle(today: date | None = None) -> int:
    """FEC two-year cycles end on even years."""
    year = (today or date.today()).year
    return year if year % 2 == 0 else year + 1


def candidate_mentioned(text: str, candidate: FinanceEntity) -> bool:
    """FEC stores names as "LAST, FIRST MIDDLE"; match the full name or a distinctive surname."""
    last, _, first = candidate.name.partition(",")
    last = last.strip()
    first = first.strip().split(" ")[0] if first.strip() else ""
    if first and contains_term(text, f"{first} {last}"):
        return True
    return len(last) >= MIN_SURNAME_LENGTH and contains_term(text, last)


class CampaignFinanceAdapter(SourceAdapter):
    name = "campaign_finance"
    display_name = "campaign finance"
    upstream = "fec"
    source_label = "OpenFEC"
    api_key_setting = "fec_api_key"

    async def _fetch(self, geography: Geography) -> CampaignFinanceDataset:
        cycle = current_cycle()
        common = {"api_key": self.api_key, "per_page": PER_PAGE}

        candidates = await self._call(
            "/candidates/",
            {**common, "state": geography.state, "election_year": cycle, "sort": "name"},
        )
        committees = await self._call(
            "/committees/",
            {**common, "state": geography.state, "cycle": cycle, "sort": "name"},
        )
        contributions = await self._call(
            "/schedules/schedule_a/",
            {
                **common,
                "contributor_state": geography.state,
                "two_year_transaction_period": cycle,
                "sort": "-contribution_receipt_date",
            },
        )

        return CampaignFinanceDataset(
            geography=geography,
            vintage=str(cycle),
            provenance=self.source_label,
            cycle=cycle,
            candidates=[
                FinanceEntity(
                    name=row["name"],
                    identifier=row.get("candidate_id", ""),
                    party=row.get("party"),
                    office=row.get("office_full"),
                )
                for row in self._results(candidates)
            ],
            committees=[
                FinanceEntity(
                    name=row["name"],
                    identifier=row.get("committee_id", ""),
                    party=row.get("party"),
                    office=row.get("committee_type_full"),
                )
                for row in self._results(committees)
            ],
            total_receipts=sum(
                float(row.get("contribution_receipt_amount") or 0)
                for row in self._results(contributions)
            ),
        )

    @staticmethod
    def _results(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        return payload.get("results") or []

    def _score(self, story: Story, dataset: CampaignFinanceDataset, card: ScoreCard) -> None:
        text = story.text
        candidates = [c for c in dataset.candidates if candidate_mentioned(text, c)]
        committees = [c for c in dataset.committees if contains_term(text, c.name)]
        card.metrics.update({
            "cycle": dataset.cycle,
            "candidates_in_state": len(dataset.candidates),
            "committees_in_state": len(dataset.committees),
            "sampled_contributions": dataset.total_receipts,
        })

        if candidates:
            card.add("candidate_named")
            card.insight(
                "candidate_match",
                "Story mentions FEC-registered candidate(s): "
                + ", ".join(c.name for c in candidates[:3]),
            )
            # Candidates were fetched by state, so a named one is a geographic match
            card.add("state_match")
            card.insight(
                "geographic_match",
                f"Story location ({dataset.geography.state}) matches {len(candidates)} "
                "candidate(s) registered in the state",
            )

        if committees:
            card.add("committee_named")
            card.insight(
                "committee_match",
                "Story mentions FEC-registered committee(s): "
                + ", ".join(c.name for c in committees[:3]),
            )

        if matches_any(text, CONTRIBUTION_TERMS) and dataset.total_receipts > 0:
            card.add("contributions")
            card.insight(
                "contributions",
                f"Recent itemized contributions from {state_name(dataset.geography.state)} donors "
                f"total ${dataset.total_receipts:,.0f} in the sampled page",
            )

        if extract_dollar_amounts(story.body):
            card.insight(
                "financial_amounts",
                "Story cites dollar amounts that can be checked against FEC filings",
            )
