"""OpenFEMA disaster and emergency adapter.

Disaster declaration summaries are published per designated county, so
declarations are de-duplicated by disasterNumber before counting. Housing
assistance totals come from the Individuals and Households Program owner
dataset.
"""

from collections import Counter
from datetime import date
from typing import Any, Dict, List

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.geography import state_name
from story_verifier.config.keywords import DISASTER_TYPE_TERMS, contains_term, matches_any
from story_verifier.data_management.schemas.dataset_schema import EmergencyDataset, Geography
from story_verifier.data_management.schemas.story_schema import Story

ASSISTANCE_TERMS = ("fema", "assistance", "relief")
ASSISTANCE_ISSUE_TERMS = ("delay", "waiting", "denied")
RECENT_YEARS = 5
PAGE_SIZE = 1000


class EmergencyAdapter(SourceAdapter):
    name = "emergency"
    display_name = "disaster and emergency"
    upstream = "fema"
    source_label = "OpenFEMA Disaster Declarations"

    async def _fetch(self, geography: Geography) -> EmergencyDataset:
        declarations = await self._call(
            "/DisasterDeclarationsSummaries",
            {
                "$filter": f"state eq '{geography.state}'",
                "$orderby": "declarationDate desc",
                "$select": "disasterNumber,incidentType,declarationDate",
                "$top": PAGE_SIZE,
            },
        )
        rows: List[Dict[str, Any]] = declarations.get("DisasterDeclarationsSummaries") or []

        unique: Dict[Any, Dict[str, Any]] = {}
        for row in rows:
            unique.setdefault(row["disasterNumber"], row)

        cutoff_year = date.today().year - RECENT_YEARS
        types: Counter = Counter()
        recent = 0
        for row in unique.values():
            types[row.get("incidentType") or "Unknown"] += 1
            if int(str(row["declarationDate"])[:4]) >= cutoff_year:
                recent += 1

        assistance = await self._call(
            "/HousingAssistanceOwners",
            {
                "$filter": f"state eq '{geography.state}'",
                "$select": "approvedForFemaAssistance,totalApprovedIhpAmount",
                "$top": PAGE_SIZE,
            },
        )
        owners = assistance.get("HousingAssistanceOwners") or []

        most_recent = max((str(row["declarationDate"])[:10] for row in unique.values()), default=None)
        return EmergencyDataset(
            geography=geography,
            vintage=most_recent[:4] if most_recent else str(date.today().year),
            provenance=self.source_label,
            total_declarations=len(unique),
            declarations_last_5_years=recent,
            disaster_types=dict(types),
            most_recent_declaration=most_recent,
            housing_assistance_applicants=sum(
                int(row.get("approvedForFemaAssistance") or 0) for row in owners
            ),
            housing_assistance_amount=sum(
                float(row.get("totalApprovedIhpAmount") or 0) for row in owners
            ),
        )

    def _score(self, story: Story, dataset: EmergencyDataset, card: ScoreCard) -> None:
        text = story.text
        where = state_name(dataset.geography.state)
        card.metrics.update({
            "total_declarations": dataset.total_declarations,
            "declarations_last_5_years": dataset.declarations_last_5_years,
            "most_common_type": dataset.most_common_type,
        })
        card.insight(
            "state_disaster_context",
            f"{where} has had {dataset.total_declarations} federal disaster declarations. "
            f"Most common: {dataset.most_common_type or 'n/a'}",
        )

        # Only types with declarations on record for the state earn credit
        matched = {}
        for term in DISASTER_TYPE_TERMS:
            if contains_term(text, term):
                count = sum(dataset.disaster_types.get(name, 0) for name in DISASTER_TYPE_TERMS[term])
                if count:
                    matched[term] = count
        card.add("disaster_type_match", times=len(matched))
        for term, count in matched.items():
            card.insight(
                "disaster_type_match",
                f"{DISASTER_TYPE_TERMS[term][0]} disasters: {count} federal declarations in {where}",
            )

        if matches_any(text, ASSISTANCE_TERMS):
            card.add("assistance")
            card.insight(
                "assistance_context",
                f"FEMA housing assistance in {where}: "
                f"{dataset.housing_assistance_applicants:,} recipients, "
                f"${dataset.housing_assistance_amount / 1_000_000:,.0f}M approved",
            )

        if dataset.declarations_last_5_years > 0:
            card.add("recent_declarations")
            card.insight(
                "recent_disasters",
                f"{dataset.declarations_last_5_years} federal disaster declarations in the past "
                f"{RECENT_YEARS} years",
            )

        if matches_any(text, ASSISTANCE_ISSUE_TERMS):
            card.insight(
                "assistance_issue",
                "Story mentions delays or denials in disaster assistance",
            )
