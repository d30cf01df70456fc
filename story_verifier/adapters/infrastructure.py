"""DOT transportation infrastructure adapter.

Reads two Socrata tables from data.transportation.gov: the National Bridge
Inventory state summary (bridge counts, condition, road condition, federal
funding) and National Transit Database ridership aggregated per state.
Resource ids are configurable because DOT republishes them per release.
"""

from typing import Any, Dict

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.geography import state_name
from story_verifier.config.keywords import contains_term, matches_any
from story_verifier.data_management.schemas.dataset_schema import Geography, InfrastructureDataset
from story_verifier.data_management.schemas.story_schema import Story

ROAD_TERMS = ("road", "highway", "pothole")
TRANSIT_TERMS = ("transit", "bus", "train", "subway")
FUNDING_TERMS = ("funding", "budget", "federal")
SAFETY_TERMS = ("accident", "crash", "unsafe", "danger")

# Share of structurally deficient bridges that warrants a flag
DEFICIENCY_FLAG_PCT = 10.0


class InfrastructureAdapter(SourceAdapter):
    name = "infrastructure"
    display_name = "transportation infrastructure"
    upstream = "dot"
    source_label = "DOT National Bridge Inventory"

    def __init__(self, *args: Any, bridge_resource: str | None = None,
                 transit_resource: str | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        from story_verifier.config.settings import settings

        self.bridge_resource = bridge_resource or settings.dot_bridge_resource
        self.transit_resource = transit_resource or settings.dot_transit_resource

    async def _fetch(self, geography: Geography) -> InfrastructureDataset:
        bridges = await self._call(
            f"/{self.bridge_resource}.json",
            {"state_code": geography.state, "$order": "year DESC", "$limit": 1},
        )
        if not bridges:
            raise ValueError(f"No bridge inventory row for {geography.state}")
        summary: Dict[str, Any] = bridges[0]

        transit = await self._call(
            f"/{self.transit_resource}.json",
            {
                "$select": "count(distinct ntd_id) AS systems, sum(unlinked_passenger_trips) AS riders",
                "$where": f"state = '{geography.state}'",
            },
        )
        ridership: Dict[str, Any] = transit[0] if transit else {}

        return InfrastructureDataset(
            geography=geography,
            vintage=str(summary.get("year", "")) or "2023",
            provenance=self.source_label,
            total_bridges=int(summary["total_bridges"]),
            deficient_bridges=int(summary["poor_condition_bridges"]),
            avg_bridge_age=float(summary.get("avg_age", 0)),
            road_condition=summary.get("road_condition", "Fair"),
            poor_road_percentage=float(summary.get("poor_road_pct", 0)),
            transit_systems=int(float(ridership.get("systems") or 0)),
            annual_transit_riders=int(float(ridership.get("riders") or 0)),
            federal_funding=int(float(summary.get("federal_funding", 0))),
        )

    def _score(self, story: Story, dataset: InfrastructureDataset, card: ScoreCard) -> None:
        text = story.text
        deficient_pct = dataset.deficient_percentage
        card.metrics.update({
            "total_bridges": dataset.total_bridges,
            "deficient_bridge_pct": deficient_pct,
            "poor_road_pct": dataset.poor_road_percentage,
            "annual_transit_riders": dataset.annual_transit_riders,
        })
        card.insight(
            "state_infrastructure_context",
            f"{state_name(dataset.geography.state)}: {dataset.total_bridges:,} bridges, "
            f"road condition {dataset.road_condition}, "
            f"${dataset.federal_funding / 1_000_000_000:,.2f}B annual federal transportation funding",
        )

        if contains_term(text, "bridge"):
            card.add("bridge")
            card.insight(
                "bridge_context",
                f"{dataset.deficient_bridges:,} bridges ({deficient_pct}%) are in poor condition; "
                f"average bridge age {dataset.avg_bridge_age:.0f} years",
            )
            if deficient_pct > DEFICIENCY_FLAG_PCT:
                card.flag(
                    "medium",
                    f"{deficient_pct}% of bridges are structurally deficient",
                    code="high_bridge_deficiency_rate",
                )

        if matches_any(text, ROAD_TERMS):
            card.add("road")
            card.insight(
                "road_context",
                f"{dataset.poor_road_percentage}% of roads are in poor condition",
            )

        if matches_any(text, TRANSIT_TERMS):
            card.add("transit")
            card.insight(
                "transit_context",
                f"{dataset.transit_systems} transit systems carry "
                f"{dataset.annual_transit_riders:,} riders per year",
            )

        if matches_any(text, FUNDING_TERMS):
            card.add("funding")
            card.insight(
                "funding_context",
                f"Federal transportation funding: ${dataset.federal_funding:,} per year",
            )

        if matches_any(text, SAFETY_TERMS):
            card.add("safety")
            card.flag("medium", "Story reports a transportation safety concern", code="safety_concern")
            card.insight(
                "safety_context",
                "Story mentions accidents or unsafe conditions",
            )
