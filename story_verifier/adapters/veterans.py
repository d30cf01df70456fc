"""VA Lighthouse facilities adapter."""

from collections import Counter
from typing import Any, Dict, List

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.geography import state_name
from story_verifier.config.keywords import matches_any
from story_verifier.data_management.schemas.dataset_schema import Geography, VeteransDataset
from story_verifier.data_management.schemas.story_schema import Story

FACILITY_TERMS = ("va hospital", "va clinic", "medical center", "facility", "clinic", "hospital")
CLOSURE_TERMS = ("closed", "closing", "closure", "shut down")
ACCESS_TERMS = ("wait", "appointment", "access", "service")

OPERATING_CODES = frozenset({"NORMAL", "LIMITED"})
PER_PAGE = 200
MAX_FACILITY_NAMES = 25


class VeteransAdapter(SourceAdapter):
    name = "veterans"
    display_name = "veterans' services"
    upstream = "va"
    source_label = "VA Facilities API"
    api_key_setting = "data_gov_api_key"

    def default_base_url(self) -> str:
        from story_verifier.config.settings import settings

        return settings.va_facilities_base_url

    async def _fetch(self, geography: Geography) -> VeteransDataset:
        payload = await self._call(
            "/facilities",
            {"state": geography.state, "per_page": PER_PAGE},
            headers={"apikey": self.api_key or ""},
        )
        facilities: List[Dict[str, Any]] = payload.get("data") or []
        if not facilities:
            raise ValueError(f"VA returned no facilities for {geography.state}")

        statuses = Counter(
            ((f.get("attributes") or {}).get("operatingStatus") or {}).get("code", "")
            for f in facilities
        )
        health = sum(
            1 for f in facilities
            if (f.get("attributes") or {}).get("facilityType") == "va_health_facility"
        )
        return VeteransDataset(
            geography=geography,
            vintage="current",
            provenance=self.source_label,
            total_facilities=len(facilities),
            operating_facilities=sum(statuses[code] for code in OPERATING_CODES),
            closed_facilities=statuses["CLOSED"],
            health_facilities=health,
            facility_names=[
                (f.get("attributes") or {}).get("name", "")
                for f in facilities[:MAX_FACILITY_NAMES]
            ],
        )

    def _score(self, story: Story, dataset: VeteransDataset, card: ScoreCard) -> None:
        text = story.text
        where = state_name(dataset.geography.state)
        card.metrics.update({
            "total_facilities": dataset.total_facilities,
            "operating_facilities": dataset.operating_facilities,
            "closed_facilities": dataset.closed_facilities,
        })
        card.insight(
            "va_facilities_context",
            f"{where} has {dataset.total_facilities} VA facilities "
            f"({dataset.operating_facilities} operating, {dataset.closed_facilities} closed)",
        )

        if matches_any(text, FACILITY_TERMS) and dataset.total_facilities > 0:
            card.add("facility_claim")

        if matches_any(text, CLOSURE_TERMS) and dataset.closed_facilities > 0:
            card.add("closures")
            card.insight(
                "facility_closures",
                f"{dataset.closed_facilities} VA facilities in {where} currently report a closed status",
            )

        if matches_any(text, ACCESS_TERMS):
            card.add("access")
            card.insight(
                "access_context",
                f"{dataset.health_facilities} VA health facilities serve {where}",
            )
