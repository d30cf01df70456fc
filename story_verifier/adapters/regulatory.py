"""Federal Register regulatory activity adapter.

Counts documents published in the trailing window by type (final rule,
proposed rule, presidential document) and ranks the most active agencies.
Federal Register data is national; the geography only keys the cache.
"""

from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, List

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.fallback.civic import REGULATORY_WINDOW_DAYS
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.keywords import FEDERAL_AGENCY_TERMS, matches_any, matching_terms
from story_verifier.data_management.schemas.dataset_schema import Geography, RegulatoryDataset
from story_verifier.data_management.schemas.story_schema import Story

EXECUTIVE_ORDER_TERMS = ("executive order",)
BURDEN_TERMS = ("burden", "compliance cost", "red tape", "overregulation")

PER_PAGE = 1000
TOP_AGENCIES = 5


def _agency_names(document: Dict[str, Any]) -> List[str]:
    return [a.get("name") or a.get("raw_name") or "" for a in document.get("agencies") or []]


class RegulatoryAdapter(SourceAdapter):
    name = "regulatory"
    display_name = "regulatory"
    upstream = "federal_register"
    source_label = "Federal Register"

    async def _fetch(self, geography: Geography) -> RegulatoryDataset:
        today = date.today()
        since = today - timedelta(days=REGULATORY_WINDOW_DAYS)
        payload = await self._call(
            "/documents.json",
            {
                "conditions[publication_date][gte]": since.isoformat(),
                "fields[]": ["type", "subtype", "agencies"],
                "per_page": PER_PAGE,
                "order": "newest",
            },
        )
        documents: List[Dict[str, Any]] = payload.get("results") or []
        types = Counter(doc.get("type", "") for doc in documents)
        agencies = Counter(name for doc in documents for name in _agency_names(doc) if name)

        return RegulatoryDataset(
            geography=geography,
            vintage=today.isoformat(),
            provenance=self.source_label,
            since_date=since.isoformat(),
            recent_documents=int(payload.get("count", len(documents))),
            final_rules=types["Rule"],
            proposed_rules=types["Proposed Rule"],
            executive_orders=sum(
                1 for doc in documents if doc.get("subtype") == "Executive Order"
            ),
            top_agencies=[name for name, _ in agencies.most_common(TOP_AGENCIES)],
        )

    def _score(self, story: Story, dataset: RegulatoryDataset, card: ScoreCard) -> None:
        text = story.text
        card.metrics.update({
            "since_date": dataset.since_date,
            "recent_documents": dataset.recent_documents,
            "final_rules": dataset.final_rules,
            "executive_orders": dataset.executive_orders,
        })
        card.insight(
            "regulatory_context",
            f"{dataset.recent_documents:,} Federal Register documents since {dataset.since_date}, "
            f"including {dataset.final_rules} final rules and {dataset.proposed_rules} proposed rules",
        )

        if matches_any(text, EXECUTIVE_ORDER_TERMS):
            card.add("executive_order")
            card.insight(
                "executive_orders",
                f"{dataset.executive_orders} executive orders published since {dataset.since_date}",
            )

        agencies = matching_terms(text, FEDERAL_AGENCY_TERMS)
        if agencies:
            card.add("agency", times=len(agencies))
            card.insight("agencies_mentioned", "Story names: " + ", ".join(agencies))

        if matches_any(text, BURDEN_TERMS):
            card.flag(
                "low",
                "Story characterizes regulation as burdensome; cost claims are not in the register",
                code="regulatory_burden_claim",
            )
