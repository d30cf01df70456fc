"""College Scorecard higher-education adapter.

One request for the state's 100 largest institutions with Pell, debt, net
price and repayment fields. Averages ignore schools that do not report a
field. The Scorecard is served through api.data.gov and shares its daily
request budget with other api.data.gov services.
"""

from statistics import mean
from typing import Any, Dict, List, Optional

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.geography import state_name
from story_verifier.config.keywords import matches_any
from story_verifier.data_management.schemas.dataset_schema import Geography, HigherEducationDataset
from story_verifier.data_management.schemas.story_schema import Story

FIELDS = {
    "name": "school.name",
    "size": "latest.student.size",
    "pell": "latest.aid.pell_grant_rate",
    "debt": "latest.aid.median_debt.completers.overall",
    "net_price": "latest.cost.avg_net_price.overall",
    "repayment": "latest.repayment.3_yr_repayment.overall",
}

PELL_TERMS = ("pell", "grant", "financial aid", "fafsa")
DEBT_TERMS = ("student loan", "student debt", "loan", "debt", "pslf", "forgiveness")
AFFORDABILITY_TERMS = ("tuition", "afford", "cost of college", "net price")

HIGH_PELL_RATE = 0.5
PER_PAGE = 100


def _average(rows: List[Dict[str, Any]], field: str) -> Optional[float]:
    values = [float(row[field]) for row in rows if row.get(field) is not None]
    return mean(values) if values else None


class HigherEducationAdapter(SourceAdapter):
    name = "higher_education"
    display_name = "higher education"
    upstream = "dept_ed"
    source_label = "College Scorecard"
    api_key_setting = "data_gov_api_key"

    async def _fetch(self, geography: Geography) -> HigherEducationDataset:
        payload = await self._call(
            "/schools",
            {
                "api_key": self.api_key,
                "school.state": geography.state,
                "fields": ",".join(FIELDS.values()),
                "per_page": PER_PAGE,
                "_sort": f"{FIELDS['size']}:desc",
            },
        )
        rows: List[Dict[str, Any]] = payload.get("results") or []
        if not rows:
            raise ValueError(f"College Scorecard returned no schools for {geography.state}")

        pell = _average(rows, FIELDS["pell"])
        if pell is None:
            raise ValueError("College Scorecard rows lacked Pell grant rates")

        return HigherEducationDataset(
            geography=geography,
            vintage="latest",
            provenance=self.source_label,
            schools_count=int(payload.get("metadata", {}).get("total", len(rows))),
            total_students=sum(int(row.get(FIELDS["size"]) or 0) for row in rows),
            avg_pell_grant_rate=round(pell, 3),
            high_pell_schools=sum(
                1 for row in rows if (row.get(FIELDS["pell"]) or 0) > HIGH_PELL_RATE
            ),
            avg_median_debt=round(_average(rows, FIELDS["debt"]) or 0.0, 2),
            avg_net_price=round(_average(rows, FIELDS["net_price"]) or 0.0, 2),
            avg_repayment_rate=round(_average(rows, FIELDS["repayment"]) or 0.0, 3),
        )

    def _score(self, story: Story, dataset: HigherEducationDataset, card: ScoreCard) -> None:
        text = story.text
        where = state_name(dataset.geography.state)
        card.metrics.update({
            "schools_count": dataset.schools_count,
            "avg_pell_grant_rate": dataset.avg_pell_grant_rate,
            "high_pell_schools": dataset.high_pell_schools,
            "avg_median_debt": dataset.avg_median_debt,
        })
        card.insight(
            "higher_education_context",
            f"{where} has {dataset.schools_count} institutions in the College Scorecard; "
            f"{dataset.avg_pell_grant_rate:.0%} of students at the largest receive Pell grants",
        )

        if matches_any(text, PELL_TERMS):
            card.add("pell")
            if dataset.high_pell_schools > 0:
                card.add("high_pell_schools")
                card.insight(
                    "high_pell_schools",
                    f"{dataset.high_pell_schools} schools in {where} enroll a majority of Pell recipients",
                )

        if matches_any(text, DEBT_TERMS):
            card.add("student_debt")
            card.insight(
                "student_debt_context",
                f"Median debt at completion averages ${dataset.avg_median_debt:,.0f}; "
                f"3-year repayment rate {dataset.avg_repayment_rate:.0%}",
            )

        if matches_any(text, AFFORDABILITY_TERMS):
            card.add("affordability")
            card.insight(
                "affordability_context",
                f"Average net price is ${dataset.avg_net_price:,.0f} per year",
            )
