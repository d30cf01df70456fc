"""USAspending.gov state profile adapter.

The recipient/state endpoint is keyed by FIPS code and returns prime award
totals for the latest fiscal year broken down by award type. No credential
is needed, but the endpoint is slow; the upstream profile gives it a longer
timeout.
"""

from datetime import date

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.geography import STATE_FIPS, state_name
from story_verifier.config.keywords import SPENDING_AGENCY_TERMS, matches_any, matching_terms
from story_verifier.data_management.schemas.dataset_schema import FederalSpendingDataset, Geography
from story_verifier.data_management.schemas.story_schema import Story

CONTRACT_TERMS = ("contract", "contractor")
GRANT_TERMS = ("grant",)
INFRASTRUCTURE_TERMS = ("infrastructure", "construction", "highway", "bridge")
MISUSE_TERMS = ("waste", "fraud", "misuse", "corruption", "abuse")


def _millions(amount: float) -> str:
    return f"${amount / 1_000_000:,.0f}M"


class FederalSpendingAdapter(SourceAdapter):
    name = "federal_spending"
    display_name = "federal spending"
    upstream = "usaspending"
    source_label = "USAspending.gov"

    async def _fetch(self, geography: Geography) -> FederalSpendingDataset:
        fips = STATE_FIPS.get(geography.state)
        if fips is None:
            raise ValueError(f"No FIPS code for {geography.state}")

        profile = await self._call(f"/recipient/state/{fips}/")
        fiscal_year = int(profile.get("fiscal_year") or date.today().year)
        return FederalSpendingDataset(
            geography=geography,
            vintage=f"FY{fiscal_year}",
            provenance=self.source_label,
            fiscal_year=fiscal_year,
            total_awards=float(profile["total_prime_amount"] or 0),
            total_contracts=float(profile.get("award_amount_contracts") or 0),
            total_grants=float(profile.get("award_amount_grants") or 0),
            total_loans=float(profile.get("award_amount_loans") or 0),
        )

    def _score(self, story: Story, dataset: FederalSpendingDataset, card: ScoreCard) -> None:
        text = story.text
        where = state_name(dataset.geography.state)
        card.metrics.update({
            "fiscal_year": dataset.fiscal_year,
            "total_awards": dataset.total_awards,
            "total_contracts": dataset.total_contracts,
            "total_grants": dataset.total_grants,
        })
        card.insight(
            "spending_context",
            f"Federal prime awards in {where} for {dataset.vintage}: {_millions(dataset.total_awards)}",
        )

        if matches_any(text, CONTRACT_TERMS) and dataset.total_contracts > 0:
            card.add("contracts")
            card.insight(
                "contracts_context",
                f"Federal contracts in {where}: {_millions(dataset.total_contracts)}",
            )

        if matches_any(text, GRANT_TERMS) and dataset.total_grants > 0:
            card.add("grants")
            card.insight(
                "grants_context",
                f"Federal grants in {where}: {_millions(dataset.total_grants)}",
            )

        if matches_any(text, INFRASTRUCTURE_TERMS):
            card.add("infrastructure")

        agencies = matching_terms(text, SPENDING_AGENCY_TERMS)
        if agencies:
            card.add("agency", times=len(agencies))
            card.insight("agencies_mentioned", "Story names: " + ", ".join(agencies))

        if matches_any(text, MISUSE_TERMS):
            card.flag(
                "medium",
                "Story alleges misuse of federal funds; award-level records should be reviewed",
                code="spending_misuse_claim",
            )
