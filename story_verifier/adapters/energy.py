"""EIA energy price adapter.

Three sequential EIA v2 queries: state retail electricity prices by sector,
state residential natural gas price, and the national weekly regular
gasoline price. Typical household costs use EIA consumption averages
(893 kWh, 5.8 Mcf and 50 gallons per month).
"""

from typing import Any, Dict, List

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard, extract_dollar_amounts
from story_verifier.config.geography import state_name
from story_verifier.config.keywords import matches_any
from story_verifier.data_management.schemas.dataset_schema import EnergyDataset, Geography
from story_verifier.data_management.schemas.story_schema import Story

ELECTRIC_TERMS = ("electric", "utility", "utilities", "power", "kwh")
NATURAL_GAS_TERMS = ("natural gas", "heating", "gas bill", "furnace")
GASOLINE_TERMS = ("gasoline", "fuel", "gas price", "gas prices", "pump")

_SECTORS = {"RES": "residential", "COM": "commercial", "IND": "industrial"}


def _latest_rows(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = payload.get("response", {}).get("data") or []
    if not rows:
        raise ValueError("EIA response contained no data")
    return rows


class EnergyAdapter(SourceAdapter):
    name = "energy"
    display_name = "energy"
    upstream = "eia"
    source_label = "EIA Electric Power Monthly"
    api_key_setting = "eia_api_key"

    def _sorted_params(self, frequency: str, length: int) -> Dict[str, Any]:
        return {
            "api_key": self.api_key,
            "frequency": frequency,
            "sort[0][column]": "period",
            "sort[0][direction]": "desc",
            "length": length,
        }

    async def _fetch(self, geography: Geography) -> EnergyDataset:
        electricity = _latest_rows(await self._call(
            "/electricity/retail-sales/data/",
            {
                **self._sorted_params("annual", 9),
                "data[0]": "price",
                "facets[stateid][]": geography.state,
                "facets[sectorid][]": list(_SECTORS),
            },
        ))
        prices: Dict[str, float] = {}
        for row in electricity:
            sector = _SECTORS.get(row.get("sectorid"))
            if sector and sector not in prices and row.get("price") is not None:
                prices[sector] = float(row["price"])
        period = str(electricity[0].get("period", ""))

        natural_gas = _latest_rows(await self._call(
            "/natural-gas/pri/sum/data/",
            {
                **self._sorted_params("annual", 1),
                "data[0]": "value",
                "facets[duoarea][]": f"S{geography.state}",
                "facets[process][]": "PRS",
            },
        ))
        gasoline = _latest_rows(await self._call(
            "/petroleum/pri/gnd/data/",
            {
                **self._sorted_params("weekly", 1),
                "data[0]": "value",
                "facets[duoarea][]": "NUS",
                "facets[product][]": "EPMR",
            },
        ))

        return EnergyDataset(
            geography=geography,
            vintage=period[:4] or "2024",
            provenance=self.source_label,
            electricity_residential_cents=prices["residential"],
            electricity_commercial_cents=prices.get("commercial", prices["residential"]),
            electricity_industrial_cents=prices.get("industrial", prices["residential"]),
            natural_gas_residential=float(natural_gas[0]["value"]),
            gasoline_price=float(gasoline[0]["value"]),
        )

    def _score(self, story: Story, dataset: EnergyDataset, card: ScoreCard) -> None:
        text = story.text
        total = round(
            dataset.monthly_electric_bill + dataset.monthly_gas_bill + dataset.monthly_gasoline_cost,
            2,
        )
        card.metrics.update({
            "electricity_cents_per_kwh": dataset.electricity_residential_cents,
            "monthly_electric_bill": dataset.monthly_electric_bill,
            "monthly_gas_bill": dataset.monthly_gas_bill,
            "monthly_gasoline_cost": dataset.monthly_gasoline_cost,
            "total_monthly_energy": total,
        })
        card.insight(
            "state_energy_context",
            f"In {state_name(dataset.geography.state)}, typical households spend ${total:,.2f}/month "
            "on energy (electricity + gas + gasoline)",
        )

        if matches_any(text, ELECTRIC_TERMS):
            card.add("electricity")
            card.insight(
                "electricity_context",
                f"Residential electricity: {dataset.electricity_residential_cents}¢/kWh "
                f"(${dataset.monthly_electric_bill:,.2f}/month average)",
            )
        if matches_any(text, NATURAL_GAS_TERMS):
            card.add("natural_gas")
            card.insight(
                "natural_gas_context",
                f"Natural gas: ${dataset.natural_gas_residential}/Mcf "
                f"(${dataset.monthly_gas_bill:,.2f}/month average)",
            )
        if matches_any(text, GASOLINE_TERMS):
            card.add("gasoline")
            card.insight(
                "gasoline_context",
                f"Gasoline: ${dataset.gasoline_price}/gallon "
                f"(${dataset.monthly_gasoline_cost:,.2f}/month average)",
            )

        amounts = extract_dollar_amounts(story.body)
        if amounts:
            card.add("dollar_amount")
            card.metrics["mentioned_amounts"] = amounts
            card.insight(
                "cost_comparison",
                f"Story mentions specific costs. State averages: electricity "
                f"${dataset.monthly_electric_bill:,.2f}/mo, natural gas ${dataset.monthly_gas_bill:,.2f}/mo",
            )
