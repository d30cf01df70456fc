"""NOAA climate adapter.

Queries the Climate Data Online v2 Global Summary of the Year (GSOY) for
every station in the state and averages each datatype across stations:
TAVG (mean temperature), PRCP (annual precipitation), DX90 (days >= 90F),
DT32 (days with max <= 32F) and DP10 (days with >= 1 inch of rain, used as
the severe-event count).
"""

from collections import defaultdict
from datetime import date
from statistics import mean
from typing import Dict, List

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.scoring import ScoreCard
from story_verifier.config.geography import STATE_FIPS, state_name
from story_verifier.config.keywords import matches_any
from story_verifier.data_management.schemas.dataset_schema import ClimateDataset, Geography
from story_verifier.data_management.schemas.story_schema import Story

HEAT_TERMS = ("heat", "hot", "temperature", "warming")
PRECIPITATION_TERMS = ("rain", "flood", "drought", "precipitation", "snow")
SEVERE_TERMS = ("storm", "severe", "extreme")
NAMED_EVENT_TERMS = ("hurricane", "tornado", "flood")

GSOY_DATATYPES = ("TAVG", "PRCP", "DX90", "DT32", "DP10")


class ClimateAdapter(SourceAdapter):
    name = "climate"
    display_name = "climate"
    upstream = "noaa"
    source_label = "NOAA Climate Data Online"
    api_key_setting = "noaa_token"

    async def _fetch(self, geography: Geography) -> ClimateDataset:
        year = date.today().year - 1
        payload = await self._call(
            "/data",
            {
                "datasetid": "GSOY",
                "locationid": f"FIPS:{STATE_FIPS[geography.state]}",
                "datatypeid": ",".join(GSOY_DATATYPES),
                "startdate": f"{year}-01-01",
                "enddate": f"{year}-12-31",
                "units": "standard",
                "limit": 1000,
            },
            headers={"token": self.api_key},
        )

        by_type: Dict[str, List[float]] = defaultdict(list)
        for row in payload.get("results") or []:
            if row.get("value") is not None:
                by_type[row["datatype"]].append(float(row["value"]))
        if not by_type.get("TAVG") or not by_type.get("PRCP"):
            raise ValueError("NOAA response lacked temperature or precipitation results")

        def average(datatype: str) -> float:
            values = by_type.get(datatype)
            return mean(values) if values else 0.0

        return ClimateDataset(
            geography=geography,
            vintage=str(year),
            provenance=self.source_label,
            avg_temperature_f=round(average("TAVG"), 1),
            annual_precipitation_in=round(average("PRCP"), 1),
            days_above_90=round(average("DX90")),
            days_below_32=round(average("DT32")),
            severe_events=round(average("DP10")),
        )

    def _score(self, story: Story, dataset: ClimateDataset, card: ScoreCard) -> None:
        text = story.text
        card.metrics.update({
            "avg_temperature_f": dataset.avg_temperature_f,
            "annual_precipitation_in": dataset.annual_precipitation_in,
            "days_above_90": dataset.days_above_90,
            "severe_events": dataset.severe_events,
        })
        card.insight(
            "state_climate_context",
            f"{state_name(dataset.geography.state)} averages {dataset.avg_temperature_f}°F with "
            f"{dataset.annual_precipitation_in} inches of precipitation per year",
        )

        if matches_any(text, HEAT_TERMS):
            card.add("heat")
            card.insight(
                "temperature_context",
                f"{dataset.days_above_90} days above 90°F per year. "
                f"Temperature trend: {dataset.temperature_trend}",
            )
        if matches_any(text, PRECIPITATION_TERMS):
            card.add("precipitation")
            card.insight(
                "precipitation_context",
                f"Annual precipitation {dataset.annual_precipitation_in} in. "
                f"Precipitation trend: {dataset.precipitation_trend}",
            )
        if matches_any(text, SEVERE_TERMS):
            card.add("severe_weather")
            card.insight(
                "extreme_weather_context",
                f"{dataset.severe_events} severe weather events recorded per year",
            )
        if matches_any(text, NAMED_EVENT_TERMS):
            card.add("named_event")
            card.insight(
                "severe_event_context",
                "Story references hurricanes, tornadoes or floods, which the "
                "emergency adapter cross-checks against disaster declarations",
            )
