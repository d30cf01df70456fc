"""Fallback datasets for the civic adapters.

Covers crime (BJS NCVS), campaign finance (OpenFEC), legislative activity
(Congress.gov), higher education (College Scorecard), veterans facilities
(VA), federal spending (USAspending) and regulatory activity (Federal
Register). NCVS, Congress.gov and the Federal Register are national sources,
so their fallbacks ignore the state.
"""

from datetime import date, timedelta

from story_verifier.adapters.fallback.archetypes import DEFAULT, fallback_provenance, pick
from story_verifier.data_management.schemas.dataset_schema import (
    CampaignFinanceDataset,
    CrimeDataset,
    FederalSpendingDataset,
    Geography,
    HigherEducationDataset,
    LegislativeDataset,
    RegulatoryDataset,
    VeteransDataset,
)

# NCVS 2022 weighted estimates. Under half of personal victimizations reach police.
NCVS_ESTIMATES = {
    "total_victimizations": 6_624_880,
    "reported_to_police": 2_782_450,
    "not_reported": 3_706_210,
    "violent": 6_001_030,
    "serious_violent": 2_243_090,
    "with_injury": 1_148_700,
    "with_weapon": 1_315_240,
    "household_reported": 4_903_020,
    "household_not_reported": 8_164_890,
}

# Bill counts per policy area in the 119th (current) and 118th Congress samples
BILL_ACTIVITY = {
    "economy": (14, 9),
    "immigration": (31, 24),
    "education": (27, 29),
    "healthcare": (44, 41),
    "environment": (19, 26),
    "energy": (23, 18),
    "housing": (17, 12),
    "infrastructure": (21, 20),
    "justice": (29, 27),
    "employment": (16, 15),
}

# schools, students, avg Pell rate, high-Pell schools, median debt, net price, 3-yr repayment
SCORECARD = {
    "MI": (92, 520_000, 0.34, 14, 24_500.0, 16_200.0, 0.58),
    "TX": (210, 1_400_000, 0.40, 48, 22_800.0, 14_900.0, 0.52),
    "VA": (88, 480_000, 0.29, 9, 25_300.0, 17_400.0, 0.63),
    "CA": (320, 2_300_000, 0.42, 81, 19_900.0, 15_100.0, 0.60),
    "NY": (250, 1_050_000, 0.36, 40, 24_100.0, 18_600.0, 0.62),
    "FL": (180, 1_000_000, 0.41, 45, 20_500.0, 13_800.0, 0.51),
    "IL": (140, 720_000, 0.35, 22, 23_900.0, 17_100.0, 0.59),
    DEFAULT: (60, 300_000, 0.36, 10, 23_000.0, 16_000.0, 0.56),
}

# total facilities, operating, closed, health facilities
VA_FACILITIES = {
    "MI": (45, 44, 1, 38),
    "TX": (120, 118, 2, 101),
    "VA": (40, 40, 0, 33),
    "CA": (110, 108, 2, 95),
    "NY": (70, 69, 1, 60),
    "FL": (95, 94, 1, 82),
    "IL": (40, 40, 0, 34),
    DEFAULT: (30, 30, 0, 25),
}

# total awards, contracts, grants, loans (USD, fiscal year 2024)
FEDERAL_AWARDS = {
    "MI": (52_100_000_000.0, 9_800_000_000.0, 35_200_000_000.0, 1_100_000_000.0),
    "TX": (168_300_000_000.0, 72_500_000_000.0, 78_100_000_000.0, 3_400_000_000.0),
    "VA": (130_400_000_000.0, 98_200_000_000.0, 24_500_000_000.0, 900_000_000.0),
    "CA": (245_700_000_000.0, 71_300_000_000.0, 145_200_000_000.0, 4_600_000_000.0),
    "NY": (142_900_000_000.0, 14_200_000_000.0, 112_800_000_000.0, 2_100_000_000.0),
    "FL": (98_600_000_000.0, 27_400_000_000.0, 55_900_000_000.0, 2_700_000_000.0),
    "IL": (64_100_000_000.0, 9_500_000_000.0, 45_300_000_000.0, 1_400_000_000.0),
    DEFAULT: (35_000_000_000.0, 8_000_000_000.0, 22_000_000_000.0, 800_000_000.0),
}

REGULATORY_WINDOW_DAYS = 30


def fallback_crime(geography: Geography) -> CrimeDataset:
    return CrimeDataset(
        geography=geography,
        vintage="2022",
        provenance=fallback_provenance("BJS National Crime Victimization Survey"),
        degraded=True,
        **NCVS_ESTIMATES,
    )


def fallback_campaign_finance(geography: Geography) -> CampaignFinanceDataset:
    return CampaignFinanceDataset(
        geography=geography,
        vintage="2024",
        provenance=fallback_provenance("OpenFEC"),
        degraded=True,
        cycle=2024,
    )


def fallback_legislative(geography: Geography) -> LegislativeDataset:
    return LegislativeDataset(
        geography=geography,
        vintage="119th Congress",
        provenance=fallback_provenance("Congress.gov"),
        degraded=True,
        bills_sampled=250,
        current_policy_counts={area: counts[0] for area, counts in BILL_ACTIVITY.items()},
        baseline_policy_counts={area: counts[1] for area, counts in BILL_ACTIVITY.items()},
    )


def fallback_higher_education(geography: Geography) -> HigherEducationDataset:
    (schools, students, pell, high_pell,
     debt, net_price, repayment) = pick(SCORECARD, geography.state)
    return HigherEducationDataset(
        geography=geography,
        vintage="2022-23",
        provenance=fallback_provenance("College Scorecard"),
        degraded=True,
        schools_count=schools,
        total_students=students,
        avg_pell_grant_rate=pell,
        high_pell_schools=high_pell,
        avg_median_debt=debt,
        avg_net_price=net_price,
        avg_repayment_rate=repayment,
    )


def fallback_veterans(geography: Geography) -> VeteransDataset:
    total, operating, closed, health = pick(VA_FACILITIES, geography.state)
    return VeteransDataset(
        geography=geography,
        vintage="current",
        provenance=fallback_provenance("VA Facilities API"),
        degraded=True,
        total_facilities=total,
        operating_facilities=operating,
        closed_facilities=closed,
        health_facilities=health,
    )


def fallback_federal_spending(geography: Geography) -> FederalSpendingDataset:
    total, contracts, grants, loans = pick(FEDERAL_AWARDS, geography.state)
    return FederalSpendingDataset(
        geography=geography,
        vintage="FY2024",
        provenance=fallback_provenance("USAspending.gov"),
        degraded=True,
        fiscal_year=2024,
        total_awards=total,
        total_contracts=contracts,
        total_grants=grants,
        total_loans=loans,
    )


def fallback_regulatory(geography: Geography) -> RegulatoryDataset:
    since = date.today() - timedelta(days=REGULATORY_WINDOW_DAYS)
    return RegulatoryDataset(
        geography=geography,
        vintage=date.today().isoformat(),
        provenance=fallback_provenance("Federal Register"),
        degraded=True,
        since_date=since.isoformat(),
        recent_documents=2_150,
        final_rules=245,
        proposed_rules=190,
        executive_orders=6,
        top_agencies=[
            "Environmental Protection Agency",
            "Commerce Department",
            "Transportation Department",
        ],
    )
