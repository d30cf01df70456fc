"""Fallback dataset for the infrastructure adapter.

Bridge counts follow the National Bridge Inventory, road condition the FHWA
Highway Statistics, transit ridership the National Transit Database.
"""

from story_verifier.adapters.fallback.archetypes import DEFAULT, fallback_provenance, pick
from story_verifier.data_management.schemas.dataset_schema import Geography, InfrastructureDataset

# bridges, deficient bridges, avg bridge age, road condition, poor road %,
# transit systems, annual transit riders, federal funding
TRANSPORTATION = {
    "MI": (11_098, 1_312, 54, "Fair", 32, 87, 54_200_000, 1_245_000_000),
    "TX": (54_682, 1_497, 42, "Good", 18, 142, 287_000_000, 4_890_000_000),
    "VA": (13_932, 782, 47, "Fair", 24, 98, 156_000_000, 1_654_000_000),
    "CA": (25_771, 1_568, 51, "Fair", 35, 267, 1_240_000_000, 6_780_000_000),
    "NY": (17_456, 2_095, 61, "Fair", 38, 187, 2_450_000_000, 5_430_000_000),
    "FL": (12_635, 440, 38, "Good", 15, 108, 298_000_000, 3_120_000_000),
    "IL": (26_846, 2_374, 48, "Fair", 30, 112, 532_000_000, 2_760_000_000),
    DEFAULT: (8_000, 640, 50, "Fair", 25, 45, 45_000_000, 987_000_000),
}


def fallback_infrastructure(geography: Geography) -> InfrastructureDataset:
    (bridges, deficient, age, condition, poor_roads,
     systems, riders, funding) = pick(TRANSPORTATION, geography.state)
    return InfrastructureDataset(
        geography=geography,
        vintage="2023",
        provenance=fallback_provenance("DOT National Bridge Inventory"),
        degraded=True,
        total_bridges=bridges,
        deficient_bridges=deficient,
        avg_bridge_age=age,
        road_condition=condition,
        poor_road_percentage=poor_roads,
        transit_systems=systems,
        annual_transit_riders=riders,
        federal_funding=funding,
    )
