"""Schema package for stories, normalized source datasets and verification output.

Primary exports:
- Story: Immutable citizen story input (camelCase aliases accepted)
- SourceDataset variants: One normalized dataset model per adapter
- VerificationRecord: Per-adapter verdict
- AggregatedVerification: Merged verdict for a story

Usage:
    from story_verifier.data_management.schemas import Story, PolicyArea
    story = Story.model_validate({"id": "s1", "story": "...", "policyArea": "housing"})

    from story_verifier.data_management.schemas import Geography, HousingDataset
"""

# Story schemas
from story_verifier.data_management.schemas.story_schema import (
    Demographics,
    Impact,
    Location,
    PolicyArea,
    Story,
)

# Dataset schemas
from story_verifier.data_management.schemas.dataset_schema import (
    FALLBACK_SUFFIX,
    AnySourceDataset,
    CampaignFinanceDataset,
    ClimateDataset,
    CrimeDataset,
    DemographicsDataset,
    EmergencyDataset,
    EnergyDataset,
    FederalSpendingDataset,
    FinanceEntity,
    Geography,
    HigherEducationDataset,
    HousingDataset,
    InfrastructureDataset,
    LegislativeDataset,
    RegulatoryDataset,
    SourceDataset,
    VeteransDataset,
    pct_change,
    percentage,
)

# Verification schemas
from story_verifier.data_management.schemas.verification_schema import (
    AggregatedVerification,
    Flag,
    Insight,
    Severity,
    StoryContext,
    VerificationRecord,
)

__all__ = [
    "Story",
    "PolicyArea",
    "Location",
    "Demographics",
    "Impact",
    "Geography",
    "SourceDataset",
    "AnySourceDataset",
    "FALLBACK_SUFFIX",
    "DemographicsDataset",
    "EnergyDataset",
    "ClimateDataset",
    "HousingDataset",
    "InfrastructureDataset",
    "EmergencyDataset",
    "CrimeDataset",
    "CampaignFinanceDataset",
    "FinanceEntity",
    "LegislativeDataset",
    "HigherEducationDataset",
    "VeteransDataset",
    "FederalSpendingDataset",
    "RegulatoryDataset",
    "percentage",
    "pct_change",
    "Severity",
    "Insight",
    "Flag",
    "VerificationRecord",
    "AggregatedVerification",
    "StoryContext",
]
