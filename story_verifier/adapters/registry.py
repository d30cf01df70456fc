"""Adapter registry: name-based construction of source adapters."""

from typing import Dict, Iterable, List, Optional, Type

import httpx
import structlog

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.campaign_finance import CampaignFinanceAdapter
from story_verifier.adapters.climate import ClimateAdapter
from story_verifier.adapters.crime import CrimeAdapter
from story_verifier.adapters.demographics import DemographicsAdapter
from story_verifier.adapters.emergency import EmergencyAdapter
from story_verifier.adapters.energy import EnergyAdapter
from story_verifier.adapters.federal_spending import FederalSpendingAdapter
from story_verifier.adapters.higher_education import HigherEducationAdapter
from story_verifier.adapters.housing import HousingAdapter
from story_verifier.adapters.infrastructure import InfrastructureAdapter
from story_verifier.adapters.legislative import LegislativeAdapter
from story_verifier.adapters.regulatory import RegulatoryAdapter
from story_verifier.adapters.veterans import VeteransAdapter
from story_verifier.config.scoring_weights import AdapterConfigurationError
from story_verifier.transport.quota import QuotaRegistry
from story_verifier.transport.resilient_client import SleepFunc

ADAPTER_CLASSES: Dict[str, Type[SourceAdapter]] = {
    cls.name: cls
    for cls in (
        DemographicsAdapter,
        EnergyAdapter,
        ClimateAdapter,
        HousingAdapter,
        InfrastructureAdapter,
        EmergencyAdapter,
        CrimeAdapter,
        CampaignFinanceAdapter,
        LegislativeAdapter,
        HigherEducationAdapter,
        VeteransAdapter,
        FederalSpendingAdapter,
        RegulatoryAdapter,
    )
}

logger = structlog.get_logger().bind(component="AdapterRegistry")


def build_adapter(
    name: str,
    http_client: Optional[httpx.AsyncClient] = None,
    quotas: Optional[QuotaRegistry] = None,
    sleep: Optional[SleepFunc] = None,
) -> SourceAdapter:
    """
    Construct one adapter by name.

    Raises:
        AdapterConfigurationError: Unknown adapter name or malformed weight overrides
    """
    try:
        adapter_cls = ADAPTER_CLASSES[name]
    except KeyError:
        raise AdapterConfigurationError(
            f"Unknown adapter '{name}'; known adapters: {', '.join(sorted(ADAPTER_CLASSES))}"
        ) from None
    return adapter_cls(http_client=http_client, quotas=quotas, sleep=sleep)


def build_default_adapters(
    http_client: Optional[httpx.AsyncClient] = None,
    quotas: Optional[QuotaRegistry] = None,
    sleep: Optional[SleepFunc] = None,
    names: Optional[Iterable[str]] = None,
) -> Dict[str, SourceAdapter]:
    """
    Construct adapters sharing one http client and one quota registry.

    Args:
        http_client: Shared httpx client (each adapter owns one if None)
        quotas: Shared account quotas; one registry from settings if None
        sleep: Sleep override forwarded to every ResilientClient
        names: Subset of adapter names; all adapters if None

    Returns:
        Dict of adapter name to adapter, in registry order
    """
    quotas = quotas if quotas is not None else QuotaRegistry.from_settings()
    selected: List[str] = list(names) if names is not None else list(ADAPTER_CLASSES)
    adapters = {
        name: build_adapter(name, http_client=http_client, quotas=quotas, sleep=sleep)
        for name in selected
    }
    logger.debug("adapters_built", adapters=list(adapters))
    return adapters
