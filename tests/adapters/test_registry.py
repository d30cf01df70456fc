"""Tests for the adapter registry."""

import httpx
import pytest

from story_verifier.adapters.housing import HousingAdapter
from story_verifier.adapters.registry import ADAPTER_CLASSES, build_adapter, build_default_adapters
from story_verifier.config.scoring_weights import AdapterConfigurationError
from story_verifier.transport.quota import QuotaRegistry


class TestRegistry:
    def test_all_adapters_registered(self) -> None:
        assert list(ADAPTER_CLASSES) == [
            "demographics", "energy", "climate", "housing", "infrastructure",
            "emergency", "crime", "campaign_finance", "legislative",
            "higher_education", "veterans", "federal_spending", "regulatory",
        ]

    def test_build_by_name(self) -> None:
        assert isinstance(build_adapter("housing"), HousingAdapter)

    def test_unknown_name(self) -> None:
        with pytest.raises(AdapterConfigurationError, match="Unknown adapter 'weather'"):
            build_adapter("weather")

    def test_defaults_share_quota_registry(self) -> None:
        quotas = QuotaRegistry.from_settings()
        client = httpx.AsyncClient()

        adapters = build_default_adapters(http_client=client, quotas=quotas,
                                          names=["housing", "crime"])

        assert list(adapters) == ["housing", "crime"]
        assert all(a._quotas is quotas for a in adapters.values())
        assert all(a._http_client is client for a in adapters.values())

    def test_builds_every_adapter(self) -> None:
        assert len(build_default_adapters()) == len(ADAPTER_CLASSES)
