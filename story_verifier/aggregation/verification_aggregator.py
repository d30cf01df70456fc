"""Verification aggregator: fan out to adapters and merge their records.

For one story:
1. Route the story to adapter names (or take an explicit list)
2. Nothing routed means a neutral no_adapters_fired result, before any lookup
3. Resolve the geography; no state means a neutral missing_location result
4. Run fetch -> score for every adapter concurrently, bounded by a semaphore
5. Merge fired records in invocation order, whatever order they completed in

Merge rules:
- confidence: max over fired records, clamped to [0, 100]
- verified: taken from the first record (in invocation order) at that max
- insights, flags: concatenated in invocation order
- data_source: provenances joined with " + "
- nothing fired: confidence 50 with a single no_adapters_fired insight

verify() never raises. An adapter that raises despite its own never-raise
contract is logged and contributes nothing.
"""

import asyncio
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import httpx
import structlog

from story_verifier.adapters.base_adapter import SourceAdapter
from story_verifier.adapters.geography_resolver import GeographyResolver
from story_verifier.adapters.registry import build_default_adapters
from story_verifier.adapters.scoring import clamp
from story_verifier.config.scoring_weights import NEUTRAL_CONFIDENCE
from story_verifier.data_management.dataset_cache import DatasetCache
from story_verifier.data_management.schemas.dataset_schema import Geography, SourceDataset
from story_verifier.data_management.schemas.story_schema import PolicyArea, Story
from story_verifier.data_management.schemas.verification_schema import (
    AggregatedVerification,
    Insight,
    StoryContext,
    VerificationRecord,
)
from story_verifier.routing.topic_router import TopicRouter
from story_verifier.transport.quota import QuotaRegistry
from story_verifier.transport.resilient_client import SleepFunc
from story_verifier.utils.logging import bind_story_context, unbind_story_context

SOURCE_SEPARATOR = " + "


class VerificationAggregator:
    """
    Concurrent multi-source verification of citizen stories.

    Attributes:
        adapters: Adapter instances by name
        router: TopicRouter selecting adapters per story
        resolver: GeographyResolver filling in the state from a ZIP
        cache: Optional dataset memo cache shared across stories
        max_concurrency: Upper bound on concurrent adapter fetches per story
    """

    def __init__(
        self,
        adapters: Optional[Mapping[str, SourceAdapter]] = None,
        router: Optional[TopicRouter] = None,
        resolver: Optional[GeographyResolver] = None,
        cache: Optional[DatasetCache] = None,
        max_concurrency: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        quotas: Optional[QuotaRegistry] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            adapters: Adapter instances by name; all registered adapters if None
            router: Router; built from settings if None
            resolver: Geography resolver; built on the shared http client if None
            cache: Dataset cache; no caching if None
            max_concurrency: Concurrent fetch bound; settings.max_concurrent_adapters if None
            http_client: Shared httpx client for default adapters and resolver
            quotas: Shared quota registry for default adapters
            sleep: Sleep override for default adapters and resolver

        Raises:
            AdapterConfigurationError: Malformed weight overrides or routing profile
        """
        from story_verifier.config.settings import settings

        if adapters is None:
            adapters = build_default_adapters(http_client=http_client, quotas=quotas, sleep=sleep)
        self.adapters: Dict[str, SourceAdapter] = dict(adapters)
        self.router = router or TopicRouter()
        self.resolver = resolver or GeographyResolver(http_client=http_client, sleep=sleep)
        self.cache = cache
        self.max_concurrency = max(1, max_concurrency or settings.max_concurrent_adapters)
        self._logger = structlog.get_logger().bind(component="VerificationAggregator")

    # ── Public API ────────────────────────────────────────────────────

    async def verify(
        self,
        story: Story,
        adapters: Optional[Sequence[str]] = None,
    ) -> AggregatedVerification:
        """
        Verify one story against every routed adapter.

        Args:
            story: Story to verify
            adapters: Explicit adapter names, bypassing the router

        Returns:
            AggregatedVerification (never raises)
        """
        bind_story_context(story.id)
        try:
            return await self._verify(story, adapters)
        except Exception as exc:
            self._logger.exception("verification_failed", error=str(exc))
            return self._neutral(
                story.id,
                "verification_error",
                "Verification could not be completed; no data sources contributed",
                [],
            )
        finally:
            unbind_story_context()

    async def get_story_context(
        self,
        state: str,
        policy_area: Union[PolicyArea, str],
        zip: Optional[str] = None,
    ) -> StoryContext:
        """
        Fetch the datasets for a state and policy area without scoring.

        Args:
            state: Two-letter state code
            policy_area: Policy area selecting adapters from the routing table
            zip: Optional ZIP for ZIP-level datasets

        Returns:
            StoryContext with one dataset per adapter that returned one
        """
        area = policy_area if isinstance(policy_area, PolicyArea) else PolicyArea(policy_area)
        names = self._known(self.router.routes.get(area, ()))
        geography = Geography(state=state, zip=zip)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch_one(name: str) -> SourceDataset:
            async with semaphore:
                return await self._fetch(self.adapters[name], geography)

        results = await asyncio.gather(*[fetch_one(n) for n in names], return_exceptions=True)

        datasets: Dict[str, SourceDataset] = {}
        for name, result in _paired(names, results):
            if isinstance(result, BaseException):
                self._logger.error("context_fetch_failed", adapter=name, error=str(result))
                continue
            datasets[name] = result

        self._logger.info(
            "story_context_fetched",
            state=geography.state,
            policy_area=area.value,
            adapters=list(datasets),
        )
        return StoryContext(
            state=geography.state,
            policy_area=area.value,
            zip=zip,
            datasets=datasets,
            degraded_sources=[name for name, ds in datasets.items() if ds.degraded],
        )

    async def aclose(self) -> None:
        for adapter in self.adapters.values():
            await adapter.aclose()
        await self.resolver.aclose()

    # ── Internals ─────────────────────────────────────────────────────

    async def _verify(
        self,
        story: Story,
        explicit: Optional[Sequence[str]],
    ) -> AggregatedVerification:
        names = self._known(explicit if explicit is not None else self.router.route(story))
        if not names:
            self._logger.info("no_adapters_routed")
            return self._merge(story.id, names, {})

        geography = await self.resolver.resolve(story.location)
        if geography is None:
            self._logger.info("missing_location", adapters=names)
            return self._neutral(
                story.id,
                "missing_location",
                "Story location not specified; unable to verify with regional data",
                names,
            )

        self._logger.info(
            "verification_started",
            state=geography.state,
            zip=geography.zip,
            adapters=names,
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(name: str) -> VerificationRecord:
            adapter = self.adapters[name]
            async with semaphore:
                dataset = await self._fetch(adapter, geography)
            return adapter.score(story, dataset)

        results = await asyncio.gather(*[run(n) for n in names], return_exceptions=True)

        records: Dict[str, VerificationRecord] = {}
        for name, result in _paired(names, results):
            if isinstance(result, BaseException):
                self._logger.error(
                    "adapter_failed",
                    adapter=name,
                    error=str(result),
                    error_type=result.__class__.__name__,
                )
                continue
            records[name] = result

        aggregated = self._merge(story.id, names, records)
        self._logger.info(
            "verification_complete",
            confidence=aggregated.confidence,
            verified=aggregated.verified,
            fired=aggregated.fired_adapters,
            data_source=aggregated.data_source,
        )
        return aggregated

    async def _fetch(self, adapter: SourceAdapter, geography: Geography) -> SourceDataset:
        if self.cache is None:
            return await adapter.fetch(geography)
        return await self.cache.get_or_fetch(adapter.name, geography, adapter.fetch)

    def _known(self, names: Sequence[str]) -> List[str]:
        """Deduplicated names in order, dropping any without an adapter instance."""
        known: List[str] = []
        for name in names:
            if name not in self.adapters:
                self._logger.warning("adapter_not_configured", adapter=name)
            elif name not in known:
                known.append(name)
        return known

    @staticmethod
    def _merge(
        story_id: str,
        names: List[str],
        records: Dict[str, VerificationRecord],
    ) -> AggregatedVerification:
        fired = [records[n] for n in names if n in records and records[n].fired]
        if not fired:
            return AggregatedVerification(
                story_id=story_id,
                verified=False,
                confidence=NEUTRAL_CONFIDENCE,
                data_source="none",
                insights=[
                    Insight(
                        type="no_adapters_fired",
                        message="No data source found the story in scope; confidence is neutral",
                    )
                ],
                per_adapter=records,
                adapters_invoked=names,
            )

        best = max(record.confidence for record in fired)
        leader = next(record for record in fired if record.confidence == best)
        return AggregatedVerification(
            story_id=story_id,
            verified=leader.verified,
            confidence=clamp(best),
            data_source=SOURCE_SEPARATOR.join(r.data_source for r in fired if r.data_source),
            insights=[insight for record in fired for insight in record.insights],
            flags=[flag for record in fired for flag in record.flags],
            per_adapter=records,
            adapters_invoked=names,
        )

    @staticmethod
    def _neutral(
        story_id: str,
        insight_type: str,
        message: str,
        names: List[str],
    ) -> AggregatedVerification:
        return AggregatedVerification(
            story_id=story_id,
            verified=False,
            confidence=NEUTRAL_CONFIDENCE,
            data_source="none",
            insights=[Insight(type=insight_type, message=message)],
            adapters_invoked=names,
        )


def _paired(names: Sequence[str], results: Sequence[object]) -> List[Tuple[str, object]]:
    """Pair adapter names with gather() results, which keep argument order."""
    return list(zip(names, results))
