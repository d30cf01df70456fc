"""Story verification pipeline: the entry point for callers.

Owns the long-lived resources one process should share across stories: a
single httpx.AsyncClient, the rolling-window quota registry and the dataset
memo cache. The aggregator is built lazily on first use.

Usage:
    from story_verifier.pipeline import VerificationPipeline

    pipeline = VerificationPipeline()
    result = await pipeline.verify_story(story)
    results = await pipeline.verify_batch(stories)
    await pipeline.aclose()
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, Union

import httpx
import structlog

from story_verifier.aggregation.verification_aggregator import VerificationAggregator
from story_verifier.data_management.dataset_cache import DatasetCache
from story_verifier.data_management.schemas.story_schema import PolicyArea, Story
from story_verifier.data_management.schemas.verification_schema import (
    AggregatedVerification,
    StoryContext,
)
from story_verifier.transport.quota import QuotaRegistry

ProgressCallback = Callable[[AggregatedVerification], Awaitable[None]]


class VerificationPipeline:
    """Batch and single-story verification over one shared aggregator."""

    def __init__(
        self,
        aggregator: Optional[VerificationAggregator] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        quotas: Optional[QuotaRegistry] = None,
        cache: Optional[DatasetCache] = None,
        max_concurrent_stories: Optional[int] = None,
    ) -> None:
        """Initialize VerificationPipeline.

        Args:
            aggregator: Pre-configured aggregator. Lazy-initialized if None.
            http_client: Shared httpx client. Created (and owned) lazily if None.
            quotas: Shared quota registry. Built from settings if None.
            cache: Dataset memo cache. Built from settings if None.
            max_concurrent_stories: Batch concurrency. settings.max_concurrent_stories if None.
        """
        from story_verifier.config.settings import settings

        self._aggregator = aggregator
        self._http_client = http_client
        self._owns_http_client = False
        self._quotas = quotas
        self._cache = cache
        self.max_concurrent_stories = max(
            1, max_concurrent_stories or settings.max_concurrent_stories
        )
        self._logger = structlog.get_logger().bind(component="VerificationPipeline")

    def _get_aggregator(self) -> VerificationAggregator:
        """Lazy-init the aggregator with shared client, quotas and cache."""
        if self._aggregator is None:
            from story_verifier.config.settings import settings

            if self._http_client is None:
                self._http_client = httpx.AsyncClient(
                    timeout=httpx.Timeout(settings.slow_timeout_seconds),
                    headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
                    follow_redirects=True,
                )
                self._owns_http_client = True
            self._aggregator = VerificationAggregator(
                http_client=self._http_client,
                quotas=self._quotas or QuotaRegistry.from_settings(),
                cache=self._cache or DatasetCache(),
            )
        return self._aggregator

    @property
    def aggregator(self) -> VerificationAggregator:
        return self._get_aggregator()

    async def verify_story(
        self,
        story: Story,
        adapters: Optional[Sequence[str]] = None,
    ) -> AggregatedVerification:
        """Verify one story. Never raises."""
        return await self._get_aggregator().verify(story, adapters)

    async def verify_batch(
        self,
        stories: Sequence[Story],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[AggregatedVerification]:
        """Verify many stories with bounded concurrency.

        Args:
            stories: Stories to verify.
            progress_callback: Optional async callback invoked as each story completes.

        Returns:
            One AggregatedVerification per story, in input order.
        """
        aggregator = self._get_aggregator()
        semaphore = asyncio.Semaphore(self.max_concurrent_stories)

        self._logger.info(
            "batch_started",
            stories=len(stories),
            concurrency=self.max_concurrent_stories,
        )

        async def verify_with_semaphore(story: Story) -> AggregatedVerification:
            async with semaphore:
                result = await aggregator.verify(story)
            if progress_callback:
                try:
                    await progress_callback(result)
                except Exception as e:
                    self._logger.error("progress_callback_failed", story_id=story.id, error=str(e))
            return result

        results = await asyncio.gather(*[verify_with_semaphore(s) for s in stories])

        self._logger.info(
            "batch_complete",
            stories=len(results),
            verified=sum(1 for r in results if r.verified),
            degraded=sum(1 for r in results if r.degraded),
        )
        return list(results)

    async def get_story_context(
        self,
        state: str,
        policy_area: Union[PolicyArea, str],
        zip: Optional[str] = None,
    ) -> StoryContext:
        """Fetch the raw datasets for a state and policy area without scoring."""
        return await self._get_aggregator().get_story_context(state, policy_area, zip)

    async def aclose(self) -> None:
        """Release adapter clients and the shared http client if owned."""
        if self._aggregator is not None:
            await self._aggregator.aclose()
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False

    async def __aenter__(self) -> "VerificationPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
