"""Abstract base class for all source verifier adapters."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional, Tuple

import httpx

from story_verifier.adapters.fallback import FALLBACK_PROVIDERS
from story_verifier.adapters.scoring import ScoreCard, degraded_record, not_relevant_record, red_flags
from story_verifier.config.keywords import RELEVANCE_KEYWORDS, matches_any
from story_verifier.config.scoring_weights import resolve_weights
from story_verifier.data_management.schemas.dataset_schema import Geography, SourceDataset
from story_verifier.data_management.schemas.story_schema import Story
from story_verifier.data_management.schemas.verification_schema import VerificationRecord
from story_verifier.transport.errors import FailureReason
from story_verifier.transport.quota import QuotaRegistry
from story_verifier.transport.resilient_client import CallTarget, ResilientClient, SleepFunc
from story_verifier.utils.logging import get_structured_logger


class UpstreamUnavailable(Exception):
    """A sub-request of fetch() failed; fetch() answers with fallback data."""

    def __init__(self, adapter: str, reason: FailureReason, message: str = "") -> None:
        super().__init__(f"[{adapter}] {reason.value}: {message}")
        self.reason = reason


class SourceAdapter(ABC):
    """
    Common interface for one government data source.

    Subclasses declare their identity as class attributes and implement two
    hooks: _fetch() (parse upstream responses into the adapter's dataset) and
    _score() (credit signals on a ScoreCard). fallback_dataset() supplies the
    per-state reference values used when the upstream is unavailable.

    The base class supplies the parts every adapter shares: relevance
    testing, the never-raising fetch() wrapper, the scoring template and
    lazy construction of the ResilientClient.

    Attributes:
        name: Adapter name used by the router and in records
        display_name: Human-readable topic name for insights
        upstream: Key into UPSTREAM_PROFILES for the ResilientClient
        source_label: Provenance written on live datasets
        api_key_setting: Settings field holding the upstream credential, if any
        api_key_required: Whether a missing credential degrades to fallback data
        weights: Resolved scoring weights
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    upstream: ClassVar[str]
    source_label: ClassVar[str]
    api_key_setting: ClassVar[Optional[str]] = None
    api_key_required: ClassVar[bool] = True

    def __init__(
        self,
        client: Optional[ResilientClient] = None,
        weights: Optional[Mapping[str, int]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        quotas: Optional[QuotaRegistry] = None,
        sleep: Optional[SleepFunc] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        """
        Initialize the adapter.

        Args:
            client: Pre-built ResilientClient (tests inject one); built lazily otherwise
            weights: Weight overrides; defaults to SCORING_WEIGHT_OVERRIDES[name]
            http_client: Shared httpx client for the lazily built ResilientClient
            quotas: Shared account quotas for the lazily built ResilientClient
            sleep: Sleep override for the lazily built ResilientClient
            api_key: Credential override; defaults to the api_key_setting value
            base_url: Upstream base URL override; defaults to settings

        Raises:
            AdapterConfigurationError: Malformed weight overrides
        """
        from story_verifier.config.settings import settings

        if weights is None:
            weights = settings.scoring_weight_overrides.get(self.name)
        self.weights: Dict[str, int] = resolve_weights(self.name, weights)
        self.keywords: FrozenSet[str] = RELEVANCE_KEYWORDS[self.name]

        if api_key is None and self.api_key_setting:
            api_key = getattr(settings, self.api_key_setting)
        self.api_key = api_key
        self.base_url = (base_url or self.default_base_url()).rstrip("/")

        self._client = client
        self._http_client = http_client
        self._quotas = quotas
        self._sleep = sleep
        self._logger = get_structured_logger(
            f"adapters.{self.name}", component=self.__class__.__name__, adapter=self.name
        )

    def default_base_url(self) -> str:
        from story_verifier.config.settings import settings

        return getattr(settings, f"{self.upstream}_base_url")

    def _get_client(self) -> ResilientClient:
        """Lazy-init the ResilientClient for this adapter's upstream."""
        if self._client is None:
            self._client = ResilientClient.for_upstream(
                self.upstream,
                http_client=self._http_client,
                quotas=self._quotas,
                sleep=self._sleep,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    # ── Relevance ─────────────────────────────────────────────────────

    def is_relevant(self, text: str) -> bool:
        return matches_any(text, self.keywords)

    # ── Fetch ─────────────────────────────────────────────────────────

    async def fetch(self, geography: Geography) -> SourceDataset:
        """
        Fetch and normalize the dataset for a geography.

        Never raises: any failure (missing credential, exhausted retries,
        unparseable payload) yields the fallback dataset for the state with
        degraded=True and the failure reason attached.
        """
        if self.api_key_setting and self.api_key_required and not self.api_key:
            self._logger.warning(
                "api_key_missing",
                setting=self.api_key_setting.upper(),
                state=geography.state,
            )
            return self.fallback(geography, FailureReason.UNAUTHORIZED)

        try:
            dataset = await self._fetch(geography)
        except UpstreamUnavailable as exc:
            self._logger.warning(
                "adapter_fetch_failed",
                state=geography.state,
                reason=exc.reason.value,
                error=str(exc),
            )
            return self.fallback(geography, exc.reason)
        except Exception as exc:
            self._logger.error(
                "adapter_parse_failed",
                state=geography.state,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return self.fallback(geography, FailureReason.UNKNOWN_ERROR)

        self._logger.info(
            "dataset_fetched",
            state=geography.state,
            zip=geography.zip,
            vintage=dataset.vintage,
        )
        return dataset

    async def _call(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Call the upstream through the substrate, raising UpstreamUnavailable on failure."""
        target = CallTarget(
            url=f"{self.base_url}{path}",
            method=method,
            headers=headers or {},
            json_body=json_body,
        )
        outcome = await self._get_client().call(target, params)
        if not outcome.ok:
            raise UpstreamUnavailable(self.name, outcome.reason, outcome.message)
        return outcome.data

    def fallback(self, geography: Geography, reason: FailureReason) -> SourceDataset:
        """Fallback dataset tagged with the failure reason."""
        dataset = self.fallback_dataset(geography)
        return dataset.model_copy(update={"failure_reason": reason})

    # ── Scoring ───────────────────────────────────────────────────────

    def score(self, story: Story, dataset: SourceDataset) -> VerificationRecord:
        """
        Score a story against a dataset. Pure: no I/O, no shared state.

        Args:
            story: Story being verified
            dataset: Dataset previously returned by fetch()

        Returns:
            VerificationRecord (confidence None when the story is out of scope)
        """
        text = story.text
        if not self.is_relevant(text):
            return not_relevant_record(self.name, self.display_name)
        card = ScoreCard(adapter=self.name, weights=self.weights)
        if dataset.degraded:
            # Story-text flags and the population bound hold without live data
            self._check_plausibility(story, dataset, card)
            card.flags.extend(red_flags(text))
            return degraded_record(self.name, self.display_name, dataset, card.flags)

        self._score(story, dataset, card)
        card.flags.extend(red_flags(text))
        return card.record(dataset.provenance)

    # ── Hooks ─────────────────────────────────────────────────────────

    @abstractmethod
    async def _fetch(self, geography: Geography) -> SourceDataset:
        """Query the upstream and build the live dataset."""
        pass

    @abstractmethod
    def _score(self, story: Story, dataset: SourceDataset, card: ScoreCard) -> None:
        """Credit corroborating signals and add insights/flags."""
        pass

    def population_bound(self, dataset: SourceDataset) -> Optional[Tuple[int, str]]:
        """(population, place name) bounding claimed affected counts, if known."""
        return None

    def _check_plausibility(
        self,
        story: Story,
        dataset: SourceDataset,
        card: ScoreCard,
    ) -> Optional[bool]:
        bound = self.population_bound(dataset)
        if story.impact is None or bound is None:
            return None
        population, where = bound
        return card.check_population(story.impact.affected_population, population, where)

    def fallback_dataset(self, geography: Geography) -> SourceDataset:
        """Deterministic reference dataset for the geography (degraded=True)."""
        return FALLBACK_PROVIDERS[self.name](geography)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name='{self.name}', upstream='{self.upstream}')>"
