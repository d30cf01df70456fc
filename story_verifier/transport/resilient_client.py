"""Resilient call substrate shared by every source adapter.

Wraps a single outbound HTTP request with:
- A per-attempt wall-clock timeout (httpx timeout plus asyncio.wait_for ceiling)
- Bounded retries with exponential backoff via tenacity (2s, 4s, 8s, ...)
- A one-time cooldown after the first HTTP 429 from the upstream
- An optional rolling-window quota checked before every attempt
- Per-attempt logging with attempt number and outcome

The client never raises past call(): callers receive either a CallResult with
the parsed JSON payload or a CallFailure carrying a FailureReason.

Usage:
    from story_verifier.transport.resilient_client import CallTarget, ResilientClient

    async with ResilientClient.for_upstream("fema") as client:
        outcome = await client.call(
            CallTarget(url="https://www.fema.gov/api/open/v2/DisasterDeclarationsSummaries"),
            {"$filter": "state eq 'TX'"},
        )
        if outcome.ok:
            rows = outcome.data["DisasterDeclarationsSummaries"]
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from story_verifier.config.logging import get_logger
from story_verifier.transport.errors import (
    FailureReason,
    PermanentUpstreamError,
    QuotaExhaustedError,
    TransientUpstreamError,
    UpstreamError,
    UpstreamNetworkError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
    error_for_status,
)
from story_verifier.transport.quota import QuotaRegistry, RollingWindowQuota

MAX_RETRIES = 3

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Resilience constants for one upstream.

    Attributes:
        timeout_seconds: Wall-clock ceiling per attempt
        max_retries: Retries after the first attempt (attempts = 1 + max_retries)
        backoff_base: Base delay; the wait before retry n is base * 2^(n-1)
        rate_limit_cooldown: Fixed wait applied once after the first HTTP 429
    """

    timeout_seconds: float = 30.0
    max_retries: int = MAX_RETRIES
    backoff_base: float = 2.0
    rate_limit_cooldown: float = 60.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_delays(self) -> list[float]:
        """Exponential waits between attempts when no 429 is seen."""
        return [self.backoff_base * (2 ** n) for n in range(self.max_retries)]

    @property
    def worst_case_seconds(self) -> float:
        """Upper bound on one call: every attempt times out plus backoff and one cooldown."""
        return (
            self.timeout_seconds * self.max_attempts
            + sum(self.backoff_delays())
            + self.rate_limit_cooldown
        )

    @classmethod
    def from_settings(cls, slow: bool = False) -> "RetryPolicy":
        from story_verifier.config.settings import settings

        return cls(
            timeout_seconds=(
                settings.slow_timeout_seconds if slow else settings.default_timeout_seconds
            ),
            max_retries=settings.max_retries,
            backoff_base=settings.backoff_base_seconds,
            rate_limit_cooldown=settings.rate_limit_cooldown_seconds,
        )


@dataclass(frozen=True)
class CallTarget:
    """One upstream endpoint.

    Attributes:
        url: Absolute endpoint URL
        method: HTTP method (GET or POST)
        params: Query parameters merged under per-call params
        headers: Extra request headers (auth tokens, API keys)
        json_body: JSON payload for POST endpoints
    """

    url: str
    method: str = "GET"
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    json_body: Optional[Any] = None


@dataclass(frozen=True)
class CallResult:
    """Successful upstream response with its parsed JSON payload."""

    data: Any
    status_code: int
    attempts: int
    elapsed_seconds: float

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class CallFailure:
    """Explicit failure value returned instead of raising."""

    reason: FailureReason
    message: str
    attempts: int
    elapsed_seconds: float
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return False


CallOutcome = Union[CallResult, CallFailure]


class ResilientClient:
    """
    Timeout, retry, backoff and quota enforcement around httpx.AsyncClient.

    One instance serves one upstream (its policy and quota are upstream
    specific) but several instances may share a single httpx.AsyncClient.

    Attributes:
        upstream: Upstream name used in logs and failure messages
        policy: RetryPolicy in force
        quota: Optional shared rolling-window quota
    """

    def __init__(
        self,
        upstream: str,
        policy: Optional[RetryPolicy] = None,
        quota: Optional[RollingWindowQuota] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFunc] = None,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            upstream: Upstream name (e.g. "fema")
            policy: Retry policy; defaults to RetryPolicy()
            quota: Shared quota for the upstream account, if metered
            http_client: Shared httpx client; one is created (and owned) lazily if None
            sleep: Async sleep used between attempts (tests pass a recorder)
            user_agent: User-Agent for an owned http client
        """
        self.upstream = upstream
        self.policy = policy or RetryPolicy()
        self.quota = quota
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._sleep: SleepFunc = sleep or asyncio.sleep
        self._user_agent = user_agent or "story_verifier/0.1.0"
        self.logger = get_logger(f"transport.{upstream}")

    @classmethod
    def for_upstream(
        cls,
        upstream: str,
        http_client: Optional[httpx.AsyncClient] = None,
        quotas: Optional[QuotaRegistry] = None,
        sleep: Optional[SleepFunc] = None,
    ) -> "ResilientClient":
        """
        Build a client using the upstream's profile from config.

        Args:
            upstream: Key in UPSTREAM_PROFILES
            http_client: Shared httpx client
            quotas: Registry holding shared account quotas
            sleep: Optional sleep override

        Raises:
            KeyError: Unknown upstream name (a configuration bug)
        """
        from story_verifier.config.settings import settings
        from story_verifier.config.upstreams import UPSTREAM_PROFILES

        profile = UPSTREAM_PROFILES[upstream]
        quota = quotas.get(profile.quota_account) if quotas is not None else None
        return cls(
            upstream,
            policy=RetryPolicy.from_settings(slow=profile.slow),
            quota=quota,
            http_client=http_client,
            sleep=sleep,
            user_agent=settings.user_agent,
        )

    async def __aenter__(self) -> "ResilientClient":
        self._get_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.policy.timeout_seconds),
                headers={"User-Agent": self._user_agent, "Accept": "application/json"},
                follow_redirects=True,
            )
            self._owns_http_client = True
        return self._http_client

    async def aclose(self) -> None:
        """Close the http client if this instance created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _wait_strategy(self) -> Callable[[RetryCallState], float]:
        """Exponential backoff, except a fixed cooldown after the first 429."""
        backoff = wait_exponential(multiplier=self.policy.backoff_base, exp_base=2)
        cooldown_used = False

        def wait(retry_state: RetryCallState) -> float:
            nonlocal cooldown_used
            outcome = retry_state.outcome
            error = outcome.exception() if outcome is not None else None
            if isinstance(error, UpstreamRateLimitedError) and not cooldown_used:
                cooldown_used = True
                self.logger.warning(
                    f"Rate limited by {self.upstream}, cooling down "
                    f"{self.policy.rate_limit_cooldown:.0f}s before retrying"
                )
                return self.policy.rate_limit_cooldown
            return backoff(retry_state)

        return wait

    async def call(
        self,
        target: CallTarget,
        params: Optional[Dict[str, Any]] = None,
    ) -> CallOutcome:
        """
        Perform the request under the resilience contract.

        Args:
            target: Endpoint description
            params: Per-call query parameters (override target.params)

        Returns:
            CallResult on success, CallFailure otherwise (never raises)
        """
        merged_params = {
            key: value
            for key, value in {**target.params, **(params or {})}.items()
            if value is not None
        }
        started = time.monotonic()
        attempts = 0

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=self._wait_strategy(),
            retry=retry_if_exception_type(TransientUpstreamError),
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    result = await self._attempt(target, merged_params, attempts, started)
        except UpstreamError as exc:
            elapsed = time.monotonic() - started
            self.logger.error(
                f"{target.method} {target.url} failed after {attempts} attempt(s): "
                f"{exc.reason.value} ({exc.message})"
            )
            return CallFailure(
                reason=exc.reason,
                message=exc.message,
                attempts=attempts,
                elapsed_seconds=elapsed,
                status_code=exc.status_code,
            )
        except Exception as exc:
            elapsed = time.monotonic() - started
            self.logger.exception(f"Unexpected error calling {target.url}: {exc}")
            return CallFailure(
                reason=FailureReason.UNKNOWN_ERROR,
                message=str(exc) or exc.__class__.__name__,
                attempts=attempts,
                elapsed_seconds=elapsed,
            )

        return result

    async def _attempt(
        self,
        target: CallTarget,
        params: Dict[str, Any],
        attempt_number: int,
        started: float,
    ) -> CallResult:
        """Run one attempt, raising an UpstreamError subclass on failure."""
        label = f"attempt {attempt_number}/{self.policy.max_attempts}"

        if self.quota is not None and not await self.quota.try_acquire():
            self.logger.warning(f"{label} refused: quota '{self.quota.name}' exhausted")
            raise QuotaExhaustedError(
                self.upstream,
                f"Local quota '{self.quota.name}' exhausted ({self.quota.limit} per window)",
            )

        client = self._get_http_client()
        attempt_started = time.monotonic()

        try:
            response = await asyncio.wait_for(
                client.request(
                    target.method,
                    target.url,
                    params=params or None,
                    headers=target.headers or None,
                    json=target.json_body,
                ),
                timeout=self.policy.timeout_seconds,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            self.logger.warning(
                f"{label} timed out after {time.monotonic() - attempt_started:.1f}s"
            )
            raise UpstreamTimeoutError(
                self.upstream, f"Timed out after {self.policy.timeout_seconds:.0f}s"
            ) from exc
        except httpx.RequestError as exc:
            self.logger.warning(f"{label} network error: {exc.__class__.__name__}: {exc}")
            raise UpstreamNetworkError(
                self.upstream, f"Network error: {exc.__class__.__name__}"
            ) from exc

        elapsed = time.monotonic() - attempt_started

        if response.status_code >= 400:
            error = error_for_status(self.upstream, response.status_code, response.text)
            retryable = isinstance(error, TransientUpstreamError)
            self.logger.warning(
                f"{label} HTTP {response.status_code} in {elapsed:.2f}s "
                f"({'retryable' if retryable else 'not retryable'})"
            )
            raise error

        try:
            payload = response.json() if response.content else None
        except ValueError as exc:
            self.logger.warning(f"{label} returned a non-JSON body")
            raise PermanentUpstreamError(
                self.upstream, "Response body is not valid JSON", response.status_code
            ) from exc

        self.logger.info(f"{label} succeeded: HTTP {response.status_code} in {elapsed:.2f}s")
        return CallResult(
            data=payload,
            status_code=response.status_code,
            attempts=attempt_number,
            elapsed_seconds=time.monotonic() - started,
        )
