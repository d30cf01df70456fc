"""Rolling-window request quotas shared across adapters.

Several upstreams meter one account across many endpoints (every api.data.gov
service shares a daily budget, Congress.gov allows 5,000 requests per hour).
A RollingWindowQuota tracks request timestamps for one such account and
refuses new requests once the window is full. Adapters never own a quota:
the QuotaRegistry builds one per account and injects it into every
ResilientClient that talks to that account.
"""

import asyncio
import time
from collections import deque
from typing import Callable, Dict, Optional

from loguru import logger

HOUR_SECONDS = 3600.0
DAY_SECONDS = 86400.0


class RollingWindowQuota:
    """
    Rolling-window request counter for one upstream account.

    Timestamps older than the window are pruned before every capacity check,
    and check + record happen under one asyncio.Lock so concurrent adapters
    can never overshoot the limit.

    Attributes:
        name: Account identifier used in logs (e.g. "data_gov")
        limit: Maximum requests per window
        window_seconds: Window length (3600 for hourly, 86400 for daily)
        warn_ratio: Usage fraction at which a warning is logged
    """

    def __init__(
        self,
        name: str,
        limit: int,
        window_seconds: float,
        warn_ratio: float = 0.8,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize an empty quota window.

        Args:
            name: Account identifier used in logs
            limit: Maximum requests per rolling window (must be positive)
            window_seconds: Window length in seconds
            warn_ratio: Fraction of the limit that triggers a warning
            clock: Monotonic clock override for tests
        """
        if limit <= 0:
            raise ValueError(f"Quota '{name}' limit must be positive, got {limit}")
        if window_seconds <= 0:
            raise ValueError(f"Quota '{name}' window must be positive, got {window_seconds}")

        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.warn_ratio = warn_ratio
        self._clock = clock or time.monotonic
        self._timestamps: deque[float] = deque()
        self._lock = asyncio.Lock()
        self._warned = False

        logger.debug(
            f"RollingWindowQuota '{name}' initialized: {limit} requests per {window_seconds:.0f}s"
        )

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()
        if len(self._timestamps) < self.limit * self.warn_ratio:
            self._warned = False

    async def try_acquire(self) -> bool:
        """
        Record one request if the window has capacity (atomic).

        Returns:
            True if the request may proceed, False if the quota is exhausted
        """
        async with self._lock:
            now = self._clock()
            self._prune(now)

            if len(self._timestamps) >= self.limit:
                logger.warning(
                    f"Quota '{self.name}' exhausted: {len(self._timestamps)}/{self.limit} "
                    f"in the last {self.window_seconds:.0f}s"
                )
                return False

            self._timestamps.append(now)
            used = len(self._timestamps)
            if not self._warned and used >= self.limit * self.warn_ratio:
                self._warned = True
                logger.warning(
                    f"Quota '{self.name}' at {used}/{self.limit} "
                    f"({used / self.limit:.0%}) of its rolling window"
                )
            return True

    def used(self) -> int:
        """Requests recorded inside the current window."""
        self._prune(self._clock())
        return len(self._timestamps)

    def remaining(self) -> int:
        return max(0, self.limit - self.used())

    def reset(self) -> None:
        """Forget every recorded request."""
        self._timestamps.clear()
        self._warned = False
        logger.debug(f"Quota '{self.name}' reset")


class QuotaRegistry:
    """
    Process-wide set of named quotas, created once and injected into clients.

    Usage:
        quotas = QuotaRegistry.from_settings()
        client = ResilientClient("fec", quota=quotas.get("fec"))
    """

    def __init__(self, quotas: Optional[Dict[str, RollingWindowQuota]] = None):
        self._quotas: Dict[str, RollingWindowQuota] = dict(quotas or {})

    @classmethod
    def from_settings(cls, clock: Optional[Callable[[], float]] = None) -> "QuotaRegistry":
        """Build the default account quotas from settings."""
        from story_verifier.config.settings import settings

        return cls({
            "data_gov": RollingWindowQuota(
                "data_gov", settings.data_gov_daily_limit, DAY_SECONDS, clock=clock
            ),
            "congress": RollingWindowQuota(
                "congress", settings.congress_hourly_limit, HOUR_SECONDS, clock=clock
            ),
            "fec": RollingWindowQuota(
                "fec", settings.fec_hourly_limit, HOUR_SECONDS, clock=clock
            ),
            "census": RollingWindowQuota(
                "census", settings.census_daily_limit, DAY_SECONDS, clock=clock
            ),
        })

    def register(self, quota: RollingWindowQuota) -> RollingWindowQuota:
        self._quotas[quota.name] = quota
        return quota

    def get(self, name: Optional[str]) -> Optional[RollingWindowQuota]:
        """Quota for an account, or None when the account is unmetered."""
        if name is None:
            return None
        return self._quotas.get(name)

    def reset_all(self) -> None:
        for quota in self._quotas.values():
            quota.reset()

    def names(self) -> list[str]:
        return sorted(self._quotas)
