"""Comprehensive tests for ResilientClient.

Tests cover:
- Success on first attempt and after transient failures
- Retry budget (1 + 3 attempts) and exponential backoff waits
- One-time cooldown after the first HTTP 429
- Permanent 4xx failures are not retried
- Local quota refusal without network I/O
- Timeouts, network errors and non-JSON bodies map to failure reasons
"""

import httpx
import pytest

from story_verifier.transport.errors import FailureReason
from story_verifier.transport.quota import DAY_SECONDS, RollingWindowQuota
from story_verifier.transport.resilient_client import (
    CallFailure,
    CallResult,
    CallTarget,
    ResilientClient,
    RetryPolicy,
)

URL = "https://upstream.test/data"


# ── Fixtures ──────────────────────────────────────────────────────────────


class SleepRecorder:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def sequenced_transport(responses: list) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    """MockTransport answering with responses in order (last one repeats)."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        item = responses[min(len(seen) - 1, len(responses) - 1)]
        if isinstance(item, Exception):
            raise item
        return item

    return httpx.MockTransport(handler), seen


def make_client(
    transport: httpx.MockTransport,
    sleep: SleepRecorder,
    quota: RollingWindowQuota | None = None,
) -> ResilientClient:
    return ResilientClient(
        "test",
        policy=RetryPolicy(timeout_seconds=5.0),
        quota=quota,
        http_client=httpx.AsyncClient(transport=transport),
        sleep=sleep,
    )


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


# ── Success Tests ─────────────────────────────────────────────────────────


class TestSuccess:
    @pytest.mark.asyncio
    async def test_first_attempt_success(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.Response(200, json={"ok": True})])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert isinstance(outcome, CallResult)
        assert outcome.ok
        assert outcome.data == {"ok": True}
        assert outcome.attempts == 1
        assert len(seen) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_success_after_transient_failures(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([
            httpx.Response(503),
            httpx.Response(502),
            httpx.Response(200, json=[1, 2, 3]),
        ])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.ok
        assert outcome.data == [1, 2, 3]
        assert outcome.attempts == 3
        assert sleep.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_params_merged_and_none_dropped(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.Response(200, json={})])
        client = make_client(transport, sleep)

        await client.call(
            CallTarget(url=URL, params={"state": "TX", "key": "base"}),
            {"key": "override", "missing": None},
        )

        params = seen[0].url.params
        assert params["state"] == "TX"
        assert params["key"] == "override"
        assert "missing" not in params

    @pytest.mark.asyncio
    async def test_headers_forwarded(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.Response(200, json={})])
        client = make_client(transport, sleep)

        await client.call(CallTarget(url=URL, headers={"Authorization": "Bearer abc"}))

        assert seen[0].headers["Authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_empty_body_yields_none(self, sleep: SleepRecorder) -> None:
        transport, _ = sequenced_transport([httpx.Response(204)])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.ok
        assert outcome.data is None


# ── Retry Budget Tests ────────────────────────────────────────────────────


class TestRetryBudget:
    @pytest.mark.asyncio
    async def test_server_errors_exhaust_four_attempts(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.Response(500)])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert isinstance(outcome, CallFailure)
        assert not outcome.ok
        assert outcome.reason == FailureReason.UNKNOWN_ERROR
        assert outcome.attempts == 4
        assert outcome.status_code == 500
        assert len(seen) == 4
        assert sleep.delays == [2.0, 4.0, 8.0]

    @pytest.mark.asyncio
    async def test_timeouts_map_to_timeout_reason(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.ReadTimeout("slow")])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.reason == FailureReason.TIMEOUT
        assert outcome.attempts == 4
        assert len(seen) == 4

    @pytest.mark.asyncio
    async def test_network_errors_are_retried(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([
            httpx.ConnectError("refused"),
            httpx.Response(200, json={"ok": True}),
        ])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.ok
        assert outcome.attempts == 2
        assert sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_zero_retries_policy(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.Response(500)])
        client = ResilientClient(
            "test",
            policy=RetryPolicy(max_retries=0),
            http_client=httpx.AsyncClient(transport=transport),
            sleep=sleep,
        )

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.attempts == 1
        assert sleep.delays == []


# ── Rate Limit Tests ──────────────────────────────────────────────────────


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_cooldown_applied_once(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.Response(429)])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.reason == FailureReason.RATE_LIMITED
        assert outcome.attempts == 4
        assert sleep.delays == [60.0, 4.0, 8.0]

    @pytest.mark.asyncio
    async def test_recovery_after_cooldown(self, sleep: SleepRecorder) -> None:
        transport, _ = sequenced_transport([
            httpx.Response(429),
            httpx.Response(200, json={"ok": True}),
        ])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.ok
        assert outcome.attempts == 2
        assert sleep.delays == [60.0]


# ── Permanent Failure Tests ───────────────────────────────────────────────


class TestPermanentFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,reason",
        [
            (404, FailureReason.NOT_FOUND),
            (401, FailureReason.UNAUTHORIZED),
            (403, FailureReason.UNAUTHORIZED),
            (400, FailureReason.UNKNOWN_ERROR),
        ],
    )
    async def test_not_retried(
        self, sleep: SleepRecorder, status: int, reason: FailureReason
    ) -> None:
        transport, seen = sequenced_transport([httpx.Response(status, text="nope")])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.reason == reason
        assert outcome.attempts == 1
        assert outcome.status_code == status
        assert len(seen) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_non_json_body_is_permanent(self, sleep: SleepRecorder) -> None:
        transport, seen = sequenced_transport([httpx.Response(200, text="<html>")])
        client = make_client(transport, sleep)

        outcome = await client.call(CallTarget(url=URL))

        assert not outcome.ok
        assert outcome.reason == FailureReason.UNKNOWN_ERROR
        assert len(seen) == 1


# ── Quota Tests ───────────────────────────────────────────────────────────


class TestQuota:
    @pytest.mark.asyncio
    async def test_quota_refusal_makes_no_request(self, sleep: SleepRecorder) -> None:
        quota = RollingWindowQuota("acct", 1, DAY_SECONDS)
        assert await quota.try_acquire()
        transport, seen = sequenced_transport([httpx.Response(200, json={})])
        client = make_client(transport, sleep, quota=quota)

        outcome = await client.call(CallTarget(url=URL))

        assert outcome.reason == FailureReason.QUOTA_EXHAUSTED
        assert outcome.attempts == 1
        assert seen == []

    @pytest.mark.asyncio
    async def test_each_attempt_consumes_quota(self, sleep: SleepRecorder) -> None:
        quota = RollingWindowQuota("acct", 2, DAY_SECONDS)
        transport, seen = sequenced_transport([httpx.Response(503)])
        client = make_client(transport, sleep, quota=quota)

        outcome = await client.call(CallTarget(url=URL))

        assert len(seen) == 2
        assert outcome.reason == FailureReason.QUOTA_EXHAUSTED
        assert quota.remaining() == 0


# ── Policy Tests ──────────────────────────────────────────────────────────


class TestRetryPolicy:
    def test_backoff_delays(self) -> None:
        assert RetryPolicy().backoff_delays() == [2.0, 4.0, 8.0]

    def test_max_attempts(self) -> None:
        assert RetryPolicy().max_attempts == 4

    def test_worst_case_bound(self) -> None:
        policy = RetryPolicy(timeout_seconds=30.0)
        assert policy.worst_case_seconds == 30.0 * 4 + 14.0 + 60.0

    @pytest.mark.asyncio
    async def test_for_upstream_attaches_account_quota(self) -> None:
        from story_verifier.transport.quota import QuotaRegistry

        quotas = QuotaRegistry.from_settings()
        client = ResilientClient.for_upstream("congress", quotas=quotas)

        assert client.quota is quotas.get("congress")
        assert ResilientClient.for_upstream("fema", quotas=quotas).quota is None
