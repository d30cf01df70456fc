"""Failure taxonomy for outbound upstream calls.

Exceptions in this module live strictly inside the transport layer: the
ResilientClient raises them between attempts so tenacity can decide whether to
retry, then converts the last one into a CallFailure value. Nothing outside
transport/ should ever see them raised.

Classification:
- Transient (retried): timeout, network error, HTTP 5xx, HTTP 429
- Permanent (not retried): HTTP 401/403, HTTP 404, other 4xx, bad payload
- Quota exhausted: local rolling-window budget refused the attempt
"""

from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    """Machine-readable reason carried by every CallFailure."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN_ERROR = "unknown_error"


class UpstreamError(Exception):
    """Base class for a failed attempt against an upstream service."""

    reason: FailureReason = FailureReason.UNKNOWN_ERROR

    def __init__(
        self,
        upstream: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(f"[{upstream}] {message}")
        self.upstream = upstream
        self.message = message
        self.status_code = status_code


class TransientUpstreamError(UpstreamError):
    """Failure worth retrying with backoff."""


class UpstreamTimeoutError(TransientUpstreamError):
    reason = FailureReason.TIMEOUT


class UpstreamNetworkError(TransientUpstreamError):
    reason = FailureReason.UNKNOWN_ERROR


class UpstreamServerError(TransientUpstreamError):
    reason = FailureReason.UNKNOWN_ERROR


class UpstreamRateLimitedError(TransientUpstreamError):
    """HTTP 429 from the upstream. The first one in a call triggers a cooldown."""

    reason = FailureReason.RATE_LIMITED


class PermanentUpstreamError(UpstreamError):
    """Client-side failure that retrying cannot fix."""


class UpstreamUnauthorizedError(PermanentUpstreamError):
    reason = FailureReason.UNAUTHORIZED


class UpstreamNotFoundError(PermanentUpstreamError):
    reason = FailureReason.NOT_FOUND


class QuotaExhaustedError(PermanentUpstreamError):
    """Local rolling-window budget refused the attempt before any network I/O."""

    reason = FailureReason.QUOTA_EXHAUSTED


def error_for_status(upstream: str, status_code: int, detail: str = "") -> UpstreamError:
    """
    Map a non-2xx HTTP status to the matching UpstreamError.

    Args:
        upstream: Upstream name for messages
        status_code: HTTP status code (>= 400)
        detail: Optional response excerpt

    Returns:
        Exception instance (not raised)
    """
    message = f"HTTP {status_code}"
    if detail:
        message = f"{message}: {detail[:200]}"

    if status_code == 429:
        return UpstreamRateLimitedError(upstream, message, status_code)
    if status_code >= 500:
        return UpstreamServerError(upstream, message, status_code)
    if status_code in (401, 403):
        return UpstreamUnauthorizedError(upstream, message, status_code)
    if status_code == 404:
        return UpstreamNotFoundError(upstream, message, status_code)
    return PermanentUpstreamError(upstream, message, status_code)
