"""Resilient call substrate: timeouts, retries, backoff and shared quotas.

Every adapter reaches its upstream through a ResilientClient. The client
converts all failures into CallFailure values so no network error ever
escapes into scoring or aggregation.
"""

from story_verifier.transport.errors import FailureReason
from story_verifier.transport.quota import QuotaRegistry, RollingWindowQuota
from story_verifier.transport.resilient_client import (
    MAX_RETRIES,
    CallFailure,
    CallOutcome,
    CallResult,
    CallTarget,
    ResilientClient,
    RetryPolicy,
)

__all__ = [
    "MAX_RETRIES",
    "CallFailure",
    "CallOutcome",
    "CallResult",
    "CallTarget",
    "FailureReason",
    "QuotaRegistry",
    "ResilientClient",
    "RetryPolicy",
    "RollingWindowQuota",
]
