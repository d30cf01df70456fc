"""Concurrent fan-out and merge of per-adapter verification records."""

from story_verifier.aggregation.verification_aggregator import VerificationAggregator

__all__ = ["VerificationAggregator"]
