"""Pipeline facade for single-story and batch verification.

Provides:
- VerificationPipeline: shared http client, quotas and cache over one aggregator
"""

from story_verifier.pipeline.verification_pipeline import VerificationPipeline

__all__ = ["VerificationPipeline"]
