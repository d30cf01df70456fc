"""Data management package for story verification.

Provides schemas and the dataset memo cache:
- schemas: Story input, normalized source datasets, verification output
- DatasetCache: TTL memoization of fetched datasets keyed by adapter + geography
"""

from story_verifier.data_management.dataset_cache import DatasetCache

__all__ = [
    "DatasetCache",
]
