"""Source verifier adapters, one per government dataset."""

from story_verifier.adapters.base_adapter import SourceAdapter, UpstreamUnavailable
from story_verifier.adapters.geography_resolver import GeographyResolver, extract_zip_code
from story_verifier.adapters.registry import ADAPTER_CLASSES, build_adapter, build_default_adapters

__all__ = [
    "ADAPTER_CLASSES",
    "GeographyResolver",
    "SourceAdapter",
    "UpstreamUnavailable",
    "build_adapter",
    "build_default_adapters",
    "extract_zip_code",
]
