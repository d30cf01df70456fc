"""Helpers shared by the fallback data providers.

Fallback tables are keyed by two-letter state code with a "default" entry
standing in for every state without its own archetype.
"""

from typing import Mapping, TypeVar

from story_verifier.data_management.schemas.dataset_schema import FALLBACK_SUFFIX

T = TypeVar("T")

DEFAULT = "default"


def pick(table: Mapping[str, T], state: str) -> T:
    """Archetype row for a state, or the national default."""
    return table.get(state.upper(), table[DEFAULT])


def fallback_provenance(source_label: str) -> str:
    return f"{source_label}{FALLBACK_SUFFIX}"
