"""ZIP to state resolution for stories that arrive without a state.

Lookups go through the resilient call substrate against Zippopotam.us and
are memoized per ZIP for the life of the resolver. Any failure resolves to
None so the aggregator can answer with a neutral record.
"""

import re
from typing import Dict, Optional

import httpx
import structlog

from story_verifier.data_management.schemas.dataset_schema import Geography
from story_verifier.data_management.schemas.story_schema import Location
from story_verifier.transport.resilient_client import CallTarget, ResilientClient, SleepFunc

_ZIP_PATTERN = re.compile(r"\b\d{5}\b")


def extract_zip_code(text: Optional[str]) -> Optional[str]:
    """First standalone 5-digit number in text, or None."""
    if not text:
        return None
    match = _ZIP_PATTERN.search(text)
    return match.group(0) if match else None


def is_valid_zip(zip_code: Optional[str]) -> bool:
    return bool(zip_code) and re.fullmatch(r"\d{5}", zip_code) is not None


class GeographyResolver:
    """
    Resolve a story Location into the Geography key adapters fetch with.

    Attributes:
        base_url: Zippopotam.us country endpoint
    """

    def __init__(
        self,
        client: Optional[ResilientClient] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFunc] = None,
        base_url: Optional[str] = None,
    ):
        from story_verifier.config.settings import settings

        self.base_url = (base_url or settings.zip_lookup_base_url).rstrip("/")
        self._client = client
        self._http_client = http_client
        self._sleep = sleep
        self._states_by_zip: Dict[str, Optional[str]] = {}
        self._logger = structlog.get_logger().bind(component="GeographyResolver")

    def _get_client(self) -> ResilientClient:
        if self._client is None:
            self._client = ResilientClient.for_upstream(
                "zip_lookup", http_client=self._http_client, sleep=self._sleep
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def lookup_state(self, zip_code: str) -> Optional[str]:
        """
        State abbreviation for a ZIP code.

        Returns:
            Two-letter state code, or None for invalid/unknown ZIPs and
            upstream failures
        """
        if not is_valid_zip(zip_code):
            return None
        if zip_code in self._states_by_zip:
            return self._states_by_zip[zip_code]

        outcome = await self._get_client().call(CallTarget(url=f"{self.base_url}/{zip_code}"))
        state: Optional[str] = None
        if outcome.ok:
            places = (outcome.data or {}).get("places") or []
            if places:
                state = places[0].get("state abbreviation")
        else:
            self._logger.warning(
                "zip_lookup_failed", zip=zip_code, reason=outcome.reason.value
            )

        # Only definitive answers are memoized; transient failures may succeed later
        if outcome.ok:
            self._states_by_zip[zip_code] = state
        return state

    async def resolve(self, location: Location) -> Optional[Geography]:
        """
        Geography for a location: the declared state, else the ZIP's state.

        Returns:
            Geography, or None when no state can be determined
        """
        zip_code = location.zip if is_valid_zip(location.zip) else None
        if location.state:
            return Geography(state=location.state, zip=zip_code)
        if zip_code is None:
            return None

        state = await self.lookup_state(zip_code)
        if state is None:
            return None
        self._logger.info("state_resolved_from_zip", zip=zip_code, state=state)
        return Geography(state=state, zip=zip_code)
