"""Topic router: which adapters a story should be verified against.

Routing is a lookup over declarative tables, never inference:
1. The story's policy area selects an ordered adapter list
2. Disaster vocabulary anywhere in the text appends the emergency adapter
3. Under the extended profile, keyword triggers append further adapters

The result is ordered and deduplicated; routing the same story twice
returns the same list.
"""

from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

import structlog

from story_verifier.config.keywords import DISASTER_KEYWORDS, EXTENDED_TRIGGERS, RELEVANCE_KEYWORDS, matches_any
from story_verifier.config.scoring_weights import AdapterConfigurationError
from story_verifier.data_management.schemas.story_schema import PolicyArea, Story

BASE_ROUTES: Dict[PolicyArea, Tuple[str, ...]] = {
    PolicyArea.HOUSING: ("housing",),
    PolicyArea.ENERGY: ("energy",),
    PolicyArea.ENVIRONMENT: ("energy", "climate"),
    PolicyArea.INFRASTRUCTURE: ("infrastructure", "climate"),
    PolicyArea.EDUCATION: (),
    PolicyArea.HEALTHCARE: (),
    PolicyArea.EMPLOYMENT: (),
    PolicyArea.IMMIGRATION: (),
    PolicyArea.JUSTICE: (),
    PolicyArea.OTHER: (),
}

EXTENDED_ROUTES: Dict[PolicyArea, Tuple[str, ...]] = {
    **BASE_ROUTES,
    PolicyArea.EDUCATION: ("higher_education",),
    PolicyArea.EMPLOYMENT: ("demographics",),
    PolicyArea.IMMIGRATION: ("legislative",),
    PolicyArea.JUSTICE: ("crime",),
}

# Area routes that apply only when the story also uses the given vocabulary
CONDITIONAL_ROUTES: Dict[PolicyArea, Tuple[Tuple[str, FrozenSet[str]], ...]] = {
    PolicyArea.HEALTHCARE: (("veterans", RELEVANCE_KEYWORDS["veterans"]),),
}

ROUTING_PROFILES = ("base", "extended")


class TopicRouter:
    """
    Map a story to the ordered list of adapters that should verify it.

    Attributes:
        profile: "base" or "extended"
        routes: Policy-area table in force
        triggers: Cross-cutting keyword triggers beyond disaster vocabulary
    """

    def __init__(
        self,
        profile: Optional[str] = None,
        routes: Optional[Mapping[PolicyArea, Tuple[str, ...]]] = None,
        triggers: Optional[Mapping[str, FrozenSet[str]]] = None,
    ):
        """
        Initialize the router.

        Args:
            profile: Routing profile; defaults to settings.routing_profile
            routes: Replacement policy-area table
            triggers: Replacement cross-cutting trigger table

        Raises:
            AdapterConfigurationError: Unknown routing profile
        """
        from story_verifier.config.settings import settings

        self.profile = (profile or settings.routing_profile).lower()
        if self.profile not in ROUTING_PROFILES:
            raise AdapterConfigurationError(
                f"Unknown routing profile '{self.profile}' (expected one of {ROUTING_PROFILES})"
            )
        extended = self.profile == "extended"

        if routes is None:
            routes = EXTENDED_ROUTES if extended else BASE_ROUTES
        if triggers is None:
            triggers = EXTENDED_TRIGGERS if extended else {}
        self.routes: Mapping[PolicyArea, Tuple[str, ...]] = routes
        self.triggers: Mapping[str, FrozenSet[str]] = triggers
        self.conditional = CONDITIONAL_ROUTES if extended else {}
        self._logger = structlog.get_logger().bind(component="TopicRouter", profile=self.profile)

    def route(self, story: Story) -> List[str]:
        """
        Ordered, deduplicated adapter names for a story.

        Args:
            story: Story to route

        Returns:
            Adapter names in invocation order (may be empty)
        """
        text = story.text
        selected: List[str] = []

        def append(name: str) -> None:
            if name not in selected:
                selected.append(name)

        for name in self.routes.get(story.policy_area, ()):
            append(name)

        for name, vocabulary in self.conditional.get(story.policy_area, ()):
            if matches_any(text, vocabulary):
                append(name)

        if matches_any(text, DISASTER_KEYWORDS):
            append("emergency")

        for name, vocabulary in self.triggers.items():
            if matches_any(text, vocabulary):
                append(name)

        self._logger.debug(
            "story_routed",
            story_id=story.id,
            policy_area=story.policy_area.value,
            adapters=selected,
        )
        return selected
