"""Policy-area and keyword routing of stories to adapters."""

from story_verifier.routing.topic_router import BASE_ROUTES, EXTENDED_ROUTES, TopicRouter

__all__ = ["BASE_ROUTES", "EXTENDED_ROUTES", "TopicRouter"]
