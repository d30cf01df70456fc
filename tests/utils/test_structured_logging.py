"""Tests for the logging helpers.

Tests cover:
- Story context binding and unbinding through structlog contextvars
- Correlation id generation and reuse
- Context bound by get_structured_logger appears on every event
- Loguru component binding used by the CLI and transport layer
"""

from typing import List

from loguru import logger
from structlog.contextvars import get_contextvars
from structlog.testing import capture_logs

from story_verifier.config.logging import get_logger
from story_verifier.utils.logging import (
    bind_story_context,
    get_structured_logger,
    unbind_story_context,
)


class TestStoryContext:
    def test_bind_and_unbind(self) -> None:
        correlation_id = bind_story_context("story-7", correlation_id="batch-1")
        try:
            context = get_contextvars()
            assert correlation_id == "batch-1"
            assert context["story_id"] == "story-7"
            assert context["correlation_id"] == "batch-1"
        finally:
            unbind_story_context()

        assert "story_id" not in get_contextvars()
        assert "correlation_id" not in get_contextvars()

    def test_generates_correlation_id(self) -> None:
        try:
            first = bind_story_context("story-1")
            second = bind_story_context("story-2")
        finally:
            unbind_story_context()

        assert first and second
        assert first != second


class TestStructuredLogger:
    def test_bound_context_on_events(self) -> None:
        with capture_logs() as events:
            log = get_structured_logger("adapters.housing", adapter="housing")
            log.info("dataset_fetched", state="TX")

        assert events[0]["event"] == "dataset_fetched"
        assert events[0]["adapter"] == "housing"
        assert events[0]["state"] == "TX"


class TestLoguruComponent:
    def test_component_bound(self) -> None:
        messages: List[str] = []
        handler_id = logger.add(messages.append, format="{extra[component]} | {message}")
        try:
            get_logger("transport.census").warning("Attempt 1/4 failed")
        finally:
            logger.remove(handler_id)

        assert messages[0].strip() == "transport.census | Attempt 1/4 failed"
