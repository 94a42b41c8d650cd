"""
Integration tests for SpecParsingService.

The AI interpreter is mocked; the cascade, validation pipeline, classifier
and recovery orchestrator are real.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from loadspec.models.enums import HttpMethod
from loadspec.service import INTERPRETER_CONFIDENCE, SpecParsingService

pytestmark = pytest.mark.integration


def make_interpreter(*responses) -> MagicMock:
    interpreter = MagicMock()
    interpreter.interpret = AsyncMock(side_effect=list(responses))
    return interpreter


@pytest.fixture(autouse=True)
def no_backoff_wait():
    with patch("loadspec.recovery.orchestrator.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


class TestWithoutInterpreter:
    """Test suite for cascade-only parsing."""

    @pytest.mark.asyncio
    async def test_cascade_result(self, test_settings):
        service = SpecParsingService(test_settings)
        outcome = await service.parse("GET https://api.example.com/users")

        assert outcome.source == "pattern-matching"
        assert outcome.spec.requests[0].url == "https://api.example.com/users"
        assert outcome.confidence == pytest.approx(0.5)
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_blank_input_recovers_through_fallback(self, test_settings):
        service = SpecParsingService(test_settings)
        outcome = await service.parse("   ")

        assert outcome.error.type == "missing_data"
        assert outcome.recovery.recovery_path == ["fallback"]
        assert outcome.source == "template-based"
        assert outcome.spec.requests[0].method == HttpMethod.GET
        assert outcome.spec.requests[0].url == "http://example.com"
        assert outcome.confidence < 0.3
        assert outcome.warnings[0].startswith("Recovered from missing_data via fallback")


class TestWithInterpreter:
    """Test suite for interpreter-first parsing."""

    @pytest.mark.asyncio
    async def test_valid_interpretation(self, test_settings, valid_interpreter_response):
        interpreter = make_interpreter(valid_interpreter_response)
        service = SpecParsingService(test_settings, interpreter=interpreter)

        outcome = await service.parse("Simulate 200 users placing orders for 10 minutes")

        assert outcome.source == "ai"
        assert outcome.confidence == INTERPRETER_CONFIDENCE
        assert outcome.spec.name == "Checkout API peak load"
        interpreter.interpret.assert_awaited_once_with("Simulate 200 users placing orders for 10 minutes", None)

    @pytest.mark.asyncio
    async def test_timeout_then_retry(self, test_settings, valid_interpreter_response):
        interpreter = make_interpreter(TimeoutError("AI timeout"), valid_interpreter_response)
        service = SpecParsingService(test_settings, interpreter=interpreter)

        outcome = await service.parse("Simulate 200 users placing orders")

        assert outcome.error.type == "ai_timeout"
        assert outcome.recovery.recovery_path == ["retry"]
        assert outcome.source == "ai"
        assert outcome.confidence == 0.8
        assert interpreter.interpret.await_count == 2

    @pytest.mark.asyncio
    async def test_schema_failure_enhances_prompt(self, test_settings, valid_interpreter_response):
        interpreter = make_interpreter('{"name": "missing requests"}', valid_interpreter_response)
        service = SpecParsingService(test_settings, interpreter=interpreter)

        outcome = await service.parse("Simulate 200 users placing orders")

        assert outcome.error.type == "schema_validation_error"
        assert outcome.error.context["validation_errors"]
        assert outcome.recovery.recovery_path == ["enhance_prompt"]
        assert outcome.spec.name == "Checkout API peak load"

        hints = interpreter.interpret.call_args_list[1].args[1]
        assert hints
        assert "JSON Schema validation failed" in hints[0]

    @pytest.mark.asyncio
    async def test_enhanced_attempts_are_bounded(self, test_settings, valid_interpreter_response):
        interpreter = make_interpreter("not json", "still not json", "nope", valid_interpreter_response)
        service = SpecParsingService(test_settings, interpreter=interpreter)

        outcome = await service.parse("GET https://api.example.com/users")

        # One plain call plus PROMPT_ENHANCEMENT_MAX_RETRIES enriched calls, then fallback
        assert interpreter.interpret.await_count == 1 + test_settings.PROMPT_ENHANCEMENT_MAX_RETRIES
        assert outcome.recovery.recovery_path == ["enhance_prompt", "fallback"]
        assert outcome.source == "pattern-matching"

        last_hints = interpreter.interpret.call_args_list[-1].args[1]
        assert any(h.startswith("Attempt 1 failed: [stage1]") for h in last_hints)

    @pytest.mark.asyncio
    async def test_interpreter_down_falls_back_to_cascade(self, test_settings):
        interpreter = make_interpreter(*[ConnectionError("Network connection failed")] * 5)
        service = SpecParsingService(test_settings, interpreter=interpreter)

        outcome = await service.parse("GET https://api.example.com/users")

        assert outcome.error.type == "network_error"
        assert outcome.recovery.recovery_path == ["retry", "fallback"]
        assert outcome.source == "pattern-matching"
        assert outcome.confidence == pytest.approx(0.5)
        assert outcome.spec.requests[0].url == "https://api.example.com/users"

    @pytest.mark.asyncio
    async def test_exhausted_recovery(self, test_settings):
        settings = test_settings.model_copy(update={"ENABLE_FALLBACK": False})
        interpreter = make_interpreter(*[ConnectionError("Network connection failed")] * 5)
        service = SpecParsingService(settings, interpreter=interpreter)

        outcome = await service.parse("GET https://api.example.com/users")

        assert outcome.spec is None
        assert outcome.source == "none"
        assert outcome.confidence == 0.0
        assert outcome.recovery.success is False
        assert outcome.recovery.recovery_path == ["retry"]
        assert outcome.warnings == outcome.error.suggestions
        assert "Check your internet connection" in outcome.warnings

    @pytest.mark.asyncio
    async def test_repeated_failures_hit_ceiling(self, test_settings):
        settings = test_settings.model_copy(update={"ENABLE_FALLBACK": False, "RECOVERY_MAX_RETRIES": 1})
        interpreter = make_interpreter(*[ConnectionError("Network connection failed")] * 10)
        service = SpecParsingService(settings, interpreter=interpreter)

        await service.parse("GET https://api.example.com/users")
        outcome = await service.parse("GET https://api.example.com/users")

        assert outcome.recovery.recovery_path == ["max_retries_exceeded"]
        assert outcome.spec is None
