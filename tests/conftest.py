"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from loadspec.config import Settings
from loadspec.models import (
    ErrorLevel,
    HttpMethod,
    LoadTestSpec,
    ParseError,
    RecoveryStrategy,
    RequestSpec,
)
from loadspec.parsing.cascade import ExtractionCascade
from loadspec.recovery.classifier import ErrorClassifier
from loadspec.recovery.orchestrator import RecoveryOrchestrator
from loadspec.recovery.strategies import StrategyCatalog


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Retry delays are kept short so recovery tests stay fast; tests that
    assert on real waits pass an explicit retry_delay instead.
    """
    return Settings(
        # === Application ===
        APP_NAME="loadspec (Test)",
        APP_VERSION="0.1.0",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        # === Parsing ===
        PARSER_MAX_INPUT_CHARS=50_000,
        PARSE_CONFIDENCE_THRESHOLD=0.1,
        DEFAULT_URL="http://example.com",
        DEFAULT_VIRTUAL_USERS=10,
        DEFAULT_DURATION_SECONDS=60,
        # === Recovery ===
        RECOVERY_MAX_RETRIES=3,
        RETRY_BASE_DELAY_SECONDS=0.001,
        RETRY_BACKOFF_BASE=2.0,
        RETRY_CONFIDENCE_DECAY=0.8,
        PROMPT_ENHANCEMENT_MAX_RETRIES=2,
        # === Feature Flags ===
        ENABLE_RETRY=True,
        ENABLE_FALLBACK=True,
        ENABLE_PROMPT_ENHANCEMENT=True,
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def valid_interpreter_response(fixtures_dir: Path) -> str:
    """Raw interpreter output (JSON text) that passes every validation stage."""
    return (fixtures_dir / "valid_interpreter_response.json").read_text(encoding="utf-8")


@pytest.fixture
def descriptions(fixtures_dir: Path) -> Dict[str, Any]:
    """Sample descriptions grouped by the tier expected to handle them."""
    with open(fixtures_dir / "descriptions.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def cascade(test_settings: Settings) -> ExtractionCascade:
    return ExtractionCascade(test_settings)


@pytest.fixture
def catalog(test_settings: Settings) -> StrategyCatalog:
    return StrategyCatalog(test_settings)


@pytest.fixture
def classifier(catalog: StrategyCatalog) -> ErrorClassifier:
    return ErrorClassifier(catalog)


@pytest.fixture
def orchestrator(test_settings: Settings) -> RecoveryOrchestrator:
    """Fresh orchestrator with a private attempt ledger."""
    return RecoveryOrchestrator(test_settings)


@pytest.fixture
def sample_spec() -> LoadTestSpec:
    """Minimal valid LoadTestSpec."""
    return LoadTestSpec(
        name="Sample",
        requests=[RequestSpec(method=HttpMethod.GET, url="https://api.example.com/users")],
    )


@pytest.fixture
def create_parse_error():
    """Factory fixture to create a ParseError with a given default strategy.

    Usage:
        def test_something(create_parse_error, catalog):
            parse_error = create_parse_error(catalog.retry(0.8))
    """

    def _create(
        strategy: RecoveryStrategy,
        level: ErrorLevel = ErrorLevel.AI,
        error_type: str = "ai_timeout",
        message: str = "AI timeout",
        original_error: BaseException | None = None,
    ) -> ParseError:
        return ParseError(
            level=level,
            type=error_type,
            message=message,
            suggestions=["Try again"],
            recovery_strategy=strategy,
            original_error=original_error,
        )

    return _create
