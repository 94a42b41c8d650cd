"""
Error classifier: maps raw pipeline failures to typed ParseErrors.

Classification is driven by CLASSIFICATION_RULES, an ordered table of
(stage, message substring, error type, default strategy). Rules are
evaluated top to bottom for the failing stage and the first match wins.
Unmatched messages degrade to a generic "<stage>_processing_error" with a
moderate-confidence retry, so raw failure text is never the only thing a
caller gets back.

Usage:
    classifier = ErrorClassifier()
    parse_error = classifier.classify(TimeoutError("AI timeout"), ErrorLevel.AI)
    parse_error.type                       # "ai_timeout"
    parse_error.recovery_strategy.strategy # StrategyKind.RETRY
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import structlog

from loadspec.models.enums import ErrorLevel
from loadspec.models.recovery_models import ParseError, RecoveryStrategy
from loadspec.monitoring.metrics import errors_classified_total
from loadspec.recovery.strategies import StrategyCatalog

logger = structlog.get_logger(__name__)

UNKNOWN_ERROR_TYPE = "unknown_error"
GENERIC_RETRY_CONFIDENCE = 0.5


@dataclass(frozen=True)
class ClassificationRule:
    """
    One row of the classification table.

    Attributes:
        level: Stage the rule applies to
        substring: Lower-case substring searched for in the error message
        error_type: Taxonomy tag assigned on match
        strategy: Builds the default RecoveryStrategy from a catalog
    """

    level: ErrorLevel
    substring: str
    error_type: str
    strategy: Callable[[StrategyCatalog], RecoveryStrategy]


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    # === Input stage ===
    ClassificationRule(ErrorLevel.INPUT, "format", "invalid_format", lambda c: c.fallback(0.8)),
    ClassificationRule(ErrorLevel.INPUT, "malformed", "malformed_input", lambda c: c.fallback(0.7)),
    ClassificationRule(ErrorLevel.INPUT, "missing", "missing_data", lambda c: c.fallback(0.6)),
    ClassificationRule(ErrorLevel.INPUT, "empty", "missing_data", lambda c: c.fallback(0.6)),
    # === AI stage ===
    ClassificationRule(ErrorLevel.AI, "rate limit", "rate_limit", lambda c: c.retry(0.9)),
    ClassificationRule(ErrorLevel.AI, "too many requests", "rate_limit", lambda c: c.retry(0.9)),
    ClassificationRule(ErrorLevel.AI, "timeout", "ai_timeout", lambda c: c.retry(0.8)),
    ClassificationRule(ErrorLevel.AI, "timed out", "ai_timeout", lambda c: c.retry(0.8)),
    ClassificationRule(ErrorLevel.AI, "network", "network_error", lambda c: c.retry(0.7)),
    ClassificationRule(ErrorLevel.AI, "connection", "network_error", lambda c: c.retry(0.7)),
    ClassificationRule(ErrorLevel.AI, "unauthorized", "ai_auth_error", lambda c: c.fallback(0.8)),
    ClassificationRule(ErrorLevel.AI, "api key", "ai_auth_error", lambda c: c.fallback(0.8)),
    ClassificationRule(ErrorLevel.AI, "invalid", "invalid_ai_response", lambda c: c.enhance_prompt(0.7)),
    # === Validation stage ===
    ClassificationRule(ErrorLevel.VALIDATION, "schema", "schema_validation_error", lambda c: c.enhance_prompt(0.7)),
    ClassificationRule(ErrorLevel.VALIDATION, "json", "invalid_json", lambda c: c.enhance_prompt(0.6)),
    ClassificationRule(ErrorLevel.VALIDATION, "required", "missing_required_field", lambda c: c.enhance_prompt(0.6)),
    ClassificationRule(ErrorLevel.VALIDATION, "rule violated", "spec_rule_violation", lambda c: c.enhance_prompt(0.6)),
)

SUGGESTIONS: dict[str, list[str]] = {
    "invalid_format": [
        "Try providing input in a more structured format",
        "Use one 'METHOD URL' per line, e.g. 'GET https://api.example.com/users'",
    ],
    "malformed_input": [
        "Check for unbalanced braces or quotes in the request body",
        "Put requests, headers and load settings on separate lines",
    ],
    "missing_data": [
        "Provide complete request information",
        "Include at least a URL, and optionally a method, user count and duration",
    ],
    "rate_limit": [
        "The AI service is rate limiting requests; wait a moment and try again",
    ],
    "ai_timeout": [
        "The AI service took too long to respond; try again",
        "Shorten or simplify the description",
    ],
    "network_error": [
        "Check your internet connection",
        "Verify that the AI service endpoint is reachable",
    ],
    "ai_auth_error": [
        "Check the AI service API key configuration",
    ],
    "invalid_ai_response": [
        "Rephrase the description with explicit URLs and load numbers",
    ],
    "schema_validation_error": [
        "Make sure every request has a URL",
        "Use positive numbers for users, rate and duration",
    ],
    "invalid_json": [
        "Check the JSON in the request body",
    ],
    "missing_required_field": [
        "Provide complete request information",
    ],
    "spec_rule_violation": [
        "Use absolute http:// or https:// URLs",
        "Keep the ramp-up period shorter than the test duration",
    ],
}

GENERIC_SUGGESTIONS = [
    "Try rephrasing the description",
    "Describe the target URL, HTTP method, number of users and duration",
]


class ErrorClassifier:
    """
    Stateless classifier over CLASSIFICATION_RULES.

    Attributes:
        catalog: Strategy catalog used to build default strategies
        rules: Ordered classification table
    """

    def __init__(
        self,
        catalog: Optional[StrategyCatalog] = None,
        rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
    ):
        self.catalog = catalog or StrategyCatalog()
        self.rules = rules

    def match(self, message: str, level: ErrorLevel) -> Optional[ClassificationRule]:
        """First rule for level whose substring occurs in message (case-insensitive)."""
        lowered = message.lower()
        for rule in self.rules:
            if rule.level is level and rule.substring in lowered:
                return rule
        return None

    def classify(
        self,
        error: Union[BaseException, str],
        stage: Union[ErrorLevel, str],
        context: Optional[dict[str, Any]] = None,
    ) -> ParseError:
        """
        Classify a failure observed at a pipeline stage.

        Args:
            error: Exception raised by the collaborator (or its message)
            stage: Stage at which the failure happened
            context: Caller diagnostics, preserved verbatim

        Returns:
            ParseError with a type tag, suggestions and default strategy

        Raises:
            ValueError: If stage is not a known ErrorLevel
        """
        level = ErrorLevel(stage)
        # Prefer the bare message over a str() that appends structured details
        message = getattr(error, "message", None)
        if not isinstance(message, str):
            message = str(error)
        original_error = error if isinstance(error, BaseException) else None

        rule = self.match(message, level) if message.strip() else None
        if rule is not None:
            error_type = rule.error_type
            strategy = rule.strategy(self.catalog)
            suggestions = SUGGESTIONS.get(error_type, GENERIC_SUGGESTIONS)
        else:
            error_type = f"{level.value}_processing_error" if message.strip() else UNKNOWN_ERROR_TYPE
            strategy = self.catalog.retry(GENERIC_RETRY_CONFIDENCE)
            suggestions = GENERIC_SUGGESTIONS

        errors_classified_total.labels(level=level.value, error_type=error_type).inc()
        logger.info(
            "Error classified",
            extra={
                "level": level.value,
                "error_type": error_type,
                "strategy": strategy.name,
                "matched_rule": rule.substring if rule else None,
                "original_error_type": type(original_error).__name__ if original_error else None,
            },
        )

        return ParseError(
            level=level,
            type=error_type,
            message=message,
            suggestions=list(suggestions),
            recovery_strategy=strategy,
            context=context,
            original_error=original_error,
        )
