"""
Exceptions raised while validating AI-interpreter output.

Messages are worded so that ErrorClassifier's validation-stage rules can
type them: stage 1 messages mention JSON, stage 2 messages mention the
schema, stage 3 messages mention the violated rule. Structured fields go
to `details`, which the service merges into the ParseError context.
"""

from typing import Any, Optional


class SpecValidationError(Exception):
    """
    Base exception for interpreter-output validation errors.

    Attributes:
        stage: Pipeline stage that rejected the response
        message: Human-readable description (what the classifier matches on)
        details: Structured diagnostics
    """

    stage = "pipeline"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.stage}] {self.message}"
        fields = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"[{self.stage}] {self.message} ({fields})"


class JSONParseError(SpecValidationError):
    """Stage 1: the response cannot be read as a JSON object."""

    stage = "stage1"

    def __init__(self, message: str, reason: str, position: Optional[int] = None):
        """
        Args:
            message: Error description
            reason: Decoder message or the shape that was found instead of an object
            position: Character offset of the decode failure, when known
        """
        details: dict[str, Any] = {"reason": reason}
        if position is not None:
            details["position"] = position
        super().__init__(message, details)
        self.reason = reason
        self.position = position


class SchemaValidationError(SpecValidationError):
    """Stage 2: parsed JSON does not conform to the LoadTestSpec schema."""

    stage = "stage2"

    def __init__(self, message: str, validation_errors: list[str]):
        super().__init__(message, {"validation_errors": validation_errors})
        self.validation_errors = validation_errors


class SpecRuleViolation(SpecValidationError):
    """
    Stage 3: a schema-valid spec that cannot be executed.

    Attributes:
        rule_name: Violated rule (e.g. "absolute_url")
        field_path: Offending field in wire form (e.g. "requests[0].url")
    """

    stage = "stage3"

    def __init__(self, message: str, rule_name: str, field_path: str, invalid_value: Any = None):
        details: dict[str, Any] = {"rule_name": rule_name, "field_path": field_path}
        if invalid_value is not None:
            details["invalid_value"] = str(invalid_value)
        super().__init__(message, details)
        self.rule_name = rule_name
        self.field_path = field_path
