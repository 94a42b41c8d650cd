"""
Stage 2: JSON Schema Validation.

Validate the parsed dict against the JSON Schema generated from the
LoadTestSpec model (camelCase aliases). This is a hard-fail stage.
"""

from typing import Optional

import structlog
from jsonschema import Draft202012Validator

from loadspec.models.spec_models import LoadTestSpec
from loadspec.monitoring.metrics import validation_failures_total
from .exceptions import SchemaValidationError

logger = structlog.get_logger(__name__)


class Stage2SchemaValidation:
    """
    Stage 2 validator: Validate against the LoadTestSpec JSON Schema.

    Raises SchemaValidationError on schema violations (hard fail).
    """

    def __init__(self, schema: Optional[dict] = None):
        """
        Initialize schema validator.

        Args:
            schema: JSON Schema to validate against (generated from LoadTestSpec if omitted)
        """
        self.schema = schema or LoadTestSpec.model_json_schema(by_alias=True)
        self._validator: Optional[Draft202012Validator] = None

    def _get_validator(self) -> Draft202012Validator:
        if self._validator is None:
            Draft202012Validator.check_schema(self.schema)
            self._validator = Draft202012Validator(self.schema)
        return self._validator

    def validate(self, data: dict) -> None:
        """
        Validate data against the JSON Schema.

        Args:
            data: Parsed JSON dict to validate

        Raises:
            SchemaValidationError: If data doesn't conform to the schema
        """
        validator = self._get_validator()
        errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])

        if errors:
            error_messages = []
            for error in errors[:10]:  # Limit to first 10 errors
                path = ".".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            validation_failures_total.labels(stage="stage2", error_type="schema_violation").inc()
            raise SchemaValidationError(
                f"JSON Schema validation failed with {len(errors)} error(s)",
                validation_errors=error_messages,
            )

        logger.debug("Stage 2: Successfully validated against JSON Schema")
