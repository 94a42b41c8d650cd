"""
Validation Pipeline: checks AI-interpreter output before it is trusted.

- Stage 1: JSON Parse (hard fail)
- Stage 2: JSON Schema (hard fail)
- Model parse into LoadTestSpec (pydantic errors reported as schema errors)
- Stage 3: Spec Rules (hard fail)

Every failure raises a SpecValidationError subclass; the caller classifies
it at the validation stage and hands it to the recovery orchestrator.
"""

import structlog
from pydantic import ValidationError as PydanticValidationError

from loadspec.models.spec_models import LoadTestSpec
from loadspec.monitoring.metrics import validation_failures_total
from .exceptions import SchemaValidationError, SpecValidationError
from .stage1_json_parse import Stage1JSONParse
from .stage2_schema import Stage2SchemaValidation
from .stage3_spec_rules import Stage3SpecRules

logger = structlog.get_logger(__name__)


class SpecValidationPipeline:
    """
    Multi-stage validation of interpreter output.
    """

    def __init__(self):
        self.stage1 = Stage1JSONParse()
        self.stage2 = Stage2SchemaValidation()
        self.stage3 = Stage3SpecRules()

    def validate(self, content: str) -> LoadTestSpec:
        """
        Run the full validation pipeline on interpreter output.

        Args:
            content: Raw interpreter response text

        Returns:
            Validated LoadTestSpec

        Raises:
            SpecValidationError: If any stage fails
        """
        try:
            logger.debug("Stage 1: Parsing JSON...")
            parsed = self.stage1.validate(content)

            logger.debug("Stage 2: Validating JSON Schema...")
            self.stage2.validate(parsed)

            try:
                spec = LoadTestSpec.model_validate(parsed)
            except PydanticValidationError as e:
                error_messages = [
                    f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ]
                validation_failures_total.labels(stage="stage2", error_type="model_error").inc()
                raise SchemaValidationError(
                    f"LoadTestSpec schema model validation failed: {len(e.errors())} error(s)",
                    validation_errors=error_messages,
                ) from e

            logger.debug("Stage 3: Validating spec rules...")
            self.stage3.validate(spec)

            logger.info(
                "Interpreter output validated",
                extra={"spec_id": spec.id, "requests_count": len(spec.requests)},
            )
            return spec

        except SpecValidationError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error during validation: {e}")
            raise SpecValidationError(
                f"Unexpected validation error: {str(e)}",
                details={"error_type": type(e).__name__},
            ) from e
