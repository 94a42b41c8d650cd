"""
Stage 3: Spec Rules Validation.

Checks that a schema-valid LoadTestSpec can actually be executed:
- every request URL is absolute http(s) with a host
- the ramp-up period fits inside the test duration

This is a hard-fail stage.
"""

from urllib.parse import urlsplit

import structlog

from loadspec.models.spec_models import LoadTestSpec
from loadspec.monitoring.metrics import validation_failures_total
from .exceptions import SpecRuleViolation

logger = structlog.get_logger(__name__)


class Stage3SpecRules:
    """
    Stage 3 validator: executability rules.

    Raises SpecRuleViolation on the first violated rule.
    """

    def validate(self, spec: LoadTestSpec) -> None:
        """
        Validate executability rules.

        Args:
            spec: Parsed and schema-validated LoadTestSpec

        Raises:
            SpecRuleViolation: If any rule is violated
        """
        self._validate_absolute_urls(spec)
        self._validate_ramp_up(spec)
        logger.debug("Stage 3: All spec rules passed")

    def _validate_absolute_urls(self, spec: LoadTestSpec) -> None:
        for index, request in enumerate(spec.requests):
            parts = urlsplit(request.url)
            if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
                validation_failures_total.labels(stage="stage3", error_type="absolute_url").inc()
                raise SpecRuleViolation(
                    f"Spec rule violated: request URL must be absolute http(s), got {request.url!r}",
                    rule_name="absolute_url",
                    invalid_value=request.url,
                    field_path=f"requests[{index}].url",
                )

    def _validate_ramp_up(self, spec: LoadTestSpec) -> None:
        ramp_up = spec.load_pattern.ramp_up
        if ramp_up is not None and ramp_up.total_seconds > spec.duration.total_seconds:
            validation_failures_total.labels(stage="stage3", error_type="ramp_up_within_duration").inc()
            raise SpecRuleViolation(
                f"Spec rule violated: ramp-up ({ramp_up.total_seconds}s) exceeds "
                f"duration ({spec.duration.total_seconds}s)",
                rule_name="ramp_up_within_duration",
                invalid_value=ramp_up.total_seconds,
                field_path="loadPattern.rampUp",
            )
