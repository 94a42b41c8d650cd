"""
Spec assembler: turns a tier's Extraction into a complete ParseResult.

Applies the same defaults and name resolution regardless of which tier
fired, and computes the pipeline confidence from the scorer's weighted
signals. Unlike the standalone score, pipeline confidence is not capped at
0.8: every indicator beyond the second adds a corroboration bonus.
"""

from typing import Optional
from urllib.parse import urlsplit

from loadspec.config import Settings
from loadspec.models.enums import DurationUnit, ParseMethod, TestType
from loadspec.models.parse_models import ParseResult
from loadspec.models.spec_models import Duration, LoadPattern, LoadTestSpec
from loadspec.parsing import patterns
from loadspec.parsing.scorer import Signals, detect_signals, weighted_sum
from loadspec.parsing.text_utils import find_json_blocks, mask_spans, truncate_at_sentence_boundary
from loadspec.parsing.tiers import Extraction

FALLBACK_NAME = "Fallback load test"

# Lowest confidence reported per tier; non-decreasing in tier specificity
TIER_CONFIDENCE_FLOORS = {
    ParseMethod.TEMPLATE_BASED: 0.1,
    ParseMethod.KEYWORD_EXTRACTION: 0.2,
    ParseMethod.PATTERN_MATCHING: 0.2,
}

TEMPLATE_CONFIDENCE_CAP = 0.2
CORROBORATION_BONUS = 0.05

_NAME_MAX_CHARS = 100


def pipeline_confidence(signals: Signals, method: ParseMethod) -> float:
    """
    Confidence of an assembled spec.

    Args:
        signals: Indicators detected in the input
        method: Tier that produced the spec

    Returns:
        max(tier floor, weighted sum + corroboration bonus), clamped to 1.0
        (template results are additionally capped at TEMPLATE_CONFIDENCE_CAP)
    """
    present = len(signals.present())
    value = weighted_sum(signals) + CORROBORATION_BONUS * max(0, present - 2)
    value = max(TIER_CONFIDENCE_FLOORS[method], value)
    if method is ParseMethod.TEMPLATE_BASED:
        value = min(value, TEMPLATE_CONFIDENCE_CAP)
    return round(min(1.0, value), 4)


class SpecAssembler:
    """Builds LoadTestSpec and ParseResult objects from tier output."""

    def __init__(self, settings: Settings):
        self.default_virtual_users = settings.DEFAULT_VIRTUAL_USERS
        self.default_duration_seconds = settings.DEFAULT_DURATION_SECONDS
        self.description_max_chars = settings.DESCRIPTION_MAX_CHARS

    def assemble(self, text: str, extraction: Extraction, method: ParseMethod) -> ParseResult:
        """
        Merge an extraction with defaults into a ParseResult.

        Args:
            text: Normalised input text
            extraction: Fields read by the winning tier
            method: The winning tier

        Returns:
            Fully populated ParseResult
        """
        warnings = list(extraction.warnings)
        apply_default_warnings = method is not ParseMethod.TEMPLATE_BASED

        duration = extraction.duration
        if duration is None:
            duration = Duration(value=self.default_duration_seconds, unit=DurationUnit.SECONDS)
            if apply_default_warnings:
                warnings.append(f"No duration found; defaulting to {self.default_duration_seconds} seconds")

        virtual_users = extraction.virtual_users
        if virtual_users is None:
            virtual_users = self.default_virtual_users
            if apply_default_warnings and extraction.requests_per_second is None:
                warnings.append(f"No user count found; defaulting to {self.default_virtual_users} virtual users")

        spec = LoadTestSpec(
            name=self.resolve_name(text, extraction.source_url),
            description=truncate_at_sentence_boundary(text.strip(), self.description_max_chars),
            test_type=extraction.test_type or TestType.BASELINE,
            duration=duration,
            requests=extraction.requests,
            load_pattern=LoadPattern(
                type=extraction.pattern_type,
                virtual_users=virtual_users,
                requests_per_second=extraction.requests_per_second,
                ramp_up=extraction.ramp_up,
            ),
        )

        return ParseResult(
            spec=spec,
            confidence=pipeline_confidence(detect_signals(text), method),
            method=method,
            warnings=warnings,
        )

    def resolve_name(self, text: str, source_url: Optional[str]) -> str:
        """
        Pick a test name.

        Precedence: `name:`/`test:` line, "Load test for <host>" from the
        first URL read from the text, the first non-empty line, and finally
        FALLBACK_NAME.
        """
        scan = mask_spans(text, find_json_blocks(text))
        match = patterns.EXPLICIT_NAME.search(scan)
        if match:
            return match.group(1)[:_NAME_MAX_CHARS]

        if source_url:
            host = urlsplit(source_url).hostname
            if host:
                return f"Load test for {host}"

        for line in text.splitlines():
            if line.strip():
                return truncate_at_sentence_boundary(line.strip(), _NAME_MAX_CHARS)

        return FALLBACK_NAME
