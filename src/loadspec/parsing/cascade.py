"""
Extraction cascade: the total entry point of the heuristic parser.

Tries PatternMatchingTier, KeywordExtractionTier and TemplateTier in order
and assembles the first extraction found. Any exception inside a tier is
treated as "insufficient signal" and the next tier is tried; the template
tier cannot fail, so parse() always returns a ParseResult.

Usage:
    cascade = ExtractionCascade(settings)
    result = cascade.parse("POST https://api.example.com/users with 50 users for 5 minutes")
    result.method        # ParseMethod.PATTERN_MATCHING
    result.spec.requests # [RequestSpec(method=POST, url=...)]
"""

from typing import Optional

import structlog

from loadspec.config import Settings, settings as default_settings
from loadspec.models.enums import HttpMethod, ParseMethod
from loadspec.models.parse_models import ParseResult
from loadspec.models.spec_models import LoadTestSpec, RequestSpec
from loadspec.monitoring.metrics import parse_confidence, parse_results_total
from loadspec.parsing import scorer
from loadspec.parsing.assembler import FALLBACK_NAME, SpecAssembler
from loadspec.parsing.text_utils import normalize_input
from loadspec.parsing.tiers import (
    ExtractionTier,
    KeywordExtractionTier,
    PatternMatchingTier,
    TemplateTier,
)

logger = structlog.get_logger(__name__)


class ExtractionCascade:
    """
    Heuristic parser for free-form load test descriptions.

    Pure and synchronous: instances hold only configuration and may be
    shared between concurrent callers.

    Attributes:
        settings: Application settings
        tiers: Extraction tiers, most specific first
        assembler: Builds the final ParseResult from a tier's output
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.tiers: list[ExtractionTier] = [
            PatternMatchingTier(self.settings),
            KeywordExtractionTier(self.settings),
            TemplateTier(self.settings),
        ]
        self.assembler = SpecAssembler(self.settings)

    def parse(self, text: Optional[str]) -> ParseResult:
        """
        Parse text into a LoadTestSpec. Never raises.

        Args:
            text: Free-form description (may be empty, huge or garbled)

        Returns:
            ParseResult with at least one request and a load pattern
        """
        normalized, truncated = normalize_input(text, self.settings.PARSER_MAX_INPUT_CHARS)

        result: Optional[ParseResult] = None
        for tier in self.tiers:
            try:
                extraction = tier.extract(normalized)
                if extraction is None:
                    logger.debug("Extraction tier found insufficient signal", extra={"tier": tier.method.value})
                    continue
                result = self.assembler.assemble(normalized, extraction, tier.method)
                break
            except Exception as e:
                logger.debug(
                    "Extraction tier failed; demoting to next tier",
                    extra={"tier": tier.method.value, "error": str(e), "error_type": type(e).__name__},
                )

        if result is None:
            result = self._last_resort()

        if truncated:
            result.warnings.append(
                f"Input truncated to {self.settings.PARSER_MAX_INPUT_CHARS} characters before parsing"
            )

        parse_results_total.labels(method=result.method.value).inc()
        parse_confidence.labels(method=result.method.value).observe(result.confidence)

        if result.method is ParseMethod.TEMPLATE_BASED:
            logger.warning(
                "Description not understood; returning template spec",
                extra={"input_chars": len(normalized), "confidence": result.confidence},
            )
        else:
            logger.info(
                "Description parsed",
                extra={
                    "method": result.method.value,
                    "confidence": result.confidence,
                    "requests_count": len(result.spec.requests),
                    "warnings_count": len(result.warnings),
                },
            )
        return result

    def can_parse(self, text: Optional[str]) -> bool:
        """Whether the standalone score of text reaches PARSE_CONFIDENCE_THRESHOLD."""
        normalized, _ = normalize_input(text, self.settings.PARSER_MAX_INPUT_CHARS)
        return scorer.can_parse(normalized, self.settings.PARSE_CONFIDENCE_THRESHOLD)

    def get_confidence_score(self, text: Optional[str]) -> float:
        """Standalone signal score of text, in [0, 0.8]."""
        normalized, _ = normalize_input(text, self.settings.PARSER_MAX_INPUT_CHARS)
        return scorer.score(normalized)

    def _last_resort(self) -> ParseResult:
        url = self.settings.DEFAULT_URL
        return ParseResult(
            spec=LoadTestSpec(name=FALLBACK_NAME, requests=[RequestSpec(method=HttpMethod.GET, url=url)]),
            confidence=0.1,
            method=ParseMethod.TEMPLATE_BASED,
            warnings=[f"Could not interpret the description; using a template GET {url} request"],
        )
