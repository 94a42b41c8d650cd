"""
Stage 1: JSON Parse Validation.

Parse raw interpreter response content into a dict. Markdown code fences
and surrounding prose are stripped, and almost-JSON is repaired when
possible. This is a hard-fail stage.
"""

import json
import re

import structlog

from loadspec.monitoring.metrics import validation_failures_total
from loadspec.parsing.text_utils import find_json_blocks, repair_json
from .exceptions import JSONParseError

logger = structlog.get_logger(__name__)

_CODE_FENCE = re.compile(r"```(?:json|JSON)?(.*?)```", re.DOTALL)


class Stage1JSONParse:
    """
    Stage 1 validator: Parse JSON string to dict.

    Raises JSONParseError on content that cannot be read as a JSON object.
    """

    def extract_candidate(self, content: str) -> str:
        """Strip code fences and prose around the first JSON object."""
        fenced = _CODE_FENCE.search(content)
        if fenced:
            content = fenced.group(1)
        content = content.strip()
        if content.startswith("{"):
            return content

        blocks = find_json_blocks(content)
        if blocks:
            start, end = blocks[0]
            return content[start:end]
        return content

    def validate(self, content: str) -> dict:
        """
        Parse JSON content from an interpreter response.

        Args:
            content: Raw response text

        Returns:
            Parsed dict representation

        Raises:
            JSONParseError: If content is not a JSON object
        """
        if not content or not content.strip():
            validation_failures_total.labels(stage="stage1", error_type="empty_content").inc()
            raise JSONParseError(
                "Interpreter response is empty; expected a JSON object",
                reason="empty response",
            )

        candidate = self.extract_candidate(content)
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            repaired = repair_json(candidate)
            if repaired is None:
                validation_failures_total.labels(stage="stage1", error_type="json_decode_error").inc()
                raise JSONParseError(
                    f"Failed to parse interpreter response as JSON: {e.msg}",
                    reason=e.msg,
                    position=e.pos,
                ) from e
            logger.info("Stage 1: Repaired malformed JSON in interpreter response")
            parsed = json.loads(repaired)

        if not isinstance(parsed, dict):
            validation_failures_total.labels(stage="stage1", error_type="not_json_object").inc()
            raise JSONParseError(
                f"Interpreter response is not a JSON object (got {type(parsed).__name__})",
                reason=f"top-level {type(parsed).__name__}",
            )

        logger.debug(f"Stage 1: Successfully parsed JSON with {len(parsed)} top-level keys")
        return parsed
