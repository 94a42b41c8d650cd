"""
Multi-stage validation of AI-interpreter output.

- pipeline.py: Orchestrator for all validation stages
- stage1_json_parse.py: JSON parsing with fence stripping and repair (hard fail)
- stage2_schema.py: JSON Schema generated from LoadTestSpec (hard fail)
- stage3_spec_rules.py: Executability rules (hard fail)
"""

from .exceptions import (
    JSONParseError,
    SchemaValidationError,
    SpecRuleViolation,
    SpecValidationError,
)
from .pipeline import SpecValidationPipeline

__all__ = [
    # Main pipeline
    "SpecValidationPipeline",
    # Exceptions (classified at the validation stage)
    "SpecValidationError",
    "JSONParseError",
    "SchemaValidationError",
    "SpecRuleViolation",
]
