"""
loadspec: natural-language load test specification parsing.

Turns free-form descriptions of a desired load test into structured,
executable LoadTestSpec objects:
- Heuristic extraction cascade (pattern matching -> keywords -> template)
- Confidence scoring for every parse
- Error classification and multi-strategy recovery for AI-assisted parsing

Architecture: pydantic models + structlog logging + Prometheus metrics
"""

__version__ = "0.1.0"
