"""
Heuristic extraction cascade.

- text_utils.py: input normalisation, JSON block scanning and repair
- patterns.py: regex tables and keyword mappings
- scorer.py: standalone confidence scorer (capped at 0.8)
- tiers.py: pattern-matching, keyword-extraction and template tiers
- assembler.py: defaults, name resolution, pipeline confidence
- cascade.py: total entry point (never raises)
"""

from .cascade import ExtractionCascade
from .scorer import MAX_STANDALONE_SCORE, SIGNAL_WEIGHTS, Signals, can_parse, detect_signals, score

__all__ = [
    "ExtractionCascade",
    "MAX_STANDALONE_SCORE",
    "SIGNAL_WEIGHTS",
    "Signals",
    "can_parse",
    "detect_signals",
    "score",
]
