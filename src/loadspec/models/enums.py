"""
Enumerations for loadspec data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class HttpMethod(str, Enum):
    """HTTP methods a load test request may use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def mutating(cls) -> frozenset["HttpMethod"]:
        """Methods that conventionally carry a request body."""
        return frozenset({cls.POST, cls.PUT, cls.PATCH})


class TestType(str, Enum):
    """
    Intent of the load test.

    BASELINE is the default when the description names no other intent.
    """

    # Not a pytest test class despite the name
    __test__ = False

    BASELINE = "baseline"
    SPIKE = "spike"
    STRESS = "stress"
    ENDURANCE = "endurance"
    VOLUME = "volume"


class LoadPatternType(str, Enum):
    """Shape of the virtual-user load over time."""

    CONSTANT = "constant"
    RAMP_UP = "ramp-up"
    SPIKE = "spike"


class DurationUnit(str, Enum):
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"


class ParseMethod(str, Enum):
    """
    Extraction tier that produced a ParseResult.

    Ordered from most to least specific.
    """

    PATTERN_MATCHING = "pattern-matching"
    KEYWORD_EXTRACTION = "keyword-extraction"
    TEMPLATE_BASED = "template-based"


class ErrorLevel(str, Enum):
    """Pipeline stage at which a failure was observed."""

    INPUT = "input"
    AI = "ai"
    VALIDATION = "validation"


class StrategyKind(str, Enum):
    """Recovery policy kinds, used as the RecoveryStrategy discriminator."""

    RETRY = "retry"
    FALLBACK = "fallback"
    ENHANCE_PROMPT = "enhance_prompt"
