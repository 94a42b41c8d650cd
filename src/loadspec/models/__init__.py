"""
Pydantic data models for loadspec.

Includes:
- Enums (HttpMethod, TestType, LoadPatternType, DurationUnit, ParseMethod, ErrorLevel, StrategyKind)
- Spec models (Duration, RequestSpec, LoadPattern, LoadTestSpec)
- ParseResult (extraction cascade outcome)
- Recovery models (RecoveryStrategy variants, ParseError, RecoveryContext, RecoveryResult)
"""

from loadspec.models.enums import (
    DurationUnit,
    ErrorLevel,
    HttpMethod,
    LoadPatternType,
    ParseMethod,
    StrategyKind,
    TestType,
)
from loadspec.models.spec_models import (
    Duration,
    LoadPattern,
    LoadTestSpec,
    RequestSpec,
)
from loadspec.models.parse_models import ParseResult
from loadspec.models.recovery_models import (
    EnhancePromptStrategy,
    FallbackStrategy,
    ParseError,
    RecoveryContext,
    RecoveryResult,
    RecoveryStats,
    RecoveryStrategy,
    RetryStrategy,
)

__all__ = [
    # Enums
    "DurationUnit",
    "ErrorLevel",
    "HttpMethod",
    "LoadPatternType",
    "ParseMethod",
    "StrategyKind",
    "TestType",
    # Spec models
    "Duration",
    "LoadPattern",
    "LoadTestSpec",
    "RequestSpec",
    # Parse models
    "ParseResult",
    # Recovery models
    "EnhancePromptStrategy",
    "FallbackStrategy",
    "ParseError",
    "RecoveryContext",
    "RecoveryResult",
    "RecoveryStats",
    "RecoveryStrategy",
    "RetryStrategy",
]
