"""
Data models for error classification and recovery.

RecoveryStrategy is a tagged union over the three recovery kinds; each
variant carries only the fields meaningful for it:
- RetryStrategy: retry_delay (seconds to wait before the attempt)
- FallbackStrategy: no extra fields
- EnhancePromptStrategy: max_retries (bounded enriched-context attempts)
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from loadspec.models.enums import ErrorLevel, StrategyKind
from loadspec.models.spec_models import LoadTestSpec


class _StrategyBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_recover: bool = Field(default=True, description="False when the strategy kind is disabled")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Ranking weight for candidate ordering")
    estimated_success: float = Field(..., ge=0.0, le=1.0, description="Expected success probability")

    @property
    def name(self) -> str:
        """Name recorded in RecoveryResult.recovery_path."""
        return self.strategy.value  # type: ignore[attr-defined]


class RetryStrategy(_StrategyBase):
    """Repeat the failed operation unchanged after a backoff delay."""

    strategy: Literal[StrategyKind.RETRY] = StrategyKind.RETRY
    retry_delay: Optional[float] = Field(default=None, ge=0.0, description="Backoff delay in seconds")


class FallbackStrategy(_StrategyBase):
    """Abandon the failed path and switch to the heuristic extraction cascade."""

    strategy: Literal[StrategyKind.FALLBACK] = StrategyKind.FALLBACK


class EnhancePromptStrategy(_StrategyBase):
    """Retry with enriched or clarified context (distinct from blind retry)."""

    strategy: Literal[StrategyKind.ENHANCE_PROMPT] = StrategyKind.ENHANCE_PROMPT
    max_retries: int = Field(default=2, ge=1, description="Enriched attempts allowed")


RecoveryStrategy = Annotated[
    Union[RetryStrategy, FallbackStrategy, EnhancePromptStrategy],
    Field(discriminator="strategy"),
]


class ParseError(BaseModel):
    """
    A classified pipeline failure.

    `context` and `original_error` are kept verbatim for diagnostics and
    are never meant to be shown to the end user; `suggestions` are.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: ErrorLevel = Field(..., description="Stage where the failure happened")
    type: str = Field(..., description="Taxonomy tag (e.g. rate_limit, invalid_format)")
    message: str = Field(..., description="Original failure message")
    suggestions: list[str] = Field(default_factory=list, description="User-facing remediation hints")
    recovery_strategy: RecoveryStrategy = Field(..., description="Default strategy for this type")
    context: Optional[dict[str, Any]] = Field(default=None, description="Caller diagnostics")
    original_error: Optional[BaseException] = Field(default=None, exclude=True, repr=False)


class RecoveryContext(BaseModel):
    """Per-call recovery state supplied by the caller."""

    original_input: str = Field(..., description="Text the failed operation was working on")
    previous_attempts: list[str] = Field(default_factory=list, description="Strategy names already tried")
    available_strategies: list[RecoveryStrategy] = Field(
        default_factory=list,
        description="Alternatives to the error's default strategy",
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Attempt-ledger key; derived from the error and input when omitted",
    )


class RecoveryResult(BaseModel):
    """
    Outcome of one recovery session.

    len(recovery_path) == attempts_used, except when the retry ceiling was
    hit: then recovery_path == ["max_retries_exceeded"] and attempts_used == 0.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    result: Optional[LoadTestSpec] = None
    attempts_used: int = Field(default=0, ge=0)
    recovery_path: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    error: Optional[BaseException] = Field(default=None, exclude=True, repr=False)

    def unwrap(self) -> LoadTestSpec:
        """
        Return the recovered spec, or raise if recovery failed.

        Raises:
            RecoveryExhausted: If success is False
        """
        if self.success and self.result is not None:
            return self.result
        from loadspec.recovery.exceptions import RecoveryExhausted

        raise RecoveryExhausted(recovery_path=self.recovery_path, last_error=self.error)


class RecoveryStats(BaseModel):
    """Snapshot of the attempt ledger."""

    total_attempts: int = Field(default=0, ge=0, description="Orchestrator calls since last reset")
    active_recoveries: int = Field(default=0, ge=0, description="Sessions counted against the ceiling")
