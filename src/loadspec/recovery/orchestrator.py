"""
Recovery orchestrator: drives the multi-strategy retry loop.

State machine:
    INIT -> SELECT_STRATEGY -> ATTEMPT -> (SUCCESS | SELECT_STRATEGY | EXHAUSTED)

1. Every call is registered in the attempt ledger. A session that exceeds
   max_retries short-circuits to EXHAUSTED with recovery_path
   ["max_retries_exceeded"]; the callback is not invoked.
2. Candidates are the error's default strategy plus the context's
   available strategies, deduplicated, filtered to can_recover=True and
   sorted by confidence descending (ties keep declaration order).
3. Each candidate is attempted in turn; retry strategies first wait
   retry_delay seconds (asyncio.sleep, so other sessions keep running).
4. The first callback that returns a spec wins; the result reports the
   confidence of that strategy. If every candidate fails the result
   carries the last error and confidence 0.

Usage:
    orchestrator = RecoveryOrchestrator(settings)
    result = await orchestrator.recover(parse_error, context, callback)
    spec = result.unwrap()
"""

import asyncio
import hashlib
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from loadspec.config import Settings, settings as default_settings
from loadspec.models.recovery_models import (
    ParseError,
    RecoveryContext,
    RecoveryResult,
    RecoveryStats,
    RecoveryStrategy,
    RetryStrategy,
)
from loadspec.models.spec_models import LoadTestSpec
from loadspec.monitoring.metrics import (
    recovery_active_sessions,
    recovery_attempts_total,
    recovery_sessions_total,
)
from loadspec.recovery.ledger import AttemptLedger

logger = structlog.get_logger(__name__)

MAX_RETRIES_EXCEEDED = "max_retries_exceeded"

RecoveryCallback = Callable[
    [RecoveryStrategy, RecoveryContext],
    Union[LoadTestSpec, Awaitable[LoadTestSpec]],
]


class RecoveryOrchestrator:
    """
    Multi-strategy recovery loop with a per-session retry ceiling.

    Attributes:
        max_retries: Calls allowed per session before short-circuiting
        ledger: Attempt counters (injectable, shareable)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        max_retries: Optional[int] = None,
        ledger: Optional[AttemptLedger] = None,
    ):
        """
        Initialize recovery orchestrator.

        Args:
            settings: Application settings (RECOVERY_MAX_RETRIES)
            max_retries: Override the retry ceiling
            ledger: Shared attempt ledger (a private one is created if omitted)
        """
        settings = settings or default_settings
        self.max_retries = settings.RECOVERY_MAX_RETRIES if max_retries is None else max_retries
        self.ledger = ledger or AttemptLedger()

    @staticmethod
    def session_key(parse_error: ParseError, context: RecoveryContext) -> str:
        """Ledger key: explicit session_id, else a digest of the error and input."""
        if context.session_id:
            return context.session_id
        raw = f"{parse_error.level.value}:{parse_error.type}:{context.original_input}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]

    @staticmethod
    def rank_candidates(parse_error: ParseError, context: RecoveryContext) -> list[RecoveryStrategy]:
        """
        Candidate strategies in attempt order.

        Returns:
            Deduplicated recoverable strategies sorted by confidence
            descending, ties broken by declaration index
        """
        declared: list[RecoveryStrategy] = []
        for strategy in [parse_error.recovery_strategy, *context.available_strategies]:
            if strategy not in declared:
                declared.append(strategy)

        recoverable = [(index, s) for index, s in enumerate(declared) if s.can_recover]
        recoverable.sort(key=lambda pair: (-pair[1].confidence, pair[0]))
        return [strategy for _, strategy in recoverable]

    async def recover(
        self,
        parse_error: ParseError,
        context: RecoveryContext,
        callback: RecoveryCallback,
    ) -> RecoveryResult:
        """
        Try candidate strategies until one produces a spec.

        Args:
            parse_error: Classified failure carrying the default strategy
            context: Original input, previous attempts, alternative strategies
            callback: Given a strategy and the current context, returns (or
                awaits to) a LoadTestSpec, or raises

        Returns:
            RecoveryResult; exhaustion is reported with success=False, never raised
        """
        key = self.session_key(parse_error, context)
        count = self.ledger.register(key)
        self._publish_active()

        if count > self.max_retries:
            logger.warning(
                "Recovery retry ceiling reached",
                extra={"session": key, "calls": count, "max_retries": self.max_retries, "error_type": parse_error.type},
            )
            recovery_sessions_total.labels(outcome="max_retries_exceeded").inc()
            return RecoveryResult(
                success=False,
                attempts_used=0,
                recovery_path=[MAX_RETRIES_EXCEEDED],
                confidence=0.0,
                error=parse_error.original_error,
            )

        candidates = self.rank_candidates(parse_error, context)
        logger.info(
            "Starting recovery",
            extra={
                "session": key,
                "error_type": parse_error.type,
                "level": parse_error.level.value,
                "candidates": [s.name for s in candidates],
            },
        )

        recovery_path: list[str] = []
        last_error: Optional[BaseException] = parse_error.original_error

        for strategy in candidates:
            if isinstance(strategy, RetryStrategy) and strategy.retry_delay:
                await asyncio.sleep(strategy.retry_delay)

            recovery_path.append(strategy.name)
            attempt_context = context.model_copy(
                update={"previous_attempts": [*context.previous_attempts, *recovery_path[:-1]]}
            )

            try:
                spec = await self._invoke(callback, strategy, attempt_context)
            except Exception as e:
                last_error = e
                recovery_attempts_total.labels(strategy=strategy.name, success="false").inc()
                logger.warning(
                    f"Recovery strategy {strategy.name} failed",
                    extra={
                        "session": key,
                        "strategy": strategy.name,
                        "attempt": len(recovery_path),
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )
                continue

            recovery_attempts_total.labels(strategy=strategy.name, success="true").inc()
            recovery_sessions_total.labels(outcome="success").inc()
            self.ledger.clear(key)
            self._publish_active()
            logger.info(
                "Recovery succeeded",
                extra={
                    "session": key,
                    "strategy": strategy.name,
                    "attempts_used": len(recovery_path),
                    "confidence": strategy.confidence,
                },
            )
            return RecoveryResult(
                success=True,
                result=spec,
                attempts_used=len(recovery_path),
                recovery_path=recovery_path,
                confidence=strategy.confidence,
            )

        recovery_sessions_total.labels(outcome="exhausted").inc()
        logger.error(
            "Recovery exhausted",
            extra={
                "session": key,
                "error_type": parse_error.type,
                "recovery_path": recovery_path,
                "final_error": type(last_error).__name__ if last_error else None,
            },
        )
        return RecoveryResult(
            success=False,
            attempts_used=len(recovery_path),
            recovery_path=recovery_path,
            confidence=0.0,
            error=last_error,
        )

    def stats(self) -> RecoveryStats:
        """Current ledger counters."""
        return self.ledger.stats()

    def reset_recovery_attempts(self) -> None:
        """Zero the ledger (housekeeping and test isolation)."""
        self.ledger.reset()
        self._publish_active()

    async def _invoke(
        self,
        callback: RecoveryCallback,
        strategy: RecoveryStrategy,
        context: RecoveryContext,
    ) -> LoadTestSpec:
        outcome: Any = callback(strategy, context)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if outcome is None:
            raise ValueError(f"Recovery callback returned no spec for strategy {strategy.name}")
        if isinstance(outcome, LoadTestSpec):
            return outcome
        return LoadTestSpec.model_validate(outcome)

    def _publish_active(self) -> None:
        recovery_active_sessions.set(self.ledger.stats().active_recoveries)
