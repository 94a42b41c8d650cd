"""
Spec parsing service: dispatches descriptions to the AI interpreter or the
heuristic cascade and routes failures through recovery.

Flow:
    1. Blank input -> classified as an input-stage "missing" error -> recovery
    2. No interpreter configured -> ExtractionCascade result
    3. Interpreter configured -> interpret -> validate
       On failure: classify (ai or validation stage) -> RecoveryOrchestrator
       with a callback that dispatches on strategy kind:
         retry          -> call the interpreter again
         enhance_prompt -> call the interpreter with hints, up to max_retries times
         fallback       -> run the extraction cascade

Usage:
    service = SpecParsingService(settings, interpreter=my_interpreter)
    outcome = await service.parse("POST https://api.example.com/users with 50 users for 5 minutes")
    outcome.spec, outcome.confidence, outcome.source
"""

from typing import Optional, Protocol

import structlog
from pydantic import BaseModel, ConfigDict, Field

from loadspec.config import Settings, settings as default_settings
from loadspec.models.enums import ErrorLevel
from loadspec.models.parse_models import ParseResult
from loadspec.models.recovery_models import (
    EnhancePromptStrategy,
    FallbackStrategy,
    ParseError,
    RecoveryContext,
    RecoveryResult,
    RecoveryStrategy,
)
from loadspec.models.spec_models import LoadTestSpec
from loadspec.parsing.cascade import ExtractionCascade
from loadspec.recovery.classifier import ErrorClassifier
from loadspec.recovery.orchestrator import RecoveryOrchestrator
from loadspec.recovery.strategies import StrategyCatalog
from loadspec.validation.exceptions import SpecValidationError
from loadspec.validation.pipeline import SpecValidationPipeline

logger = structlog.get_logger(__name__)

INTERPRETER_SOURCE = "ai"
NO_SOURCE = "none"
INTERPRETER_CONFIDENCE = 0.9


class SpecInterpreter(Protocol):
    """AI-assisted interpreter returning (ideally) a JSON LoadTestSpec."""

    async def interpret(self, text: str, hints: Optional[list[str]] = None) -> str:
        """
        Interpret a description.

        Args:
            text: Free-form description
            hints: Extra guidance for enriched attempts (None on plain calls)

        Returns:
            Response text expected to contain a JSON LoadTestSpec
        """
        ...


class InterpretationOutcome(BaseModel):
    """
    Final answer for one description.

    `spec` is None only when recovery was exhausted; `error.suggestions`
    then explain what the user can change.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    spec: Optional[LoadTestSpec] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: str = Field(..., description="ai, a cascade tier name, or none")
    warnings: list[str] = Field(default_factory=list)
    error: Optional[ParseError] = None
    recovery: Optional[RecoveryResult] = None


class SpecParsingService:
    """
    Dispatcher between the AI interpreter, validation, recovery and the cascade.

    Attributes:
        interpreter: Optional AI interpreter
        cascade: Heuristic extraction cascade (fallback path)
        validator: Interpreter-output validation pipeline
        catalog: Strategy catalog
        classifier: Error classifier
        orchestrator: Recovery orchestrator (owns the attempt ledger)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        interpreter: Optional[SpecInterpreter] = None,
        cascade: Optional[ExtractionCascade] = None,
        orchestrator: Optional[RecoveryOrchestrator] = None,
    ):
        self.settings = settings or default_settings
        self.interpreter = interpreter
        self.cascade = cascade or ExtractionCascade(self.settings)
        self.validator = SpecValidationPipeline()
        self.catalog = StrategyCatalog(self.settings)
        self.classifier = ErrorClassifier(self.catalog)
        self.orchestrator = orchestrator or RecoveryOrchestrator(self.settings)

    async def parse(self, text: Optional[str]) -> InterpretationOutcome:
        """
        Turn a description into a LoadTestSpec.

        Args:
            text: Free-form description

        Returns:
            InterpretationOutcome (never raises for interpreter or validation failures)
        """
        text = text or ""
        if not text.strip():
            parse_error = self.classifier.classify(
                "Input is missing: the description is empty",
                ErrorLevel.INPUT,
                context={"input_chars": len(text)},
            )
            return await self._recover(text, parse_error)

        if self.interpreter is None:
            result = self.cascade.parse(text)
            return self._from_parse_result(result)

        try:
            raw = await self.interpreter.interpret(text, None)
        except Exception as e:
            parse_error = self.classifier.classify(e, ErrorLevel.AI, context={"input_chars": len(text)})
            return await self._recover(text, parse_error)

        try:
            spec = self.validator.validate(raw)
        except SpecValidationError as e:
            parse_error = self.classifier.classify(
                e, ErrorLevel.VALIDATION, context={"input_chars": len(text), **e.details}
            )
            return await self._recover(text, parse_error)

        return InterpretationOutcome(spec=spec, confidence=INTERPRETER_CONFIDENCE, source=INTERPRETER_SOURCE)

    async def _recover(self, text: str, parse_error: ParseError) -> InterpretationOutcome:
        fallback_results: list[ParseResult] = []

        async def callback(strategy: RecoveryStrategy, context: RecoveryContext) -> LoadTestSpec:
            if isinstance(strategy, FallbackStrategy):
                result = self.cascade.parse(text)
                fallback_results.append(result)
                return result.spec
            if isinstance(strategy, EnhancePromptStrategy):
                return await self._interpret_with_hints(text, parse_error, strategy, context)
            return await self._interpret(text, None)

        context = RecoveryContext(original_input=text, available_strategies=[self.catalog.fallback()])
        recovery = await self.orchestrator.recover(parse_error, context, callback)

        if not recovery.success:
            return InterpretationOutcome(
                confidence=0.0,
                source=NO_SOURCE,
                warnings=list(parse_error.suggestions),
                error=parse_error,
                recovery=recovery,
            )

        warnings = [f"Recovered from {parse_error.type} via {' -> '.join(recovery.recovery_path)}"]
        if recovery.recovery_path[-1] == "fallback" and fallback_results:
            result = fallback_results[-1]
            return InterpretationOutcome(
                spec=recovery.result,
                confidence=result.confidence,
                source=result.method.value,
                warnings=warnings + result.warnings,
                error=parse_error,
                recovery=recovery,
            )
        return InterpretationOutcome(
            spec=recovery.result,
            confidence=recovery.confidence,
            source=INTERPRETER_SOURCE,
            warnings=warnings,
            error=parse_error,
            recovery=recovery,
        )

    async def _interpret(self, text: str, hints: Optional[list[str]]) -> LoadTestSpec:
        if self.interpreter is None:
            raise RuntimeError("No interpreter configured")
        raw = await self.interpreter.interpret(text, hints)
        return self.validator.validate(raw)

    async def _interpret_with_hints(
        self,
        text: str,
        parse_error: ParseError,
        strategy: EnhancePromptStrategy,
        context: RecoveryContext,
    ) -> LoadTestSpec:
        hints = [f"The previous interpretation failed: {parse_error.message}", *parse_error.suggestions]
        if context.previous_attempts:
            hints.append(f"Strategies already tried: {', '.join(context.previous_attempts)}")

        attempt = 1
        while True:
            try:
                return await self._interpret(text, hints)
            except Exception as e:
                logger.info(
                    "Enhanced interpretation attempt failed",
                    extra={"attempt": attempt, "max_retries": strategy.max_retries, "error_type": type(e).__name__},
                )
                if attempt >= strategy.max_retries:
                    raise
                hints = [*hints, f"Attempt {attempt} failed: {e}"]
                attempt += 1

    def _from_parse_result(self, result: ParseResult) -> InterpretationOutcome:
        return InterpretationOutcome(
            spec=result.spec,
            confidence=result.confidence,
            source=result.method.value,
            warnings=list(result.warnings),
        )
