"""
Strategy catalog: factories for recovery strategy descriptors.

Every factory honours the catalog's feature flags; a disabled strategy kind
is still returned (so it can be reported) but with can_recover=False, which
makes the orchestrator skip it.

Retry escalation:
    confidence(n)  = base_confidence * RETRY_CONFIDENCE_DECAY ** (n - 1)
    retry_delay(n) = RETRY_BASE_DELAY_SECONDS * RETRY_BACKOFF_BASE ** (n - 1)

With the defaults (decay 0.8, base delay 1s, backoff 2) attempt 1 waits 1s
at full confidence, attempt 2 waits 2s at 80%, attempt 3 waits 4s at 64%.
"""

from typing import Optional

from loadspec.config import Settings, settings as default_settings
from loadspec.models.recovery_models import (
    EnhancePromptStrategy,
    FallbackStrategy,
    RetryStrategy,
)

DEFAULT_RETRY_CONFIDENCE = 0.8
DEFAULT_FALLBACK_CONFIDENCE = 0.6
DEFAULT_ENHANCE_PROMPT_CONFIDENCE = 0.7


class StrategyCatalog:
    """
    Factory for RecoveryStrategy variants.

    Attributes:
        enable_retry: When False, retry() returns can_recover=False
        enable_fallback: When False, fallback() returns can_recover=False
        enable_prompt_enhancement: When False, enhance_prompt() returns can_recover=False
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        enable_retry: Optional[bool] = None,
        enable_fallback: Optional[bool] = None,
        enable_prompt_enhancement: Optional[bool] = None,
    ):
        """
        Initialize strategy catalog.

        Args:
            settings: Application settings (backoff and decay parameters, default flags)
            enable_retry: Override ENABLE_RETRY
            enable_fallback: Override ENABLE_FALLBACK
            enable_prompt_enhancement: Override ENABLE_PROMPT_ENHANCEMENT
        """
        settings = settings or default_settings
        self.base_delay = settings.RETRY_BASE_DELAY_SECONDS
        self.backoff_base = settings.RETRY_BACKOFF_BASE
        self.confidence_decay = settings.RETRY_CONFIDENCE_DECAY
        self.prompt_max_retries = settings.PROMPT_ENHANCEMENT_MAX_RETRIES

        self.enable_retry = settings.ENABLE_RETRY if enable_retry is None else enable_retry
        self.enable_fallback = settings.ENABLE_FALLBACK if enable_fallback is None else enable_fallback
        self.enable_prompt_enhancement = (
            settings.ENABLE_PROMPT_ENHANCEMENT if enable_prompt_enhancement is None else enable_prompt_enhancement
        )

    def retry(self, base_confidence: float = DEFAULT_RETRY_CONFIDENCE, attempt_number: int = 1) -> RetryStrategy:
        """
        Build a retry strategy for the given attempt.

        Confidence decays geometrically and the delay grows exponentially
        with attempt_number.

        Args:
            base_confidence: Confidence of the first attempt, in [0, 1]
            attempt_number: 1-indexed attempt number

        Returns:
            RetryStrategy with retry_delay in seconds

        Raises:
            ValueError: If attempt_number < 1
        """
        if attempt_number < 1:
            raise ValueError(f"attempt_number must be >= 1, got {attempt_number}")

        exponent = attempt_number - 1
        confidence = round(base_confidence * self.confidence_decay**exponent, 6)
        return RetryStrategy(
            can_recover=self.enable_retry,
            confidence=confidence,
            estimated_success=confidence,
            retry_delay=self.base_delay * self.backoff_base**exponent,
        )

    def fallback(self, confidence: float = DEFAULT_FALLBACK_CONFIDENCE) -> FallbackStrategy:
        """Switch to the heuristic extraction cascade; static confidence, no delay."""
        return FallbackStrategy(
            can_recover=self.enable_fallback,
            confidence=confidence,
            estimated_success=confidence,
        )

    def enhance_prompt(self, confidence: float = DEFAULT_ENHANCE_PROMPT_CONFIDENCE) -> EnhancePromptStrategy:
        """Retry with enriched context, bounded by PROMPT_ENHANCEMENT_MAX_RETRIES."""
        return EnhancePromptStrategy(
            can_recover=self.enable_prompt_enhancement,
            confidence=confidence,
            estimated_success=confidence,
            max_retries=self.prompt_max_retries,
        )
