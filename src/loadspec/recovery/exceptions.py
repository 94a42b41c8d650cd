"""
Recovery engine exceptions.

Recovery exhaustion is normally reported through a success=False
RecoveryResult; RecoveryExhausted is raised only by RecoveryResult.unwrap()
for callers that prefer exceptions.
"""

from typing import Optional


class RecoveryExhausted(Exception):
    """
    Raised when a recovery session ended without a usable spec.

    Attributes:
        recovery_path: Strategy names attempted, in order (or the
            "max_retries_exceeded" marker when the ceiling was hit)
        last_error: Final failure raised by the recovery callback, if any
    """

    def __init__(self, recovery_path: list[str], last_error: Optional[BaseException] = None) -> None:
        """
        Initialize RecoveryExhausted exception.

        Args:
            recovery_path: Attempted strategy names
            last_error: Final callback failure
        """
        self.recovery_path = list(recovery_path)
        self.last_error = last_error

        path = ", ".join(self.recovery_path) or "none"
        final = type(last_error).__name__ if last_error is not None else "none"
        super().__init__(f"Recovery exhausted. Strategies tried: {path}. Final error: {final}")
