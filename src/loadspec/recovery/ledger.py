"""
Attempt ledger: per-session counters behind the recovery retry ceiling.

Owned by a RecoveryOrchestrator instance; pass the same ledger to several
orchestrators to share a ceiling between them. Every read-modify-write
happens under one lock.
"""

import threading

from loadspec.models.recovery_models import RecoveryStats


class AttemptLedger:
    """Thread-safe recovery attempt counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, int] = {}
        self._total_attempts = 0

    def register(self, session_key: str) -> int:
        """
        Count one orchestrator call for a session.

        Args:
            session_key: Recovery session identifier

        Returns:
            Number of calls recorded for the session, including this one
        """
        with self._lock:
            self._total_attempts += 1
            count = self._sessions.get(session_key, 0) + 1
            self._sessions[session_key] = count
            return count

    def clear(self, session_key: str) -> None:
        """Forget a session (after it recovered successfully)."""
        with self._lock:
            self._sessions.pop(session_key, None)

    def count(self, session_key: str) -> int:
        with self._lock:
            return self._sessions.get(session_key, 0)

    def stats(self) -> RecoveryStats:
        with self._lock:
            return RecoveryStats(
                total_attempts=self._total_attempts,
                active_recoveries=len(self._sessions),
            )

    def reset(self) -> None:
        """Zero every counter (housekeeping and test isolation)."""
        with self._lock:
            self._sessions.clear()
            self._total_attempts = 0
