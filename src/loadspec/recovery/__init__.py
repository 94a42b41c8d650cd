"""
Error classification and multi-strategy recovery.

- classifier.py: ordered rule table mapping failures to typed ParseErrors
- strategies.py: StrategyCatalog factories (retry / fallback / enhance_prompt)
- ledger.py: per-session attempt counters behind the retry ceiling
- orchestrator.py: RecoveryOrchestrator state machine
- exceptions.py: RecoveryExhausted (raised by RecoveryResult.unwrap)
"""

from .classifier import CLASSIFICATION_RULES, ClassificationRule, ErrorClassifier
from .exceptions import RecoveryExhausted
from .ledger import AttemptLedger
from .orchestrator import MAX_RETRIES_EXCEEDED, RecoveryCallback, RecoveryOrchestrator
from .strategies import StrategyCatalog

__all__ = [
    "AttemptLedger",
    "CLASSIFICATION_RULES",
    "ClassificationRule",
    "ErrorClassifier",
    "MAX_RETRIES_EXCEEDED",
    "RecoveryCallback",
    "RecoveryExhausted",
    "RecoveryOrchestrator",
    "StrategyCatalog",
]
