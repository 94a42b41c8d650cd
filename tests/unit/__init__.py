"""
Unit tests for loadspec.

Test individual components in isolation:
- Data models (aliases, defaults, constraints)
- Text utilities, confidence scorer, extraction tiers and cascade
- Error classifier, strategy catalog, attempt ledger, recovery orchestrator
- Validation stages
"""
