"""
Test suite for raygauge

Contains:
- tests/unit/        : Unit tests for individual modules
- tests/properties/  : Property-based tests (hypothesis)
"""
