"""
Test suite for freightsplit

Contains:
- tests/unit/          : Unit tests for individual modules
"""
