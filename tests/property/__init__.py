"""
OpenBibles - Property-Based Testing Suite

Property-based testing using Hypothesis for text normalization, reference
resolution and aggregation invariants.
"""
