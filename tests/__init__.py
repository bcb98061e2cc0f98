"""Tests package for the bartest framework.

Covers tag metadata, assertions, discovery, the per-unit execution engine,
result aggregation, reporting, the runner's bar policy and the simulated
feed. Tests are plain functions and run with or without pytest.
"""
