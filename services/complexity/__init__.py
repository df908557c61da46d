"""Complexity matrix: scores a process's technical attributes into five levels.

- scorer.py: ComplexityInput, point table, classification thresholds
"""
