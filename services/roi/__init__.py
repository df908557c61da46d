"""ROI engine: composes the cost models into the business case.

- engine.py: calculate_full_roi (pure) and the cache-backed ROIEngine
- result.py: ROIResult record and its serialized shape
- projection.py: month-by-month breakeven curve
"""
