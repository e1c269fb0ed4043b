"""
Health metric evaluation.

Responsibilities:
- Validate raw metric values against fixed per-metric ranges.
- Classify each supplied metric into a severity band.
- Produce an ordered, structured assessment independent of input key order.
- Render the assessment into the advisory markup shown to the user.
"""
