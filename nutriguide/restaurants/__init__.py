"""
Restaurant selection.

Responsibilities:
- Infer dietary-need categories from the health advisory text.
- Live mode: geocode the location and run a Google Places nearby search.
- Catalog mode: pick curated entries from the local restaurant catalog.
- Fall back from live to catalog mode on any upstream failure.
"""
