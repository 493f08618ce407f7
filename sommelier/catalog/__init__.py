"""
Whisky catalog.

Responsibilities:
- Load the bottle dataset from CSV into normalized Whisky records.
- Default malformed numeric fields to 0.
- Precompute the top-by-popularity and per-category diversity views.
- Look up whiskies by id, spirit type or brand.
"""
