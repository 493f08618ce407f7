"""
Hybrid whisky recommendation engine.

Responsibilities:
- Build a taste profile from the bottles in a user's bar.
- Score catalog whiskies by brand, type, price, proof, name, notes and looks.
- Fall back to popular and category-diverse picks for users with no bar.
- Merge sources, deduplicate, weight by source and order the final list.
"""
