"""
Visual embeddings for bottle images.

Responsibilities:
- Load a CLIP image model through sentence-transformers.
- Download and decode bottle images and encode them to fixed-length vectors.
- Populate the per-whisky embedding cache at startup, skipping failed images.
- Score visual similarity between a user's bottles and a candidate.
"""
