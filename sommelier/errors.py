from __future__ import annotations


class SommelierError(Exception):
    """Base class for recommendation service errors."""


class CatalogLoadError(SommelierError):
    """The whisky catalog could not be read."""


class EmbeddingModelError(SommelierError):
    """The image embedding model could not be loaded."""


class ProfileFetchError(SommelierError):
    """The user's bar could not be fetched from the profile service."""


class ImageEmbeddingError(SommelierError):
    """A bottle image could not be downloaded, decoded or encoded."""
