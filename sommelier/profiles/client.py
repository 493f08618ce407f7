from __future__ import annotations

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..errors import ProfileFetchError
from ..recommendations.cache import TTLCache
from ..recommendations.models import BarItem, UserBar
from ..recommendations.profile import normalize_id
from .config import DEFAULT_PROFILE_API_CONFIG, ProfileAPIConfig

logger = logging.getLogger(__name__)


class UserBarClient:
    """Reads the bottles in a user's bar from the profile API."""

    def __init__(
        self,
        config: ProfileAPIConfig = DEFAULT_PROFILE_API_CONFIG,
        client: httpx.Client | None = None,
        cache: TTLCache | None = None,
    ) -> None:
        self.config = config
        self._client = client or httpx.Client(base_url=config.base_url, timeout=config.timeout)
        self.cache = cache if cache is not None else TTLCache(ttl=config.cache_ttl)

    def get_user_bar(self, username: str) -> UserBar:
        """Return the user's bar; an unknown user has an empty bar.

        Raises ``ProfileFetchError`` when the API is unreachable or returns
        something that is not a list of bar items.
        """
        cache_key = {"user_bar": username}
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        path = f"{self.config.user_bar_endpoint}/{quote(username, safe='')}"
        try:
            response = self._client.get(path)
        except httpx.HTTPError as exc:
            raise ProfileFetchError(f"Failed to fetch user bar data for {username}") from exc

        if response.status_code == 404:
            logger.info("User %s has no bar items or doesn't exist", username)
            return UserBar()

        try:
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPStatusError, ValueError) as exc:
            raise ProfileFetchError(f"Failed to fetch user bar data for {username}") from exc

        if not isinstance(payload, list):
            raise ProfileFetchError("Invalid user bar data format")

        try:
            items = [BarItem.model_validate(entry) for entry in payload]
        except ValidationError as exc:
            raise ProfileFetchError("Invalid user bar data format") from exc

        bar = UserBar(items=items, whisky_ids=[normalize_id(item.product.id) for item in items])
        self.cache.set(cache_key, bar)
        return bar

    def close(self) -> None:
        self._client.close()
