from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from sommelier.app import app, get_bar_client, get_catalog, get_recommender
from sommelier.profiles.client import UserBarClient
from sommelier.profiles.config import ProfileAPIConfig
from sommelier.recommendations.cache import TTLCache
from sommelier.recommendations.hybrid import ScoreOrdering, build_recommender
from sommelier.recommendations.models import DEFAULT_IMAGE_URL

client = TestClient(app)

BARS = {
    "alice": [
        {"id": 1, "product": {"id": 2, "brand": "Buffalo Trace", "spirit": "Bourbon",
                              "proof": 90, "shelf_price": 35}},
        {"id": 2, "product": {"id": 1, "brand": "Buffalo Trace", "spirit": "Bourbon",
                              "proof": 90, "shelf_price": 50}},
    ],
}


def _handler(request: httpx.Request) -> httpx.Response:
    username = request.url.path.rsplit("/", 1)[-1]
    if username == "broken":
        return httpx.Response(500)
    if username not in BARS:
        return httpx.Response(404)
    return httpx.Response(200, json=BARS[username])


@pytest.fixture(autouse=True)
def overrides(catalog, empty_embeddings, text_similarity):
    recommender = build_recommender(catalog, empty_embeddings, text=text_similarity, ordering=ScoreOrdering())
    http = httpx.Client(transport=httpx.MockTransport(_handler), base_url="https://api.test")
    bar_client = UserBarClient(ProfileAPIConfig(base_url="https://api.test"), client=http, cache=TTLCache())

    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_recommender] = lambda: recommender
    app.dependency_overrides[get_bar_client] = lambda: bar_client
    yield
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    body = client.get("/metadata").json()
    assert body["total_whiskies"] == 8
    assert body["spirit_types"] == ["Bourbon", "Irish", "Rye", "Scotch"]
    assert "Redbreast" in body["brands"]


def test_unknown_user_gets_cold_start():
    resp = client.get("/recommendations/user/newcomer", params={"limit": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == "newcomer"
    assert body["has_existing_collection"] is False
    assert body["count"] == 5
    types = {rec["recommendation_type"] for rec in body["recommendations"]}
    assert types <= {"popularity", "diversity"}


def test_user_with_bar_gets_personalized_results():
    body = client.get("/recommendations/user/alice").json()

    assert body["has_existing_collection"] is True
    ids = [rec["whisky"]["id"] for rec in body["recommendations"]]
    assert "1" not in ids
    assert "2" not in ids
    assert len(ids) == len(set(ids))
    assert "content" in {rec["recommendation_type"] for rec in body["recommendations"]}
    assert all(0.0 <= rec["match_score"] <= 1.0 for rec in body["recommendations"])


def test_missing_image_gets_placeholder():
    body = client.get("/recommendations/user/newcomer", params={"limit": 10}).json()
    whiskies = {rec["whisky"]["id"]: rec["whisky"] for rec in body["recommendations"]}
    assert whiskies["7"]["image_url"] == DEFAULT_IMAGE_URL


def test_profile_failure_falls_back_to_cold_start():
    resp = client.get("/recommendations/user/broken")
    assert resp.status_code == 200
    assert resp.json()["has_existing_collection"] is False


def test_no_recommendations_is_404():
    empty = MagicMock()
    empty.recommend.return_value = []
    app.dependency_overrides[get_recommender] = lambda: empty

    resp = client.get("/recommendations/user/newcomer")

    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "No recommendations available"
    assert len(body["suggestions"]) == 2


@pytest.mark.parametrize("limit", [0, 51])
def test_limit_out_of_range_is_rejected(limit):
    assert client.get("/recommendations/user/alice", params={"limit": limit}).status_code == 422


def test_cache_stats_reflect_profile_lookups():
    client.get("/recommendations/user/alice")
    client.get("/recommendations/user/alice")
    stats = client.get("/cache/stats").json()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
