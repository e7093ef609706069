import json

import httpx
import pytest
from fastapi.testclient import TestClient

from artdesk import config
from artdesk.main import app
from artdesk.utils.http import get_async_client


@pytest.fixture
def upstream():
    """Collects requests the app makes upstream; tests set `handler`."""
    state = {"requests": [], "handler": lambda request: httpx.Response(200, json={})}

    def transport_handler(request):
        state["requests"].append(request)
        return state["handler"](request)

    async def override():
        async with httpx.AsyncClient(transport=httpx.MockTransport(transport_handler)) as client:
            yield client

    app.dependency_overrides[get_async_client] = override
    yield state
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def algolia_config(monkeypatch):
    monkeypatch.setattr(config, "ALGOLIA_APP_ID", "APP123")
    monkeypatch.setattr(config, "ALGOLIA_API_KEY", "secret-key")
    monkeypatch.setattr(config, "ALGOLIA_INDEX", "artworks")


def test_root(client):
    assert client.get("/").json() == {"message": "artdesk backend is live"}


class TestAlgoliaProxy:
    def test_forwards_body_with_credentials(self, client, upstream, algolia_config):
        upstream["handler"] = lambda request: httpx.Response(200, json={"hits": [{"objectID": "1"}], "nbHits": 1})
        payload = {"query": "monet", "page": 0, "hitsPerPage": 20}

        resp = client.post("/api/algolia", json=payload)

        assert resp.status_code == 200
        assert resp.json() == {"hits": [{"objectID": "1"}], "nbHits": 1}
        sent = upstream["requests"][0]
        assert str(sent.url) == "https://app123-dsn.algolia.net/1/indexes/artworks/query"
        assert sent.headers["x-algolia-application-id"] == "APP123"
        assert sent.headers["x-algolia-api-key"] == "secret-key"
        assert json.loads(sent.content) == payload

    def test_upstream_error_passes_through(self, client, upstream, algolia_config):
        upstream["handler"] = lambda request: httpx.Response(403, json={"message": "Invalid API key"})

        resp = client.post("/api/algolia", json={"query": ""})

        assert resp.status_code == 403
        assert resp.json() == {"message": "Invalid API key"}

    def test_transport_failure_is_500(self, client, upstream, algolia_config):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        upstream["handler"] = handler
        resp = client.post("/api/algolia", json={"query": ""})

        assert resp.status_code == 500
        assert "error" in resp.json()

    def test_missing_configuration_is_500(self, client, upstream, monkeypatch):
        monkeypatch.setattr(config, "ALGOLIA_APP_ID", None)
        resp = client.post("/api/algolia", json={"query": ""})
        assert resp.status_code == 500
        assert upstream["requests"] == []


class TestArtworkQuery:
    def test_forwards_query_and_variables(self, client, upstream, monkeypatch):
        monkeypatch.setattr(config, "ARTSY_GRAPHQL_URL", "https://graphql.test/v2")
        upstream["handler"] = lambda request: httpx.Response(200, json={"data": {"artwork": {"title": "Irises"}}})

        resp = client.post("/api/artwork", json={"query": "query($id: String!) { artwork(id: $id) { title } }",
                                                 "variables": {"id": "irises"}})

        assert resp.status_code == 200
        assert resp.json() == {"data": {"artwork": {"title": "Irises"}}}
        sent = upstream["requests"][0]
        assert str(sent.url) == "https://graphql.test/v2"
        assert json.loads(sent.content)["variables"] == {"id": "irises"}

    def test_missing_query_is_rejected(self, client, upstream):
        assert client.post("/api/artwork", json={"variables": {}}).status_code == 422


class TestListings:
    @staticmethod
    def _handler(request):
        path = request.url.path
        if path == "/api/galleries":
            return httpx.Response(200, json={"galleries": [
                {"_id": f"g{i}", "name": f"Gallery {i}"} for i in range(15)
            ]})
        if path == "/api/museums":
            return httpx.Response(200, json={"museums": [{"_id": "m1", "name": "Louvre",
                                                          "locations": [{"city": "Paris"}]}]})
        if path == "/api/shows":
            return httpx.Response(500)
        return httpx.Response(200, json={})

    def test_first_page(self, client, upstream):
        upstream["handler"] = self._handler
        resp = client.get("/api/listings", params={"limit": 10})

        assert resp.status_code == 200
        body = resp.json()
        assert len(body["items"]) == 10
        assert body["has_more"] is True
        assert body["window"] == {"current_page": 1, "items_per_page": 10, "total_pages": 2, "total_items": 16}
        assert body["categories"] == ["All Galleries", "Museums"]
        assert "raw" not in body["items"][0]

    def test_search_and_category(self, client, upstream):
        upstream["handler"] = self._handler
        body = client.get("/api/listings", params={"search": "paris"}).json()
        assert [i["name"] for i in body["items"]] == ["Louvre"]

        body = client.get("/api/listings", params={"category": "Museums", "kind": "museum"}).json()
        assert [i["id"] for i in body["items"]] == ["m1"]
        assert body["has_more"] is False

    def test_last_page(self, client, upstream):
        upstream["handler"] = self._handler
        body = client.get("/api/listings", params={"limit": 10, "page": 2}).json()
        assert len(body["items"]) == 6
        assert body["has_more"] is False

    def test_categories(self, client):
        body = client.get("/api/listings/categories", params={"kind": "show"}).json()
        assert body == {"categories": [{"name": "Shows", "slug": "shows", "kind": "show"}]}
