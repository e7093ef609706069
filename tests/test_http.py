import pytest
import requests

from conftest import FakeHTTP, FakeResponse
from artdesk.errors import EnvelopeError, HTTPStatusError, TransportError
from artdesk.utils.http import BackendClient, extract_page, unwrap


def test_sends_bearer_and_timeout(backend, fake_http):
    backend.get("/users/all", params={"page": 1})
    call = fake_http.calls[0]
    assert call["url"] == "http://api.test/v1/api/users/all"
    assert call["headers"]["Authorization"] == "Bearer test-token"
    assert call["timeout"] == backend.timeout > 0


def test_http_error_carries_status_and_message():
    http = FakeHTTP(lambda method, url, body: FakeResponse(404, {"message": "Not found"}))
    client = BackendClient(base_url="http://api.test", http=http)
    with pytest.raises(HTTPStatusError) as exc:
        client.get("/sponsor-banner/missing")
    assert exc.value.status_code == 404
    assert exc.value.message == "Not found"


def test_envelope_failure_on_2xx():
    http = FakeHTTP(lambda method, url, body: FakeResponse(200, {"success": False, "message": "Nope"}))
    client = BackendClient(base_url="http://api.test", http=http)
    with pytest.raises(EnvelopeError):
        client.post("/sponsor-banner/create", json={})


def test_network_failure_becomes_transport_error():
    def handler(method, url, body):
        raise requests.exceptions.ConnectTimeout("timed out")

    client = BackendClient(base_url="http://api.test", http=FakeHTTP(handler))
    with pytest.raises(TransportError):
        client.get("/users/all")


def test_non_json_success_body():
    http = FakeHTTP(lambda method, url, body: FakeResponse(204, None, text=""))
    client = BackendClient(base_url="http://api.test", http=http)
    assert client.delete("/users/u1") is None


def test_unwrap_and_extract_page():
    assert unwrap({"success": True, "data": [1, 2]}) == [1, 2]
    assert unwrap([1]) == [1]

    items, pagination = extract_page({"artworks": [{"_id": "a"}], "pagination": {"totalPages": 2}}, "artworks")
    assert items == [{"_id": "a"}]
    assert pagination == {"totalPages": 2}

    items, pagination = extract_page({"success": True, "data": []})
    assert items == [] and pagination == {}
