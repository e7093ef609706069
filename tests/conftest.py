import json as jsonlib

import pytest

from artdesk.auth.session import Session
from artdesk.utils.http import BackendClient


class RecordingNotifier:
    def __init__(self):
        self.successes = []
        self.errors = []

    def success(self, message):
        self.successes.append(message)

    def error(self, message):
        self.errors.append(message)


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ("" if body is None else jsonlib.dumps(body))

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeHTTP:
    """Stands in for requests.Session: records calls, answers through `handler`."""

    def __init__(self, handler=None):
        self.calls = []
        self.handler = handler or (lambda method, url, body: FakeResponse(200, {"success": True}))

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "params": params,
            "json": json,
            "headers": headers,
            "timeout": timeout,
        })
        return self.handler(method, url, json)

    def calls_for(self, method):
        return [c for c in self.calls if c["method"] == method]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def session():
    return Session("Bearer test-token")


@pytest.fixture
def fake_http():
    return FakeHTTP()


@pytest.fixture
def backend(fake_http, session):
    return BackendClient(session=session, base_url="http://api.test/v1/api", http=fake_http)
