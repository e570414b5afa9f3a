import json

import pytest
from fastapi.testclient import TestClient

from hai_relay.api.app import GENERIC_ERROR, app
from hai_relay.config.settings import settings
from hai_relay.domain.exceptions import DialogError, UpstreamError


class FakeUpstream:
    name = "fake"

    def __init__(self, text="Hello from upstream", dialog_error=False, complete_error=False):
        self.text = text
        self.dialog_error = dialog_error
        self.complete_error = complete_error
        self.dialog_calls = []
        self.complete_calls = []

    def create_dialog(self, token, mode_id):
        self.dialog_calls.append((token, mode_id))
        if self.dialog_error:
            raise DialogError()
        return "dialog-1"

    def complete(self, dialog_id, prompt, mode_id, token):
        self.complete_calls.append((dialog_id, prompt, mode_id, token))
        if self.complete_error:
            raise UpstreamError()
        return self.text


@pytest.fixture
def upstream(monkeypatch):
    fake = FakeUpstream()
    monkeypatch.setattr("hai_relay.api.service.create_provider", lambda: fake)
    monkeypatch.setattr(settings, "stream_chunk_delay", 0.0)
    return fake


@pytest.fixture
def client():
    return TestClient(app)


AUTH = {"Authorization": "Bearer tok-abc"}
BODY = {"model": "gpt-4o", "messages": [{"role": "user", "content": "hi"}]}


def test_missing_authorization_returns_401(client, upstream):
    resp = client.post("/v1/chat/completions", json=BODY)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Missing authorization header"}
    assert upstream.dialog_calls == []


def test_other_path_returns_404(client):
    resp = client.post("/v1/completions", json=BODY, headers=AUTH)
    assert resp.status_code == 404
    assert resp.text == "Not Found"


def test_other_method_returns_404(client):
    resp = client.get("/v1/chat/completions", headers=AUTH)
    assert resp.status_code == 404
    assert resp.text == "Not Found"


def test_non_streaming_completion(client, upstream):
    resp = client.post("/v1/chat/completions", json=BODY, headers=AUTH)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    data = resp.json()
    assert data["model"] == "gpt-4o"
    assert data["choices"][0]["message"]["content"] == "Hello from upstream"
    assert upstream.dialog_calls == [("tok-abc", 17)]
    dialog_id, prompt, mode_id, token = upstream.complete_calls[0]
    assert dialog_id == "dialog-1"
    assert prompt.endswith("我的问题是:hi")
    assert (mode_id, token) == (17, "tok-abc")


def test_default_model_is_echoed(client, upstream):
    resp = client.post("/v1/chat/completions", json={"messages": BODY["messages"]}, headers=AUTH)
    assert resp.json()["model"] == "gpt-4o-mini"
    assert upstream.dialog_calls == [("tok-abc", 21)]


def test_streaming_completion(client, upstream):
    upstream.text = "y" * 75
    resp = client.post("/v1/chat/completions", json={**BODY, "stream": True}, headers=AUTH)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.headers["cache-control"] == "no-cache"
    assert resp.headers["connection"] == "keep-alive"
    frames = [f for f in resp.text.split("\n\n") if f]
    assert frames[-1] == "data: [DONE]"
    chunks = [json.loads(f[len("data: "):]) for f in frames[:-1]]
    assert len(chunks) == 3
    assert "".join(c["choices"][0]["delta"].get("content", "") for c in chunks) == upstream.text
    assert chunks[-1]["choices"][0]["finish_reason"] == "stop"


def test_dialog_failure_skips_upstream_completion(client, upstream):
    upstream.dialog_error = True
    resp = client.post("/v1/chat/completions", json=BODY, headers=AUTH)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to create dialog"}
    assert upstream.complete_calls == []


def test_upstream_failure_returns_500(client, upstream):
    upstream.complete_error = True
    resp = client.post("/v1/chat/completions", json=BODY, headers=AUTH)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to get ChatGPT response"}


def test_malformed_body_returns_generic_error(client, upstream):
    resp = client.post(
        "/v1/chat/completions",
        content=b"{not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": GENERIC_ERROR}


def test_empty_messages_returns_generic_error(client, upstream):
    resp = client.post("/v1/chat/completions", json={"messages": []}, headers=AUTH)
    assert resp.status_code == 500
    assert resp.json() == {"error": GENERIC_ERROR}
    assert upstream.dialog_calls == []
