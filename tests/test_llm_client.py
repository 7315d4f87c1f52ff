import pytest
import requests

from hiresight.infrastructure.llm import VertexRestClient, LLMError, LLMTimeoutError
from hiresight.infrastructure.llm.client import extract_text


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class FakeCredentials:
    def __init__(self, valid=True):
        self.valid = valid
        self.token = "token-0"
        self.refreshes = 0

    def refresh(self, request):
        self.refreshes += 1
        self.token = f"token-{self.refreshes}"
        self.valid = True


def reply(text):
    return FakeResponse(payload={"candidates": [{"content": {"parts": [{"text": text}]}}]})


@pytest.fixture
def client():
    c = VertexRestClient(project="demo-project", location="us-central1", model="gemini-test", timeout=5)
    c._credentials = FakeCredentials()
    return c


def test_generate_content_posts_prompt(client, monkeypatch):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, json=json, timeout=timeout)
        return reply("Hello")

    monkeypatch.setattr(requests, "post", fake_post)

    assert client.generate_content("Say hi", temperature=0.7, timeout=3) == "Hello"
    assert captured["url"].endswith(
        "projects/demo-project/locations/us-central1/publishers/google/models/gemini-test:generateContent"
    )
    assert captured["headers"]["Authorization"] == "Bearer token-0"
    assert captured["json"]["contents"][0]["parts"][0]["text"] == "Say hi"
    assert captured["json"]["generationConfig"]["temperature"] == 0.7
    assert captured["timeout"] == 3


def test_default_timeout_comes_from_client(client, monkeypatch):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured["timeout"] = timeout
        return reply("ok")

    monkeypatch.setattr(requests, "post", fake_post)
    assert client.generate_content("prompt") == "ok"
    assert captured["timeout"] == 5


def test_expired_token_is_refreshed_before_request(client, monkeypatch):
    client._credentials.valid = False
    seen = []

    def fake_post(url, headers=None, json=None, timeout=None):
        seen.append(headers["Authorization"])
        return reply("ok")

    monkeypatch.setattr(requests, "post", fake_post)
    client.generate_content("prompt")
    assert seen == ["Bearer token-1"]


def test_rejected_token_is_refreshed_once(client, monkeypatch):
    responses = [FakeResponse(status_code=401, text="expired"), reply("ok")]
    seen = []

    def fake_post(url, headers=None, json=None, timeout=None):
        seen.append(headers["Authorization"])
        return responses.pop(0)

    monkeypatch.setattr(requests, "post", fake_post)

    assert client.generate_content("prompt") == "ok"
    assert seen == ["Bearer token-0", "Bearer token-1"]
    assert client._credentials.refreshes == 1


def test_http_error_raises_llm_error(client, monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse(status_code=503, text="unavailable"))
    with pytest.raises(LLMError, match="503"):
        client.generate_content("prompt")


def test_invalid_json_raises_llm_error(client, monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse(payload=None))
    with pytest.raises(LLMError):
        client.generate_content("prompt")


def test_timeout_raises_llm_timeout(client, monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(requests, "post", fake_post)
    with pytest.raises(LLMTimeoutError):
        client.generate_content("prompt")


def test_connection_error_raises_llm_error(client, monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "post", fake_post)
    with pytest.raises(LLMError) as exc_info:
        client.generate_content("prompt")
    assert not isinstance(exc_info.value, LLMTimeoutError)


def test_extract_text_joins_parts():
    payload = {"candidates": [{"content": {"parts": [{"text": "Hel"}, {"text": "lo"}]}}]}
    assert extract_text(payload) == "Hello"


def test_blocked_prompt_raises():
    with pytest.raises(LLMError, match="SAFETY"):
        extract_text({"promptFeedback": {"blockReason": "SAFETY"}})
    with pytest.raises(LLMError, match="MAX_TOKENS"):
        extract_text({"candidates": [{"content": {"parts": []}, "finishReason": "MAX_TOKENS"}]})
