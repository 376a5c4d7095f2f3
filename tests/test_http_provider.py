import pytest
import requests

from coco_completion.llm.providers.http_provider import HttpInferenceProvider, build_headers
from coco_completion.llm.types import CompletionTransportError, GenerationRequest


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text="", reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.reason = reason

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


def _request():
    return GenerationRequest(
        prompt="def add(a, b):\n    ",
        max_new_tokens=60,
        fim=False,
        language="python",
        temperature=0.2,
        do_sample=True,
        stop=["<|endoftext|>"],
    )


def test_build_headers_only_adds_auth_with_credential():
    assert build_headers(None) == {"Content-Type": "application/json"}
    assert build_headers("") == {"Content-Type": "application/json"}
    assert build_headers("tok") == {
        "Content-Type": "application/json",
        "Authorization": "Bearer tok",
    }


def test_posts_wire_payload(monkeypatch):
    captured = {}

    def fake_post(url, json, headers, timeout):
        captured.update(url=url, json=json, headers=headers, timeout=timeout)
        return DummyResponse(payload={"choices": [{"text": "x"}]}, text='{"choices":[{"text":"x"}]}')

    monkeypatch.setattr("coco_completion.llm.providers.http_provider.requests.post", fake_post)

    response = HttpInferenceProvider().generate("https://api.example.com/gen", _request(), "tok", 7.5)

    assert response.ok is True
    assert response.body == {"choices": [{"text": "x"}]}
    assert captured["url"] == "https://api.example.com/gen"
    assert captured["timeout"] == 7.5
    assert captured["headers"]["Authorization"] == "Bearer tok"
    assert captured["json"] == {
        "prompt": "def add(a, b):\n    ",
        "parameters": {
            "max_new_tokens": 60,
            "fim": False,
            "language": "python",
            "temperature": 0.2,
            "do_sample": True,
            "top_p": 0.95,
            "stop": ["<|endoftext|>"],
        },
    }


def test_non_success_status_is_returned_not_raised(monkeypatch):
    def fake_post(url, json, headers, timeout):
        return DummyResponse(status_code=503, text="busy", reason="Service Unavailable")

    monkeypatch.setattr("coco_completion.llm.providers.http_provider.requests.post", fake_post)

    response = HttpInferenceProvider().generate("starcoder", _request(), None, 5)
    assert response.ok is False
    assert response.status_code == 503
    assert response.reason == "Service Unavailable"
    assert response.body is None


def test_unparseable_success_body_decodes_as_none(monkeypatch):
    def fake_post(url, json, headers, timeout):
        return DummyResponse(status_code=200, payload=None, text="<html>")

    monkeypatch.setattr("coco_completion.llm.providers.http_provider.requests.post", fake_post)

    response = HttpInferenceProvider().generate("starcoder", _request(), None, 5)
    assert response.ok is True
    assert response.body is None


def test_network_errors_raise_transport_error(monkeypatch):
    def fake_post(url, json, headers, timeout):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr("coco_completion.llm.providers.http_provider.requests.post", fake_post)

    with pytest.raises(CompletionTransportError, match="read timed out"):
        HttpInferenceProvider().generate("starcoder", _request(), None, 0.1)
