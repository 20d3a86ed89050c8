import httpx
import pytest

from model_bridge.domain.exceptions import ApiError, NetworkError, RateLimitError
from model_bridge.domain.models import ChatMessage, SendOptions
from model_bridge.providers.anthropic_client import AnthropicProvider


MESSAGES = [
    ChatMessage(role="system", content="ignored"),
    ChatMessage(role="user", content="hi"),
    ChatMessage(role="assistant", content="hello"),
    ChatMessage(role="user", content="again"),
]


class Resp:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data or {}
        self.text = text

    def json(self):
        return self._data


class FakeStreamResponse:
    status_code = 200

    def __init__(self, lines, fail_with=None):
        self._lines = list(lines)
        self._fail_with = fail_with

    def iter_lines(self):
        for line in self._lines:
            yield line
        if self._fail_with is not None:
            raise self._fail_with


class StreamContext:
    def __init__(self, response):
        self._response = response

    def __enter__(self):
        return self._response

    def __exit__(self, *args):
        return False


def install_client(monkeypatch, post_resp=None, stream_resp=None):
    captured = {}

    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, json=None, headers=None, **_):
            captured.update(url=url, payload=json, headers=headers)
            return post_resp

        def stream(self, method, url, json=None, headers=None, **_):
            captured.update(url=url, payload=json, headers=headers)
            return StreamContext(stream_resp)

    monkeypatch.setattr("httpx.Client", Client)
    return captured


def test_send_message_payload_and_first_text_block(monkeypatch):
    provider = AnthropicProvider(api_key="sk-ant-123456")
    resp = Resp(data={
        "content": [
            {"type": "thinking", "thinking": "..."},
            {"type": "text", "text": "ok"},
            {"type": "text", "text": "second"},
        ],
    })
    captured = install_client(monkeypatch, post_resp=resp)

    reply = provider.send_message(MESSAGES, "be nice", SendOptions(temperature=0.3))

    assert reply == "ok"
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert captured["headers"]["x-api-key"] == "sk-ant-123456"
    assert captured["headers"]["anthropic-version"] == "2023-06-01"
    payload = captured["payload"]
    assert payload["model"] == "claude-sonnet-4-20250514"
    assert payload["max_tokens"] == 4096
    assert payload["system"] == "be nice"
    assert payload["temperature"] == 0.3
    assert "top_p" not in payload
    # system 角色的消息不会转发给 Messages API
    assert payload["messages"] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "again"},
    ]


def test_send_message_overrides_and_empty_reply(monkeypatch):
    provider = AnthropicProvider(api_key="sk-ant-123456", base_url="https://proxy.example.com/", default_model="claude-3-haiku-20240307")
    captured = install_client(monkeypatch, post_resp=Resp(data={"content": []}))
    reply = provider.send_message(MESSAGES[1:2], options=SendOptions(model="claude-3-opus-20240229", max_tokens=100))
    assert reply == ""
    assert captured["url"] == "https://proxy.example.com/v1/messages"
    assert captured["payload"]["model"] == "claude-3-opus-20240229"
    assert captured["payload"]["max_tokens"] == 100
    assert "system" not in captured["payload"]


def test_send_message_errors(monkeypatch):
    provider = AnthropicProvider(api_key="sk-ant-123456")
    install_client(monkeypatch, post_resp=Resp(status_code=429))
    with pytest.raises(RateLimitError):
        provider.send_message(MESSAGES)
    install_client(monkeypatch, post_resp=Resp(status_code=400, text="bad"))
    with pytest.raises(ApiError) as excinfo:
        provider.send_message(MESSAGES)
    assert excinfo.value.http_status == 400


def test_stream_message_extracts_text_deltas(monkeypatch):
    provider = AnthropicProvider(api_key="sk-ant-123456")
    lines = [
        "event: message_start",
        'data: {"type": "message_start", "message": {"id": "msg_1"}}',
        "",
        "event: content_block_start",
        'data: {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}}',
        "event: ping",
        'data: {"type": "ping"}',
        "event: content_block_delta",
        'data: {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "Hel"}}',
        "event: content_block_delta",
        'data: {"type": "content_block_delta", "index": 0, "delta": {"type": "input_json_delta", "partial_json": "{}"}}',
        "event: content_block_delta",
        'data: {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "lo"}}',
        "event: message_stop",
        'data: {"type": "message_stop"}',
    ]
    captured = install_client(monkeypatch, stream_resp=FakeStreamResponse(lines))
    assert list(provider.stream_message(MESSAGES, "sys")) == ["Hel", "lo"]
    assert captured["payload"]["stream"] is True


def test_stream_error_event_after_fragment(monkeypatch):
    provider = AnthropicProvider(api_key="sk-ant-123456")
    lines = [
        'data: {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "par"}}',
        "event: error",
        'data: {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}',
    ]
    install_client(monkeypatch, stream_resp=FakeStreamResponse(lines))
    received = []
    with pytest.raises(ApiError) as excinfo:
        for chunk in provider.stream_message(MESSAGES):
            received.append(chunk)
    assert received == ["par"]
    assert excinfo.value.message == "Overloaded"
    assert excinfo.value.extra["error_type"] == "overloaded_error"


def test_stream_network_failure(monkeypatch):
    provider = AnthropicProvider(api_key="sk-ant-123456")
    lines = ['data: {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "a"}}']
    install_client(monkeypatch, stream_resp=FakeStreamResponse(lines, fail_with=httpx.RemoteProtocolError("closed")))
    gen = provider.stream_message(MESSAGES)
    assert next(gen) == "a"
    with pytest.raises(NetworkError):
        next(gen)


def test_identity_and_catalog():
    provider = AnthropicProvider(api_key=None)
    assert provider.id == "anthropic"
    assert provider.name == "Anthropic Claude"
    models = provider.get_models()
    assert models[0].id == "claude-sonnet-4-20250514"
    assert models[0].max_output_tokens == 8192
