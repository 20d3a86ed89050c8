import pytest

from model_bridge.agents.agent import Agent
from model_bridge.config.settings import settings
from model_bridge.domain.exceptions import ApiError, ConfigurationError, NetworkError
from model_bridge.domain.models import ChatMessage, SendOptions
from model_bridge.providers.base import BaseProvider
from model_bridge.providers.registry import ProviderRegistry


class FakeProvider(BaseProvider):
    """按 reply_fn 生成回复的 Provider，记录每次调用的参数。"""

    def __init__(self, provider_id="fake", reply_fn=None, fragments=None, fail_after=None, error=None):
        super().__init__(name=f"Fake {provider_id}", provider_id=provider_id, default_model="fake-model")
        self._reply_fn = reply_fn or (lambda text: text)
        self._fragments = fragments
        self._fail_after = fail_after
        self._error = error
        self.calls = []

    def send_message(self, messages, system_prompt=None, options=None):
        self.calls.append((list(messages), system_prompt, options))
        if self._error is not None:
            raise self._error
        return self._reply_fn(messages[-1].content)

    def stream_message(self, messages, system_prompt=None, options=None):
        self.calls.append((list(messages), system_prompt, options))
        fragments = self._fragments
        if fragments is None:
            fragments = list(self._reply_fn(messages[-1].content))
        for i, fragment in enumerate(fragments):
            if self._fail_after is not None and i == self._fail_after:
                raise self._error
            yield fragment
        if self._fail_after is not None and self._fail_after >= len(fragments):
            raise self._error

    def get_models(self):
        return []


def make_agent(*providers, max_turns=50):
    registry = ProviderRegistry()
    for p in providers:
        registry.register(p.id, p)
    return Agent(registry, system_prompt="sys", max_turns=max_turns)


def test_chat_without_provider_raises_configuration_error():
    agent = Agent(ProviderRegistry(), system_prompt="sys")
    with pytest.raises(ConfigurationError):
        agent.chat("hi")
    assert agent.get_history_length() == 0
    with pytest.raises(ConfigurationError):
        agent.chat_stream("hi")
    assert agent.get_history_length() == 0


def test_chat_echo_round_trip():
    provider = FakeProvider()
    agent = make_agent(provider)
    reply = agent.chat("hi")
    assert reply == "hi"
    assert agent.get_history() == [
        ChatMessage(role="user", content="hi"),
        ChatMessage(role="assistant", content="hi"),
    ]
    messages, system_prompt, _ = provider.calls[0]
    # Provider 看到的上下文已包含本次 user 消息
    assert messages == [ChatMessage(role="user", content="hi")]
    assert system_prompt == "sys"


def test_chat_passes_full_history_and_options():
    provider = FakeProvider(reply_fn=str.upper)
    agent = make_agent(provider)
    agent.chat("a")
    opts = SendOptions(model="other", temperature=0.2)
    agent.chat("b", opts)
    messages, _, options = provider.calls[-1]
    assert [m.content for m in messages] == ["a", "A", "b"]
    assert options is opts


def test_max_turns_evicts_oldest_turn():
    agent = make_agent(FakeProvider(reply_fn=str.upper), max_turns=1)
    agent.chat("a")
    agent.chat("b")
    assert agent.get_history() == [
        ChatMessage(role="user", content="b"),
        ChatMessage(role="assistant", content="B"),
    ]


def test_chat_failure_rolls_back_whole_history():
    provider = FakeProvider(reply_fn=str.upper)
    agent = make_agent(provider)
    agent.chat("a")
    assert agent.get_history_length() == 2
    err = ApiError(code="API_ERROR", message="boom", http_status=500)
    provider._error = err
    with pytest.raises(ApiError) as excinfo:
        agent.chat("b")
    assert excinfo.value is err
    assert agent.get_history_length() == 0


def test_chat_stream_commits_joined_text():
    provider = FakeProvider(fragments=["Hel", "", "lo"])
    agent = make_agent(provider)
    stream = agent.chat_stream("hi")
    # user 消息在开始消费前就已追加
    assert agent.get_history() == [ChatMessage(role="user", content="hi")]
    assert list(stream) == ["Hel", "lo"]
    assert agent.get_history() == [
        ChatMessage(role="user", content="hi"),
        ChatMessage(role="assistant", content="Hello"),
    ]


def test_chat_stream_partial_commit_on_failure():
    err = NetworkError(code="NETWORK_ERROR", message="connection reset")
    provider = FakeProvider(fragments=["par", "tial", "never"], fail_after=2, error=err)
    agent = make_agent(provider)
    received = []
    with pytest.raises(NetworkError) as excinfo:
        for chunk in agent.chat_stream("q"):
            received.append(chunk)
    assert excinfo.value is err
    assert received == ["par", "tial"]
    assert agent.get_history() == [
        ChatMessage(role="user", content="q"),
        ChatMessage(role="assistant", content="partial"),
    ]


def test_chat_stream_failure_before_any_fragment_keeps_only_user_turn():
    err = ApiError(code="API_ERROR", message="bad request")
    provider = FakeProvider(fragments=["x"], fail_after=0, error=err)
    agent = make_agent(provider)
    with pytest.raises(ApiError):
        list(agent.chat_stream("q"))
    assert agent.get_history() == [ChatMessage(role="user", content="q")]


def test_chat_stream_abandoned_commits_nothing():
    provider = FakeProvider(fragments=["a", "b", "c"])
    agent = make_agent(provider)
    stream = agent.chat_stream("q")
    assert next(stream) == "a"
    stream.close()
    assert agent.get_history() == [ChatMessage(role="user", content="q")]


def test_switch_provider_clears_history_only_on_success():
    a, b = FakeProvider("a"), FakeProvider("b")
    agent = make_agent(a, b)
    agent.chat("hello")
    assert agent.switch_provider("missing") is False
    assert agent.get_history_length() == 2
    assert agent.get_registry().get_current_id() == "a"

    assert agent.switch_provider("b") is True
    assert agent.get_history_length() == 0
    assert agent.get_current_provider_name() == "Fake b"
    agent.chat("again")
    assert len(b.calls) == 1


def test_switch_model_updates_current_provider():
    a, b = FakeProvider("a"), FakeProvider("b")
    agent = make_agent(a, b)
    agent.switch_model("bigger")
    assert a.get_default_model() == "bigger"
    assert b.get_default_model() == "fake-model"
    assert agent.get_current_model() == "bigger"


def test_switch_model_without_provider_is_noop():
    agent = Agent(ProviderRegistry(), system_prompt="sys")
    agent.switch_model("x")
    assert agent.get_current_model() == ""
    assert agent.get_current_provider_name() == ""


def test_system_prompt_and_clear_history():
    provider = FakeProvider()
    agent = make_agent(provider)
    agent.set_system_prompt("be brief")
    assert agent.get_system_prompt() == "be brief"
    agent.chat("x")
    assert provider.calls[-1][1] == "be brief"
    agent.clear_history()
    assert agent.get_history_length() == 0


def test_default_system_prompt_loaded_from_package(monkeypatch):
    monkeypatch.setattr(settings, "system_prompt", None)
    agent = Agent(ProviderRegistry())
    assert "AI 助手" in agent.get_system_prompt()
