"""Provider 抽象接口。

上层 Agent 不直接依赖具体厂商的 HTTP API，而是依赖此协议：

- 每个厂商实现一个 Provider（如 OpenAICompatibleProvider、AnthropicProvider）。
- 负责：把中立的 ChatMessage 列表与系统提示词转成具体 API 请求，
  并把响应 / 流式事件解析回纯文本。

Provider 本身不保存会话历史，每次调用都由上层传入完整的消息列表。
"""

from typing import Iterator, List, Optional, Protocol, Sequence

from model_bridge.domain.models import ChatMessage, ModelInfo, SendOptions


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name / id: 展示名称与唯一标识，实例生命周期内不变。
    - send_message: 一次阻塞调用，返回完整回复文本。
    - stream_message: 流式调用，逐个产出文本增量，拼接后等于完整回复。
    - get_models: 静态模型目录，不访问网络。
    - get_default_model / set_default_model: 唯一的可变状态。
    """

    name: str
    id: str

    def send_message(
        self,
        messages: Sequence[ChatMessage],
        system_prompt: Optional[str] = None,
        options: Optional[SendOptions] = None,
    ) -> str:
        ...

    def stream_message(
        self,
        messages: Sequence[ChatMessage],
        system_prompt: Optional[str] = None,
        options: Optional[SendOptions] = None,
    ) -> Iterator[str]:
        ...

    def get_models(self) -> List[ModelInfo]:
        ...

    def get_default_model(self) -> str:
        ...

    def set_default_model(self, model: str) -> None:
        ...


class BaseProvider:
    """各 Provider 共用的字段：name、id 与默认模型。"""

    def __init__(self, name: str, provider_id: str, default_model: str):
        self.name = name
        self.id = provider_id
        self._default_model = default_model

    def get_default_model(self) -> str:
        return self._default_model

    def set_default_model(self, model: str) -> None:
        self._default_model = model

    def _resolve_model(self, options: Optional[SendOptions]) -> str:
        if options and options.model:
            return options.model
        return self._default_model
