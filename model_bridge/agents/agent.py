"""Agent 编排模块。

Agent 把三者串起来：

- ProviderRegistry: 提供当前 Provider。
- ConversationBuffer: 会话历史的唯一来源（Provider 本身无状态）。
- Provider: 执行一次阻塞调用或流式调用。

单次调用的状态流转：idle -> awaiting-response -> committed / rolled-back。

- chat 失败时整段会话被清空（完整回滚），避免一条没有回答的 user 消息
  在切换 Provider 后被重放。
- chat_stream 失败时，已收到的部分回答（非空）仍作为 assistant 消息提交，
  然后再抛出异常。
"""

import logging
import time
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

from model_bridge.config.settings import settings
from model_bridge.domain.conversation import ConversationBuffer
from model_bridge.domain.exceptions import ConfigurationError
from model_bridge.domain.models import ChatMessage, SendOptions
from model_bridge.infrastructure.logging.logger import logger
from model_bridge.prompts import load_system_prompt
from model_bridge.providers.base import ProviderClient
from model_bridge.providers.registry import ProviderRegistry


class Agent:
    """多 Provider 对话 Agent。

    同一个 Agent 实例同一时间只允许一个进行中的 chat / chat_stream 调用，
    需要并发时请为每个会话创建独立的 Agent。
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        system_prompt: Optional[str] = None,
        max_turns: Optional[int] = None,
    ):
        self._registry = registry
        self._system_prompt = system_prompt or settings.system_prompt or load_system_prompt()
        self._conversation = ConversationBuffer(max_turns or settings.max_turns)

    # ---- 对话 ----

    def chat(self, message: str, options: Optional[SendOptions] = None) -> str:
        """发送一条消息并返回完整回复。

        Raises:
            ConfigurationError: 没有可用的 Provider，请求不会被发出。
            其他异常: Provider 抛出的异常原样向上传递，此时会话历史被清空。
        """

        provider = self._require_provider()
        log_ctx = self._new_log_ctx(provider)
        start_time = time.time()

        self._conversation.add_user(message)
        history = self._conversation.snapshot()
        self._log(
            logging.INFO,
            "Calling provider",
            log_ctx,
            model=self._model_for(provider, options),
            message_count=len(history),
        )
        try:
            reply = provider.send_message(history, self._system_prompt, options)
        except Exception:
            self._conversation.clear()
            logger.exception(
                "Provider call failed, conversation rolled back",
                extra={"extra": dict(log_ctx)},
            )
            raise

        self._conversation.add_assistant(reply)
        self._log(
            logging.INFO,
            "Committed assistant message",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
            history_length=self._conversation.length(),
        )
        return reply

    def chat_stream(self, message: str, options: Optional[SendOptions] = None) -> Iterator[str]:
        """发送一条消息并以流式方式逐段返回回复。

        Provider 检查与 user 消息追加在调用本方法时立即完成；
        返回的迭代器逐个产出文本增量。提前停止消费（关闭迭代器）不会提交任何
        assistant 消息，也不会撤回已追加的 user 消息。
        """

        provider = self._require_provider()
        log_ctx = self._new_log_ctx(provider)

        self._conversation.add_user(message)
        history = self._conversation.snapshot()
        self._log(
            logging.INFO,
            "Calling provider (stream)",
            log_ctx,
            model=self._model_for(provider, options),
            message_count=len(history),
        )
        return self._stream_and_commit(provider, history, options, log_ctx)

    def _stream_and_commit(
        self,
        provider: ProviderClient,
        history: List[ChatMessage],
        options: Optional[SendOptions],
        log_ctx: Dict[str, Any],
    ) -> Iterator[str]:
        start_time = time.time()
        pieces: List[str] = []
        stream: Optional[Iterator[str]] = None
        try:
            stream = provider.stream_message(history, self._system_prompt, options)
            for delta in stream:
                if not delta:
                    continue
                pieces.append(delta)
                yield delta
        except Exception:
            partial = "".join(pieces)
            if partial:
                self._conversation.add_assistant(partial)
            logger.exception(
                "Provider stream failed",
                extra={"extra": {**log_ctx, "partial_chars": len(partial), "fragments": len(pieces)}},
            )
            raise
        finally:
            # 调用方放弃消费时尽早释放底层 HTTP 连接
            close = getattr(stream, "close", None)
            if close is not None:
                close()

        self._conversation.add_assistant("".join(pieces))
        self._log(
            logging.INFO,
            "Committed streamed assistant message",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
            fragments=len(pieces),
            history_length=self._conversation.length(),
        )

    # ---- Provider / 模型切换 ----

    def switch_provider(self, provider_id: str) -> bool:
        """切换 Provider；成功时清空会话历史，不同后端之间不共享历史。"""

        if not self._registry.set_current(provider_id):
            logger.warning(
                "Unknown provider",
                extra={"extra": {"provider": provider_id}},
            )
            return False
        self._conversation.clear()
        logger.info("Switched provider", extra={"extra": {"provider": provider_id}})
        return True

    def switch_model(self, model: str) -> None:
        """设置当前 Provider 的默认模型，没有当前 Provider 时什么也不做。"""

        provider = self._registry.get_current()
        if provider is None:
            return
        provider.set_default_model(model)
        logger.info(
            "Switched model",
            extra={"extra": {"provider": provider.id, "model": model}},
        )

    def get_current_provider_name(self) -> str:
        provider = self._registry.get_current()
        return provider.name if provider else ""

    def get_current_model(self) -> str:
        provider = self._registry.get_current()
        return provider.get_default_model() if provider else ""

    def get_registry(self) -> ProviderRegistry:
        return self._registry

    # ---- 历史与系统提示词 ----

    def clear_history(self) -> None:
        self._conversation.clear()

    def get_history_length(self) -> int:
        return self._conversation.length()

    def get_history(self) -> List[ChatMessage]:
        return self._conversation.snapshot()

    def get_system_prompt(self) -> str:
        return self._system_prompt

    def set_system_prompt(self, prompt: str) -> None:
        self._system_prompt = prompt

    # ---- 内部 ----

    def _require_provider(self) -> ProviderClient:
        provider = self._registry.get_current()
        if provider is None:
            raise ConfigurationError(
                code="NO_PROVIDER",
                message="No provider registered; configure at least one API key",
            )
        return provider

    def _new_log_ctx(self, provider: ProviderClient) -> Dict[str, Any]:
        return {
            "trace_id": f"tr-{uuid4().hex}",
            "provider": provider.id,
        }

    @staticmethod
    def _model_for(provider: ProviderClient, options: Optional[SendOptions]) -> str:
        if options and options.model:
            return options.model
        return provider.get_default_model()

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
