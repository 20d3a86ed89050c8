"""Anthropic Claude Provider 适配器。

使用 Messages API：
- URL: {base_url}/v1/messages
- 认证: x-api-key: <api_key>，并附带 anthropic-version 头

与 OpenAI 兼容接口的差异：
- 系统提示词放在顶层 system 字段，消息列表只保留 user/assistant。
- max_tokens 为必填，默认 4096。
- 流式事件是带类型的 JSON，文本增量在 content_block_delta 事件的
  delta.text 中（delta.type == "text_delta"）。
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence

import httpx

from model_bridge.domain.exceptions import ApiError, NetworkError, ValidationError
from model_bridge.domain.models import ChatMessage, ModelInfo, SendOptions
from model_bridge.providers.base import BaseProvider
from model_bridge.providers.catalog import ANTHROPIC_PRESET
from model_bridge.providers.http import check_response, iter_sse_json


ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4096


class AnthropicProvider(BaseProvider):
    """Anthropic Claude 客户端实现。"""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        default_model: Optional[str] = None,
        http_timeout: float = 30.0,
    ):
        super().__init__(
            name=ANTHROPIC_PRESET.name,
            provider_id=ANTHROPIC_PRESET.id,
            default_model=default_model or ANTHROPIC_PRESET.default_model,
        )
        self._api_key = api_key
        self._base_url = (base_url or ANTHROPIC_PRESET.base_url).rstrip("/")
        self._http_timeout = http_timeout

    def send_message(
        self,
        messages: Sequence[ChatMessage],
        system_prompt: Optional[str] = None,
        options: Optional[SendOptions] = None,
    ) -> str:
        self._require_api_key()
        payload = self._build_payload(messages, system_prompt, options, stream=False)
        try:
            with httpx.Client(timeout=self._http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{self._base_url}/v1/messages",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.id)
        check_response(resp, self.id)
        return self._parse_response(resp.json())

    def stream_message(
        self,
        messages: Sequence[ChatMessage],
        system_prompt: Optional[str] = None,
        options: Optional[SendOptions] = None,
    ) -> Iterator[str]:
        self._require_api_key()
        payload = self._build_payload(messages, system_prompt, options, stream=True)
        try:
            with httpx.Client(timeout=self._http_timeout, trust_env=False) as client:
                with client.stream(
                    "POST",
                    f"{self._base_url}/v1/messages",
                    json=payload,
                    headers=self._headers(),
                ) as resp:
                    check_response(resp, self.id, streaming=True)
                    for event in iter_sse_json(resp):
                        text = self._parse_stream_event(event)
                        if text:
                            yield text
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.id)

    def get_models(self) -> List[ModelInfo]:
        return list(ANTHROPIC_PRESET.models)

    def _require_api_key(self) -> None:
        if not self._api_key:
            raise ValidationError(
                code="MISSING_API_KEY",
                message="ANTHROPIC_API_KEY not set",
                provider=self.id,
            )

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": str(self._api_key),
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    def _build_payload(
        self,
        messages: Sequence[ChatMessage],
        system_prompt: Optional[str],
        options: Optional[SendOptions],
        stream: bool,
    ) -> Dict[str, Any]:
        # Messages API 不接受 role=system 的消息
        msgs = [
            {"role": m.role, "content": m.content}
            for m in messages
            if m.role in ("user", "assistant")
        ]
        max_tokens = options.max_tokens if options and options.max_tokens else DEFAULT_MAX_TOKENS
        payload: Dict[str, Any] = {
            "model": self._resolve_model(options),
            "max_tokens": max_tokens,
            "messages": msgs,
        }
        if system_prompt:
            payload["system"] = system_prompt
        if options is not None:
            if options.temperature is not None:
                payload["temperature"] = options.temperature
            if options.top_p is not None:
                payload["top_p"] = options.top_p
        if stream:
            payload["stream"] = True
        return payload

    @staticmethod
    def _parse_response(data: Dict[str, Any]) -> str:
        """返回第一个 text 类型内容块的文本。"""

        for block in data.get("content") or []:
            if block.get("type") == "text":
                return block.get("text") or ""
        return ""

    def _parse_stream_event(self, event: Dict[str, Any]) -> str:
        event_type = event.get("type")
        if event_type == "error":
            error = event.get("error") or {}
            raise ApiError(
                code="STREAM_ERROR",
                message=error.get("message") or "stream error",
                provider=self.id,
                error_type=error.get("type"),
            )
        if event_type != "content_block_delta":
            return ""
        delta = event.get("delta") or {}
        if delta.get("type") != "text_delta":
            return ""
        return delta.get("text") or ""
