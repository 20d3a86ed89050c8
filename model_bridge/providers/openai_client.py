"""OpenAI 兼容 Provider 适配器。

适用于所有兼容 OpenAI Chat Completions API 的服务：
OpenAI、阿里云百炼、DeepSeek、月之暗面、智谱 AI、硅基流动、OpenRouter、Ollama 等。

- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>

本模块负责：

1. 接收中立的 ChatMessage 列表与可选的系统提示词。
2. 转换为 Chat Completions 请求体（系统提示词作为第一条 system 消息）。
3. 调用 HTTP 接口并处理网络/API 异常。
4. 从 choices[0].message.content 或流式 choices[0].delta.content 中提取文本。
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence

import httpx

from model_bridge.domain.exceptions import ApiError, NetworkError, ValidationError
from model_bridge.domain.models import ChatMessage, ModelInfo, SendOptions
from model_bridge.providers.base import BaseProvider
from model_bridge.providers.catalog import OPENAI_PRESET
from model_bridge.providers.http import check_response, iter_sse_json


class OpenAICompatibleProvider(BaseProvider):
    """OpenAI Chat Completions 协议的客户端实现。

    name / provider_id / models 可定制，这样同一个类可以服务多个兼容厂商。
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        default_model: Optional[str] = None,
        name: Optional[str] = None,
        provider_id: Optional[str] = None,
        models: Optional[Sequence[ModelInfo]] = None,
        http_timeout: float = 30.0,
    ):
        super().__init__(
            name=name or OPENAI_PRESET.name,
            provider_id=provider_id or OPENAI_PRESET.id,
            default_model=default_model or OPENAI_PRESET.default_model,
        )
        self._api_key = api_key
        self._base_url = (base_url or OPENAI_PRESET.base_url).rstrip("/")
        self._models = list(models) if models is not None else list(OPENAI_PRESET.models)
        self._http_timeout = http_timeout

    # ---- 非流式 ----

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
                    f"{self._base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.id)
        check_response(resp, self.id)
        return self._parse_response(resp.json())

    # ---- 流式 ----

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
                    f"{self._base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                ) as resp:
                    check_response(resp, self.id, streaming=True)
                    for chunk in iter_sse_json(resp):
                        text = self._parse_stream_chunk(chunk)
                        if text:
                            yield text
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.id)

    def get_models(self) -> List[ModelInfo]:
        return list(self._models)

    # ---- 辅助方法 ----

    def _require_api_key(self) -> None:
        if not self._api_key:
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(
                code="MISSING_API_KEY",
                message=f"API key for {self.id} not set",
                provider=self.id,
            )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(
        self,
        messages: Sequence[ChatMessage],
        system_prompt: Optional[str],
        options: Optional[SendOptions],
        stream: bool,
    ) -> Dict[str, Any]:
        """构造 Chat Completions 请求 JSON，未设置的采样参数不下发。"""

        msgs: List[Dict[str, str]] = []
        if system_prompt:
            msgs.append({"role": "system", "content": system_prompt})
        msgs.extend({"role": m.role, "content": m.content} for m in messages)
        payload: Dict[str, Any] = {
            "model": self._resolve_model(options),
            "messages": msgs,
        }
        if options is not None:
            if options.max_tokens is not None:
                payload["max_tokens"] = options.max_tokens
            if options.temperature is not None:
                payload["temperature"] = options.temperature
            if options.top_p is not None:
                payload["top_p"] = options.top_p
        if stream:
            payload["stream"] = True
        return payload

    @staticmethod
    def _parse_response(data: Dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""

    def _parse_stream_chunk(self, data: Dict[str, Any]) -> str:
        """提取单条流式增量的文本；部分兼容服务会在流中返回 error 对象。"""

        error = data.get("error")
        if error:
            detail = error.get("message") if isinstance(error, dict) else str(error)
            raise ApiError(code="STREAM_ERROR", message=detail or "stream error", provider=self.id)
        choices = data.get("choices") or []
        if not choices:
            return ""
        delta = choices[0].get("delta") or {}
        return delta.get("content") or ""
