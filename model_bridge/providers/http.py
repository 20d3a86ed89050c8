"""Provider 共用的 HTTP 辅助函数。

- check_response: 把 HTTP 状态码映射为统一的业务异常。
- iter_sse_json: 解析 SSE 流，逐条产出 data 字段中的 JSON 对象。
"""

import json
from typing import Any, Dict, Iterator

import httpx

from model_bridge.domain.exceptions import ApiError, RateLimitError


def check_response(resp: httpx.Response, provider_id: str, streaming: bool = False) -> None:
    """非 2xx 响应抛出 RateLimitError / ApiError，成功时什么也不做。"""

    if resp.status_code < 400:
        return
    if streaming:
        # 流式响应在读取前拿不到 text
        resp.read()
    if resp.status_code == 429:
        # 限流错误交给上层做重试/退避
        raise RateLimitError(code="RATE_LIMIT", message=f"{provider_id} rate limit", provider=provider_id)
    raise ApiError(
        code="API_ERROR",
        message=resp.text,
        http_status=resp.status_code,
        provider=provider_id,
    )


def iter_sse_json(resp: httpx.Response) -> Iterator[Dict[str, Any]]:
    """逐行读取 SSE 流。

    只关心 data: 行；event: 行、空行、[DONE] 与无法解析的 JSON 都会被跳过。
    """

    for line in resp.iter_lines():
        if not line:
            continue
        if line.startswith("data:"):
            data_str = line[5:].strip()
        elif line.startswith(("event:", "id:", "retry:", ":")):
            continue
        else:
            data_str = line.strip()
        if not data_str or data_str == "[DONE]":
            continue
        try:
            payload = json.loads(data_str)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            yield payload
