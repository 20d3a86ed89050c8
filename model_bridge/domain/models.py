"""统一的对话数据模型。

本模块定义了 Agent 与各 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant）。
- ModelInfo: Provider 模型目录中的一项，只读。
- SendOptions: 单次调用的可选覆盖参数（模型、max_tokens、temperature、top_p）。
- ProviderListing: 注册表列表中的一行，供上层展示。

所有 Provider 适配器都只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass
from typing import Literal, Optional


# 消息角色（与 OpenAI / Anthropic 的 role 字段对应）
Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息。追加到会话后不可再修改，顺序即时间顺序。"""

    role: Role
    content: str


@dataclass(frozen=True)
class ModelInfo:
    """模型目录条目。

    - id: 厂商模型 ID，例如 "gpt-4o"。
    - name: 展示名称。
    - description: 可选的简短说明。
    - max_output_tokens: 可选的最大输出 token 数。
    """

    id: str
    name: str
    description: Optional[str] = None
    max_output_tokens: Optional[int] = None


@dataclass
class SendOptions:
    """单次调用的覆盖参数，字段为 None 时使用 Provider 自身的默认值。"""

    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None


@dataclass(frozen=True)
class ProviderListing:
    id: str
    name: str
    is_current: bool
