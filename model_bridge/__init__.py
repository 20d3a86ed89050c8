"""model_bridge 顶层包。

通过统一的接口与多个大模型后端对话：
Provider 协议与具体适配器、Provider 注册表、有界会话历史，
以及负责调用编排与流式累积的 Agent。
"""

from model_bridge.agents.agent import Agent
from model_bridge.domain.conversation import ConversationBuffer
from model_bridge.domain.models import ChatMessage, ModelInfo, SendOptions
from model_bridge.providers import build_registry, create_provider
from model_bridge.providers.registry import ProviderRegistry

__all__ = [
    "Agent",
    "ChatMessage",
    "ConversationBuffer",
    "ModelInfo",
    "ProviderRegistry",
    "SendOptions",
    "build_registry",
    "create_provider",
]
