"""对外 API 服务模块。

提供简化的函数接口供上层应用（命令行、Web 服务等）调用。
"""

from typing import Any, Dict, List, Optional

from model_bridge.agents.agent import Agent
from model_bridge.domain.models import SendOptions
from model_bridge.infrastructure.logging.logger import logger
from model_bridge.providers import build_registry


_agent: Optional[Agent] = None


def get_default_agent() -> Agent:
    """获取默认的 Agent 实例（单例），Provider 按配置中的凭据注册。"""
    global _agent
    if _agent is None:
        _agent = Agent(build_registry())
    return _agent


def reset_default_agent() -> None:
    """丢弃单例，下次调用时按当前配置重新构建。"""
    global _agent
    _agent = None


def run_chat(
    user_input: str,
    provider_id: Optional[str] = None,
    options: Optional[SendOptions] = None,
) -> Dict[str, Any]:
    """运行一次非流式对话。

    Args:
        user_input: 用户输入内容
        provider_id: 可选，先切换到该 Provider（切换会清空历史）
        options: 可选的单次调用参数

    Returns:
        包含 provider、model、reply 与 history_length 的字典

    Raises:
        各种 domain.exceptions 中定义的异常
    """
    agent = get_default_agent()
    if provider_id and provider_id != agent.get_registry().get_current_id():
        if not agent.switch_provider(provider_id):
            raise KeyError(f"Unknown provider: {provider_id!r}")
    try:
        reply = agent.chat(user_input, options)
    except Exception as e:
        logger.error(f"Chat failed: {e}", extra={"extra": {
            "provider": agent.get_registry().get_current_id(),
            "error": str(e),
        }})
        raise
    return {
        "provider": agent.get_registry().get_current_id(),
        "model": agent.get_current_model(),
        "reply": reply,
        "history_length": agent.get_history_length(),
    }


def list_providers() -> List[Dict[str, Any]]:
    """列出所有已注册的 Provider。

    Returns:
        Provider 列表，每项包含 id, name, model, is_current
    """
    registry = get_default_agent().get_registry()
    result = []
    for item in registry.list():
        provider = registry.get(item.id)
        result.append({
            "id": item.id,
            "name": item.name,
            "model": provider.get_default_model() if provider else "",
            "is_current": item.is_current,
        })
    return result


def get_history() -> List[Dict[str, str]]:
    """获取当前会话的消息列表。"""
    return [
        {"role": m.role, "content": m.content}
        for m in get_default_agent().get_history()
    ]
