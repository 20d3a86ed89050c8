"""交互式命令行。

普通输入以流式方式发给当前 Provider；以 "/" 开头的输入是命令：

    /providers (/p)      列出所有可用提供商
    /switch <id> (/s)    切换提供商（会清空对话历史）
    /models (/m)         列出当前提供商可用模型
    /model <name> (/md)  切换模型
    /system [prompt]     查看或设置系统提示词
    /clear (/c)          清除对话历史
    /info (/i)           显示当前配置信息
    /history (/h)        查看对话历史
    /exit (/q)           退出程序
"""

import sys
import time

import httpx

from model_bridge.agents.agent import Agent
from model_bridge.domain.exceptions import (
    ApiError,
    BusinessError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from model_bridge.providers import build_registry


HELP_TEXT = """可用命令
  /providers (/p)        列出所有可用提供商
  /switch <id> (/s)      切换提供商
  /models (/m)           列出当前提供商可用模型
  /model <name> (/md)    切换模型
  /system <prompt>       设置系统提示词
  /clear (/c)            清除对话历史
  /info (/i)             显示当前配置信息
  /history (/h)          查看对话历史
  /exit (/q)             退出程序"""

PREVIEW_CHARS = 100


def format_provider_list(agent: Agent) -> str:
    registry = agent.get_registry()
    items = registry.list()
    if not items:
        return "没有可用的提供商，请配置 API Key"
    lines = ["已加载提供商:"]
    for item in items:
        provider = registry.get(item.id)
        model = provider.get_default_model() if provider else ""
        marker = "▶" if item.is_current else " "
        lines.append(f"  {marker} {item.name} ({item.id}) · {model}")
    return "\n".join(lines)


def format_models(agent: Agent) -> str:
    provider = agent.get_registry().get_current()
    if provider is None:
        return "无当前提供商"
    current = provider.get_default_model()
    lines = [f"{provider.name} 可用模型:"]
    for m in provider.get_models():
        marker = "▶" if m.id == current else " "
        lines.append(f"  {marker} {m.id} · {m.description or m.name}")
    return "\n".join(lines)


def format_info(agent: Agent) -> str:
    prompt = agent.get_system_prompt()
    preview = prompt[:60] + ("..." if len(prompt) > 60 else "")
    return "\n".join([
        "当前配置:",
        f"  提供商:   {agent.get_current_provider_name()}",
        f"  模型:     {agent.get_current_model()}",
        f"  对话轮数: {agent.get_history_length() // 2} 轮",
        f"  系统提示: {preview}",
    ])


def format_history(agent: Agent) -> str:
    history = agent.get_history()
    if not history:
        return "暂无对话历史"
    lines = [f"对话历史 ({len(history) // 2} 轮):"]
    for msg in history:
        label = "You" if msg.role == "user" else "AI"
        content = msg.content
        if len(content) > PREVIEW_CHARS:
            content = content[:PREVIEW_CHARS] + "..."
        lines.append(f"  {label} › {content}")
    return "\n".join(lines)


def handle_command(line: str, agent: Agent) -> str:
    """执行一条 "/" 命令，返回需要打印的文本。/exit 抛出 SystemExit(0)。"""

    parts = line.strip().split()
    cmd = parts[0] if parts else ""
    arg = " ".join(parts[1:])

    if cmd == "/help":
        return HELP_TEXT
    if cmd in ("/providers", "/p"):
        return format_provider_list(agent)
    if cmd in ("/switch", "/s"):
        if not arg:
            return "用法: /switch <提供商ID>\n输入 /providers 查看可用提供商"
        if agent.switch_provider(arg):
            return f"✓ 已切换到: {agent.get_current_provider_name()} ({agent.get_current_model()})"
        return f"✗ 未找到提供商: {arg}\n输入 /providers 查看可用提供商"
    if cmd in ("/models", "/m"):
        return format_models(agent)
    if cmd in ("/model", "/md"):
        if not arg:
            return "用法: /model <模型名称>\n输入 /models 查看可用模型"
        agent.switch_model(arg)
        return f"✓ 已切换模型: {arg}"
    if cmd == "/system":
        if not arg:
            return f"当前系统提示词:\n  {agent.get_system_prompt()}"
        agent.set_system_prompt(arg)
        return "✓ 系统提示词已更新"
    if cmd in ("/clear", "/c"):
        agent.clear_history()
        return "✓ 对话历史已清除"
    if cmd in ("/info", "/i"):
        return format_info(agent)
    if cmd in ("/history", "/h"):
        return format_history(agent)
    if cmd in ("/exit", "/quit", "/q"):
        raise SystemExit(0)
    return f"未知命令: {cmd}\n输入 /help 查看可用命令"


def describe_error(exc: BaseException) -> str:
    """把调用失败转换成一行错误信息，常见错误附带处理提示。"""

    lines = [f"✗ 错误: {exc}"]
    if isinstance(exc, (ConfigurationError, ValidationError)):
        lines.append("请检查 API Key 是否正确配置")
    elif isinstance(exc, RateLimitError):
        lines.append("请求过于频繁，请稍后再试")
    elif isinstance(exc, ApiError) and exc.http_status in (401, 403):
        lines.append("请检查 API Key 是否正确配置")
    elif isinstance(exc, (NetworkError, httpx.TransportError)):
        lines.append("网络连接失败，请检查网络设置")
    return "\n".join(lines)


def main() -> int:
    registry = build_registry()
    agent = Agent(registry)

    print(format_provider_list(agent))
    if registry.size() == 0:
        print("没有配置任何 API Key！请在 .env 或 config.yaml 中配置至少一个提供商的 API Key")
        return 1
    print(f"当前: {agent.get_current_provider_name()} / {agent.get_current_model()}")
    print("输入 /help 查看可用命令")

    while True:
        prompt = f"You ({registry.get_current_id()}/{agent.get_current_model()}) › "
        try:
            user_input = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print("\n再见！")
            return 0
        if not user_input.strip():
            continue
        if user_input.startswith("/"):
            try:
                print(handle_command(user_input, agent))
            except SystemExit:
                print("再见！")
                return 0
            continue

        sys.stdout.write("AI › ")
        start = time.time()
        try:
            for chunk in agent.chat_stream(user_input):
                sys.stdout.write(chunk)
                sys.stdout.flush()
        except (BusinessError, httpx.HTTPError) as exc:
            print()
            print(describe_error(exc))
            continue
        print(f"\n[{time.time() - start:.1f}s]")


if __name__ == "__main__":
    sys.exit(main())
