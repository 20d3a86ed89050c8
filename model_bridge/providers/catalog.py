"""Provider 预设目录。

每个预设描述一个可接入的后端：

- kind: 使用哪种协议适配器（"openai" 兼容接口或 "anthropic" Messages API）。
- base_url / default_model: 未在配置中覆盖时使用的默认值。
- models: 静态模型目录，供 /models 展示。

OpenAI 兼容的厂商（百炼、DeepSeek、Kimi、智谱等）共用同一个适配器，
只是 base_url 与模型目录不同。
"""

from dataclasses import dataclass
from typing import Dict, List, Literal, Tuple

from model_bridge.domain.models import ModelInfo


ProviderKind = Literal["openai", "anthropic"]


@dataclass(frozen=True)
class ProviderPreset:
    """某个 Provider 的整体预设。"""

    id: str
    name: str
    kind: ProviderKind
    base_url: str
    default_model: str
    models: Tuple[ModelInfo, ...]


OPENAI_MODELS = (
    ModelInfo("gpt-4o", "GPT-4o", "最新的多模态旗舰模型"),
    ModelInfo("gpt-4o-mini", "GPT-4o Mini", "更快更经济的 GPT-4o"),
    ModelInfo("gpt-4-turbo", "GPT-4 Turbo", "GPT-4 Turbo 版本"),
    ModelInfo("gpt-3.5-turbo", "GPT-3.5 Turbo", "快速经济的模型"),
)

ANTHROPIC_MODELS = (
    ModelInfo("claude-sonnet-4-20250514", "Claude Sonnet 4", "最新旗舰模型，性能卓越", 8192),
    ModelInfo("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", "高性能模型，适合复杂任务", 8192),
    ModelInfo("claude-3-opus-20240229", "Claude 3 Opus", "最强大的模型，适合最复杂的任务", 4096),
    ModelInfo("claude-3-sonnet-20240229", "Claude 3 Sonnet", "平衡性能和速度", 4096),
    ModelInfo("claude-3-haiku-20240307", "Claude 3 Haiku", "最快最经济的模型", 4096),
)

OPENAI_PRESET = ProviderPreset(
    id="openai",
    name="OpenAI",
    kind="openai",
    base_url="https://api.openai.com/v1",
    default_model="gpt-4o",
    models=OPENAI_MODELS,
)

ANTHROPIC_PRESET = ProviderPreset(
    id="anthropic",
    name="Anthropic Claude",
    kind="anthropic",
    base_url="https://api.anthropic.com",
    default_model="claude-sonnet-4-20250514",
    models=ANTHROPIC_MODELS,
)

DASHSCOPE_PRESET = ProviderPreset(
    id="dashscope",
    name="阿里云百炼",
    kind="openai",
    base_url="https://dashscope.aliyuncs.com/compatible-mode/v1",
    default_model="qwen-plus",
    models=(
        ModelInfo("qwen-plus", "Qwen Plus", "通义千问增强版"),
        ModelInfo("qwen-max", "Qwen Max", "通义千问旗舰版"),
        ModelInfo("qwen-turbo", "Qwen Turbo", "通义千问极速版"),
        ModelInfo("qwen-long", "Qwen Long", "通义千问长文本"),
        ModelInfo("deepseek-v3", "DeepSeek V3", "DeepSeek V3 模型"),
        ModelInfo("deepseek-r1", "DeepSeek R1", "DeepSeek R1 推理模型"),
    ),
)

DEEPSEEK_PRESET = ProviderPreset(
    id="deepseek",
    name="DeepSeek",
    kind="openai",
    base_url="https://api.deepseek.com",
    default_model="deepseek-chat",
    models=(
        ModelInfo("deepseek-chat", "DeepSeek Chat", "DeepSeek 对话模型 (V3)"),
        ModelInfo("deepseek-reasoner", "DeepSeek Reasoner", "DeepSeek R1 推理模型"),
    ),
)

MOONSHOT_PRESET = ProviderPreset(
    id="moonshot",
    name="月之暗面 Kimi",
    kind="openai",
    base_url="https://api.moonshot.cn/v1",
    default_model="moonshot-v1-8k",
    models=(
        ModelInfo("moonshot-v1-8k", "Moonshot V1 8K", "8K 上下文窗口"),
        ModelInfo("moonshot-v1-32k", "Moonshot V1 32K", "32K 上下文窗口"),
        ModelInfo("moonshot-v1-128k", "Moonshot V1 128K", "128K 上下文窗口"),
    ),
)

ZHIPU_PRESET = ProviderPreset(
    id="zhipu",
    name="智谱 AI",
    kind="openai",
    base_url="https://open.bigmodel.cn/api/paas/v4",
    default_model="glm-4-plus",
    models=(
        ModelInfo("glm-4-plus", "GLM-4 Plus", "高智能旗舰模型"),
        ModelInfo("glm-4-air", "GLM-4 Air", "高性价比模型"),
        ModelInfo("glm-4-flash", "GLM-4 Flash", "免费极速模型"),
        ModelInfo("glm-4-long", "GLM-4 Long", "超长上下文模型"),
    ),
)

SILICONFLOW_PRESET = ProviderPreset(
    id="siliconflow",
    name="硅基流动",
    kind="openai",
    base_url="https://api.siliconflow.cn/v1",
    default_model="deepseek-ai/DeepSeek-V3",
    models=(
        ModelInfo("deepseek-ai/DeepSeek-V3", "DeepSeek V3", "DeepSeek V3"),
        ModelInfo("deepseek-ai/DeepSeek-R1", "DeepSeek R1", "推理模型"),
        ModelInfo("Qwen/Qwen2.5-72B-Instruct", "Qwen 2.5 72B", "通义千问 72B"),
    ),
)

OPENROUTER_PRESET = ProviderPreset(
    id="openrouter",
    name="OpenRouter",
    kind="openai",
    base_url="https://openrouter.ai/api/v1",
    default_model="openai/gpt-4o",
    models=(
        ModelInfo("openai/gpt-4o", "GPT-4o", "OpenAI GPT-4o"),
        ModelInfo("openai/gpt-4o-mini", "GPT-4o Mini", "OpenAI GPT-4o Mini"),
        ModelInfo("anthropic/claude-sonnet-4", "Claude Sonnet 4", "Anthropic Claude Sonnet 4"),
        ModelInfo("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet", "Anthropic Claude 3.5 Sonnet"),
        ModelInfo("google/gemini-2.5-pro-preview", "Gemini 2.5 Pro", "Google Gemini 2.5 Pro"),
        ModelInfo("google/gemini-2.5-flash-preview", "Gemini 2.5 Flash", "Google Gemini 2.5 Flash"),
        ModelInfo("deepseek/deepseek-chat-v3-0324", "DeepSeek V3", "DeepSeek Chat V3"),
        ModelInfo("deepseek/deepseek-r1", "DeepSeek R1", "DeepSeek R1 推理模型"),
        ModelInfo("meta-llama/llama-4-maverick", "Llama 4 Maverick", "Meta Llama 4 Maverick"),
        ModelInfo("mistralai/mistral-large-2411", "Mistral Large", "Mistral Large"),
        ModelInfo("qwen/qwen-2.5-72b-instruct", "Qwen 2.5 72B", "通义千问 2.5 72B"),
    ),
)

OLLAMA_PRESET = ProviderPreset(
    id="ollama",
    name="Ollama (本地)",
    kind="openai",
    base_url="http://localhost:11434/v1",
    default_model="llama3",
    models=(
        ModelInfo("llama3", "Llama 3", "Meta Llama 3"),
        ModelInfo("qwen2.5", "Qwen 2.5", "通义千问 2.5"),
        ModelInfo("deepseek-r1", "DeepSeek R1", "DeepSeek R1"),
        ModelInfo("mistral", "Mistral", "Mistral AI"),
    ),
)


# 注册顺序即启动时的自动注册顺序，第一个检测到凭据的成为当前 Provider
PRESETS: Dict[str, ProviderPreset] = {
    p.id: p
    for p in (
        OPENAI_PRESET,
        ANTHROPIC_PRESET,
        DASHSCOPE_PRESET,
        DEEPSEEK_PRESET,
        MOONSHOT_PRESET,
        ZHIPU_PRESET,
        SILICONFLOW_PRESET,
        OPENROUTER_PRESET,
        OLLAMA_PRESET,
    )
}


def get_preset(provider_id: str) -> ProviderPreset:
    """根据 ID 获取预设，名称不区分大小写。"""

    key = provider_id.lower()
    for k, preset in PRESETS.items():
        if k.lower() == key:
            return preset
    raise KeyError(f"Unknown provider: {provider_id!r}")


def list_presets() -> List[ProviderPreset]:
    return list(PRESETS.values())
