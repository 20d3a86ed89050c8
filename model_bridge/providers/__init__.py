"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 预设目录 (catalog) 与运行期注册表 (registry)。
- 提供具体协议实现 (openai_client、anthropic_client)。

create_provider / build_registry 是启动引导步骤：根据配置中检测到的凭据
注册 Provider。核心的 Agent / ProviderRegistry 本身不做任何隐式注册。
"""

from typing import Optional

from model_bridge.config.settings import Settings, settings
from model_bridge.providers.anthropic_client import AnthropicProvider
from model_bridge.providers.base import BaseProvider, ProviderClient
from model_bridge.providers.catalog import get_preset, list_presets
from model_bridge.providers.openai_client import OpenAICompatibleProvider
from model_bridge.providers.registry import ProviderRegistry


# Ollama 不校验密钥，但 Authorization 头仍需要一个值
OLLAMA_PLACEHOLDER_KEY = "ollama"


def _cfg_value(cfg, provider_id: str, field: str):
    """读取某个预设的配置项，例如 deepseek_api_key。"""

    return getattr(cfg, f"{provider_id}_{field}", None)


def create_provider(provider_id: str, cfg: Optional[Settings] = None) -> ProviderClient:
    """根据预设 ID 创建 Provider 实例，密钥 / base_url / 模型取自配置。"""

    cfg = cfg or settings
    preset = get_preset(provider_id)
    api_key = _cfg_value(cfg, preset.id, "api_key")
    if preset.id == "ollama":
        api_key = OLLAMA_PLACEHOLDER_KEY
    base_url = _cfg_value(cfg, preset.id, "base_url") or preset.base_url
    model = _cfg_value(cfg, preset.id, "model") or preset.default_model
    if preset.kind == "anthropic":
        return AnthropicProvider(
            api_key=api_key,
            base_url=base_url,
            default_model=model,
            http_timeout=getattr(cfg, "http_timeout", 30.0),
        )
    return OpenAICompatibleProvider(
        api_key=api_key,
        base_url=base_url,
        default_model=model,
        name=preset.name,
        provider_id=preset.id,
        models=preset.models,
        http_timeout=getattr(cfg, "http_timeout", 30.0),
    )


def build_registry(cfg: Optional[Settings] = None) -> ProviderRegistry:
    """为每个已配置凭据的预设注册一个 Provider（按目录顺序）。

    若配置了 default_provider 且已注册，则将其设为当前 Provider。
    """

    cfg = cfg or settings
    registry = ProviderRegistry()
    for preset in list_presets():
        if preset.id == "ollama":
            if not getattr(cfg, "ollama_enabled", False):
                continue
        elif not _cfg_value(cfg, preset.id, "api_key"):
            continue
        registry.register(preset.id, create_provider(preset.id, cfg))
    default_provider = getattr(cfg, "default_provider", None)
    if default_provider:
        registry.set_current(default_provider)
    return registry


__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "OpenAICompatibleProvider",
    "ProviderClient",
    "ProviderRegistry",
    "build_registry",
    "create_provider",
]
