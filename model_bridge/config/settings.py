"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
每个 Provider 预设都有一组 <id>_api_key / <id>_base_url / <id>_model 字段，
未填写 base_url / model 时使用 providers.catalog 中的预设值。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("MODEL_BRIDGE_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}

class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 通用 ----
    default_provider: Optional[str] = Field(
        default=None,
        description="启动时优先使用的 Provider ID，未设置时取第一个注册的 Provider",
    )
    system_prompt: Optional[str] = Field(
        default=None,
        description="默认系统提示词，未设置时使用 prompts 目录中的内置提示词",
    )
    max_turns: int = Field(default=50, ge=1, le=1000, description="会话保留的最大轮数")
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    # ---- OpenAI ----
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API 密钥")
    openai_base_url: Optional[str] = None
    openai_model: Optional[str] = None

    # ---- Anthropic Claude ----
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API 密钥")
    anthropic_base_url: Optional[str] = None
    anthropic_model: Optional[str] = None

    # ---- 阿里云百炼 ----
    dashscope_api_key: Optional[str] = Field(default=None, description="DashScope API 密钥")
    dashscope_base_url: Optional[str] = None
    dashscope_model: Optional[str] = None

    # ---- DeepSeek ----
    deepseek_api_key: Optional[str] = Field(default=None, description="DeepSeek API 密钥")
    deepseek_base_url: Optional[str] = None
    deepseek_model: Optional[str] = None

    # ---- 月之暗面 Kimi ----
    moonshot_api_key: Optional[str] = Field(default=None, description="Moonshot API 密钥")
    moonshot_base_url: Optional[str] = None
    moonshot_model: Optional[str] = None

    # ---- 智谱 AI ----
    zhipu_api_key: Optional[str] = Field(default=None, description="智谱 API 密钥")
    zhipu_base_url: Optional[str] = None
    zhipu_model: Optional[str] = None

    # ---- 硅基流动 ----
    siliconflow_api_key: Optional[str] = Field(default=None, description="SiliconFlow API 密钥")
    siliconflow_base_url: Optional[str] = None
    siliconflow_model: Optional[str] = None

    # ---- OpenRouter ----
    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API 密钥")
    openrouter_base_url: Optional[str] = None
    openrouter_model: Optional[str] = None

    # ---- Ollama（本地，无需密钥） ----
    ollama_enabled: bool = Field(default=False, description="是否注册本地 Ollama")
    ollama_base_url: Optional[str] = None
    ollama_model: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator(
        "openai_api_key",
        "anthropic_api_key",
        "dashscope_api_key",
        "deepseek_api_key",
        "moonshot_api_key",
        "zhipu_api_key",
        "siliconflow_api_key",
        "openrouter_api_key",
    )
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
