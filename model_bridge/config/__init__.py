"""配置加载。"""

from model_bridge.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
