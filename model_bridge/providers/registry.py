"""Provider 注册表。

维护“Provider ID -> Provider 实例”的映射以及当前 Provider 指针：

- 第一个注册的 Provider 自动成为当前 Provider，这是唯一的隐式默认。
- 重复注册同一 ID 只替换实例，不改变当前指针。
- 切换到未注册的 ID 返回 False，状态不变。
"""

from typing import Dict, List, Optional

from model_bridge.domain.models import ProviderListing
from model_bridge.providers.base import ProviderClient


class ProviderRegistry:
    def __init__(self) -> None:
        # dict 保持插入顺序，list() 依赖该顺序
        self._providers: Dict[str, ProviderClient] = {}
        self._current_id = ""

    def register(self, provider_id: str, provider: ProviderClient) -> None:
        self._providers[provider_id] = provider
        if not self._current_id:
            self._current_id = provider_id

    def get(self, provider_id: str) -> Optional[ProviderClient]:
        return self._providers.get(provider_id)

    def get_current(self) -> Optional[ProviderClient]:
        """返回当前 Provider，尚未注册任何 Provider 时返回 None。"""

        if not self._current_id:
            return None
        return self._providers.get(self._current_id)

    def get_current_id(self) -> str:
        return self._current_id

    def set_current(self, provider_id: str) -> bool:
        """切换当前 Provider；目标不存在时返回 False 且不做任何修改。"""

        if provider_id not in self._providers:
            return False
        self._current_id = provider_id
        return True

    def list(self) -> List[ProviderListing]:
        return [
            ProviderListing(id=pid, name=provider.name, is_current=pid == self._current_id)
            for pid, provider in self._providers.items()
        ]

    def has(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def size(self) -> int:
        return len(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers
