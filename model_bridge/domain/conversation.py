"""会话历史缓冲区。

ConversationBuffer 按时间顺序保存 user/assistant 消息，
并以“轮”为单位限制长度（一轮 = 一问一答）：超过上限时从最早的消息开始丢弃。
"""

from typing import List

from .models import ChatMessage


DEFAULT_MAX_TURNS = 50


class ConversationBuffer:
    """有界的会话消息序列。

    - max_turns 在构造时确定，之后不再改变。
    - 最多保留 2 * max_turns 条消息，溢出时 FIFO 丢弃最旧的消息。
    """

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS):
        self._max_turns = max_turns
        self._messages: List[ChatMessage] = []

    @property
    def max_turns(self) -> int:
        return self._max_turns

    def add_user(self, content: str) -> None:
        self._messages.append(ChatMessage(role="user", content=content))
        self._trim()

    def add_assistant(self, content: str) -> None:
        self._messages.append(ChatMessage(role="assistant", content=content))
        self._trim()

    def snapshot(self) -> List[ChatMessage]:
        """返回全部消息的副本，调用方修改返回值不会影响缓冲区。"""

        return list(self._messages)

    def recent(self, n: int) -> List[ChatMessage]:
        """返回最近 n 条消息。"""

        if n <= 0:
            return []
        return self._messages[-n:]

    def clear(self) -> None:
        self._messages = []

    def length(self) -> int:
        """当前消息条数（不是轮数）。"""

        return len(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def _trim(self) -> None:
        limit = self._max_turns * 2
        if len(self._messages) > limit:
            del self._messages[: len(self._messages) - limit]
