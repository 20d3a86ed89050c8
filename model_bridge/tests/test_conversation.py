from model_bridge.domain.conversation import ConversationBuffer
from model_bridge.domain.models import ChatMessage


def test_add_and_snapshot_keeps_order():
    buf = ConversationBuffer(max_turns=5)
    buf.add_user("hi")
    buf.add_assistant("hello")
    assert buf.snapshot() == [
        ChatMessage(role="user", content="hi"),
        ChatMessage(role="assistant", content="hello"),
    ]
    assert buf.length() == 2
    assert len(buf) == 2


def test_trim_drops_oldest_first():
    buf = ConversationBuffer(max_turns=2)
    for i in range(5):
        buf.add_user(f"u{i}")
        buf.add_assistant(f"a{i}")
        assert buf.length() <= 4
    assert [m.content for m in buf.snapshot()] == ["u3", "a3", "u4", "a4"]


def test_trim_applies_after_each_append():
    buf = ConversationBuffer(max_turns=1)
    buf.add_user("a")
    buf.add_assistant("A")
    buf.add_user("b")
    # 奇数长度的中间态同样受上限约束
    assert [m.content for m in buf.snapshot()] == ["A", "b"]


def test_snapshot_is_a_copy():
    buf = ConversationBuffer()
    buf.add_user("x")
    snap = buf.snapshot()
    snap.append(ChatMessage(role="assistant", content="injected"))
    snap.clear()
    assert buf.length() == 1


def test_recent_and_clear():
    buf = ConversationBuffer()
    for c in "abcd":
        buf.add_user(c)
    assert [m.content for m in buf.recent(2)] == ["c", "d"]
    assert buf.recent(0) == []
    buf.clear()
    assert buf.length() == 0
    assert buf.snapshot() == []


def test_default_max_turns():
    assert ConversationBuffer().max_turns == 50
