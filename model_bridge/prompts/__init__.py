"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取默认 system prompt 文本，
Agent 未显式指定系统提示词时使用。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(locale: str = "zh") -> str:
    """加载默认系统提示词文本（去掉首尾空白）。"""

    fname = PROMPTS_DIR / locale / "default_system.md"
    return fname.read_text(encoding="utf-8").strip()
