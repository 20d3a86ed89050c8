"""Agent 编排层。"""

from model_bridge.agents.agent import Agent

__all__ = ["Agent"]
