"""结构化 JSON 日志。"""
