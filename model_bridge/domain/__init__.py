"""领域层模型。

包含：
- models: 统一的 ChatMessage / ModelInfo / SendOptions 模型。
- conversation: 有界的会话缓冲区 ConversationBuffer。
- exceptions: 业务异常类型定义。
"""
