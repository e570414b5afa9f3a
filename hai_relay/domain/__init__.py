"""领域层模型与异常。

包含：
- models: ChatMessage、SearchLink 以及 PlainText / LinkResult 内容片段。
- exceptions: 业务异常类型定义。
"""
