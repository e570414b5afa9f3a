"""hai_relay 顶层包。

把 OpenAI 风格的 chat completions 请求转译为 Juchat 上游调用，
再把上游事件流整理为 OpenAI 的响应格式（JSON 或模拟的 SSE 流）。
"""

__version__ = "0.1.0"
