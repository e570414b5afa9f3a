"""上游 Provider 抽象接口。

API 层不直接依赖具体站点的 HTTP 细节，而是依赖此协议：

- create_dialog: 为一次请求开一个新的上游对话。
- complete: 在该对话里提问，返回完整回答文本。

测试中可以用任何满足该协议的替身替换 JuchatClient。
"""

from typing import Protocol


class UpstreamClient(Protocol):
    """上游客户端协议。"""

    name: str

    def create_dialog(self, token: str, mode_id: int) -> str:
        ...

    def complete(self, dialog_id: str, prompt: str, mode_id: int, token: str) -> str:
        ...
