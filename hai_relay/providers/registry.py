"""上游站点与模型配置。

本模块将“客户端模型名”与“上游 modeId”解耦：

- 客户端模型名：OpenAI 风格请求里的 model 字段，例如 "gpt-4o"。
- modeId：上游用于选择底层模型的整数编号，例如 17。

映射表在导入时构造一次，进程内只读；未知模型名回退到默认 modeId。
另外集中维护上游的两个端点与浏览器指纹请求头。"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional


DEFAULT_MODE_ID = 36

MODEL_TO_MODE_ID: Mapping[str, int] = MappingProxyType({
    "o3-mini": 33,
    "o1-mini": 27,
    "o1-preview": 26,
    "gpt-4o-mini": 21,
    "gpt-4o": 17,
    "claude-3-5-haiku": 5,
    "claude-3-5-sonnet": 20,
    "claude-3-7-sonnet": 36,
    "gemini-2.0-flash-exp": 34,
    "deepseek-r1": 32,
    "deepseek-v3": 35,
})


def resolve_mode_id(model: Optional[str], fallback: int = DEFAULT_MODE_ID) -> int:
    """根据模型名获取上游 modeId，未知名称静默回退到 fallback。"""

    if not model:
        return fallback
    return MODEL_TO_MODE_ID.get(model, fallback)


@dataclass(frozen=True)
class UpstreamEndpoints:
    """上游站点根地址与两个固定端点（相对 base_url 的路径）。"""

    base_url: str = "https://www.juchats.com"
    create_dialog: str = "/gw/chatweb/gpt/createDialog"
    completions: str = "/gw/chatgpt/gpt/completions"

    def dialog_url(self, base_url: str) -> str:
        return f"{base_url}{self.create_dialog}"

    def completions_url(self, base_url: str) -> str:
        return f"{base_url}{self.completions}"


JUCHAT_ENDPOINTS = UpstreamEndpoints()

# 模拟浏览器请求的固定指纹头，jtoken / accept 由调用方补充
FINGERPRINT_HEADERS: Mapping[str, str] = MappingProxyType({
    "accept-language": "zh-CN,zh;q=0.9,en;q=0.8,en-GB;q=0.7,en-US;q=0.6",
    "content-type": "application/json",
    "priority": "u=1, i",
    "sec-ch-ua": '"Not(A:Brand";v="99", "Microsoft Edge";v="133", "Chromium";v="133"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-origin",
    "Referer": "https://www.juchats.com/chat",
    "Referrer-Policy": "strict-origin-when-cross-origin",
})


def build_headers(token: str, accept: str) -> Dict[str, str]:
    """拼装单次上游请求的请求头。"""

    headers = dict(FINGERPRINT_HEADERS)
    headers["accept"] = accept
    headers["jtoken"] = token
    return headers


# 补全请求里声明的工具列表，上游要求固定携带
COMPLETION_TOOLS = (
    {"name": "DALL·E3", "id": "DALL_E3"},
    {"name": "Mermaid", "id": "MERMAID"},
    {"name": "Browsing", "id": "BROWSING"},
    {"name": "Code Interprer", "id": "CODE_INTERPRER"},
    {"name": "Advanced analysis", "id": "ADVANCED_ANALYSIS"},
    {"name": "𝕏", "id": "X"},
)
