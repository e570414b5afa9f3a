"""中继内部共享的数据模型。

- ChatMessage: 一条 OpenAI 风格的对话消息（system/user/assistant）。
- SearchLink: 上游搜索结果中的一条链接。
- PlainText / LinkResult: 上游 data.content 经解析后的两种内容片段，
  由 providers.sse.classify_content 产出，最终拼接为完整回答文本。
"""

from dataclasses import dataclass, field
from typing import Tuple, Union


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息。角色顺序由调用方决定，这里不做校验。"""

    role: str
    content: str


@dataclass(frozen=True)
class SearchLink:
    """搜索结果中的单条链接。"""

    title: str
    link: str

    def to_markdown(self) -> str:
        return f"- [{self.title}]({self.link})"


@dataclass(frozen=True)
class PlainText:
    """普通文本增量，原样追加到结果中。"""

    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class LinkResult:
    """内嵌标记负载解析出的搜索结果。

    links 为空时表示标记存在但没有可用的 searchResult，渲染为空串，
    原始标记文本不会出现在最终结果里。
    """

    links: Tuple[SearchLink, ...] = field(default_factory=tuple)

    def render(self) -> str:
        if not self.links:
            return ""
        items = "\n".join(link.to_markdown() for link in self.links)
        return f"\n### 相关链接:\n{items}\n"


ContentPiece = Union[PlainText, LinkResult]
