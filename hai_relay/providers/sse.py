"""上游事件流解析。

两层职责：

1. SSEFrameDecoder：把任意切分的字节块还原成完整的 SSE 事件负载。
   UTF-8 增量解码保证多字节字符跨块时不被破坏，未结束的行留到下一块。
2. classify_content：把 data.content 识别为普通文本或内嵌的搜索结果标记负载。
"""

import codecs
import json
import re
from typing import Any, Iterable, Iterator, List, Optional

from hai_relay.domain.models import ContentPiece, LinkResult, PlainText, SearchLink
from hai_relay.infrastructure.logging.logger import logger


MARKER = "HERMSTDUIO"
DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
MARKER_PATTERN = re.compile(re.escape(MARKER) + r"\{")


class SSEFrameDecoder:
    """按 SSE 事件切分流，产出每个事件 data 字段拼接后的负载字符串。

    同一事件内的多行 data 以 "\\n" 连接，遇到空行或流结束时派发。
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._data_lines: List[str] = []

    def feed(self, chunk: bytes) -> List[str]:
        self._buffer += self._decoder.decode(chunk)
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return self._consume(lines)

    def flush(self) -> List[str]:
        """流结束时处理缓冲区中剩余的内容。"""

        self._buffer += self._decoder.decode(b"", final=True)
        rest, self._buffer = self._buffer, ""
        frames = self._consume(rest.split("\n"))
        frames.extend(self._dispatch())
        return frames

    def _consume(self, lines: Iterable[str]) -> List[str]:
        frames: List[str] = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.strip():
                frames.extend(self._dispatch())
                continue
            if not line.startswith(DATA_PREFIX):
                continue
            value = line[len(DATA_PREFIX):]
            if value.startswith(" "):
                value = value[1:]
            self._data_lines.append(value)
        return frames

    def _dispatch(self) -> List[str]:
        if not self._data_lines:
            return []
        payload = "\n".join(self._data_lines).strip()
        self._data_lines = []
        if payload and payload != DONE_SENTINEL:
            return [payload]
        return []


def iter_frames(chunks: Iterable[bytes]) -> Iterator[dict]:
    """把字节块序列解析为 JSON 帧；无法解析的帧记录告警后丢弃。"""

    decoder = SSEFrameDecoder()
    for chunk in chunks:
        yield from _parse_all(decoder.feed(chunk))
    yield from _parse_all(decoder.flush())


def _parse_all(payloads: List[str]) -> Iterator[dict]:
    for payload in payloads:
        try:
            frame = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.warning("Dropped unparseable upstream frame", extra={"extra": {
                "error": str(e),
                "preview": payload[:200],
            }})
            continue
        if isinstance(frame, dict):
            yield frame


def frame_content(frame: dict) -> Optional[str]:
    """取出帧中的 data.content；缺失或为空时返回 None。"""

    data = frame.get("data")
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if isinstance(content, str) and content:
        return content
    return None


def classify_content(content: str) -> ContentPiece:
    """先尝试提取标记负载，失败再按普通文本处理。

    只有标记后紧跟 "{" 才算标记负载；负载存在但解析失败或缺少
    searchResult 时渲染为空，其余情况原样保留。
    """

    match = MARKER_PATTERN.search(content)
    if match is None:
        return PlainText(content)

    blob = _decode_marker_blob(content, match.end() - 1)
    if blob is None:
        logger.debug("Marker payload not decodable", extra={"extra": {"preview": content[:200]}})
        return LinkResult()
    return LinkResult(links=tuple(_parse_search_result(blob.get("searchResult"))))


def _decode_marker_blob(content: str, start: int) -> Optional[dict]:
    try:
        blob, _ = json.JSONDecoder().raw_decode(content, start)
    except json.JSONDecodeError:
        return None
    return blob if isinstance(blob, dict) else None


def _parse_search_result(raw: Any) -> List[SearchLink]:
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("searchResult is not valid JSON", extra={"extra": {"preview": raw[:200]}})
            return []
    if not isinstance(raw, list):
        return []
    links: List[SearchLink] = []
    for item in raw:
        if isinstance(item, dict):
            links.append(SearchLink(title=str(item.get("title", "")), link=str(item.get("link", ""))))
    return links


def accumulate(frames: Iterable[dict]) -> str:
    """按顺序拼接所有帧的可见文本。"""

    parts: List[str] = []
    for frame in frames:
        content = frame_content(frame)
        if content is None:
            continue
        parts.append(classify_content(content).render())
    return "".join(parts)
