"""OpenAI 风格响应构造。

上游回答在这里已经是完整文本：
- 非流式：打包成一个 chat.completion 对象。
- 流式：按固定字符数切片，逐片输出 chat.completion.chunk 帧，
  最后追加结束帧与 [DONE] 标记。切片节奏是人为模拟的，与上游无关。
"""

import json
import time
import uuid
from typing import Any, Dict, Iterator, List


def _completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


def build_completion(text: str, model: str) -> Dict[str, Any]:
    return {
        "id": _completion_id(),
        "object": "chat.completion",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ],
        # 未实现 token 统计
        "usage": {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0},
    }


def split_chunks(text: str, chunk_size: int) -> List[str]:
    """按码点切片；str 切片不会拆开多字节字符。"""

    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


def _sse(data: Any) -> str:
    if isinstance(data, str):
        return f"data: {data}\n\n"
    return f"data: {json.dumps(data, ensure_ascii=False)}\n\n"


def iter_completion_chunks(
    text: str,
    model: str,
    chunk_size: int = 50,
    delay: float = 0.05,
) -> Iterator[str]:
    """逐帧产出 SSE 字符串。

    每个内容帧之后暂停 delay 秒；id 与 created 在整条流内保持一致。
    """

    chat_id = _completion_id()
    created = int(time.time())

    def chunk(delta: Dict[str, Any], finish_reason):
        return {
            "id": chat_id,
            "object": "chat.completion.chunk",
            "created": created,
            "model": model,
            "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
        }

    for piece in split_chunks(text, chunk_size):
        yield _sse(chunk({"content": piece}, None))
        if delay > 0:
            time.sleep(delay)

    yield _sse(chunk({}, "stop"))
    yield _sse("[DONE]")
