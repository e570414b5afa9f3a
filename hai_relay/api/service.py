"""中继主流程。

一次请求严格按顺序执行：解析模型 -> 创建对话 -> 编译 prompt -> 消费上游流。
这里只做编排，HTTP 细节在 api.app，上游细节在 providers。
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hai_relay.config.settings import settings
from hai_relay.domain.exceptions import AuthError
from hai_relay.domain.models import ChatMessage
from hai_relay.infrastructure.logging.logger import logger
from hai_relay.prompts import compile_prompt
from hai_relay.providers import UpstreamClient, create_provider
from hai_relay.providers.registry import resolve_mode_id


class InboundMessage(BaseModel):
    """请求体中的单条消息。"""

    model_config = ConfigDict(extra="ignore")

    role: str
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def flatten_content(cls, v: Any) -> str:
        # 兼容 OpenAI 的 content parts：只保留 text 片段
        if v is None:
            return ""
        if isinstance(v, list):
            texts = [
                part.get("text", "")
                for part in v
                if isinstance(part, dict) and part.get("type") == "text"
            ]
            return "\n".join(texts)
        return v


class ChatCompletionRequest(BaseModel):
    """OpenAI 风格的 chat completions 请求体。"""

    model_config = ConfigDict(extra="ignore")

    model: Optional[str] = None
    messages: List[InboundMessage] = Field(min_length=1)
    stream: Optional[bool] = False

    def to_messages(self) -> List[ChatMessage]:
        return [ChatMessage(role=m.role, content=m.content) for m in self.messages]


@dataclass
class RelayResult:
    model: str
    text: str


def extract_bearer(header: Optional[str]) -> str:
    """从 Authorization 头取出 token，缺失时抛出 AuthError。"""

    if not header:
        raise AuthError()
    value = header.strip()
    parts = value.split(None, 1)
    if parts and parts[0].lower() == "bearer":
        value = parts[1].strip() if len(parts) > 1 else ""
    if not value:
        raise AuthError()
    return value


def relay_chat(
    token: str,
    req: ChatCompletionRequest,
    client: Optional[UpstreamClient] = None,
) -> RelayResult:
    """执行一次完整的中继调用，返回回显模型名与回答文本。

    Raises:
        DialogError: 上游创建对话失败。
        UpstreamError: 上游补全流失败。
    """

    client = client or create_provider()
    model = req.model or settings.default_model
    mode_id = resolve_mode_id(model, settings.fallback_mode_id)

    dialog_id = client.create_dialog(token, mode_id)
    prompt = compile_prompt(req.to_messages())
    text = client.complete(dialog_id, prompt, mode_id, token)

    logger.info("Relay completed", extra={"extra": {
        "model": model,
        "mode_id": mode_id,
        "dialog_id": dialog_id,
        "chars": len(text),
    }})
    return RelayResult(model=model, text=text)
