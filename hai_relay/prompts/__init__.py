"""Prompt 编译工具。

上游只接受单条 prompt 文本，这里把 OpenAI 风格的消息列表压平为一段字符串：
system 指令包装成人设提示，历史轮次按 "role: content" 逐行排列，
最后一条 user 消息作为“我的问题是”后缀。该转换不可逆。
"""

from typing import Sequence

from hai_relay.domain.models import ChatMessage


PERSONA_TEMPLATE = "你将扮演一个{content},不要联网,不要搜索,不要提及juchat.\n"
QUESTION_INTRO = "我的问题是:"


def build_system_block(messages: Sequence[ChatMessage]) -> str:
    """取第一条 system 消息包装为人设指令，没有则为空串。"""

    for message in messages:
        if message.role == "system":
            return PERSONA_TEMPLATE.format(content=message.content)
    return ""


def build_history(messages: Sequence[ChatMessage]) -> str:
    # 先排除 system，再去掉末尾一条（即当前提问）
    history = [m for m in messages if m.role != "system"][:-1]
    return "\n".join(f"{m.role}: {m.content}" for m in history)


def current_question(messages: Sequence[ChatMessage]) -> str:
    if not messages:
        return ""
    last = messages[-1]
    return last.content if last.role == "user" else ""


def compile_prompt(messages: Sequence[ChatMessage]) -> str:
    """把消息列表编译为上游 prompt。"""

    system_block = build_system_block(messages)
    history = build_history(messages)
    return f"{system_block}\n{history}\n{QUESTION_INTRO}{current_question(messages)}"
