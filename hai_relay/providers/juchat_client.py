"""Juchat 上游适配器。

本模块负责：

1. 为每次请求创建一个新的上游对话（dialog），拿到 dialog ID。
2. 把编译好的 prompt 发送到补全端点，按字节读取事件流。
3. 借助 providers.sse 还原帧、识别内嵌标记负载，拼接成完整回答文本。

任何失败都抛出业务异常（DialogError / UpstreamError），由 API 层映射为 500；
这里不做重试，也不返回部分结果。
"""

import uuid

import httpx

from hai_relay.config.settings import settings
from hai_relay.domain.exceptions import DialogError, UpstreamError
from hai_relay.infrastructure.logging.logger import logger
from hai_relay.providers.registry import COMPLETION_TOOLS, JUCHAT_ENDPOINTS, build_headers
from hai_relay.providers.sse import accumulate, iter_frames


# 对话创建时上游要求的初始名称，沿用网页端的默认值
DIALOG_NAME = "你是谁"


class JuchatClient:
    """Juchat 上游客户端实现。"""

    name = "juchat"

    def __init__(self, cfg=settings):
        self._settings = cfg

    @property
    def _base_url(self) -> str:
        return getattr(self._settings, "upstream_base_url", None) or JUCHAT_ENDPOINTS.base_url

    # ---- 创建对话 ----

    def create_dialog(self, token: str, mode_id: int) -> str:
        """创建对话并返回 dialog ID。

        上游信封形如 {"code": 200, "data": "<dialog id>"}，
        其他任何情况（非 200、无 data、非 JSON、网络错误）均视为失败。
        """

        payload = {
            "dialogType": 1,
            "name": DIALOG_NAME,
            "type": 15,
            "ttsLanguageTypeId": 0,
            "ttsType": 0,
            "modeId": mode_id,
            "contextId": "",
        }
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    JUCHAT_ENDPOINTS.dialog_url(self._base_url),
                    json=payload,
                    headers=build_headers(token, "application/json, text/plain, */*"),
                )
        except httpx.RequestError as e:
            logger.error(f"Create dialog request failed: {e}", extra={"extra": {"mode_id": mode_id}})
            raise DialogError(error=str(e))

        try:
            data = resp.json()
        except ValueError:
            logger.error("Create dialog returned non-JSON body", extra={"extra": {
                "status": resp.status_code,
                "body": resp.text[:500],
            }})
            raise DialogError(status=resp.status_code)

        dialog_id = data.get("data") if isinstance(data, dict) else None
        if not isinstance(data, dict) or data.get("code") != 200 or not dialog_id:
            logger.error("Create dialog rejected by upstream", extra={"extra": {
                "status": resp.status_code,
                "envelope": data,
            }})
            raise DialogError(status=resp.status_code)

        logger.info("Dialog created", extra={"extra": {"dialog_id": str(dialog_id), "mode_id": mode_id}})
        return str(dialog_id)

    # ---- 补全 ----

    def complete(self, dialog_id: str, prompt: str, mode_id: int, token: str) -> str:
        """发送补全请求并消费整个事件流，返回拼接后的文本。"""

        payload = self._build_payload(dialog_id, prompt, mode_id)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                with client.stream(
                    "POST",
                    JUCHAT_ENDPOINTS.completions_url(self._base_url),
                    json=payload,
                    headers=build_headers(token, "text/event-stream"),
                ) as resp:
                    if resp.status_code >= 400:
                        body = resp.read().decode("utf-8", errors="replace")
                        logger.error(f"Upstream HTTP error {resp.status_code}", extra={"extra": {
                            "dialog_id": dialog_id,
                            "status": resp.status_code,
                            "body": body[:500],
                        }})
                        raise UpstreamError(status=resp.status_code)
                    text = accumulate(iter_frames(resp.iter_bytes()))
        except httpx.HTTPError as e:
            # 连接失败、读取超时、流中途断开均在此
            logger.error(f"Upstream stream failed: {e}", extra={"extra": {"dialog_id": dialog_id}})
            raise UpstreamError(error=str(e))

        if not text:
            logger.error("Upstream returned empty content", extra={"extra": {"dialog_id": dialog_id}})
            raise UpstreamError(reason="empty")
        return text

    @staticmethod
    def _build_payload(dialog_id: str, prompt: str, mode_id: int) -> dict:
        return {
            "prompt": prompt,
            "requestId": str(uuid.uuid4()),
            "modeId": mode_id,
            "contextId": "",
            "dialogId": dialog_id,
            "languageTypeId": 0,
            "fileUuid": "",
            "tools": [dict(tool) for tool in COMPLETION_TOOLS],
            "deepThinking": False,
        }
