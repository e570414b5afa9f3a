"""HTTP 入口。

只暴露一个路由：POST /v1/chat/completions。其他任何路径或方法都返回 404。
业务异常按 http_status 映射，其余异常统一返回 500 与通用提示。
"""

import json

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from hai_relay.api.service import ChatCompletionRequest, extract_bearer, relay_chat
from hai_relay.api.shaping import build_completion, iter_completion_chunks
from hai_relay.config.settings import settings
from hai_relay.domain.exceptions import AuthError, BusinessError
from hai_relay.infrastructure.logging.logger import logger


GENERIC_ERROR = "模型请求失败，服务器内部错误，请检查传递信息格式是否正确或稍后重试"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def create_app() -> FastAPI:
    app = FastAPI(title="hai_relay", docs_url=None, redoc_url=None, openapi_url=None)

    @app.exception_handler(StarletteHTTPException)
    async def _not_found(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        return await http_exception_handler(request, exc)

    @app.post("/v1/chat/completions")
    async def chat_completions(request: Request):
        try:
            token = extract_bearer(request.headers.get("authorization"))
            body = await request.json()
            req = ChatCompletionRequest.model_validate(body)
            result = await run_in_threadpool(relay_chat, token, req)
        except AuthError as e:
            return JSONResponse({"error": e.message}, status_code=e.http_status)
        except BusinessError as e:
            logger.error(f"Relay failed: {e.message}", extra={"extra": {"code": e.code, **e.extra}})
            return JSONResponse({"error": e.message}, status_code=e.http_status)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Malformed request body: {e}")
            return JSONResponse({"error": GENERIC_ERROR}, status_code=500)
        except Exception:
            logger.exception("Unhandled error while relaying request")
            return JSONResponse({"error": GENERIC_ERROR}, status_code=500)

        if req.stream:
            return StreamingResponse(
                iter_completion_chunks(
                    result.text,
                    result.model,
                    chunk_size=settings.stream_chunk_size,
                    delay=settings.stream_chunk_delay,
                ),
                media_type="text/event-stream",
                headers=SSE_HEADERS,
            )
        return JSONResponse(build_completion(result.text, result.model))

    return app


app = create_app()
