"""统一业务异常模型。

中继流程中各阶段的失败都继承自 BusinessError，
由 API 层统一捕获并映射为对外的 HTTP 状态码与错误信息。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "DIALOG_CREATE_FAILED"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 500。
        extra: 其他补充字段（例如 status、mode_id 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 500, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class AuthError(BusinessError):
    """调用方未提供 Bearer token。"""

    def __init__(self, message: str = "Missing authorization header", **extra):
        super().__init__(code="MISSING_AUTH", message=message, http_status=401, **extra)


class DialogError(BusinessError):
    """上游创建对话失败：信封非成功、响应不可解析或网络错误。"""

    def __init__(self, message: str = "Failed to create dialog", **extra):
        super().__init__(code="DIALOG_CREATE_FAILED", message=message, http_status=500, **extra)


class UpstreamError(BusinessError):
    """上游补全流失败：非 2xx、流读取异常或结果为空。"""

    def __init__(self, message: str = "Failed to get ChatGPT response", **extra):
        super().__init__(code="UPSTREAM_STREAM_FAILED", message=message, http_status=500, **extra)
