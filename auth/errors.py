from __future__ import annotations


class CallbackError(RuntimeError):
    """An expected outcome of callback verification, reported to the caller as-is."""

    default_message = "授权处理失败"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class DeniedByProvider(CallbackError):
    def __init__(self, error: str) -> None:
        super().__init__(f"授权失败: {error}")
        self.error = error


class MalformedCallback(CallbackError):
    default_message = "缺少必要的参数"


class InvalidOrExpiredSession(CallbackError):
    default_message = "无效的会话状态或会话已过期"


class TokenIssuanceFailed(CallbackError):
    default_message = "保存账号失败"
