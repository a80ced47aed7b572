"""统一错误处理

通知发送过程中的所有错误都继承自 NotifyError，按类别区分：

- ParamError: 消息校验失败、缺少必需字段
- ConfigError: 提供者未配置、无可用账号、指定账号不存在
- TransportError: 网络 I/O 失败、超时、非成功 HTTP 状态、SMTP 失败
- APIError: 平台返回了非成功的业务码
- UploadError: 发送前的媒体上传失败
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel


class ErrorPayload(BaseModel):
    """标准错误结构"""

    kind: str
    code: str
    message: str
    provider: str | None = None
    account: str | None = None
    data: dict[str, Any] | None = None
    timestamp: str


class NotifyError(Exception):
    """通知错误基类

    使用示例:
        raise ParamError(
            code="content_too_long",
            message="text content exceeds 2048 bytes",
            data={"length": 4096},
        )
    """

    kind = "notify"
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        provider: str | None = None,
        account: str | None = None,
        data: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code or self.kind
        self.provider = provider
        self.account = account
        self.data = data
        super().__init__(message)

    def __str__(self) -> str:
        prefix = f"[{self.provider}] " if self.provider else ""
        suffix = f" (account={self.account})" if self.account else ""
        return f"{prefix}{self.message}{suffix}"

    def with_context(self, *, provider: str | None = None, account: str | None = None) -> "NotifyError":
        """补充提供者和账号信息，已有的值不会被覆盖"""
        if provider and not self.provider:
            self.provider = provider
        if account and not self.account:
            self.account = account
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
            "provider": self.provider,
            "account": self.account,
            "data": self.data,
        }


class ParamError(NotifyError):
    """参数错误（不重试）"""

    kind = "param"


class ConfigError(NotifyError):
    """配置错误"""

    kind = "config"


class TransportError(NotifyError):
    """传输错误（可能是暂时性的）"""

    kind = "transport"
    retryable = True

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs: Any):
        self.status_code = status_code
        super().__init__(message, **kwargs)


class APIError(NotifyError):
    """平台业务错误，携带平台自身的错误码与描述"""

    kind = "api"

    def __init__(
        self,
        message: str,
        *,
        api_code: Any = None,
        api_message: str | None = None,
        status_code: int | None = None,
        **kwargs: Any,
    ):
        self.api_code = api_code
        self.api_message = api_message
        self.status_code = status_code
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["api_code"] = self.api_code
        result["api_message"] = self.api_message
        return result


class UploadError(NotifyError):
    """媒体上传错误"""

    kind = "upload"


def create_error_response(error: NotifyError) -> dict[str, Any]:
    """创建标准错误结构，便于调用方记录或返回"""
    payload = ErrorPayload(
        **{k: v for k, v in error.to_dict().items() if k in ErrorPayload.model_fields},
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
    return {"error": payload.model_dump()}


# 常用错误快捷函数
def raise_required(field: str) -> None:
    """抛出必填字段缺失错误"""
    raise ParamError(f"{field} is required", code="missing_field", data={"field": field})
