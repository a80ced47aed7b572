"""声明式响应处理

通过 ResponseHandlerConfig 描述成功条件，新增平台只需要一张配置表：

1. HTTP 状态码是否在可接受范围（默认 2xx），否则 TransportError
2. check_body 时按 path 取值并与 expect 比较，不匹配则 APIError
3. 成功返回 SendResult
"""

import json
import re
from collections.abc import Collection
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from notifyhub.core.config import settings
from notifyhub.core.errors import APIError, TransportError

_MISSING = object()


class ResponseBodyType(StrEnum):
    """响应体解析方式"""

    JSON = "json"
    TEXT = "text"


class MatchMode(StrEnum):
    """字段比较模式"""

    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    PRESENT = "present"
    REGEX = "regex"
    CONTAINS = "contains"
    GT = "gt"
    LT = "lt"


@dataclass
class ResponseHandlerConfig:
    """响应成功判定配置"""

    body_type: ResponseBodyType = ResponseBodyType.JSON
    check_body: bool = False
    path: str = ""
    expect: Any = None
    mode: MatchMode = MatchMode.EQUAL
    code_path: str = ""
    msg_path: str = ""
    success_statuses: Collection[int] = range(200, 300)
    # 成功时复制到 SendResult.metadata 的字段：{metadata_key: dotted_path}
    metadata_paths: dict[str, str] = field(default_factory=dict)
    # 响应体没有描述字段时，用错误码映射可读信息
    code_messages: dict[str, str] = field(default_factory=dict)


@dataclass
class SendResult:
    """发送结果"""

    status_code: int
    raw_body: bytes = b""
    metadata: dict[str, Any] = field(default_factory=dict)
    provider: str | None = None
    account: str | None = None

    @property
    def text(self) -> str:
        return self.raw_body.decode("utf-8", errors="replace")


def extract_path(data: Any, path: str) -> Any:
    """按点分路径取值，支持列表下标（如 result.items.0.id），不存在返回 _MISSING"""
    if not path:
        return data
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, list):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return _MISSING
        else:
            return _MISSING
    return current


def _stringify(value: Any) -> str:
    """按 JSON 习惯转为字符串，True -> "true"，None -> "null" """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    return str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def match_value(actual: Any, expect: Any, mode: MatchMode) -> bool:
    """按模式比较实际值与期望值"""
    if mode == MatchMode.PRESENT:
        return actual is not _MISSING and actual is not None
    if actual is _MISSING:
        # 字段缺失时只有 not_equal 成立
        return mode == MatchMode.NOT_EQUAL

    if mode == MatchMode.EQUAL:
        return _stringify(actual) == _stringify(expect)
    if mode == MatchMode.NOT_EQUAL:
        return _stringify(actual) != _stringify(expect)
    if mode == MatchMode.REGEX:
        return re.search(str(expect), _stringify(actual)) is not None
    if mode == MatchMode.CONTAINS:
        return _stringify(expect) in _stringify(actual)
    if mode in (MatchMode.GT, MatchMode.LT):
        left, right = _as_number(actual), _as_number(expect)
        if left is None or right is None:
            return False
        return left > right if mode == MatchMode.GT else left < right
    raise ValueError(f"unsupported match mode: {mode}")


class ResponseHandler:
    """根据配置将 HTTP 响应分类为成功或带类型的错误"""

    def __init__(self, config: ResponseHandlerConfig, *, provider: str | None = None) -> None:
        self.config = config
        self.provider = provider

    def _preview(self, body: bytes) -> str:
        text = body.decode("utf-8", errors="replace")
        limit = settings.ERROR_BODY_PREVIEW_CHARS
        return text if len(text) <= limit else text[:limit] + "..."

    def _parse(self, body: bytes) -> Any:
        if self.config.body_type == ResponseBodyType.TEXT:
            return body.decode("utf-8", errors="replace")
        return json.loads(body)

    def handle(self, status_code: int, body: bytes) -> SendResult:
        """分类响应，成功返回 SendResult，失败抛出 TransportError 或 APIError"""
        config = self.config

        if status_code not in config.success_statuses:
            raise TransportError(
                f"unexpected http status {status_code}: {self._preview(body)}",
                code="http_status",
                status_code=status_code,
                provider=self.provider,
                data={"body": self._preview(body)},
            )

        result = SendResult(status_code=status_code, raw_body=body, provider=self.provider)
        if not config.check_body and not config.metadata_paths:
            return result

        try:
            parsed = self._parse(body)
        except (ValueError, UnicodeDecodeError) as e:
            if not config.check_body:
                return result
            raise APIError(
                f"invalid response body: {e}",
                code="invalid_body",
                status_code=status_code,
                provider=self.provider,
                data={"body": self._preview(body)},
            ) from e

        if config.check_body:
            actual = extract_path(parsed, config.path)
            if not match_value(actual, config.expect, config.mode):
                raise self._api_error(status_code, parsed)

        for key, path in config.metadata_paths.items():
            value = extract_path(parsed, path)
            if value is not _MISSING:
                result.metadata[key] = value

        return result

    def _api_error(self, status_code: int, parsed: Any) -> APIError:
        config = self.config
        api_code = None
        if config.code_path:
            value = extract_path(parsed, config.code_path)
            api_code = None if value is _MISSING else value

        api_message = None
        if config.msg_path:
            value = extract_path(parsed, config.msg_path)
            if value is not _MISSING and value is not None:
                api_message = str(value)
        if not api_message and api_code is not None:
            api_message = config.code_messages.get(_stringify(api_code))

        detail = api_message or "response did not match success condition"
        message = f"api error {api_code}: {detail}" if api_code is not None else f"api error: {detail}"
        return APIError(
            message,
            code="api_error",
            api_code=api_code,
            api_message=api_message,
            status_code=status_code,
            provider=self.provider,
        )
