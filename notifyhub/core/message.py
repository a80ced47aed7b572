"""消息模型基类

每个平台的消息变体都继承 Message，带有：
- provider_type: 平台标签（类属性）
- msgtype: 变体判别字段，序列化为线上字段 msgtype
- validate(): 校验字段，失败抛出 ParamError
- to_payload(): 生成线上 JSON 结构
"""

from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from notifyhub.core.errors import ParamError, raise_required


class ProviderType(StrEnum):
    """平台类型"""

    DINGTALK = "dingtalk"
    TELEGRAM = "telegram"
    WECOMBOT = "wecombot"
    EMAIL = "email"


class Message(BaseModel):
    """消息基类"""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", validate_assignment=False)

    provider_type: ClassVar[ProviderType]

    msgtype: str

    def validate(self) -> None:  # type: ignore[override]
        """校验消息，子类扩展"""
        if not self.msgtype:
            raise ParamError("msgtype is required", code="missing_field", data={"field": "msgtype"})

    def to_payload(self) -> dict[str, Any]:
        """线上 JSON 结构：使用别名、省略 None"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ========== 通用校验函数 ==========


def utf8_len(text: str) -> int:
    """UTF-8 字节长度"""
    return len(text.encode("utf-8"))


def require(value: Any, field: str) -> None:
    """必填校验：None、空字符串、空列表均视为缺失"""
    if value is None or value == "" or value == [] or value == {}:
        raise_required(field)


def check_max_bytes(text: str | None, limit: int, field: str) -> None:
    """UTF-8 字节长度上限"""
    if text and utf8_len(text) > limit:
        raise ParamError(
            f"{field} exceeds {limit} bytes",
            code="content_too_long",
            data={"field": field, "limit": limit, "length": utf8_len(text)},
        )


def check_max_chars(text: str | None, limit: int, field: str) -> None:
    """字符数上限"""
    if text and len(text) > limit:
        raise ParamError(
            f"{field} exceeds {limit} characters",
            code="content_too_long",
            data={"field": field, "limit": limit, "length": len(text)},
        )


def check_choice(value: Any, choices: Any, field: str) -> None:
    """枚举值校验，None 视为未设置"""
    if value is not None and value not in choices:
        raise ParamError(
            f"invalid {field}: {value!r}",
            code="invalid_value",
            data={"field": field, "allowed": sorted(str(c) for c in choices)},
        )


def check_range(value: float | None, low: float, high: float, field: str) -> None:
    """闭区间范围校验，None 视为未设置"""
    if value is not None and not (low <= value <= high):
        raise ParamError(
            f"{field} must be between {low} and {high}",
            code="out_of_range",
            data={"field": field, "value": value},
        )


def check_mentions(ids: list[str] | None, field: str) -> None:
    """@all 不能与具体 ID 同时出现"""
    if ids and "@all" in ids and len(ids) > 1:
        raise ParamError(
            f"{field} cannot mix @all with specific ids",
            code="invalid_mentions",
            data={"field": field},
        )
