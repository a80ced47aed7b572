"""HTTP 转换器

转换器把 (消息, 账号) 映射为 HTTPRequestSpec 与对应的 ResponseHandler，
负责 URL 构建、签名和请求体编码，不做任何网络 I/O。
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from notifyhub.core.account import Account
from notifyhub.core.errors import ConfigError, NotifyError, ParamError
from notifyhub.core.message import Message, ProviderType
from notifyhub.core.response import ResponseHandler, ResponseHandlerConfig


class BodyType(StrEnum):
    """请求体编码方式"""

    JSON = "json"
    FORM = "form"
    MULTIPART = "multipart"
    RAW = "raw"


@dataclass
class HTTPRequestSpec:
    """与具体 HTTP 客户端无关的请求描述"""

    method: str
    url: str
    query_params: list[tuple[str, str]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    body_type: BodyType = BodyType.JSON
    form: dict[str, Any] | None = None  # form / multipart 的普通字段
    files: dict[str, Any] | None = None  # multipart 的文件字段
    timeout: float | None = None

    @classmethod
    def json_post(cls, url: str, payload: dict[str, Any], **kwargs: Any) -> "HTTPRequestSpec":
        """构造 JSON POST 请求"""
        headers = {"Content-Type": "application/json; charset=utf-8"}
        headers.update(kwargs.pop("headers", {}))
        return cls(
            method="POST",
            url=url,
            headers=headers,
            body=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
            body_type=BodyType.JSON,
            **kwargs,
        )

    def json_body(self) -> Any:
        """解析 JSON 请求体，便于调试和测试"""
        return json.loads(self.body) if self.body else None


class HTTPTransformer(ABC):
    """HTTP 转换器抽象基类

    子类需要定义：
    - provider_type: 平台类型
    - response_config: 响应成功判定配置
    - build_request(): 构建请求
    """

    provider_type: ProviderType
    response_config: ResponseHandlerConfig

    def can_transform(self, msg: Message) -> bool:
        return getattr(msg, "provider_type", None) == self.provider_type

    def transform(self, msg: Message, account: Account | None) -> tuple[HTTPRequestSpec, ResponseHandler]:
        """校验消息并构建请求

        Raises:
            ConfigError: 账号缺失
            ParamError: 平台不匹配或消息校验失败
        """
        if account is None:
            raise ConfigError("account is required", code="missing_account", provider=self.provider_type)
        if not self.can_transform(msg):
            raise ParamError(
                f"unsupported message type for {self.provider_type}: {type(msg).__name__}",
                code="type_mismatch",
                provider=self.provider_type,
            )
        try:
            msg.validate()
        except ParamError as e:
            e.with_context(provider=self.provider_type)
            raise

        try:
            spec = self.build_request(msg, account)
        except NotifyError as e:
            e.with_context(provider=self.provider_type, account=account.name)
            raise
        return spec, self.response_handler()

    def response_handler(self) -> ResponseHandler:
        return ResponseHandler(self.response_config, provider=self.provider_type)

    @abstractmethod
    def build_request(self, msg: Message, account: Account) -> HTTPRequestSpec:
        """构建 HTTP 请求描述，消息已校验"""
        ...

    @staticmethod
    def base_url(account: Account, default: str) -> str:
        """账号 endpoint 优先，去掉末尾斜杠"""
        return (account.endpoint or default).rstrip("/")
