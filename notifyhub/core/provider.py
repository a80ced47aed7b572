"""提供者抽象与 HTTP 提供者外壳

单次发送的状态流转：
    Received → Validated → Selected → Prepared → Transformed → Executed → Classified

任一步骤出错都直接抛出，不做重试。
"""

import random
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from notifyhub.core.account import Account, ProviderConfig
from notifyhub.core.config import settings
from notifyhub.core.errors import NotifyError, ParamError
from notifyhub.core.logging import get_logger
from notifyhub.core.message import Message
from notifyhub.core.response import SendResult
from notifyhub.core.strategy import Selector
from notifyhub.core.transformer import HTTPRequestSpec, HTTPTransformer
from notifyhub.core.transport import execute_request

logger = get_logger("provider")


@dataclass
class SendOptions:
    """单次发送选项

    Attributes:
        account_name: 指定账号名，优先于任何策略
        strategy: 覆盖本次调用的选择策略
        http_client: 覆盖提供者的 HTTP 客户端（测试或自定义传输）
        timeout: 请求超时（秒），转换器未设置时生效
    """

    account_name: str | None = None
    strategy: str | None = None
    http_client: httpx.AsyncClient | None = None
    timeout: float | None = None


class BaseProvider(ABC):
    """通知提供者抽象基类"""

    @property
    @abstractmethod
    def name(self) -> str:
        """平台标签"""
        ...

    @abstractmethod
    async def send(self, msg: Message, options: SendOptions | None = None) -> SendResult:
        """发送消息"""
        ...

    async def close(self) -> None:
        """释放资源"""
        return None


class HTTPProvider(BaseProvider):
    """基于 HTTP 的提供者

    组合账号选择器、转换器和 HTTP 客户端。实例可被并发调用，
    除选择器计数器外不保存单次调用的可变状态。
    """

    def __init__(
        self,
        name: str,
        transformer: HTTPTransformer,
        config: ProviderConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        reuse_connections: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        config.validate_pool(provider=name)
        self._name = name
        self.transformer = transformer
        self.config = config
        self.selector = Selector(config.accounts, config.strategy, rng=rng)
        self._http_client = http_client
        self._owns_client = False
        if http_client is None and reuse_connections:
            self._http_client = self._new_client()
            self._owns_client = True

        logger.info(
            "初始化提供者",
            provider=name,
            accounts=len(config.accounts),
            enabled=len(self.selector.enabled_accounts),
            strategy=str(config.strategy),
        )

    @property
    def name(self) -> str:
        return self._name

    @staticmethod
    def _new_client() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            headers={"User-Agent": settings.HTTP_USER_AGENT},
        )

    @asynccontextmanager
    async def client_for(self, options: SendOptions) -> AsyncIterator[httpx.AsyncClient]:
        """获取本次调用的 HTTP 客户端：调用覆盖 > 提供者客户端 > 临时客户端"""
        client = options.http_client or self._http_client
        if client is not None:
            yield client
            return
        async with self._new_client() as ephemeral:
            yield ephemeral

    def select_account(self, options: SendOptions) -> Account:
        try:
            return self.selector.select(options.account_name, options.strategy)
        except NotifyError as e:
            e.with_context(provider=self.name)
            raise

    async def send(self, msg: Message, options: SendOptions | None = None) -> SendResult:
        """发送消息

        Raises:
            ParamError: 消息校验失败
            ConfigError: 无可用账号或指定账号不存在
            UploadError: 媒体上传失败
            TransportError: 网络错误、超时或非成功状态码
            APIError: 平台返回业务错误
        """
        options = options or SendOptions()

        # 校验在选择账号之前，保证无效消息不会产生任何请求
        if not self.transformer.can_transform(msg):
            raise ParamError(
                f"unsupported message type for {self.name}: {type(msg).__name__}",
                code="type_mismatch",
                provider=self.name,
            )
        try:
            msg.validate()
        except ParamError as e:
            e.with_context(provider=self.name)
            raise

        account = self.select_account(options)
        log = logger.bind(provider=self.name, account=account.name, msgtype=msg.msgtype)
        log.debug("已选择账号")

        try:
            async with self.client_for(options) as client:
                await self.prepare(msg, account, client, options)
                spec, handler = self.transformer.transform(msg, account)
                if spec.timeout is None and options.timeout is not None:
                    spec.timeout = options.timeout
                status_code, body = await self.execute(client, spec)
            result = handler.handle(status_code, body)
        except NotifyError as e:
            e.with_context(provider=self.name, account=account.name)
            log.warning("消息发送失败", kind=e.kind, code=e.code, error=e.message)
            raise

        result.provider = self.name
        result.account = account.name
        log.info("消息发送成功", status_code=result.status_code)
        return result

    async def prepare(
        self,
        msg: Message,
        account: Account,
        client: httpx.AsyncClient,
        options: SendOptions,
    ) -> None:
        """转换前的准备步骤（如媒体上传），默认无操作"""
        return None

    async def execute(self, client: httpx.AsyncClient, spec: HTTPRequestSpec) -> tuple[int, bytes]:
        """执行请求，返回状态码与响应体"""
        return await execute_request(client, spec)

    async def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_client = False

