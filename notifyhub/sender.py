"""发送器

按平台类型管理提供者，并把消息路由到对应的提供者：

    sender = Sender()
    sender.register_provider(telegram.new_provider([Account.create("main", token)]))

    result = await sender.send(TextMessage(chat_id="100", text="hello"))
"""

import asyncio

from notifyhub.core.errors import ConfigError, NotifyError
from notifyhub.core.logging import get_logger
from notifyhub.core.message import Message
from notifyhub.core.provider import BaseProvider, SendOptions
from notifyhub.core.response import SendResult

logger = get_logger("sender")


class Sender:
    """提供者注册表与消息路由

    每个实例相互独立，不使用全局状态。
    """

    def __init__(self) -> None:
        self._providers: dict[str, BaseProvider] = {}

    def register_provider(self, provider: BaseProvider) -> None:
        """注册提供者，同名提供者会被替换"""
        if provider.name in self._providers:
            logger.warning("替换已注册的提供者", provider=provider.name)
        self._providers[provider.name] = provider
        logger.info("已注册提供者", provider=provider.name)

    def unregister_provider(self, name: str) -> BaseProvider | None:
        """注销提供者，返回被注销的实例"""
        provider = self._providers.pop(str(name), None)
        if provider is not None:
            logger.info("已注销提供者", provider=str(name))
        return provider

    def get_provider(self, name: str) -> BaseProvider:
        provider = self._providers.get(str(name))
        if provider is None:
            raise ConfigError(
                f"provider not registered: {name}",
                code="provider_not_registered",
                provider=str(name),
                data={"registered": sorted(self._providers)},
            )
        return provider

    @property
    def providers(self) -> list[str]:
        """已注册的提供者名称"""
        return list(self._providers)

    async def send(self, msg: Message, options: SendOptions | None = None) -> SendResult:
        """按消息的平台类型路由发送"""
        return await self.send_via(msg.provider_type, msg, options)

    async def send_via(self, name: str, msg: Message, options: SendOptions | None = None) -> SendResult:
        """通过指定的提供者发送"""
        provider = self.get_provider(name)
        return await provider.send(msg, options)

    async def dispatch(
        self,
        messages: list[Message],
        options: SendOptions | None = None,
    ) -> list[SendResult | NotifyError]:
        """并发发送多条消息

        单条失败不影响其他消息，结果与输入顺序一致，失败项为对应的错误。
        """
        if not messages:
            return []

        results = await asyncio.gather(
            *(self.send(msg, options) for msg in messages),
            return_exceptions=True,
        )

        processed: list[SendResult | NotifyError] = []
        for result in results:
            if isinstance(result, NotifyError):
                processed.append(result)
            elif isinstance(result, BaseException):
                # 非通知错误（编程错误、取消）继续抛出
                raise result
            else:
                processed.append(result)

        success = sum(1 for r in processed if isinstance(r, SendResult))
        logger.info("批量发送完成", total=len(processed), success=success, failed=len(processed) - success)
        return processed

    async def close(self) -> None:
        """关闭所有提供者"""
        for name, provider in list(self._providers.items()):
            try:
                await provider.close()
            except Exception as e:
                logger.error("关闭提供者失败", provider=name, error=str(e))
        self._providers.clear()
