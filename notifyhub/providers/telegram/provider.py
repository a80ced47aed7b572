"""Telegram Bot 提供者"""

import random

import httpx

from notifyhub.core.account import Account, ProviderConfig, StrategyType
from notifyhub.core.message import ProviderType
from notifyhub.core.provider import HTTPProvider
from notifyhub.providers.telegram.transformer import TelegramTransformer


class TelegramProvider(HTTPProvider):
    """Telegram 提供者，账号的 key 为 bot token"""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        reuse_connections: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(
            ProviderType.TELEGRAM,
            TelegramTransformer(),
            config,
            http_client=http_client,
            reuse_connections=reuse_connections,
            rng=rng,
        )


def new_provider(
    accounts: list[Account],
    strategy: str = StrategyType.ROUND_ROBIN,
    **kwargs,
) -> TelegramProvider:
    """根据账号列表创建 Telegram 提供者"""
    return TelegramProvider(ProviderConfig(accounts=accounts, strategy=strategy), **kwargs)
