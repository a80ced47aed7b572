"""钉钉群机器人提供者"""

import random
from collections.abc import Callable

import httpx

from notifyhub.core.account import Account, ProviderConfig, StrategyType
from notifyhub.core.message import ProviderType
from notifyhub.core.provider import HTTPProvider
from notifyhub.providers.dingtalk.transformer import DingTalkTransformer


class DingTalkProvider(HTTPProvider):
    """钉钉提供者"""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        reuse_connections: bool = False,
        clock: Callable[[], int] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(
            ProviderType.DINGTALK,
            DingTalkTransformer(clock=clock),
            config,
            http_client=http_client,
            reuse_connections=reuse_connections,
            rng=rng,
        )


def new_provider(
    accounts: list[Account],
    strategy: str = StrategyType.ROUND_ROBIN,
    **kwargs,
) -> DingTalkProvider:
    """根据账号列表创建钉钉提供者"""
    return DingTalkProvider(ProviderConfig(accounts=accounts, strategy=strategy), **kwargs)
