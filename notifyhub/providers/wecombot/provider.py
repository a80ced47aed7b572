"""企业微信群机器人提供者

file / voice 消息只有 local_path 时，先用选中的账号上传，再用同一账号发送。
"""

import random

import httpx

from notifyhub.core.account import Account, ProviderConfig, StrategyType
from notifyhub.core.logging import get_logger
from notifyhub.core.message import Message, ProviderType
from notifyhub.core.provider import HTTPProvider, SendOptions
from notifyhub.core.uploader import MediaLimits, MediaSource, MediaUploader
from notifyhub.providers.wecombot.messages import MediaMessage
from notifyhub.providers.wecombot.transformer import WeComBotTransformer, errcode_config, upload_endpoint

logger = get_logger("provider.wecombot")

MIN_MEDIA_BYTES = 5
MAX_FILE_BYTES = 20 * 1024 * 1024
MAX_VOICE_BYTES = 2 * 1024 * 1024

MEDIA_LIMITS = {
    "file": MediaLimits(min_size=MIN_MEDIA_BYTES, max_size=MAX_FILE_BYTES),
    "voice": MediaLimits(min_size=MIN_MEDIA_BYTES, max_size=MAX_VOICE_BYTES, extensions=(".amr",)),
}


class WeComBotProvider(HTTPProvider):
    """企业微信群机器人提供者"""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        reuse_connections: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(
            ProviderType.WECOMBOT,
            WeComBotTransformer(),
            config,
            http_client=http_client,
            reuse_connections=reuse_connections,
            rng=rng,
        )
        self.uploader = MediaUploader(
            upload_endpoint,
            errcode_config(metadata_paths={"media_id": "media_id"}),
            MEDIA_LIMITS,
            provider=self.name,
        )

    async def upload_media(
        self,
        source: MediaSource,
        media_type: str = "file",
        options: SendOptions | None = None,
        *,
        filename: str | None = None,
    ) -> tuple[str, Account]:
        """上传媒体文件

        返回 media_id 与上传所用账号，后续发送需通过 SendOptions.account_name
        指定同一账号，media_id 有效期 3 天。
        """
        options = options or SendOptions()
        account = self.select_account(options)
        async with self.client_for(options) as client:
            media_id = await self.uploader.upload(
                account,
                media_type,
                source,
                client,
                filename=filename,
                timeout=options.timeout,
            )
        return media_id, account

    async def prepare(
        self,
        msg: Message,
        account: Account,
        client: httpx.AsyncClient,
        options: SendOptions,
    ) -> None:
        if not isinstance(msg, MediaMessage) or not msg.needs_upload:
            return

        # 上传失败时消息保持原样
        media_id = await self.uploader.upload(
            account,
            msg.msgtype,
            msg.local_path,
            client,
            timeout=options.timeout,
        )
        msg.media.media_id = media_id
        logger.debug("已回填 media_id", account=account.name, msgtype=msg.msgtype)


def new_provider(
    accounts: list[Account],
    strategy: str = StrategyType.ROUND_ROBIN,
    **kwargs,
) -> WeComBotProvider:
    """根据账号列表创建企业微信群机器人提供者"""
    return WeComBotProvider(ProviderConfig(accounts=accounts, strategy=strategy), **kwargs)
