"""Telegram Bot 转换器

URL: https://api.telegram.org/bot<token>/<method>
成功条件：HTTP 2xx 且 ok == true，失败时带上 error_code 与 description。
"""

from notifyhub.core.account import Account
from notifyhub.core.config import settings
from notifyhub.core.errors import ParamError
from notifyhub.core.message import Message, ProviderType
from notifyhub.core.response import MatchMode, ResponseHandlerConfig
from notifyhub.core.transformer import HTTPRequestSpec, HTTPTransformer

# 消息变体 → Bot API 方法
ENDPOINTS: dict[str, str] = {
    "text": "sendMessage",
    "photo": "sendPhoto",
    "audio": "sendAudio",
    "voice": "sendVoice",
    "document": "sendDocument",
    "video": "sendVideo",
    "animation": "sendAnimation",
    "video_note": "sendVideoNote",
    "location": "sendLocation",
    "contact": "sendContact",
    "poll": "sendPoll",
    "dice": "sendDice",
    "venue": "sendVenue",
}


def endpoint_for(msgtype: str) -> str:
    endpoint = ENDPOINTS.get(msgtype)
    if endpoint is None:
        raise ParamError(
            f"unsupported telegram message type: {msgtype}",
            code="type_mismatch",
            provider=ProviderType.TELEGRAM,
        )
    return endpoint


class TelegramTransformer(HTTPTransformer):
    """Telegram HTTP 转换器"""

    provider_type = ProviderType.TELEGRAM

    def __init__(self) -> None:
        self.response_config = ResponseHandlerConfig(
            check_body=True,
            path="ok",
            expect=True,
            mode=MatchMode.EQUAL,
            code_path="error_code",
            msg_path="description",
            metadata_paths={"message_id": "result.message_id"},
        )

    def can_transform(self, msg: Message) -> bool:
        return super().can_transform(msg) and msg.msgtype in ENDPOINTS

    def build_request(self, msg: Message, account: Account) -> HTTPRequestSpec:
        if not account.api_key:
            raise ParamError("bot token is required", code="missing_credential", account=account.name)

        base = self.base_url(account, settings.TELEGRAM_BASE_URL)
        url = f"{base}/bot{account.api_key}/{endpoint_for(msg.msgtype)}"
        return HTTPRequestSpec.json_post(url, msg.to_payload())
