"""企业微信群机器人转换器

发送：POST https://qyapi.weixin.qq.com/cgi-bin/webhook/send?key=<key>
上传：POST https://qyapi.weixin.qq.com/cgi-bin/webhook/upload_media?key=<key>&type=<file|voice>
成功条件：HTTP 2xx 且 errcode == 0。
"""

from notifyhub.core.account import Account
from notifyhub.core.config import settings
from notifyhub.core.errors import ParamError
from notifyhub.core.message import Message, ProviderType
from notifyhub.core.response import MatchMode, ResponseHandlerConfig
from notifyhub.core.transformer import HTTPRequestSpec, HTTPTransformer
from notifyhub.providers.wecombot.messages import MediaMessage

SEND_PATH = "/cgi-bin/webhook/send"
UPLOAD_PATH = "/cgi-bin/webhook/upload_media"


def errcode_config(**kwargs) -> ResponseHandlerConfig:
    """errcode == 0 判定成功的响应配置"""
    return ResponseHandlerConfig(
        check_body=True,
        path="errcode",
        expect=0,
        mode=MatchMode.EQUAL,
        code_path="errcode",
        msg_path="errmsg",
        **kwargs,
    )


def _require_key(account: Account) -> str:
    if not account.api_key:
        raise ParamError("webhook key is required", code="missing_credential", account=account.name)
    return account.api_key


def upload_endpoint(account: Account, media_type: str) -> tuple[str, list[tuple[str, str]]]:
    """上传地址与查询参数"""
    key = _require_key(account)
    url = f"{HTTPTransformer.base_url(account, settings.WECOM_BASE_URL)}{UPLOAD_PATH}"
    return url, [("key", key), ("type", media_type)]


class WeComBotTransformer(HTTPTransformer):
    """企业微信群机器人 HTTP 转换器"""

    provider_type = ProviderType.WECOMBOT

    def __init__(self) -> None:
        self.response_config = errcode_config()

    def build_request(self, msg: Message, account: Account) -> HTTPRequestSpec:
        if isinstance(msg, MediaMessage) and not msg.media.media_id:
            # 只有 local_path 的消息必须先经提供者上传
            raise ParamError(
                f"{msg.msgtype} message has no media_id, upload it first",
                code="upload_required",
                account=account.name,
                data={"local_path": msg.local_path},
            )
        key = _require_key(account)
        url = f"{self.base_url(account, settings.WECOM_BASE_URL)}{SEND_PATH}"
        return HTTPRequestSpec.json_post(url, msg.to_payload(), query_params=[("key", key)])
