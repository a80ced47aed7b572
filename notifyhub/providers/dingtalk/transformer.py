"""钉钉群机器人转换器

URL: https://oapi.dingtalk.com/robot/send?access_token=<key>
配置了 secret 时追加 timestamp 与 sign 参数（加签模式）。
成功条件：HTTP 2xx 且 errcode == 0。
"""

import time
from collections.abc import Callable

from notifyhub.core.account import Account
from notifyhub.core.config import settings
from notifyhub.core.errors import ParamError
from notifyhub.core.message import Message, ProviderType
from notifyhub.core.response import MatchMode, ResponseHandlerConfig
from notifyhub.core.transformer import HTTPRequestSpec, HTTPTransformer
from notifyhub.utils.signer import dingtalk_sign


def _now_ms() -> int:
    return int(time.time() * 1000)


class DingTalkTransformer(HTTPTransformer):
    """钉钉 HTTP 转换器"""

    provider_type = ProviderType.DINGTALK

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        # clock 返回毫秒时间戳，测试中可固定
        self.clock = clock or _now_ms
        self.response_config = ResponseHandlerConfig(
            check_body=True,
            path="errcode",
            expect=0,
            mode=MatchMode.EQUAL,
            code_path="errcode",
            msg_path="errmsg",
        )

    def build_request(self, msg: Message, account: Account) -> HTTPRequestSpec:
        if not account.api_key:
            raise ParamError("access token is required", code="missing_credential", account=account.name)

        params = [("access_token", account.api_key)]
        if account.api_secret:
            timestamp = self.clock()
            params.append(("timestamp", str(timestamp)))
            params.append(("sign", dingtalk_sign(account.api_secret, timestamp)))

        url = f"{self.base_url(account, settings.DINGTALK_BASE_URL)}/robot/send"
        return HTTPRequestSpec.json_post(url, msg.to_payload(), query_params=params)
