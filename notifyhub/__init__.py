"""notifyhub - 多平台通知分发库

支持钉钉群机器人、Telegram Bot、企业微信群机器人与邮件。
"""

from notifyhub.core import (
    Account,
    APIError,
    ConfigError,
    Credentials,
    NotifyError,
    ParamError,
    ProviderConfig,
    ProviderType,
    SendOptions,
    SendResult,
    StrategyType,
    TransportError,
    UploadError,
)
from notifyhub.sender import Sender

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "Account",
    "ConfigError",
    "Credentials",
    "NotifyError",
    "ParamError",
    "ProviderConfig",
    "ProviderType",
    "SendOptions",
    "SendResult",
    "Sender",
    "StrategyType",
    "TransportError",
    "UploadError",
    "__version__",
]
