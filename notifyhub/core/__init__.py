"""核心分发引擎"""

from notifyhub.core.account import Account, Credentials, ProviderConfig, StrategyType
from notifyhub.core.errors import (
    APIError,
    ConfigError,
    NotifyError,
    ParamError,
    TransportError,
    UploadError,
)
from notifyhub.core.message import Message, ProviderType
from notifyhub.core.provider import BaseProvider, HTTPProvider, SendOptions
from notifyhub.core.response import MatchMode, ResponseHandler, ResponseHandlerConfig, SendResult
from notifyhub.core.strategy import Selector
from notifyhub.core.transformer import BodyType, HTTPRequestSpec, HTTPTransformer
from notifyhub.core.uploader import MediaLimits, MediaUploader

__all__ = [
    "APIError",
    "Account",
    "BaseProvider",
    "BodyType",
    "ConfigError",
    "Credentials",
    "HTTPProvider",
    "HTTPRequestSpec",
    "HTTPTransformer",
    "MatchMode",
    "MediaLimits",
    "MediaUploader",
    "Message",
    "NotifyError",
    "ParamError",
    "ProviderConfig",
    "ProviderType",
    "ResponseHandler",
    "ResponseHandlerConfig",
    "Selector",
    "SendOptions",
    "SendResult",
    "StrategyType",
    "TransportError",
    "UploadError",
]
