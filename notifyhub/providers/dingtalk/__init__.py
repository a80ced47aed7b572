"""钉钉群机器人"""

from notifyhub.providers.dingtalk.messages import (
    ActionButton,
    ActionCardMessage,
    At,
    DingTalkMessage,
    FeedCardLink,
    FeedCardMessage,
    LinkMessage,
    MarkdownMessage,
    TextMessage,
)
from notifyhub.providers.dingtalk.provider import DingTalkProvider, new_provider
from notifyhub.providers.dingtalk.transformer import DingTalkTransformer

__all__ = [
    "ActionButton",
    "ActionCardMessage",
    "At",
    "DingTalkMessage",
    "DingTalkProvider",
    "DingTalkTransformer",
    "FeedCardLink",
    "FeedCardMessage",
    "LinkMessage",
    "MarkdownMessage",
    "TextMessage",
    "new_provider",
]
