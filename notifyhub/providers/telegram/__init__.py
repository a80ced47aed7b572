"""Telegram Bot"""

from notifyhub.providers.telegram.messages import (
    AnimationMessage,
    AudioMessage,
    ContactMessage,
    DiceMessage,
    DocumentMessage,
    LocationMessage,
    PhotoMessage,
    PollMessage,
    TelegramMessage,
    TextMessage,
    VenueMessage,
    VideoMessage,
    VideoNoteMessage,
    VoiceMessage,
)
from notifyhub.providers.telegram.provider import TelegramProvider, new_provider
from notifyhub.providers.telegram.transformer import ENDPOINTS, TelegramTransformer
from notifyhub.providers.telegram.types import (
    ForceReply,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InputPollOption,
    KeyboardButton,
    LinkPreviewOptions,
    MessageEntity,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
    ReplyParameters,
    User,
)

__all__ = [
    "ENDPOINTS",
    "AnimationMessage",
    "AudioMessage",
    "ContactMessage",
    "DiceMessage",
    "DocumentMessage",
    "ForceReply",
    "InlineKeyboardButton",
    "InlineKeyboardMarkup",
    "InputPollOption",
    "KeyboardButton",
    "LinkPreviewOptions",
    "LocationMessage",
    "MessageEntity",
    "PhotoMessage",
    "PollMessage",
    "ReplyKeyboardMarkup",
    "ReplyKeyboardRemove",
    "ReplyParameters",
    "TelegramMessage",
    "TelegramProvider",
    "TelegramTransformer",
    "TextMessage",
    "User",
    "VenueMessage",
    "VideoMessage",
    "VideoNoteMessage",
    "VoiceMessage",
    "new_provider",
]
