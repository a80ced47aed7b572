"""Telegram Bot 消息

每个变体对应一个 Bot API 方法，字段名与 Bot API 保持一致。
回复使用 reply_parameters，链接预览使用 link_preview_options；
已废弃的 reply_to_message_id / disable_web_page_preview 会被转换并发出
DeprecationWarning，与新字段同时出现时直接拒绝。
"""

import warnings
from typing import Any, ClassVar, Literal

from pydantic import model_validator

from notifyhub.core.errors import ParamError
from notifyhub.core.message import (
    Message,
    ProviderType,
    check_choice,
    check_max_chars,
    check_range,
    require,
)
from notifyhub.providers.telegram.types import (
    PARSE_MODES,
    InputPollOption,
    LinkPreviewOptions,
    MessageEntity,
    ReplyMarkup,
    ReplyParameters,
    validate_entities,
    validate_reply_markup,
)

MAX_TEXT_CHARS = 4096
MAX_CAPTION_CHARS = 1024
MAX_POLL_QUESTION_CHARS = 300
MAX_POLL_OPTION_CHARS = 100
MIN_POLL_OPTIONS = 2
MAX_POLL_OPTIONS = 10
MAX_POLL_EXPLANATION_CHARS = 200
DICE_EMOJIS = ("🎲", "🎯", "🏀", "⚽", "🎳", "🎰")
# live_period 可以是 60 到 86400 秒，或 0x7FFFFFFF 表示无限期
LIVE_PERIOD_FOREVER = 0x7FFFFFFF


def _deprecated(old: str, new: str) -> None:
    warnings.warn(f"{old} is deprecated, use {new}", DeprecationWarning, stacklevel=4)


class TelegramMessage(Message):
    """Telegram 消息基类，包含所有发送方法共有的字段"""

    provider_type: ClassVar[ProviderType] = ProviderType.TELEGRAM

    chat_id: int | str = ""
    business_connection_id: str | None = None
    message_thread_id: int | None = None
    disable_notification: bool | None = None
    protect_content: bool | None = None
    allow_paid_broadcast: bool | None = None
    message_effect_id: str | None = None
    reply_parameters: ReplyParameters | None = None
    reply_markup: ReplyMarkup | None = None

    @model_validator(mode="before")
    @classmethod
    def _upgrade_reply_to(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "reply_to_message_id" not in data:
            return data
        if data.get("reply_parameters") is not None:
            raise ValueError("reply_to_message_id cannot be combined with reply_parameters")
        _deprecated("reply_to_message_id", "reply_parameters")
        data = dict(data)
        message_id = data.pop("reply_to_message_id")
        if message_id is not None:
            data["reply_parameters"] = {"message_id": message_id}
        return data

    def validate(self) -> None:
        super().validate()
        require(self.chat_id, "chat_id")
        if self.reply_parameters is not None:
            self.reply_parameters.validate_reply()
        validate_reply_markup(self.reply_markup)


class _CaptionMessage(TelegramMessage):
    """带说明文字的媒体消息"""

    caption: str | None = None
    parse_mode: str | None = None
    caption_entities: list[MessageEntity] | None = None

    def validate(self) -> None:
        super().validate()
        check_max_chars(self.caption, MAX_CAPTION_CHARS, "caption")
        check_choice(self.parse_mode, PARSE_MODES, "parse_mode")
        validate_entities(self.caption_entities, "caption_entities")
        if self.parse_mode and self.caption_entities:
            raise ParamError("parse_mode cannot be combined with caption_entities", code="conflicting_fields")


# ========== text ==========


class TextMessage(TelegramMessage):
    """文本消息 → sendMessage"""

    msgtype: Literal["text"] = "text"
    text: str = ""
    parse_mode: str | None = None
    entities: list[MessageEntity] | None = None
    link_preview_options: LinkPreviewOptions | None = None

    @model_validator(mode="before")
    @classmethod
    def _upgrade_preview(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "disable_web_page_preview" not in data:
            return data
        if data.get("link_preview_options") is not None:
            raise ValueError("disable_web_page_preview cannot be combined with link_preview_options")
        _deprecated("disable_web_page_preview", "link_preview_options")
        data = dict(data)
        if data.pop("disable_web_page_preview"):
            data["link_preview_options"] = {"is_disabled": True}
        return data

    def validate(self) -> None:
        super().validate()
        require(self.text, "text")
        check_max_chars(self.text, MAX_TEXT_CHARS, "text")
        check_choice(self.parse_mode, PARSE_MODES, "parse_mode")
        validate_entities(self.entities, "entities")
        if self.parse_mode and self.entities:
            raise ParamError("parse_mode cannot be combined with entities", code="conflicting_fields")
        if self.link_preview_options is not None:
            self.link_preview_options.validate_preview()


# ========== 媒体 ==========


class PhotoMessage(_CaptionMessage):
    """图片 → sendPhoto，photo 为 file_id 或 URL"""

    msgtype: Literal["photo"] = "photo"
    photo: str = ""
    show_caption_above_media: bool | None = None
    has_spoiler: bool | None = None

    def validate(self) -> None:
        super().validate()
        require(self.photo, "photo")


class AudioMessage(_CaptionMessage):
    """音频 → sendAudio"""

    msgtype: Literal["audio"] = "audio"
    audio: str = ""
    duration: int | None = None
    performer: str | None = None
    title: str | None = None
    thumbnail: str | None = None

    def validate(self) -> None:
        super().validate()
        require(self.audio, "audio")
        check_range(self.duration, 0, float("inf"), "duration")


class DocumentMessage(_CaptionMessage):
    """文件 → sendDocument"""

    msgtype: Literal["document"] = "document"
    document: str = ""
    thumbnail: str | None = None
    disable_content_type_detection: bool | None = None

    def validate(self) -> None:
        super().validate()
        require(self.document, "document")


class VideoMessage(_CaptionMessage):
    """视频 → sendVideo"""

    msgtype: Literal["video"] = "video"
    video: str = ""
    duration: int | None = None
    width: int | None = None
    height: int | None = None
    thumbnail: str | None = None
    cover: str | None = None
    start_timestamp: int | None = None
    show_caption_above_media: bool | None = None
    has_spoiler: bool | None = None
    supports_streaming: bool | None = None

    def validate(self) -> None:
        super().validate()
        require(self.video, "video")
        for field in ("duration", "width", "height", "start_timestamp"):
            check_range(getattr(self, field), 0, float("inf"), field)


class AnimationMessage(_CaptionMessage):
    """动画（GIF / 无声 MP4）→ sendAnimation"""

    msgtype: Literal["animation"] = "animation"
    animation: str = ""
    duration: int | None = None
    width: int | None = None
    height: int | None = None
    thumbnail: str | None = None
    show_caption_above_media: bool | None = None
    has_spoiler: bool | None = None

    def validate(self) -> None:
        super().validate()
        require(self.animation, "animation")


class VoiceMessage(_CaptionMessage):
    """语音（OGG/OPUS、MP3、M4A）→ sendVoice"""

    msgtype: Literal["voice"] = "voice"
    voice: str = ""
    duration: int | None = None

    def validate(self) -> None:
        super().validate()
        require(self.voice, "voice")
        check_range(self.duration, 0, float("inf"), "duration")


class VideoNoteMessage(TelegramMessage):
    """圆形视频 → sendVideoNote，不支持 caption"""

    msgtype: Literal["video_note"] = "video_note"
    video_note: str = ""
    duration: int | None = None
    length: int | None = None
    thumbnail: str | None = None

    def validate(self) -> None:
        super().validate()
        require(self.video_note, "video_note")
        if self.length is not None and self.length <= 0:
            raise ParamError("length must be > 0", code="out_of_range")


# ========== 位置与联系人 ==========


class LocationMessage(TelegramMessage):
    """位置 → sendLocation"""

    msgtype: Literal["location"] = "location"
    latitude: float | None = None
    longitude: float | None = None
    horizontal_accuracy: float | None = None
    live_period: int | None = None
    heading: int | None = None
    proximity_alert_radius: int | None = None

    def validate(self) -> None:
        super().validate()
        require(self.latitude, "latitude")
        require(self.longitude, "longitude")
        check_range(self.latitude, -90, 90, "latitude")
        check_range(self.longitude, -180, 180, "longitude")
        check_range(self.horizontal_accuracy, 0, 1500, "horizontal_accuracy")
        if self.live_period is not None and self.live_period != LIVE_PERIOD_FOREVER:
            check_range(self.live_period, 60, 86400, "live_period")
        check_range(self.heading, 1, 360, "heading")
        check_range(self.proximity_alert_radius, 1, 100000, "proximity_alert_radius")


class VenueMessage(TelegramMessage):
    """地点 → sendVenue"""

    msgtype: Literal["venue"] = "venue"
    latitude: float | None = None
    longitude: float | None = None
    title: str = ""
    address: str = ""
    foursquare_id: str | None = None
    foursquare_type: str | None = None
    google_place_id: str | None = None
    google_place_type: str | None = None

    def validate(self) -> None:
        super().validate()
        require(self.latitude, "latitude")
        require(self.longitude, "longitude")
        check_range(self.latitude, -90, 90, "latitude")
        check_range(self.longitude, -180, 180, "longitude")
        require(self.title, "title")
        require(self.address, "address")


class ContactMessage(TelegramMessage):
    """联系人 → sendContact"""

    msgtype: Literal["contact"] = "contact"
    phone_number: str = ""
    first_name: str = ""
    last_name: str | None = None
    vcard: str | None = None

    def validate(self) -> None:
        super().validate()
        require(self.phone_number, "phone_number")
        require(self.first_name, "first_name")


# ========== 投票与骰子 ==========


class PollMessage(TelegramMessage):
    """投票 → sendPoll"""

    msgtype: Literal["poll"] = "poll"
    question: str = ""
    question_parse_mode: str | None = None
    question_entities: list[MessageEntity] | None = None
    options: list[InputPollOption] = []
    is_anonymous: bool | None = None
    type: Literal["regular", "quiz"] | None = None
    allows_multiple_answers: bool | None = None
    correct_option_id: int | None = None
    explanation: str | None = None
    explanation_parse_mode: str | None = None
    explanation_entities: list[MessageEntity] | None = None
    open_period: int | None = None
    close_date: int | None = None
    is_closed: bool | None = None

    @classmethod
    def create(cls, chat_id: int | str, question: str, options: list[str], **kwargs: Any) -> "PollMessage":
        return cls(
            chat_id=chat_id,
            question=question,
            options=[InputPollOption(text=text) for text in options],
            **kwargs,
        )

    def validate(self) -> None:
        super().validate()
        require(self.question, "question")
        check_max_chars(self.question, MAX_POLL_QUESTION_CHARS, "question")
        check_choice(self.question_parse_mode, PARSE_MODES, "question_parse_mode")
        validate_entities(self.question_entities, "question_entities")

        if not MIN_POLL_OPTIONS <= len(self.options) <= MAX_POLL_OPTIONS:
            raise ParamError(
                f"poll must have {MIN_POLL_OPTIONS} to {MAX_POLL_OPTIONS} options",
                code="out_of_range",
                data={"count": len(self.options)},
            )
        for index, option in enumerate(self.options):
            require(option.text, f"options[{index}].text")
            check_max_chars(option.text, MAX_POLL_OPTION_CHARS, f"options[{index}].text")
            check_choice(option.text_parse_mode, PARSE_MODES, f"options[{index}].text_parse_mode")
            validate_entities(option.text_entities, f"options[{index}].text_entities")

        if self.type == "quiz":
            if self.correct_option_id is None:
                raise ParamError("correct_option_id is required for quiz polls", code="missing_field")
            if self.allows_multiple_answers:
                raise ParamError("quiz polls cannot allow multiple answers", code="conflicting_fields")
        if self.correct_option_id is not None:
            check_range(self.correct_option_id, 0, len(self.options) - 1, "correct_option_id")
        check_max_chars(self.explanation, MAX_POLL_EXPLANATION_CHARS, "explanation")
        check_choice(self.explanation_parse_mode, PARSE_MODES, "explanation_parse_mode")
        validate_entities(self.explanation_entities, "explanation_entities")
        check_range(self.open_period, 5, 600, "open_period")
        if self.open_period is not None and self.close_date is not None:
            raise ParamError("open_period cannot be combined with close_date", code="conflicting_fields")


class DiceMessage(TelegramMessage):
    """骰子 → sendDice"""

    msgtype: Literal["dice"] = "dice"
    emoji: str | None = None

    def validate(self) -> None:
        super().validate()
        check_choice(self.emoji, DICE_EMOJIS, "emoji")
