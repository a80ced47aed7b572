"""Telegram Bot API 公共类型

只包含发送消息需要的结构：消息实体、回复参数、链接预览、键盘、投票选项。
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from notifyhub.core.errors import ParamError
from notifyhub.core.message import check_choice, require

PARSE_MODES = ("HTML", "Markdown", "MarkdownV2")

ENTITY_TYPES = (
    "mention",
    "hashtag",
    "cashtag",
    "bot_command",
    "url",
    "email",
    "phone_number",
    "bold",
    "italic",
    "underline",
    "strikethrough",
    "spoiler",
    "blockquote",
    "expandable_blockquote",
    "code",
    "pre",
    "text_link",
    "text_mention",
    "custom_emoji",
)


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class User(_Wire):
    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None


class MessageEntity(_Wire):
    """消息实体（粗体、链接、提及等）"""

    type: str
    offset: int
    length: int
    url: str | None = None
    user: User | None = None
    language: str | None = None
    custom_emoji_id: str | None = None

    def validate_entity(self, field: str = "entities") -> None:
        check_choice(self.type, ENTITY_TYPES, f"{field}.type")
        if self.offset < 0:
            raise ParamError(f"{field}.offset must be >= 0", code="out_of_range")
        if self.length <= 0:
            raise ParamError(f"{field}.length must be > 0", code="out_of_range")
        if self.type == "text_link":
            require(self.url, f"{field}.url")
        elif self.type == "text_mention" and self.user is None:
            raise ParamError(f"{field}.user is required for text_mention", code="missing_field")
        elif self.type == "custom_emoji":
            require(self.custom_emoji_id, f"{field}.custom_emoji_id")


def validate_entities(entities: list[MessageEntity] | None, field: str) -> None:
    for index, entity in enumerate(entities or []):
        entity.validate_entity(f"{field}[{index}]")


class ReplyParameters(_Wire):
    """回复参数，取代已废弃的 reply_to_message_id"""

    message_id: int
    chat_id: int | str | None = None
    allow_sending_without_reply: bool | None = None
    quote: str | None = None
    quote_parse_mode: str | None = None
    quote_entities: list[MessageEntity] | None = None
    quote_position: int | None = None

    def validate_reply(self) -> None:
        if self.message_id <= 0:
            raise ParamError("reply_parameters.message_id must be > 0", code="out_of_range")
        check_choice(self.quote_parse_mode, PARSE_MODES, "reply_parameters.quote_parse_mode")
        validate_entities(self.quote_entities, "reply_parameters.quote_entities")


class LinkPreviewOptions(_Wire):
    """链接预览选项，取代已废弃的 disable_web_page_preview"""

    is_disabled: bool | None = None
    url: str | None = None
    prefer_small_media: bool | None = None
    prefer_large_media: bool | None = None
    show_above_text: bool | None = None

    def validate_preview(self) -> None:
        if self.prefer_small_media and self.prefer_large_media:
            raise ParamError(
                "prefer_small_media and prefer_large_media are mutually exclusive",
                code="conflicting_fields",
            )


# ========== 键盘 ==========


class InlineKeyboardButton(_Wire):
    text: str
    url: str | None = None
    callback_data: str | None = None
    switch_inline_query: str | None = None
    switch_inline_query_current_chat: str | None = None
    pay: bool | None = None


class InlineKeyboardMarkup(_Wire):
    inline_keyboard: list[list[InlineKeyboardButton]]


class KeyboardButton(_Wire):
    text: str
    request_contact: bool | None = None
    request_location: bool | None = None


class ReplyKeyboardMarkup(_Wire):
    keyboard: list[list[KeyboardButton]]
    is_persistent: bool | None = None
    resize_keyboard: bool | None = None
    one_time_keyboard: bool | None = None
    input_field_placeholder: str | None = None
    selective: bool | None = None


class ReplyKeyboardRemove(_Wire):
    remove_keyboard: Literal[True] = True
    selective: bool | None = None


class ForceReply(_Wire):
    force_reply: Literal[True] = True
    input_field_placeholder: str | None = None
    selective: bool | None = None


ReplyMarkup = InlineKeyboardMarkup | ReplyKeyboardMarkup | ReplyKeyboardRemove | ForceReply


def validate_reply_markup(markup: ReplyMarkup | None) -> None:
    if isinstance(markup, InlineKeyboardMarkup):
        for row in markup.inline_keyboard:
            for button in row:
                require(button.text, "reply_markup.inline_keyboard.text")
                targets = [
                    button.url,
                    button.callback_data,
                    button.switch_inline_query,
                    button.switch_inline_query_current_chat,
                    button.pay,
                ]
                if sum(t is not None for t in targets) != 1:
                    raise ParamError(
                        "inline keyboard button must have exactly one action",
                        code="conflicting_fields",
                        data={"text": button.text},
                    )
    elif isinstance(markup, ReplyKeyboardMarkup):
        require(markup.keyboard, "reply_markup.keyboard")


# ========== 投票 ==========


class InputPollOption(_Wire):
    text: str
    text_parse_mode: str | None = None
    text_entities: list[MessageEntity] | None = None
