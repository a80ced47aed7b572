"""企业微信模版卡片消息

card_type 取值：
- text_notice: 文本通知模版卡片
- news_notice: 图文展示模版卡片（必须带 card_image）
"""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.core.errors import ParamError
from notifyhub.core.message import check_choice, check_max_bytes, check_range, require
from notifyhub.providers.wecombot.messages import WeComBotMessage

MAX_MAIN_TITLE_BYTES = 26
MAX_MAIN_DESC_BYTES = 30
MAX_SOURCE_DESC_BYTES = 13
MAX_SUB_TITLE_CHARS = 4096
MAX_HORIZONTAL_ITEMS = 6
MAX_HORIZONTAL_KEYNAME_BYTES = 5
MAX_HORIZONTAL_VALUE_BYTES = 26
MAX_JUMP_ITEMS = 5
MAX_JUMP_TITLE_BYTES = 128
MAX_VERTICAL_ITEMS = 4


class CardType(StrEnum):
    TEXT_NOTICE = "text_notice"
    NEWS_NOTICE = "news_notice"


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class Source(_Wire):
    """卡片来源"""

    icon_url: str | None = None
    desc: str | None = None
    desc_color: int | None = None  # 0 灰 1 黑 2 红 3 绿


class MainTitle(_Wire):
    title: str | None = None
    desc: str | None = None


class EmphasisContent(_Wire):
    """关键数据，仅 text_notice"""

    title: str | None = None
    desc: str | None = None


class QuoteArea(_Wire):
    """引用区域，type 0 无跳转 1 url 2 小程序"""

    type: int | None = None
    url: str | None = None
    appid: str | None = None
    pagepath: str | None = None
    title: str | None = None
    quote_text: str | None = None


class HorizontalContent(_Wire):
    """二级标题 + 文本，type 0 文本 1 url 2 附件 3 成员详情"""

    keyname: str = ""
    value: str | None = None
    type: int | None = None
    url: str | None = None
    media_id: str | None = None
    userid: str | None = None


class JumpAction(_Wire):
    """跳转指引，type 0 无跳转 1 url 2 小程序"""

    type: int | None = None
    title: str = ""
    url: str | None = None
    appid: str | None = None
    pagepath: str | None = None


class CardAction(_Wire):
    """整体卡片点击跳转，type 1 url 2 小程序"""

    type: int | None = None
    url: str | None = None
    appid: str | None = None
    pagepath: str | None = None


class CardImage(_Wire):
    """图片样式，仅 news_notice"""

    url: str = ""
    aspect_ratio: float | None = None


class ImageTextArea(_Wire):
    """左图右文样式，仅 news_notice"""

    type: int | None = None
    url: str | None = None
    appid: str | None = None
    pagepath: str | None = None
    title: str | None = None
    desc: str | None = None
    image_url: str = ""


class VerticalContent(_Wire):
    """卡片二级垂直内容，仅 news_notice"""

    title: str = ""
    desc: str | None = None


class TemplateCard(_Wire):
    card_type: CardType = CardType.TEXT_NOTICE
    source: Source | None = None
    main_title: MainTitle | None = None
    emphasis_content: EmphasisContent | None = None
    quote_area: QuoteArea | None = None
    sub_title_text: str | None = None
    horizontal_content_list: list[HorizontalContent] | None = None
    jump_list: list[JumpAction] | None = None
    card_action: CardAction | None = None
    card_image: CardImage | None = None
    image_text_area: ImageTextArea | None = None
    vertical_content_list: list[VerticalContent] | None = None


def _check_link_target(kind: int | None, url: str | None, appid: str | None, pagepath: str | None, field: str) -> None:
    """type 1 需要 url，type 2 需要 appid 与 pagepath"""
    if kind == 1:
        require(url, f"{field}.url")
    elif kind == 2:
        require(appid, f"{field}.appid")
        require(pagepath, f"{field}.pagepath")


class TemplateCardMessage(WeComBotMessage):
    """模版卡片消息"""

    msgtype: Literal["template_card"] = "template_card"
    template_card: TemplateCard = Field(default_factory=TemplateCard)

    @classmethod
    def create(cls, card: TemplateCard) -> "TemplateCardMessage":
        return cls(template_card=card)

    def validate(self) -> None:
        super().validate()
        card = self.template_card
        check_choice(card.card_type, tuple(CardType), "card_type")
        is_news = card.card_type == CardType.NEWS_NOTICE

        if card.source is not None:
            check_max_bytes(card.source.desc, MAX_SOURCE_DESC_BYTES, "source.desc")
            check_range(card.source.desc_color, 0, 3, "source.desc_color")

        title = card.main_title.title if card.main_title else None
        if not title and not card.sub_title_text:
            raise ParamError(
                "either main_title.title or sub_title_text is required",
                code="missing_field",
            )
        if card.main_title is not None:
            check_max_bytes(card.main_title.title, MAX_MAIN_TITLE_BYTES, "main_title.title")
            check_max_bytes(card.main_title.desc, MAX_MAIN_DESC_BYTES, "main_title.desc")

        self._check_card_type_fields(card, is_news)

        if card.quote_area is not None:
            check_range(card.quote_area.type, 0, 2, "quote_area.type")
            area = card.quote_area
            _check_link_target(area.type, area.url, area.appid, area.pagepath, "quote_area")

        items = card.horizontal_content_list or []
        if len(items) > MAX_HORIZONTAL_ITEMS:
            raise ParamError(
                f"horizontal_content_list exceeds {MAX_HORIZONTAL_ITEMS} items",
                code="out_of_range",
            )
        for index, item in enumerate(items):
            field = f"horizontal_content_list[{index}]"
            require(item.keyname, f"{field}.keyname")
            check_max_bytes(item.keyname, MAX_HORIZONTAL_KEYNAME_BYTES, f"{field}.keyname")
            check_max_bytes(item.value, MAX_HORIZONTAL_VALUE_BYTES, f"{field}.value")
            check_range(item.type, 0, 3, f"{field}.type")
            if item.type == 1:
                require(item.url, f"{field}.url")
            elif item.type == 2:
                require(item.media_id, f"{field}.media_id")
            elif item.type == 3:
                require(item.userid, f"{field}.userid")

        jumps = card.jump_list or []
        if len(jumps) > MAX_JUMP_ITEMS:
            raise ParamError(f"jump_list exceeds {MAX_JUMP_ITEMS} items", code="out_of_range")
        for index, jump in enumerate(jumps):
            field = f"jump_list[{index}]"
            require(jump.title, f"{field}.title")
            check_max_bytes(jump.title, MAX_JUMP_TITLE_BYTES, f"{field}.title")
            check_range(jump.type, 0, 2, f"{field}.type")
            _check_link_target(jump.type, jump.url, jump.appid, jump.pagepath, field)

        if card.card_action is None or card.card_action.type is None:
            raise ParamError("card_action.type is required", code="missing_field")
        check_choice(card.card_action.type, (1, 2), "card_action.type")
        action = card.card_action
        _check_link_target(action.type, action.url, action.appid, action.pagepath, "card_action")

    @staticmethod
    def _check_card_type_fields(card: TemplateCard, is_news: bool) -> None:
        if is_news:
            if card.sub_title_text:
                raise ParamError("sub_title_text is only allowed for text_notice", code="invalid_field")
            if card.emphasis_content is not None:
                raise ParamError("emphasis_content is only allowed for text_notice", code="invalid_field")
            if card.card_image is None:
                raise ParamError("card_image is required for news_notice", code="missing_field")
            require(card.card_image.url, "card_image.url")
            check_range(card.card_image.aspect_ratio, 1.3, 2.25, "card_image.aspect_ratio")
            if card.image_text_area is not None:
                area = card.image_text_area
                require(area.image_url, "image_text_area.image_url")
                check_range(area.type, 0, 2, "image_text_area.type")
                _check_link_target(area.type, area.url, area.appid, area.pagepath, "image_text_area")
            vertical = card.vertical_content_list or []
            if len(vertical) > MAX_VERTICAL_ITEMS:
                raise ParamError(
                    f"vertical_content_list exceeds {MAX_VERTICAL_ITEMS} items",
                    code="out_of_range",
                )
            for index, item in enumerate(vertical):
                require(item.title, f"vertical_content_list[{index}].title")
            return

        if card.card_image is not None:
            raise ParamError("card_image is only allowed for news_notice", code="invalid_field")
        if card.image_text_area is not None:
            raise ParamError("image_text_area is only allowed for news_notice", code="invalid_field")
        if card.vertical_content_list:
            raise ParamError("vertical_content_list is only allowed for news_notice", code="invalid_field")
        if card.sub_title_text and len(card.sub_title_text) > MAX_SUB_TITLE_CHARS:
            raise ParamError(
                f"sub_title_text exceeds {MAX_SUB_TITLE_CHARS} characters",
                code="content_too_long",
            )
