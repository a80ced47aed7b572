"""钉钉群机器人消息

支持 text、markdown、link、actionCard、feedCard 五种消息。
线上字段名与钉钉文档保持一致（atMobiles、isAtAll、btnOrientation 等）。
"""

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.core.errors import ParamError
from notifyhub.core.message import (
    Message,
    ProviderType,
    check_choice,
    check_max_bytes,
    require,
)

MAX_TEXT_BYTES = 2048
MAX_MARKDOWN_BYTES = 2048


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class At(_Wire):
    """@ 提醒"""

    at_mobiles: list[str] | None = Field(default=None, alias="atMobiles")
    at_user_ids: list[str] | None = Field(default=None, alias="atUserIds")
    is_at_all: bool | None = Field(default=None, alias="isAtAll")


class DingTalkMessage(Message):
    """钉钉消息基类"""

    provider_type: ClassVar[ProviderType] = ProviderType.DINGTALK


def _build_at(
    at_mobiles: list[str] | None,
    at_user_ids: list[str] | None,
    at_all: bool,
) -> At | None:
    if not (at_mobiles or at_user_ids or at_all):
        return None
    return At(at_mobiles=at_mobiles, at_user_ids=at_user_ids, is_at_all=at_all or None)


# ========== text ==========


class TextContent(_Wire):
    content: str = ""


class TextMessage(DingTalkMessage):
    """文本消息"""

    msgtype: Literal["text"] = "text"
    text: TextContent = Field(default_factory=TextContent)
    at: At | None = None

    @classmethod
    def create(
        cls,
        content: str,
        *,
        at_mobiles: list[str] | None = None,
        at_user_ids: list[str] | None = None,
        at_all: bool = False,
    ) -> "TextMessage":
        return cls(text=TextContent(content=content), at=_build_at(at_mobiles, at_user_ids, at_all))

    def validate(self) -> None:
        super().validate()
        require(self.text.content, "text.content")
        check_max_bytes(self.text.content, MAX_TEXT_BYTES, "text content")


# ========== markdown ==========


class MarkdownContent(_Wire):
    title: str = ""
    text: str = ""


class MarkdownMessage(DingTalkMessage):
    """Markdown 消息，title 用于会话列表展示"""

    msgtype: Literal["markdown"] = "markdown"
    markdown: MarkdownContent = Field(default_factory=MarkdownContent)
    at: At | None = None

    @classmethod
    def create(
        cls,
        title: str,
        text: str,
        *,
        at_mobiles: list[str] | None = None,
        at_user_ids: list[str] | None = None,
        at_all: bool = False,
    ) -> "MarkdownMessage":
        return cls(
            markdown=MarkdownContent(title=title, text=text),
            at=_build_at(at_mobiles, at_user_ids, at_all),
        )

    def validate(self) -> None:
        super().validate()
        require(self.markdown.title, "markdown.title")
        require(self.markdown.text, "markdown.text")
        check_max_bytes(self.markdown.text, MAX_MARKDOWN_BYTES, "markdown text")


# ========== link ==========


class LinkContent(_Wire):
    title: str = ""
    text: str = ""
    message_url: str = Field(default="", alias="messageUrl")
    pic_url: str | None = Field(default=None, alias="picUrl")


class LinkMessage(DingTalkMessage):
    """链接消息"""

    msgtype: Literal["link"] = "link"
    link: LinkContent = Field(default_factory=LinkContent)

    @classmethod
    def create(cls, title: str, text: str, message_url: str, pic_url: str | None = None) -> "LinkMessage":
        return cls(link=LinkContent(title=title, text=text, message_url=message_url, pic_url=pic_url))

    def validate(self) -> None:
        super().validate()
        require(self.link.title, "link.title")
        require(self.link.text, "link.text")
        require(self.link.message_url, "link.messageUrl")


# ========== actionCard ==========


class ActionButton(_Wire):
    title: str = ""
    action_url: str = Field(default="", alias="actionURL")


class ActionCardContent(_Wire):
    title: str = ""
    text: str = ""
    btn_orientation: str | None = Field(default=None, alias="btnOrientation")
    single_title: str | None = Field(default=None, alias="singleTitle")
    single_url: str | None = Field(default=None, alias="singleURL")
    btns: list[ActionButton] | None = None


class ActionCardMessage(DingTalkMessage):
    """ActionCard 消息

    整体跳转（singleTitle + singleURL）与独立跳转（btns）二选一。
    """

    msgtype: Literal["actionCard"] = "actionCard"
    action_card: ActionCardContent = Field(default_factory=ActionCardContent, alias="actionCard")

    @classmethod
    def single(
        cls,
        title: str,
        text: str,
        single_title: str,
        single_url: str,
        *,
        btn_orientation: str | None = None,
    ) -> "ActionCardMessage":
        return cls(
            action_card=ActionCardContent(
                title=title,
                text=text,
                single_title=single_title,
                single_url=single_url,
                btn_orientation=btn_orientation,
            )
        )

    @classmethod
    def multi(
        cls,
        title: str,
        text: str,
        buttons: list[tuple[str, str]],
        *,
        btn_orientation: str = "0",
    ) -> "ActionCardMessage":
        return cls(
            action_card=ActionCardContent(
                title=title,
                text=text,
                btn_orientation=btn_orientation,
                btns=[ActionButton(title=t, action_url=u) for t, u in buttons],
            )
        )

    def validate(self) -> None:
        super().validate()
        card = self.action_card
        require(card.title, "actionCard.title")
        require(card.text, "actionCard.text")
        check_choice(card.btn_orientation, ("0", "1"), "btnOrientation")

        has_single = bool(card.single_title or card.single_url)
        has_multi = bool(card.btns)
        if has_single and has_multi:
            raise ParamError(
                "actionCard cannot have both single button and multiple buttons",
                code="conflicting_fields",
            )
        if not has_single and not has_multi:
            raise ParamError(
                "actionCard requires either single button or multiple buttons",
                code="missing_field",
            )
        if has_single:
            require(card.single_title, "actionCard.singleTitle")
            require(card.single_url, "actionCard.singleURL")
        for index, btn in enumerate(card.btns or []):
            require(btn.title, f"actionCard.btns[{index}].title")
            require(btn.action_url, f"actionCard.btns[{index}].actionURL")


# ========== feedCard ==========


class FeedCardLink(_Wire):
    title: str = ""
    message_url: str = Field(default="", alias="messageURL")
    pic_url: str = Field(default="", alias="picURL")


class FeedCardContent(_Wire):
    links: list[FeedCardLink] = Field(default_factory=list)


class FeedCardMessage(DingTalkMessage):
    """FeedCard 消息"""

    msgtype: Literal["feedCard"] = "feedCard"
    feed_card: FeedCardContent = Field(default_factory=FeedCardContent, alias="feedCard")

    @classmethod
    def create(cls, links: list[tuple[str, str, str]]) -> "FeedCardMessage":
        """links: [(title, message_url, pic_url), ...]"""
        return cls(
            feed_card=FeedCardContent(
                links=[FeedCardLink(title=t, message_url=u, pic_url=p) for t, u, p in links]
            )
        )

    def validate(self) -> None:
        super().validate()
        require(self.feed_card.links, "feedCard.links")
        for index, link in enumerate(self.feed_card.links):
            require(link.title, f"feedCard.links[{index}].title")
            require(link.message_url, f"feedCard.links[{index}].messageURL")
            require(link.pic_url, f"feedCard.links[{index}].picURL")
