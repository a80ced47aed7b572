"""企业微信群机器人消息

支持 text、markdown（legacy / v2）、image、news、file、voice、template_card。
file / voice 可以只给出 local_path，发送时由提供者上传并回填 media_id。
"""

import base64
import binascii
import os
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.core.errors import ParamError
from notifyhub.core.message import (
    Message,
    ProviderType,
    check_max_bytes,
    check_mentions,
    require,
)
from notifyhub.utils.signer import md5_hex

MAX_TEXT_BYTES = 2048
MAX_MARKDOWN_CHARS = 4096
MAX_IMAGE_BYTES = 2 * 1024 * 1024
MAX_NEWS_ARTICLES = 8


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class WeComBotMessage(Message):
    """企业微信群机器人消息基类"""

    provider_type: ClassVar[ProviderType] = ProviderType.WECOMBOT


# ========== text ==========


class TextContent(_Wire):
    content: str = ""
    mentioned_list: list[str] | None = None
    mentioned_mobile_list: list[str] | None = None


class TextMessage(WeComBotMessage):
    """文本消息"""

    msgtype: Literal["text"] = "text"
    text: TextContent = Field(default_factory=TextContent)

    @classmethod
    def create(
        cls,
        content: str,
        *,
        mentioned_list: list[str] | None = None,
        mentioned_mobile_list: list[str] | None = None,
    ) -> "TextMessage":
        return cls(
            text=TextContent(
                content=content,
                mentioned_list=mentioned_list,
                mentioned_mobile_list=mentioned_mobile_list,
            )
        )

    def validate(self) -> None:
        super().validate()
        require(self.text.content, "text.content")
        check_max_bytes(self.text.content, MAX_TEXT_BYTES, "text content")
        check_mentions(self.text.mentioned_list, "mentioned_list")
        check_mentions(self.text.mentioned_mobile_list, "mentioned_mobile_list")


# ========== markdown ==========


class MarkdownVersion(StrEnum):
    """markdown 版本，v2 的线上信封键为 markdown_v2"""

    LEGACY = "legacy"
    V2 = "v2"


class MarkdownContent(_Wire):
    content: str = ""


class MarkdownMessage(WeComBotMessage):
    """Markdown 消息"""

    msgtype: Literal["markdown", "markdown_v2"] = "markdown"
    markdown: MarkdownContent = Field(default_factory=MarkdownContent)

    @classmethod
    def create(cls, content: str, *, version: MarkdownVersion = MarkdownVersion.LEGACY) -> "MarkdownMessage":
        msgtype = "markdown_v2" if version == MarkdownVersion.V2 else "markdown"
        return cls(msgtype=msgtype, markdown=MarkdownContent(content=content))

    @property
    def version(self) -> MarkdownVersion:
        return MarkdownVersion.V2 if self.msgtype == "markdown_v2" else MarkdownVersion.LEGACY

    def validate(self) -> None:
        super().validate()
        require(self.markdown.content, "markdown.content")
        if len(self.markdown.content) > MAX_MARKDOWN_CHARS:
            raise ParamError(
                f"markdown content exceeds {MAX_MARKDOWN_CHARS} characters",
                code="content_too_long",
                data={"length": len(self.markdown.content), "limit": MAX_MARKDOWN_CHARS},
            )

    def to_payload(self) -> dict[str, Any]:
        # 信封键跟随 msgtype：markdown 或 markdown_v2
        return {"msgtype": self.msgtype, self.msgtype: self.markdown.model_dump(mode="json")}


# ========== image ==========


class ImageContent(_Wire):
    base64: str = ""
    md5: str = ""


class ImageMessage(WeComBotMessage):
    """图片消息，内容为 base64 与原始字节的 md5，不需要上传"""

    msgtype: Literal["image"] = "image"
    image: ImageContent = Field(default_factory=ImageContent)

    @classmethod
    def from_bytes(cls, data: bytes) -> "ImageMessage":
        return cls(
            image=ImageContent(
                base64=base64.b64encode(data).decode("ascii"),
                md5=md5_hex(data),
            )
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "ImageMessage":
        return cls.from_bytes(Path(path).read_bytes())

    def validate(self) -> None:
        super().validate()
        require(self.image.base64, "image.base64")
        require(self.image.md5, "image.md5")
        # 按 base64 长度估算原始大小，避免解码大图
        estimated = len(self.image.base64) * 3 // 4
        if estimated > MAX_IMAGE_BYTES:
            raise ParamError(
                f"image size exceeds {MAX_IMAGE_BYTES} bytes",
                code="content_too_long",
                data={"estimated": estimated},
            )
        try:
            base64.b64decode(self.image.base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ParamError("image.base64 is not valid base64", code="invalid_value") from e


# ========== news ==========


class Article(_Wire):
    title: str = ""
    description: str | None = None
    url: str = ""
    picurl: str | None = None


class NewsContent(_Wire):
    articles: list[Article] = Field(default_factory=list)


class NewsMessage(WeComBotMessage):
    """图文消息，1 到 8 条"""

    msgtype: Literal["news"] = "news"
    news: NewsContent = Field(default_factory=NewsContent)

    @classmethod
    def create(cls, articles: list[Article]) -> "NewsMessage":
        return cls(news=NewsContent(articles=articles))

    def validate(self) -> None:
        super().validate()
        articles = self.news.articles
        if not 1 <= len(articles) <= MAX_NEWS_ARTICLES:
            raise ParamError(
                f"news must contain 1 to {MAX_NEWS_ARTICLES} articles",
                code="out_of_range",
                data={"count": len(articles)},
            )
        for index, article in enumerate(articles):
            require(article.title, f"news.articles[{index}].title")
            require(article.url, f"news.articles[{index}].url")


# ========== file / voice ==========


class MediaContent(_Wire):
    media_id: str = ""


class MediaMessage(WeComBotMessage):
    """引用 media_id 的消息，local_path 不参与序列化"""

    local_path: str = Field(default="", exclude=True)

    @property
    def media(self) -> MediaContent:
        return getattr(self, self.msgtype)

    @property
    def needs_upload(self) -> bool:
        return not self.media.media_id and bool(self.local_path)

    def validate(self) -> None:
        super().validate()
        if not self.media.media_id and not self.local_path:
            raise ParamError(
                f"{self.msgtype} requires media_id or local_path",
                code="missing_field",
                data={"field": f"{self.msgtype}.media_id"},
            )
        if not self.media.media_id and not os.path.isfile(self.local_path):
            raise ParamError(
                f"local file not found: {self.local_path}",
                code="file_not_found",
                data={"path": self.local_path},
            )


class FileMessage(MediaMessage):
    """文件消息"""

    msgtype: Literal["file"] = "file"
    file: MediaContent = Field(default_factory=MediaContent)

    @classmethod
    def create(cls, *, media_id: str = "", local_path: str = "") -> "FileMessage":
        return cls(file=MediaContent(media_id=media_id), local_path=local_path)


class VoiceMessage(MediaMessage):
    """语音消息，仅支持 AMR 格式"""

    msgtype: Literal["voice"] = "voice"
    voice: MediaContent = Field(default_factory=MediaContent)

    @classmethod
    def create(cls, *, media_id: str = "", local_path: str = "") -> "VoiceMessage":
        return cls(voice=MediaContent(media_id=media_id), local_path=local_path)


# ========== markdown 构建辅助 ==========


class MarkdownBuilder:
    """legacy markdown 内容构建器

    企业微信 legacy markdown 只支持部分语法，font color 仅支持
    info（绿色）、comment（灰色）、warning（橙红色）。
    """

    COLORS = ("info", "comment", "warning")

    def __init__(self) -> None:
        self._lines: list[str] = []

    def heading(self, text: str, level: int = 1) -> "MarkdownBuilder":
        level = min(max(level, 1), 6)
        self._lines.append(f"{'#' * level} {text}")
        return self

    def text(self, text: str) -> "MarkdownBuilder":
        self._lines.append(text)
        return self

    def bold(self, text: str) -> "MarkdownBuilder":
        self._lines.append(f"**{text}**")
        return self

    def link(self, text: str, url: str) -> "MarkdownBuilder":
        self._lines.append(f"[{text}]({url})")
        return self

    def quote(self, text: str) -> "MarkdownBuilder":
        self._lines.append(f"> {text}")
        return self

    def colored(self, text: str, color: str) -> "MarkdownBuilder":
        if color not in self.COLORS:
            raise ParamError(f"invalid font color: {color}", code="invalid_value")
        self._lines.append(f'<font color="{color}">{text}</font>')
        return self

    def mention(self, user_id: str) -> "MarkdownBuilder":
        self._lines.append(f"<@{user_id}>")
        return self

    def build(self) -> str:
        return "\n".join(self._lines)

    def to_message(self, version: MarkdownVersion = MarkdownVersion.LEGACY) -> MarkdownMessage:
        return MarkdownMessage.create(self.build(), version=version)
