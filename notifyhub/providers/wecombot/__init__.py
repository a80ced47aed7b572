"""企业微信群机器人"""

from notifyhub.providers.wecombot.messages import (
    Article,
    FileMessage,
    ImageMessage,
    MarkdownBuilder,
    MarkdownMessage,
    MarkdownVersion,
    MediaMessage,
    NewsMessage,
    TextMessage,
    VoiceMessage,
    WeComBotMessage,
)
from notifyhub.providers.wecombot.provider import WeComBotProvider, new_provider
from notifyhub.providers.wecombot.template_card import (
    CardAction,
    CardImage,
    CardType,
    EmphasisContent,
    HorizontalContent,
    ImageTextArea,
    JumpAction,
    MainTitle,
    QuoteArea,
    Source,
    TemplateCard,
    TemplateCardMessage,
    VerticalContent,
)
from notifyhub.providers.wecombot.transformer import WeComBotTransformer

__all__ = [
    "Article",
    "CardAction",
    "CardImage",
    "CardType",
    "EmphasisContent",
    "FileMessage",
    "HorizontalContent",
    "ImageMessage",
    "ImageTextArea",
    "JumpAction",
    "MainTitle",
    "MarkdownBuilder",
    "MarkdownMessage",
    "MarkdownVersion",
    "MediaMessage",
    "NewsMessage",
    "QuoteArea",
    "Source",
    "TemplateCard",
    "TemplateCardMessage",
    "TextMessage",
    "VerticalContent",
    "VoiceMessage",
    "WeComBotMessage",
    "WeComBotProvider",
    "WeComBotTransformer",
    "new_provider",
]
