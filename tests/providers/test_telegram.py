"""Telegram 提供者测试"""

import pytest
from pydantic import ValidationError

from notifyhub.core.account import Account
from notifyhub.core.errors import APIError, ParamError
from notifyhub.core.provider import SendOptions
from notifyhub.providers import telegram
from notifyhub.providers.telegram import (
    ENDPOINTS,
    AnimationMessage,
    AudioMessage,
    ContactMessage,
    DiceMessage,
    DocumentMessage,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    LinkPreviewOptions,
    LocationMessage,
    MessageEntity,
    PhotoMessage,
    PollMessage,
    ReplyParameters,
    TextMessage,
    VenueMessage,
    VideoMessage,
    VideoNoteMessage,
    VoiceMessage,
)

OK = {"ok": True, "result": {"message_id": 7}}


def _provider(mock_http):
    return telegram.new_provider([Account.create("main", "bot123:token")], http_client=mock_http.client)


class TestTelegramSend:
    """测试发送请求"""

    @pytest.mark.anyio
    async def test_send_text(self, mock_http):
        """测试文本消息的 URL 与请求体"""
        mock_http.reply(json_body=OK)
        result = await _provider(mock_http).send(TextMessage(chat_id="100", text="hello"))

        request = mock_http.last
        assert request.method == "POST"
        assert request.url.host == "api.telegram.org"
        assert request.url.path == "/botbot123:token/sendMessage"
        assert request.headers["content-type"].startswith("application/json")
        assert mock_http.last_json() == {"msgtype": "text", "chat_id": "100", "text": "hello"}
        assert result.metadata["message_id"] == 7
        assert result.account == "main"

    @pytest.mark.anyio
    async def test_poll_api_error(self, mock_http):
        """测试平台返回 ok=false 时的错误"""
        mock_http.reply(json_body={"ok": False, "error_code": 400, "description": "bad"})
        msg = PollMessage.create("100", "Are you OK?", ["Yes", "No"])

        with pytest.raises(APIError) as exc_info:
            await _provider(mock_http).send(msg)

        error = exc_info.value
        assert error.api_code == 400
        assert error.api_message == "bad"
        assert mock_http.last.url.path.endswith("/sendPoll")
        body = mock_http.last_json()
        assert body["question"] == "Are you OK?"
        assert body["options"] == [{"text": "Yes"}, {"text": "No"}]

    @pytest.mark.anyio
    async def test_custom_endpoint(self, mock_http):
        """测试账号自定义 API 地址"""
        mock_http.reply(json_body=OK)
        account = Account.create("local", "T", endpoint="http://localhost:8081/")
        provider = telegram.new_provider([account])
        await provider.send(DiceMessage(chat_id=1), SendOptions(http_client=mock_http.client))
        assert str(mock_http.last.url) == "http://localhost:8081/botT/sendDice"

    @pytest.mark.anyio
    async def test_missing_token(self, mock_http):
        provider = telegram.new_provider([Account.create("main", "")], http_client=mock_http.client)
        with pytest.raises(ParamError) as exc_info:
            await provider.send(TextMessage(chat_id="1", text="x"))
        assert exc_info.value.code == "missing_credential"
        assert mock_http.requests == []


class TestEndpoints:
    """测试消息变体与 Bot API 方法的映射"""

    @pytest.mark.parametrize(
        ("msg", "method"),
        [
            (TextMessage(chat_id=1, text="t"), "sendMessage"),
            (PhotoMessage(chat_id=1, photo="p"), "sendPhoto"),
            (AudioMessage(chat_id=1, audio="a"), "sendAudio"),
            (VoiceMessage(chat_id=1, voice="v"), "sendVoice"),
            (DocumentMessage(chat_id=1, document="d"), "sendDocument"),
            (VideoMessage(chat_id=1, video="v"), "sendVideo"),
            (AnimationMessage(chat_id=1, animation="a"), "sendAnimation"),
            (VideoNoteMessage(chat_id=1, video_note="n"), "sendVideoNote"),
            (LocationMessage(chat_id=1, latitude=1.0, longitude=2.0), "sendLocation"),
            (ContactMessage(chat_id=1, phone_number="+1", first_name="A"), "sendContact"),
            (PollMessage.create(1, "q", ["a", "b"]), "sendPoll"),
            (DiceMessage(chat_id=1), "sendDice"),
            (VenueMessage(chat_id=1, latitude=1.0, longitude=2.0, title="t", address="a"), "sendVenue"),
        ],
    )
    def test_endpoint(self, msg, method):
        transformer = telegram.TelegramTransformer()
        spec, _ = transformer.transform(msg, Account.create("main", "T"))
        assert spec.url.endswith(f"/botT/{method}")
        assert ENDPOINTS[msg.msgtype] == method

    def test_all_variants_mapped(self):
        assert len(ENDPOINTS) == 13


class TestTelegramValidation:
    """测试消息校验"""

    def test_chat_id_required(self):
        with pytest.raises(ParamError):
            TextMessage(text="hi").validate()

    def test_text_too_long(self):
        with pytest.raises(ParamError) as exc_info:
            TextMessage(chat_id=1, text="a" * 4097).validate()
        assert exc_info.value.code == "content_too_long"
        TextMessage(chat_id=1, text="a" * 4096).validate()

    def test_caption_too_long(self):
        with pytest.raises(ParamError):
            PhotoMessage(chat_id=1, photo="p", caption="c" * 1025).validate()

    def test_invalid_parse_mode(self):
        with pytest.raises(ParamError) as exc_info:
            TextMessage(chat_id=1, text="x", parse_mode="RST").validate()
        assert exc_info.value.code == "invalid_value"

    def test_parse_mode_with_entities(self):
        msg = TextMessage(
            chat_id=1,
            text="hello",
            parse_mode="HTML",
            entities=[MessageEntity(type="bold", offset=0, length=5)],
        )
        with pytest.raises(ParamError) as exc_info:
            msg.validate()
        assert exc_info.value.code == "conflicting_fields"

    def test_entity_rules(self):
        """测试实体类型相关的必填字段"""
        with pytest.raises(ParamError):
            TextMessage(chat_id=1, text="x", entities=[MessageEntity(type="text_link", offset=0, length=1)]).validate()
        with pytest.raises(ParamError):
            TextMessage(chat_id=1, text="x", entities=[MessageEntity(type="unknown", offset=0, length=1)]).validate()
        with pytest.raises(ParamError):
            TextMessage(chat_id=1, text="x", entities=[MessageEntity(type="bold", offset=0, length=0)]).validate()
        TextMessage(
            chat_id=1,
            text="x",
            entities=[MessageEntity(type="text_link", offset=0, length=1, url="https://example.com")],
        ).validate()

    def test_link_preview_conflict(self):
        msg = TextMessage(
            chat_id=1,
            text="x",
            link_preview_options=LinkPreviewOptions(prefer_small_media=True, prefer_large_media=True),
        )
        with pytest.raises(ParamError):
            msg.validate()

    def test_inline_button_single_action(self):
        markup = InlineKeyboardMarkup(inline_keyboard=[[InlineKeyboardButton(text="go")]])
        with pytest.raises(ParamError):
            TextMessage(chat_id=1, text="x", reply_markup=markup).validate()
        markup = InlineKeyboardMarkup(inline_keyboard=[[InlineKeyboardButton(text="go", url="https://a.b")]])
        TextMessage(chat_id=1, text="x", reply_markup=markup).validate()

    def test_location_ranges(self):
        with pytest.raises(ParamError):
            LocationMessage(chat_id=1, latitude=91, longitude=0).validate()
        with pytest.raises(ParamError):
            LocationMessage(chat_id=1, latitude=1, longitude=1, live_period=30).validate()
        LocationMessage(chat_id=1, latitude=1, longitude=1, live_period=0x7FFFFFFF).validate()
        with pytest.raises(ParamError):
            LocationMessage(chat_id=1, latitude=1, longitude=1, heading=0).validate()

    def test_video_note_length(self):
        with pytest.raises(ParamError):
            VideoNoteMessage(chat_id=1, video_note="n", length=0).validate()

    def test_poll_rules(self):
        """测试投票选项数量与测验规则"""
        with pytest.raises(ParamError):
            PollMessage.create(1, "q", ["only"]).validate()
        with pytest.raises(ParamError):
            PollMessage.create(1, "q", [str(i) for i in range(11)]).validate()
        with pytest.raises(ParamError):
            PollMessage.create(1, "q", ["a", "b"], type="quiz").validate()
        with pytest.raises(ParamError):
            PollMessage.create(1, "q", ["a", "b"], type="quiz", correct_option_id=2).validate()
        with pytest.raises(ParamError):
            PollMessage.create(1, "q", ["a", "b"], open_period=60, close_date=1700000000).validate()
        PollMessage.create(1, "q", ["a", "b"], type="quiz", correct_option_id=1).validate()

    def test_dice_emoji(self):
        with pytest.raises(ParamError):
            DiceMessage(chat_id=1, emoji="x").validate()
        DiceMessage(chat_id=1, emoji="🎯").validate()


class TestDeprecatedFields:
    """测试已废弃字段的转换"""

    def test_reply_to_message_id_converted(self):
        with pytest.warns(DeprecationWarning):
            msg = TextMessage(chat_id=1, text="x", reply_to_message_id=5)
        assert msg.reply_parameters == ReplyParameters(message_id=5)
        assert "reply_to_message_id" not in msg.to_payload()

    def test_reply_to_message_id_conflict(self):
        with pytest.raises(ValidationError):
            TextMessage(chat_id=1, text="x", reply_to_message_id=5, reply_parameters={"message_id": 6})

    def test_disable_web_page_preview_converted(self):
        with pytest.warns(DeprecationWarning):
            msg = TextMessage(chat_id=1, text="x", disable_web_page_preview=True)
        assert msg.link_preview_options.is_disabled is True

    def test_disable_web_page_preview_conflict(self):
        with pytest.raises(ValidationError):
            TextMessage(
                chat_id=1,
                text="x",
                disable_web_page_preview=True,
                link_preview_options={"is_disabled": False},
            )
