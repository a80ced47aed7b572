"""企业微信群机器人提供者测试"""

import base64
import hashlib

import pytest

from notifyhub.core.account import Account
from notifyhub.core.errors import ParamError, UploadError
from notifyhub.core.provider import SendOptions
from notifyhub.providers import wecombot
from notifyhub.providers.wecombot import (
    Article,
    CardAction,
    CardImage,
    FileMessage,
    HorizontalContent,
    ImageMessage,
    JumpAction,
    MainTitle,
    MarkdownBuilder,
    MarkdownMessage,
    MarkdownVersion,
    NewsMessage,
    TemplateCard,
    TemplateCardMessage,
    TextMessage,
    VoiceMessage,
    WeComBotTransformer,
)

OK = {"errcode": 0, "errmsg": "ok"}


def _provider(mock_http, *names: str):
    accounts = [Account.create(name, f"key-{name}") for name in names or ("bot",)]
    return wecombot.new_provider(accounts, http_client=mock_http.client)


def _card(**kwargs) -> TemplateCard:
    fields = {
        "main_title": MainTitle(title="告警", desc="CPU 过高"),
        "card_action": CardAction(type=1, url="https://example.com"),
    }
    fields.update(kwargs)
    return TemplateCard(**fields)


class TestWeComBotSend:
    """测试发送请求"""

    @pytest.mark.anyio
    async def test_send_text(self, mock_http):
        mock_http.reply(json_body=OK)
        msg = TextMessage.create("hello", mentioned_list=["@all"])
        await _provider(mock_http).send(msg)

        request = mock_http.last
        assert request.url.host == "qyapi.weixin.qq.com"
        assert request.url.path == "/cgi-bin/webhook/send"
        assert request.url.params["key"] == "key-bot"
        assert mock_http.last_json() == {
            "msgtype": "text",
            "text": {"content": "hello", "mentioned_list": ["@all"]},
        }

    @pytest.mark.anyio
    async def test_markdown_too_long(self, mock_http):
        """测试超长 markdown 被拒绝且不发请求"""
        msg = MarkdownMessage.create("a" * 4097)
        with pytest.raises(ParamError) as exc_info:
            await _provider(mock_http).send(msg)
        assert exc_info.value.message == "markdown content exceeds 4096 characters"
        assert mock_http.requests == []

    @pytest.mark.anyio
    async def test_markdown_v2_envelope(self, mock_http):
        mock_http.reply(json_body=OK)
        await _provider(mock_http).send(MarkdownMessage.create("**hi**", version=MarkdownVersion.V2))
        assert mock_http.last_json() == {"msgtype": "markdown_v2", "markdown_v2": {"content": "**hi**"}}

    @pytest.mark.anyio
    async def test_file_upload_then_send(self, tmp_path, mock_http):
        """测试只给出本地路径的文件消息：先上传再发送"""
        path = tmp_path / "report.txt"
        path.write_bytes(b"quarterly report")
        mock_http.reply(json_body={"errcode": 0, "errmsg": "ok", "media_id": "MID"})
        mock_http.reply(json_body=OK)

        msg = FileMessage.create(local_path=str(path))
        result = await _provider(mock_http).send(msg)

        upload, send = mock_http.requests
        assert upload.url.path == "/cgi-bin/webhook/upload_media"
        assert upload.url.params["key"] == "key-bot"
        assert upload.url.params["type"] == "file"
        assert b'name="media"' in upload.content

        assert send.url.path == "/cgi-bin/webhook/send"
        assert mock_http.last_json() == {"msgtype": "file", "file": {"media_id": "MID"}}
        assert msg.file.media_id == "MID"
        assert result.account == "bot"

    @pytest.mark.anyio
    async def test_upload_uses_selected_account(self, tmp_path, mock_http):
        """测试上传和发送使用同一个账号"""
        path = tmp_path / "report.txt"
        path.write_bytes(b"quarterly report")
        mock_http.reply(json_body={"errcode": 0, "media_id": "MID"})
        mock_http.reply(json_body=OK)

        provider = _provider(mock_http, "A", "B")
        await provider.send(FileMessage.create(local_path=str(path)), SendOptions(account_name="B"))

        assert [r.url.params["key"] for r in mock_http.requests] == ["key-B", "key-B"]

    @pytest.mark.anyio
    async def test_upload_failure_leaves_message(self, tmp_path, mock_http):
        path = tmp_path / "report.txt"
        path.write_bytes(b"quarterly report")
        mock_http.reply(json_body={"errcode": 40008, "errmsg": "invalid"})

        msg = FileMessage.create(local_path=str(path))
        with pytest.raises(UploadError) as exc_info:
            await _provider(mock_http).send(msg)

        assert exc_info.value.provider == "wecombot"
        assert msg.file.media_id == ""
        assert len(mock_http.requests) == 1

    @pytest.mark.anyio
    async def test_voice_must_be_amr(self, tmp_path, mock_http):
        path = tmp_path / "voice.mp3"
        path.write_bytes(b"not an amr file")
        with pytest.raises(UploadError) as exc_info:
            await _provider(mock_http).send(VoiceMessage.create(local_path=str(path)))
        assert exc_info.value.code == "invalid_format"
        assert mock_http.requests == []

    @pytest.mark.anyio
    async def test_send_with_media_id_skips_upload(self, mock_http):
        mock_http.reply(json_body=OK)
        await _provider(mock_http).send(FileMessage.create(media_id="EXISTING"))
        assert len(mock_http.requests) == 1
        assert mock_http.last.url.path == "/cgi-bin/webhook/send"

    @pytest.mark.anyio
    async def test_upload_media_returns_account(self, mock_http):
        mock_http.reply(json_body={"errcode": 0, "media_id": "M2"})
        provider = _provider(mock_http, "A", "B")
        media_id, account = await provider.upload_media(
            b"hello world", "file", SendOptions(account_name="B"), filename="hello.txt"
        )
        assert media_id == "M2"
        assert account.name == "B"


class TestWeComBotMessages:
    """测试消息序列化与校验"""

    def test_markdown_legacy(self):
        msg = MarkdownMessage.create("# hi")
        assert msg.version == MarkdownVersion.LEGACY
        assert msg.to_payload() == {"msgtype": "markdown", "markdown": {"content": "# hi"}}

    def test_markdown_limit_boundary(self):
        MarkdownMessage.create("a" * 4096).validate()

    def test_text_mentions(self):
        with pytest.raises(ParamError) as exc_info:
            TextMessage.create("hi", mentioned_list=["@all", "zhangsan"]).validate()
        assert exc_info.value.code == "invalid_mentions"

    def test_text_byte_limit(self):
        with pytest.raises(ParamError):
            TextMessage.create("中" * 683).validate()

    def test_image_from_bytes(self):
        data = b"\x89PNG fake image"
        msg = ImageMessage.from_bytes(data)
        msg.validate()
        assert msg.image.md5 == hashlib.md5(data).hexdigest()
        assert base64.b64decode(msg.image.base64) == data

    def test_image_invalid_base64(self):
        msg = ImageMessage(image={"base64": "not base64!", "md5": "x"})
        with pytest.raises(ParamError):
            msg.validate()

    def test_news_article_count(self):
        article = Article(title="t", url="https://a")
        NewsMessage.create([article]).validate()
        with pytest.raises(ParamError):
            NewsMessage.create([]).validate()
        with pytest.raises(ParamError):
            NewsMessage.create([article] * 9).validate()

    def test_file_requires_source(self):
        with pytest.raises(ParamError):
            FileMessage.create().validate()
        with pytest.raises(ParamError) as exc_info:
            FileMessage.create(local_path="/nonexistent/file.txt").validate()
        assert exc_info.value.code == "file_not_found"

    def test_local_path_not_serialised(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("content")
        payload = FileMessage.create(local_path=str(path)).to_payload()
        assert "local_path" not in payload

    def test_markdown_builder(self):
        content = (
            MarkdownBuilder()
            .heading("告警", level=2)
            .colored("严重", "warning")
            .link("详情", "https://a")
            .mention("zhangsan")
            .build()
        )
        assert content == '## 告警\n<font color="warning">严重</font>\n[详情](https://a)\n<@zhangsan>'
        with pytest.raises(ParamError):
            MarkdownBuilder().colored("x", "red")


class TestTemplateCard:
    """测试模版卡片校验"""

    def test_text_notice_valid(self):
        msg = TemplateCardMessage.create(_card())
        msg.validate()
        payload = msg.to_payload()
        assert payload["msgtype"] == "template_card"
        assert payload["template_card"]["card_type"] == "text_notice"

    def test_title_or_sub_title_required(self):
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(main_title=None)).validate()
        TemplateCardMessage.create(_card(main_title=None, sub_title_text="说明")).validate()

    def test_title_byte_limit(self):
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(main_title=MainTitle(title="中" * 9))).validate()

    def test_card_action_required(self):
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(card_action=None)).validate()
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(card_action=CardAction(type=1))).validate()

    def test_news_notice_requires_image(self):
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(card_type="news_notice")).validate()
        card = _card(card_type="news_notice", card_image=CardImage(url="https://a/p.png", aspect_ratio=1.5))
        TemplateCardMessage.create(card).validate()
        card = _card(card_type="news_notice", card_image=CardImage(url="https://a/p.png", aspect_ratio=3))
        with pytest.raises(ParamError):
            TemplateCardMessage.create(card).validate()

    def test_card_image_only_for_news(self):
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(card_image=CardImage(url="https://a/p.png"))).validate()

    def test_horizontal_content(self):
        items = [HorizontalContent(keyname="k", value="v")] * 7
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(horizontal_content_list=items)).validate()
        with pytest.raises(ParamError):
            item = HorizontalContent(keyname="k", value="v", type=1)
            TemplateCardMessage.create(_card(horizontal_content_list=[item])).validate()

    def test_jump_list(self):
        jumps = [JumpAction(title="j", type=0)] * 6
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(jump_list=jumps)).validate()
        with pytest.raises(ParamError):
            TemplateCardMessage.create(_card(jump_list=[JumpAction(title="j", type=2, appid="x")])).validate()


class TestWeComBotTransformer:
    """测试转换器"""

    def test_local_path_requires_upload(self, tmp_path):
        """测试只有本地路径的文件消息不能直接构建请求"""
        path = tmp_path / "report.txt"
        path.write_bytes(b"quarterly report")
        msg = FileMessage.create(local_path=str(path))

        with pytest.raises(ParamError) as exc_info:
            WeComBotTransformer().transform(msg, Account.create("bot", "K"))
        assert exc_info.value.code == "upload_required"
        assert exc_info.value.provider == "wecombot"

    def test_media_id_builds_request(self):
        spec, _ = WeComBotTransformer().transform(VoiceMessage.create(media_id="M1"), Account.create("bot", "K"))
        assert spec.url == "https://qyapi.weixin.qq.com/cgi-bin/webhook/send"
        assert spec.query_params == [("key", "K")]
        assert spec.json_body() == {"msgtype": "voice", "voice": {"media_id": "M1"}}
