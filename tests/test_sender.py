"""发送器测试"""

import pytest

from notifyhub import Sender
from notifyhub.core.account import Account
from notifyhub.core.errors import APIError, ConfigError
from notifyhub.core.provider import SendOptions
from notifyhub.core.response import SendResult
from notifyhub.providers import dingtalk, telegram, wecombot

TELEGRAM_OK = {"ok": True, "result": {"message_id": 1}}


def _sender(mock_http) -> Sender:
    sender = Sender()
    sender.register_provider(telegram.new_provider([Account.create("tg", "T")], http_client=mock_http.client))
    sender.register_provider(wecombot.new_provider([Account.create("wx", "K")], http_client=mock_http.client))
    return sender


class TestSender:
    """测试提供者注册与路由"""

    def test_register(self, mock_http):
        sender = _sender(mock_http)
        assert sender.providers == ["telegram", "wecombot"]
        assert sender.get_provider("telegram").name == "telegram"

    def test_unregistered_provider(self, mock_http):
        with pytest.raises(ConfigError) as exc_info:
            _sender(mock_http).get_provider("dingtalk")
        assert exc_info.value.code == "provider_not_registered"

    def test_unregister(self, mock_http):
        sender = _sender(mock_http)
        provider = sender.unregister_provider("telegram")
        assert provider is not None
        assert sender.providers == ["wecombot"]
        assert sender.unregister_provider("telegram") is None

    @pytest.mark.anyio
    async def test_route_by_provider_type(self, mock_http):
        mock_http.reply(json_body=TELEGRAM_OK)
        result = await _sender(mock_http).send(telegram.TextMessage(chat_id=1, text="hi"))
        assert result.provider == "telegram"
        assert mock_http.last.url.path == "/botT/sendMessage"

    @pytest.mark.anyio
    async def test_send_unregistered(self, mock_http):
        with pytest.raises(ConfigError):
            await _sender(mock_http).send(dingtalk.TextMessage.create("hi"))
        assert mock_http.requests == []

    @pytest.mark.anyio
    async def test_send_via(self, mock_http):
        mock_http.reply(json_body={"errcode": 0})
        msg = wecombot.TextMessage.create("hi")
        result = await _sender(mock_http).send_via("wecombot", msg, SendOptions(account_name="wx"))
        assert result.account == "wx"

    @pytest.mark.anyio
    async def test_dispatch_keeps_order(self, mock_http):
        """测试批量发送：失败不影响其他消息，结果与输入顺序一致"""
        mock_http.reply(json_body={"ok": False, "error_code": 400, "description": "bad"})
        sender = _sender(mock_http)
        messages = [
            telegram.TextMessage(chat_id=1, text="a"),
            dingtalk.TextMessage.create("b"),
        ]
        results = await sender.dispatch(messages)
        assert isinstance(results[0], APIError)
        assert isinstance(results[1], ConfigError)

    @pytest.mark.anyio
    async def test_dispatch_success(self, mock_http):
        mock_http.reply(json_body=TELEGRAM_OK)
        results = await _sender(mock_http).dispatch([telegram.TextMessage(chat_id=1, text="a")] * 3)
        assert all(isinstance(r, SendResult) for r in results)
        assert len(mock_http.requests) == 3

    @pytest.mark.anyio
    async def test_dispatch_empty(self, mock_http):
        assert await _sender(mock_http).dispatch([]) == []

    @pytest.mark.anyio
    async def test_close(self, mock_http):
        sender = _sender(mock_http)
        await sender.close()
        assert sender.providers == []
