"""Pytest 配置"""

import json
import os
from typing import Any

import httpx
import pytest

# 测试日志保持简洁
os.environ.setdefault("NOTIFYHUB_LOG_MODE", "simple")
os.environ.setdefault("NOTIFYHUB_LOG_LEVEL", "WARNING")


class MockHTTP:
    """记录请求并按顺序回放响应的 HTTP 桩

    只登记一个响应时，所有请求都返回它。
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response | Exception] = []
        self._client: httpx.AsyncClient | None = None

    def reply(self, status_code: int = 200, json_body: Any = None, *, content: bytes | None = None) -> "MockHTTP":
        if content is None:
            content = json.dumps(json_body if json_body is not None else {}).encode("utf-8")
        self._responses.append(httpx.Response(status_code, content=content))
        return self

    def fail(self, error: Exception) -> "MockHTTP":
        self._responses.append(error)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(200, json={})
        response = self._responses[0] if len(self._responses) == 1 else self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def client(self) -> httpx.AsyncClient:
        """同一个测试内复用同一个客户端，MockTransport 不持有连接"""
        if self._client is None:
            self._client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return self._client

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mock_http() -> MockHTTP:
    return MockHTTP()
