"""HTTP 执行辅助

把 HTTPRequestSpec 转为 httpx 请求并执行，httpx 异常统一转换为 TransportError。
"""

from typing import Any

import httpx

from notifyhub.core.errors import TransportError
from notifyhub.core.transformer import BodyType, HTTPRequestSpec


def build_httpx_request(client: httpx.AsyncClient, spec: HTTPRequestSpec) -> httpx.Request:
    """将 HTTPRequestSpec 转为 httpx.Request"""
    kwargs: dict[str, Any] = {
        "params": spec.query_params or None,
        "headers": spec.headers or None,
    }
    if spec.body_type == BodyType.MULTIPART:
        kwargs["data"] = spec.form
        kwargs["files"] = spec.files
    elif spec.body_type == BodyType.FORM:
        kwargs["data"] = spec.form
    else:
        kwargs["content"] = spec.body
    if spec.timeout is not None:
        kwargs["timeout"] = spec.timeout
    return client.build_request(spec.method, spec.url, **kwargs)


async def execute_request(client: httpx.AsyncClient, spec: HTTPRequestSpec) -> tuple[int, bytes]:
    """执行请求，返回状态码与完整响应体"""
    request = build_httpx_request(client, spec)
    try:
        response = await client.send(request)
    except httpx.TimeoutException as e:
        raise TransportError(f"request timed out: {e}", code="timeout") from e
    except httpx.HTTPError as e:
        raise TransportError(f"request failed: {e}", code="network") from e
    return response.status_code, response.content
