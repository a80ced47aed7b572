"""媒体上传

部分平台的文件/语音消息只能引用 media_id，需要先把本地文件上传。
上传和随后的发送必须使用同一个账号，media_id 与上传账号绑定。
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Union

import httpx

from notifyhub.core.account import Account
from notifyhub.core.errors import APIError, NotifyError, UploadError
from notifyhub.core.logging import get_logger
from notifyhub.core.response import ResponseHandler, ResponseHandlerConfig
from notifyhub.core.transformer import BodyType, HTTPRequestSpec
from notifyhub.core.transport import execute_request

logger = get_logger("uploader")

MediaSource = Union[str, Path, bytes, IO[bytes]]

# (account, media_type) -> (url, query_params)
EndpointBuilder = Callable[[Account, str], tuple[str, list[tuple[str, str]]]]


@dataclass(frozen=True)
class MediaLimits:
    """单种媒体类型的限制"""

    min_size: int = 0  # 大小必须严格大于该值
    max_size: int | None = None
    extensions: tuple[str, ...] = field(default_factory=tuple)  # 允许的扩展名，空表示不限


class MediaUploader:
    """通用媒体上传器"""

    def __init__(
        self,
        endpoint: EndpointBuilder,
        response_config: ResponseHandlerConfig,
        limits: dict[str, MediaLimits],
        *,
        field_name: str = "media",
        id_key: str = "media_id",
        provider: str | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.response_config = response_config
        self.limits = limits
        self.field_name = field_name
        self.id_key = id_key
        self.provider = provider

    def _error(self, message: str, code: str, account: Account | None = None, **data) -> UploadError:
        return UploadError(
            message,
            code=code,
            provider=self.provider,
            account=account.name if account else None,
            data=data or None,
        )

    async def _read(self, source: MediaSource, filename: str | None) -> tuple[str, bytes]:
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.is_file():
                raise self._error(f"file not found: {path}", "file_not_found", path=str(path))
            data = await asyncio.to_thread(path.read_bytes)
            return filename or path.name, data
        if isinstance(source, bytes):
            if not filename:
                raise self._error("filename is required for raw bytes", "missing_filename")
            return filename, source
        if hasattr(source, "read"):
            data = await asyncio.to_thread(source.read)
            name = filename or Path(getattr(source, "name", "") or "").name
            if not name:
                raise self._error("filename is required for readers without a name", "missing_filename")
            return name, data
        raise self._error(f"unsupported media source: {type(source).__name__}", "invalid_source")

    def check_limits(self, media_type: str, filename: str, size: int) -> None:
        """大小和格式检查，不通过抛出 UploadError"""
        limits = self.limits.get(media_type)
        if limits is None:
            raise self._error(f"unsupported media type: {media_type}", "invalid_media_type", media_type=media_type)
        if size <= limits.min_size:
            raise self._error(
                f"{media_type} must be larger than {limits.min_size} bytes",
                "file_too_small",
                size=size,
            )
        if limits.max_size is not None and size > limits.max_size:
            raise self._error(
                f"{media_type} exceeds {limits.max_size} bytes",
                "file_too_large",
                size=size,
                limit=limits.max_size,
            )
        if limits.extensions and Path(filename).suffix.lower() not in limits.extensions:
            raise self._error(
                f"{media_type} must be one of {', '.join(limits.extensions)}",
                "invalid_format",
                filename=filename,
            )

    async def upload(
        self,
        account: Account,
        media_type: str,
        source: MediaSource,
        client: httpx.AsyncClient,
        *,
        filename: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """上传媒体并返回 media_id

        Raises:
            UploadError: 读取、限制检查、请求或响应解析任一步失败
        """
        try:
            name, data = await self._read(source, filename)
            self.check_limits(media_type, name, len(data))
        except UploadError as e:
            e.with_context(account=account.name)
            raise

        url, params = self.endpoint(account, media_type)
        spec = HTTPRequestSpec(
            method="POST",
            url=url,
            query_params=params,
            body_type=BodyType.MULTIPART,
            files={self.field_name: (name, data)},
            timeout=timeout,
        )

        log = logger.bind(provider=self.provider, account=account.name, media_type=media_type)
        log.debug("开始上传媒体", filename=name, size=len(data))

        handler = ResponseHandler(self.response_config, provider=self.provider)
        try:
            status_code, body = await execute_request(client, spec)
            result = handler.handle(status_code, body)
        except NotifyError as e:
            log.warning("媒体上传失败", kind=e.kind, error=e.message)
            detail: dict = {"cause": e.kind}
            if isinstance(e, APIError):
                detail.update(api_code=e.api_code, api_message=e.api_message)
            raise UploadError(
                f"upload failed: {e.message}",
                code="upload_failed",
                provider=self.provider,
                account=account.name,
                data=detail,
            ) from e

        media_id = result.metadata.get(self.id_key)
        if not media_id:
            raise self._error("upload response has no media id", "missing_media_id", account)

        log.info("媒体上传成功", media_id=media_id)
        return str(media_id)
