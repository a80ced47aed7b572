"""邮件消息与邮件账号

账号的 key 为 SMTP 用户名，secret 为密码。
"""

import os
from email.utils import parseaddr
from typing import ClassVar, Literal

from pydantic import Field

from notifyhub.core.account import Account
from notifyhub.core.errors import ParamError
from notifyhub.core.message import Message, ProviderType, require


class EmailAccount(Account):
    """SMTP 账号"""

    host: str
    port: int = 587
    from_address: str = ""

    @classmethod
    def smtp(
        cls,
        name: str,
        host: str,
        port: int,
        username: str,
        password: str | None = None,
        *,
        from_address: str = "",
        **kwargs,
    ) -> "EmailAccount":
        return cls.create(
            name,
            username,
            password,
            host=host,
            port=port,
            from_address=from_address or username,
            **kwargs,
        )


def is_valid_address(address: str) -> bool:
    """地址可被解析且包含 @"""
    _, addr = parseaddr(address)
    if not addr or "@" not in addr or " " in addr:
        return False
    local, _, domain = addr.rpartition("@")
    return bool(local) and bool(domain)


class EmailMessage(Message):
    """邮件消息"""

    provider_type: ClassVar[ProviderType] = ProviderType.EMAIL

    msgtype: Literal["email"] = "email"
    sender: str | None = None  # 为空时使用账号的 from_address
    to: list[str] = Field(default_factory=list)
    cc: list[str] = Field(default_factory=list)
    bcc: list[str] = Field(default_factory=list)
    reply_to: str | None = None
    subject: str = ""
    body: str = ""
    is_html: bool = False
    attachments: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)

    def validate(self) -> None:
        super().validate()
        require(self.to, "to")
        for field in ("to", "cc", "bcc"):
            for address in getattr(self, field):
                if not is_valid_address(address):
                    raise ParamError(
                        f"invalid {field} address: {address}",
                        code="invalid_address",
                        data={"field": field},
                    )
        for field in ("sender", "reply_to"):
            value = getattr(self, field)
            if value and not is_valid_address(value):
                raise ParamError(f"invalid {field} address: {value}", code="invalid_address")
        require(self.subject, "subject")
        require(self.body, "body")
        for path in self.attachments:
            if not os.path.isfile(path):
                raise ParamError(f"attachment not found: {path}", code="file_not_found", data={"path": path})

    def recipients(self) -> list[str]:
        """信封收件人（含抄送与密送），去重并保持顺序"""
        seen: dict[str, None] = {}
        for address in [*self.to, *self.cc, *self.bcc]:
            seen.setdefault(parseaddr(address)[1], None)
        return list(seen)
