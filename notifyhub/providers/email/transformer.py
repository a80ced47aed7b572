"""邮件转换器

不走 HTTP，生成 SMTP 会话描述：主机、端口、TLS 策略、认证信息、信封与 MIME 正文。
端口 465 使用隐式 SSL，其余端口尝试 STARTTLS。
"""

import mimetypes
from dataclasses import dataclass
from email.message import EmailMessage as MIMEMessage
from email.utils import formatdate, make_msgid, parseaddr
from enum import StrEnum
from pathlib import Path

from notifyhub.core.account import Account
from notifyhub.core.errors import ConfigError, ParamError
from notifyhub.core.message import Message, ProviderType
from notifyhub.providers.email.messages import EmailAccount, EmailMessage

IMPLICIT_TLS_PORT = 465


class TLSPolicy(StrEnum):
    IMPLICIT = "implicit"  # SMTP_SSL
    STARTTLS = "starttls"  # 服务器支持时升级


def tls_policy_for(port: int) -> TLSPolicy:
    return TLSPolicy.IMPLICIT if port == IMPLICIT_TLS_PORT else TLSPolicy.STARTTLS


@dataclass
class SMTPSession:
    """一次 SMTP 投递所需的全部信息"""

    host: str
    port: int
    tls: TLSPolicy
    username: str
    password: str | None
    sender: str
    recipients: list[str]
    message: MIMEMessage


class EmailTransformer:
    """邮件转换器"""

    provider_type = ProviderType.EMAIL

    def can_transform(self, msg: Message) -> bool:
        return getattr(msg, "provider_type", None) == self.provider_type

    def transform(self, msg: Message, account: Account | None) -> SMTPSession:
        if account is None:
            raise ConfigError("account is required", code="missing_account", provider=self.provider_type)
        if not isinstance(account, EmailAccount):
            raise ConfigError(
                f"account {account.name} is not an email account",
                code="invalid_account",
                provider=self.provider_type,
                account=account.name,
            )
        if not self.can_transform(msg):
            raise ParamError(
                f"unsupported message type for email: {type(msg).__name__}",
                code="type_mismatch",
                provider=self.provider_type,
            )
        try:
            msg.validate()
        except ParamError as e:
            e.with_context(provider=self.provider_type)
            raise

        if not isinstance(msg, EmailMessage):
            raise ParamError(
                f"unsupported message type for email: {type(msg).__name__}",
                code="type_mismatch",
                provider=self.provider_type,
            )
        sender = msg.sender or account.from_address or account.api_key
        if not sender:
            raise ConfigError("sender address is required", code="missing_sender", account=account.name)

        return SMTPSession(
            host=account.host,
            port=account.port,
            tls=tls_policy_for(account.port),
            username=account.api_key,
            password=account.api_secret,
            sender=parseaddr(sender)[1],
            recipients=msg.recipients(),
            message=build_mime(msg, sender),
        )


def build_mime(msg: EmailMessage, sender: str) -> MIMEMessage:
    """构建 MIME 邮件，密送地址不写入头部"""
    mime = MIMEMessage()
    mime["From"] = sender
    mime["To"] = ", ".join(msg.to)
    if msg.cc:
        mime["Cc"] = ", ".join(msg.cc)
    if msg.reply_to:
        mime["Reply-To"] = msg.reply_to
    mime["Subject"] = msg.subject
    mime["Date"] = formatdate(localtime=True)
    mime["Message-ID"] = make_msgid()
    for name, value in msg.headers.items():
        mime[name] = value

    mime.set_content(msg.body, subtype="html" if msg.is_html else "plain", charset="utf-8")

    for path in msg.attachments:
        file_path = Path(path)
        content_type, encoding = mimetypes.guess_type(file_path.name)
        if content_type is None or encoding is not None:
            content_type = "application/octet-stream"
        maintype, subtype = content_type.split("/", 1)
        mime.add_attachment(
            file_path.read_bytes(),
            maintype=maintype,
            subtype=subtype,
            filename=file_path.name,
        )
    return mime
