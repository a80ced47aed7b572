"""邮件提供者

SMTP 会话是阻塞调用，在线程中执行，不阻塞事件循环。
"""

import asyncio
import random
import smtplib
import ssl

from notifyhub.core.account import Account, ProviderConfig, StrategyType
from notifyhub.core.config import settings
from notifyhub.core.errors import ConfigError, NotifyError, ParamError, TransportError
from notifyhub.core.logging import get_logger
from notifyhub.core.message import Message, ProviderType
from notifyhub.core.provider import BaseProvider, SendOptions
from notifyhub.core.response import SendResult
from notifyhub.core.strategy import Selector
from notifyhub.providers.email.messages import EmailAccount
from notifyhub.providers.email.transformer import EmailTransformer, SMTPSession, TLSPolicy

logger = get_logger("provider.email")

# SMTP 250: Requested mail action okay, completed
SMTP_OK = 250


class EmailProvider(BaseProvider):
    """邮件提供者"""

    def __init__(self, config: ProviderConfig, *, rng: random.Random | None = None) -> None:
        config.validate_pool(provider=ProviderType.EMAIL)
        for account in config.accounts:
            if not isinstance(account, EmailAccount):
                raise ConfigError(
                    f"account {account.name} is not an email account",
                    code="invalid_account",
                    provider=ProviderType.EMAIL,
                    account=account.name,
                )
        self.config = config
        self.transformer = EmailTransformer()
        self.selector = Selector(config.accounts, config.strategy, rng=rng)
        logger.info("初始化提供者", provider=self.name, accounts=len(config.accounts))

    @property
    def name(self) -> str:
        return ProviderType.EMAIL

    async def send(self, msg: Message, options: SendOptions | None = None) -> SendResult:
        """发送邮件

        Raises:
            ParamError: 消息校验失败
            ConfigError: 无可用账号
            TransportError: 连接、认证或投递失败
        """
        options = options or SendOptions()
        if not self.transformer.can_transform(msg):
            raise ParamError(
                f"unsupported message type for email: {type(msg).__name__}",
                code="type_mismatch",
                provider=self.name,
            )
        try:
            msg.validate()
        except ParamError as e:
            e.with_context(provider=self.name)
            raise

        account = self._select(options)
        log = logger.bind(provider=self.name, account=account.name)
        try:
            session = self.transformer.transform(msg, account)
            refused = await asyncio.to_thread(deliver, session, options.timeout)
        except NotifyError as e:
            e.with_context(provider=self.name, account=account.name)
            log.warning("邮件发送失败", kind=e.kind, code=e.code, error=e.message)
            raise

        log.info("邮件发送成功", recipients=len(session.recipients), refused=len(refused))
        return SendResult(
            status_code=SMTP_OK,
            metadata={
                "message_id": session.message["Message-ID"],
                "recipients": session.recipients,
                "refused": {addr: list(reply) for addr, reply in refused.items()},
            },
            provider=self.name,
            account=account.name,
        )

    def _select(self, options: SendOptions) -> Account:
        try:
            return self.selector.select(options.account_name, options.strategy)
        except NotifyError as e:
            e.with_context(provider=self.name)
            raise


def _connect(session: SMTPSession, timeout: float) -> smtplib.SMTP:
    context = ssl.create_default_context()
    if session.tls == TLSPolicy.IMPLICIT:
        server = smtplib.SMTP_SSL(session.host, session.port, timeout=timeout, context=context)
    else:
        server = smtplib.SMTP(session.host, session.port, timeout=timeout)

    # 握手失败时关闭已建立的连接
    try:
        server.ehlo()
        if session.tls == TLSPolicy.STARTTLS and server.has_extn("starttls"):
            server.starttls(context=context)
            server.ehlo()
    except BaseException:
        server.close()
        raise
    return server


def deliver(session: SMTPSession, timeout: float | None = None) -> dict:
    """执行一次 SMTP 投递，返回被拒绝的收件人"""
    timeout = timeout or settings.SMTP_TIMEOUT_SECONDS
    try:
        server = _connect(session, timeout)
    except (smtplib.SMTPException, OSError) as e:
        raise TransportError(
            f"smtp connect to {session.host}:{session.port} failed: {e}",
            code="smtp_connect",
        ) from e

    try:
        if session.username:
            server.login(session.username, session.password or "")
        refused = server.send_message(
            session.message,
            from_addr=session.sender,
            to_addrs=session.recipients,
        )
    except smtplib.SMTPAuthenticationError as e:
        server.close()
        raise TransportError(f"smtp authentication failed: {e.smtp_code}", code="smtp_auth") from e
    except smtplib.SMTPRecipientsRefused as e:
        server.close()
        raise TransportError(
            "all recipients were refused",
            code="smtp_recipients_refused",
            data={"recipients": list(e.recipients)},
        ) from e
    except (smtplib.SMTPException, OSError) as e:
        server.close()
        raise TransportError(f"smtp delivery failed: {e}", code="smtp") from e

    # 邮件已投递，部分服务器在 QUIT / RSET 阶段返回错误或直接断开
    try:
        server.quit()
    except (smtplib.SMTPException, OSError) as e:
        logger.debug("关闭 SMTP 连接时出错，已忽略", host=session.host, error=str(e))
    finally:
        server.close()
    return refused


def new_provider(
    accounts: list[EmailAccount],
    strategy: str = StrategyType.ROUND_ROBIN,
    **kwargs,
) -> EmailProvider:
    """根据账号列表创建邮件提供者"""
    return EmailProvider(ProviderConfig(accounts=accounts, strategy=strategy), **kwargs)
