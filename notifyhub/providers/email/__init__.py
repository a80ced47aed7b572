"""邮件"""

from notifyhub.providers.email.messages import EmailAccount, EmailMessage
from notifyhub.providers.email.provider import EmailProvider, new_provider
from notifyhub.providers.email.transformer import EmailTransformer, SMTPSession, TLSPolicy, tls_policy_for

__all__ = [
    "EmailAccount",
    "EmailMessage",
    "EmailProvider",
    "EmailTransformer",
    "SMTPSession",
    "TLSPolicy",
    "new_provider",
    "tls_policy_for",
]
