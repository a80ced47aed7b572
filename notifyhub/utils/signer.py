"""签名工具

- HMAC-SHA256 + Base64：钉钉加签 webhook
- MD5 hex：企业微信图片消息
"""

import base64
import hashlib
import hmac


def hmac_sha256_base64(secret: str, data: str) -> str:
    """计算 HMAC-SHA256 并以标准 Base64 编码返回"""
    digest = hmac.new(secret.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def md5_hex(data: bytes) -> str:
    """计算 MD5，返回 32 位小写十六进制"""
    return hashlib.md5(data).hexdigest()


def dingtalk_sign(secret: str, timestamp_ms: int) -> str:
    """钉钉加签：base64(HMAC-SHA256(secret, "<timestamp>\\n<secret>"))"""
    return hmac_sha256_base64(secret, f"{timestamp_ms}\n{secret}")
