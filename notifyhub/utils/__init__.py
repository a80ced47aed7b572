"""工具函数"""

from notifyhub.utils.signer import dingtalk_sign, hmac_sha256_base64, md5_hex

__all__ = ["dingtalk_sign", "hmac_sha256_base64", "md5_hex"]
