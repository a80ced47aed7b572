"""应用配置

所有配置项均可通过 NOTIFYHUB_ 前缀的环境变量或 .env 文件覆盖。
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """通知库配置"""

    model_config = SettingsConfigDict(
        env_prefix="NOTIFYHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ========== 日志配置 ==========
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_MODE: str = "simple"  # simple, detailed, json
    LOG_FILE: str = ""  # 留空则不写文件
    LOG_FILE_ROTATION: str = "10 MB"
    LOG_FILE_RETENTION: str = "7 days"
    LOG_RICH_TRACEBACK: bool = False  # 是否在 detailed 模式安装 Rich traceback

    # ========== HTTP 配置 ==========
    HTTP_TIMEOUT_SECONDS: float = 10.0  # 未指定请求超时时的默认值
    HTTP_USER_AGENT: str = "notifyhub/0.1"
    ERROR_BODY_PREVIEW_CHARS: int = 512  # 错误信息中响应体的截断长度

    # ========== SMTP 配置 ==========
    SMTP_TIMEOUT_SECONDS: float = 30.0

    # ========== 平台 API 地址 ==========
    # 账号上的 endpoint 字段优先于这里的默认值
    DINGTALK_BASE_URL: str = "https://oapi.dingtalk.com"
    WECOM_BASE_URL: str = "https://qyapi.weixin.qq.com"
    TELEGRAM_BASE_URL: str = "https://api.telegram.org"


@lru_cache
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()


settings = get_settings()
