"""账号与账号池

账号是一个可以发送消息的凭证身份。账号池（ProviderConfig）在提供者
构造时校验，之后只读。
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.core.errors import ConfigError


class StrategyType(StrEnum):
    """账号选择策略"""

    ROUND_ROBIN = "round_robin"
    RANDOM = "random"
    WEIGHTED = "weighted"


class Credentials(BaseModel):
    """凭证三元组

    - key: webhook key 或 bot token
    - secret: 签名密钥（钉钉加签）或密码（邮件）
    - app_id: 预留给需要应用 ID 的平台
    """

    model_config = ConfigDict(frozen=True)

    key: str = ""
    secret: str | None = None
    app_id: str | None = None

    def __repr__(self) -> str:
        # 不在 repr 中暴露凭证
        return f"Credentials(key={'***' if self.key else ''!r}, has_secret={bool(self.secret)})"


class Account(BaseModel):
    """发送账号"""

    model_config = ConfigDict(frozen=True)

    name: str
    weight: int = 1
    disabled: bool = False
    credentials: Credentials = Field(default_factory=Credentials)
    sub_type: str | None = None
    endpoint: str | None = None  # 覆盖平台默认 API 地址

    @classmethod
    def create(
        cls,
        name: str,
        key: str,
        secret: str | None = None,
        *,
        app_id: str | None = None,
        weight: int = 1,
        disabled: bool = False,
        **kwargs,
    ) -> "Account":
        """便捷构造"""
        return cls(
            name=name,
            weight=weight,
            disabled=disabled,
            credentials=Credentials(key=key, secret=secret, app_id=app_id),
            **kwargs,
        )

    @property
    def is_enabled(self) -> bool:
        return not self.disabled

    @property
    def api_key(self) -> str:
        return self.credentials.key

    @property
    def api_secret(self) -> str | None:
        return self.credentials.secret

    @property
    def app_id(self) -> str | None:
        return self.credentials.app_id


class ProviderConfig(BaseModel):
    """提供者配置（账号池）"""

    accounts: list[Account] = Field(default_factory=list)
    strategy: StrategyType = StrategyType.ROUND_ROBIN
    disabled: bool = False

    def validate_pool(self, provider: str | None = None) -> None:
        """校验账号池，失败抛出 ConfigError"""
        if self.disabled:
            raise ConfigError("provider is disabled", code="provider_disabled", provider=provider)
        if not self.accounts:
            raise ConfigError("at least one account must be configured", code="no_accounts", provider=provider)

        seen: set[str] = set()
        for index, account in enumerate(self.accounts):
            if not account.name:
                raise ConfigError(
                    f"account at index {index} has an empty name",
                    code="invalid_account",
                    provider=provider,
                )
            if account.name in seen:
                raise ConfigError(
                    f"duplicate account name: {account.name}",
                    code="duplicate_account",
                    provider=provider,
                )
            seen.add(account.name)

        if not self.enabled_accounts():
            raise ConfigError("no enabled account", code="no_available_account", provider=provider)

    def enabled_accounts(self) -> list[Account]:
        return [account for account in self.accounts if account.is_enabled]

    def get_account(self, name: str) -> Account | None:
        for account in self.accounts:
            if account.name == name:
                return account
        return None
