"""账号与账号池测试"""

import pytest
from pydantic import ValidationError

from notifyhub.core.account import Account, Credentials, ProviderConfig, StrategyType
from notifyhub.core.errors import ConfigError


class TestAccount:
    """测试账号模型"""

    def test_create(self):
        """测试便捷构造"""
        account = Account.create("ops", "KEY", "SECRET", weight=3)
        assert account.name == "ops"
        assert account.api_key == "KEY"
        assert account.api_secret == "SECRET"
        assert account.weight == 3
        assert account.is_enabled

    def test_defaults(self):
        """测试默认值"""
        account = Account(name="a")
        assert account.weight == 1
        assert account.disabled is False
        assert account.credentials == Credentials()
        assert account.endpoint is None

    def test_immutable(self):
        """测试账号构造后不可修改"""
        account = Account.create("a", "k")
        with pytest.raises(ValidationError):
            account.name = "b"

    def test_repr_hides_secrets(self):
        """测试 repr 不暴露凭证"""
        account = Account.create("a", "very-secret-token", "sig")
        assert "very-secret-token" not in repr(account.credentials)
        assert "sig" not in repr(account.credentials)


class TestProviderConfig:
    """测试账号池校验"""

    def test_valid_pool(self):
        config = ProviderConfig(accounts=[Account.create("a", "k"), Account.create("b", "k")])
        config.validate_pool()
        assert config.strategy == StrategyType.ROUND_ROBIN

    def test_strategy_from_string(self):
        config = ProviderConfig(accounts=[Account.create("a", "k")], strategy="weighted")
        assert config.strategy == StrategyType.WEIGHTED

    def test_invalid_strategy_string(self):
        with pytest.raises(ValidationError):
            ProviderConfig(accounts=[], strategy="fastest")

    def test_disabled_provider(self):
        config = ProviderConfig(accounts=[Account.create("a", "k")], disabled=True)
        with pytest.raises(ConfigError) as exc_info:
            config.validate_pool()
        assert exc_info.value.code == "provider_disabled"

    def test_empty_pool(self):
        with pytest.raises(ConfigError) as exc_info:
            ProviderConfig().validate_pool()
        assert exc_info.value.code == "no_accounts"

    def test_duplicate_names(self):
        config = ProviderConfig(accounts=[Account.create("a", "k"), Account.create("a", "k2")])
        with pytest.raises(ConfigError) as exc_info:
            config.validate_pool()
        assert exc_info.value.code == "duplicate_account"

    def test_empty_name(self):
        config = ProviderConfig(accounts=[Account.create("", "k")])
        with pytest.raises(ConfigError):
            config.validate_pool()

    def test_all_disabled(self):
        config = ProviderConfig(accounts=[Account.create("a", "k", disabled=True)])
        with pytest.raises(ConfigError) as exc_info:
            config.validate_pool()
        assert exc_info.value.code == "no_available_account"

    def test_enabled_accounts_keep_order(self):
        config = ProviderConfig(
            accounts=[
                Account.create("a", "k"),
                Account.create("b", "k", disabled=True),
                Account.create("c", "k"),
            ]
        )
        assert [a.name for a in config.enabled_accounts()] == ["a", "c"]
        assert config.get_account("b").disabled is True
        assert config.get_account("zzz") is None
