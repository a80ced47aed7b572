"""账号选择策略

- round_robin: 原子递增计数器，按插入顺序轮询
- random: 均匀随机
- weighted: 按权重随机，累积和首个命中

每个 Selector 拥有独立的策略实例，计数器不在提供者之间共享。
"""

import itertools
import random
from abc import ABC, abstractmethod
from bisect import bisect_right
from collections.abc import Callable, Sequence

from notifyhub.core.account import Account, StrategyType
from notifyhub.core.errors import ConfigError
from notifyhub.core.logging import get_logger

logger = get_logger("strategy")


class SelectionStrategy(ABC):
    """选择策略抽象基类"""

    name: str = ""

    @abstractmethod
    def pick(self, accounts: Sequence[Account]) -> Account:
        """从已启用的账号列表中选择一个，列表保证非空"""
        ...


class RoundRobinStrategy(SelectionStrategy):
    """轮询策略

    itertools.count 的 next() 在 GIL 下是原子的，热路径无需加锁。
    """

    name = StrategyType.ROUND_ROBIN

    def __init__(self) -> None:
        self._counter = itertools.count()

    def pick(self, accounts: Sequence[Account]) -> Account:
        return accounts[next(self._counter) % len(accounts)]


class RandomStrategy(SelectionStrategy):
    """均匀随机策略"""

    name = StrategyType.RANDOM

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def pick(self, accounts: Sequence[Account]) -> Account:
        return accounts[self._rng.randrange(len(accounts))]


class WeightedStrategy(SelectionStrategy):
    """加权随机策略"""

    name = StrategyType.WEIGHTED

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def pick(self, accounts: Sequence[Account]) -> Account:
        cumulative: list[int] = []
        total = 0
        for account in accounts:
            weight = account.weight
            if weight <= 0:
                logger.warning("账号权重非正，按 1 处理", account=account.name, weight=weight)
                weight = 1
            total += weight
            cumulative.append(total)

        draw = self._rng.randrange(total)
        return accounts[bisect_right(cumulative, draw)]


StrategyFactory = Callable[[random.Random | None], SelectionStrategy]

_STRATEGIES: dict[str, StrategyFactory] = {
    StrategyType.ROUND_ROBIN: lambda rng: RoundRobinStrategy(),
    StrategyType.RANDOM: lambda rng: RandomStrategy(rng),
    StrategyType.WEIGHTED: lambda rng: WeightedStrategy(rng),
}


def register_strategy(name: str, factory: StrategyFactory) -> None:
    """注册自定义策略"""
    _STRATEGIES[name] = factory
    logger.debug("注册选择策略", strategy=name)


def create_strategy(name: str, rng: random.Random | None = None) -> SelectionStrategy:
    """按名称创建策略实例"""
    factory = _STRATEGIES.get(str(name))
    if factory is None:
        raise ConfigError(
            f"unknown strategy: {name}",
            code="unknown_strategy",
            data={"available": sorted(_STRATEGIES)},
        )
    return factory(rng)


class Selector:
    """账号选择器

    优先级：指定账号名 > 单次调用覆盖的策略 > 配置的策略。
    """

    def __init__(
        self,
        accounts: Sequence[Account],
        strategy: str = StrategyType.ROUND_ROBIN,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._accounts = list(accounts)
        self._enabled = [account for account in self._accounts if account.is_enabled]
        self._by_name = {account.name: account for account in self._accounts}
        self._rng = rng
        self._default = create_strategy(strategy, rng)
        self._strategies: dict[str, SelectionStrategy] = {str(strategy): self._default}

    @property
    def enabled_accounts(self) -> list[Account]:
        return list(self._enabled)

    def _strategy_for(self, name: str) -> SelectionStrategy:
        strategy = self._strategies.get(str(name))
        if strategy is None:
            # 并发下可能重复创建，setdefault 保证最终只保留一个
            strategy = self._strategies.setdefault(str(name), create_strategy(name, self._rng))
        return strategy

    def select(self, account_name: str | None = None, strategy: str | None = None) -> Account:
        """选择一个账号，失败立即抛出 ConfigError"""
        if account_name:
            account = self._by_name.get(account_name)
            if account is None:
                raise ConfigError(
                    f"account not found: {account_name}",
                    code="account_not_found",
                    account=account_name,
                )
            if not account.is_enabled:
                raise ConfigError(
                    f"account is disabled: {account_name}",
                    code="account_disabled",
                    account=account_name,
                )
            return account

        if not self._enabled:
            raise ConfigError("no available account", code="no_available_account")

        if len(self._enabled) == 1:
            return self._enabled[0]

        chosen = self._strategy_for(strategy) if strategy else self._default
        return chosen.pick(self._enabled)
