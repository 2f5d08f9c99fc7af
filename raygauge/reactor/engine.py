"""
Reactor Engine — стейкинг RAY, эмиссия isoRAY и блокировка голосов

Глобальные индексы (ReactorConfig), продвигаются до now ПЕРЕД любым
изменением total_ray_deposited:
    ray_reward_index += daily_emission * (elapsed / day) / total_ray_deposited
    iso_ray_index    += (elapsed / year) * apr_bps / 10_000

Персональный reactor — два share-аккаунта над этими индексами с долей ray:
    iso_ray                += floor(ray * Δ iso_ray_index)
    uncollected_ray_reward += floor(ray * Δ ray_reward_index)

Сила голоса:
    vote_power = ray + iso_ray
    free_votes = vote_power - locked_votes

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. rewards_emitted_until не убывает (now < until → TimestampRegression)
2. При total_ray_deposited == 0 оба индекса не растут
3. locked_votes <= vote_power после любой операции
4. Вывод RAY списывает isoRAY пропорционально (см. slashing)
5. Доменные ошибки проверяются до любой checked-арифметики
"""

import logging
from dataclasses import dataclass

from raygauge.core.domain import RayStakeRewards, Reactor, ReactorConfig
from raygauge.core.errors import (
    InsufficientRayBalance,
    InsufficientVotesToLock,
    InsufficientVotesToUnlock,
    InsufficientVotesToWithdraw,
)
from raygauge.core.math import (
    U16_MAX,
    Number,
    accrue_share,
    advance_rate_index,
    annual_rate,
    checked_add,
    checked_sub,
    daily_emission_rate,
    elapsed_seconds,
    shared_index_delta,
    validate_u64,
)
from raygauge.reactor.slashing import iso_ray_slash_amount

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class ReactorSettings:
    """Параметры эмиссии reactor-а.

    - ray_reward_daily_emission: RAY наград в сутки на весь стейк
    - iso_ray_apr_bps: годовая ставка isoRAY (5000 = 50%)
    """
    ray_reward_daily_emission: int = 0
    iso_ray_apr_bps: int = 0

    def __post_init__(self) -> None:
        validate_u64(self.ray_reward_daily_emission, "ray_reward_daily_emission")
        if not 0 <= self.iso_ray_apr_bps <= U16_MAX:
            raise ValueError(f"iso_ray_apr_bps must be in [0, {U16_MAX}], got {self.iso_ray_apr_bps}")


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class ReactorResult:
    """Результат операции, затрагивающей глобальную конфигурацию."""

    config: ReactorConfig
    reactor: Reactor

    # RAY к переводу (в vault при deposit, владельцу при withdraw/collect)
    transfer_amount: int = 0

    # Диагностика
    iso_ray_slashed: int = 0


@dataclass(frozen=True)
class CollectResult:
    """Результат сбора RAY наград."""

    reactor: Reactor
    amount: int


# =============================================================================
# INDEX / SHARE OPERATIONS
# =============================================================================


def accrue_rewards(config: ReactorConfig, now: int) -> ReactorConfig:
    """
    Продвижение обоих глобальных индексов до now.

    Raises:
        TimestampRegression: now < rewards_emitted_until
    """
    elapsed = elapsed_seconds(config.rewards_emitted_until, now, "reactor rewards")
    if elapsed == 0:
        return config

    total = config.total_ray_deposited
    if total == 0:
        logger.debug("reactor: no RAY deposited over %ds, indices unchanged", elapsed)

    ray_reward_index = config.ray_reward_index + shared_index_delta(
        elapsed, total, daily_emission_rate(config.ray_reward_daily_emission)
    )
    iso_ray_index = advance_rate_index(
        config.iso_ray_index, elapsed, total, annual_rate(config.iso_ray_apr_bps)
    )
    return config.model_copy(
        update={
            "ray_reward_index": ray_reward_index,
            "iso_ray_index": iso_ray_index,
            "rewards_emitted_until": now,
        }
    )


def accrue_iso_ray(reactor: Reactor, iso_ray_index: Number) -> Reactor:
    """
    Начисление isoRAY по индексу.

    Raises:
        IndexRegression: iso_ray_index < last_seen_index_iso_ray
    """
    accrual = accrue_share(
        reactor.ray, reactor.last_seen_index_iso_ray, iso_ray_index, "reactor isoRAY"
    )
    return reactor.model_copy(
        update={
            "iso_ray": checked_add(reactor.iso_ray, accrual.accrued_units(), "iso_ray"),
            "last_seen_index_iso_ray": accrual.last_seen_index,
        }
    )


def accrue_ray_rewards(reactor: Reactor, ray_reward_index: Number) -> Reactor:
    """
    Начисление RAY наград по индексу.

    Raises:
        IndexRegression: ray_reward_index < ray_stake_rewards.last_seen_index
    """
    rewards = reactor.ray_stake_rewards
    accrual = accrue_share(
        reactor.ray, rewards.last_seen_index, ray_reward_index, "reactor RAY rewards"
    )
    if accrual.last_seen_index == rewards.last_seen_index:
        return reactor

    return reactor.model_copy(
        update={
            "ray_stake_rewards": RayStakeRewards(
                last_seen_index=accrual.last_seen_index,
                uncollected_ray_reward=checked_add(
                    rewards.uncollected_ray_reward,
                    accrual.accrued_units(),
                    "uncollected_ray_reward",
                ),
            )
        }
    )


def accrue_reactor(reactor: Reactor, config: ReactorConfig) -> Reactor:
    """Синхронизация обоих share-аккаунтов с (уже продвинутой) конфигурацией."""
    reactor = accrue_iso_ray(reactor, config.iso_ray_index)
    return accrue_ray_rewards(reactor, config.ray_reward_index)


# =============================================================================
# REACTOR ENGINE
# =============================================================================


class ReactorEngine:
    """
    Движок reactor-а.

    Все методы чистые: принимают текущие записи и возвращают новые.
    При любой ошибке новые записи не возвращаются.
    """

    def __init__(self, settings: ReactorSettings | None = None):
        """
        Args:
            settings: Параметры эмиссии для init_reactor_config
        """
        self.settings = settings or ReactorSettings()

    # -------------------------------------------------------------------------
    # Инициализация
    # -------------------------------------------------------------------------

    def init_reactor_config(self, now: int) -> ReactorConfig:
        """Глобальная конфигурация с нулевыми индексами, rewards_emitted_until = now."""
        validate_u64(now, "now")
        return ReactorConfig(
            total_ray_deposited=0,
            ray_reward_daily_emission=self.settings.ray_reward_daily_emission,
            ray_reward_index=Number.ZERO,
            iso_ray_apr_bps=self.settings.iso_ray_apr_bps,
            iso_ray_index=Number.ZERO,
            rewards_emitted_until=now,
        )

    def init_reactor(self, owner: str) -> Reactor:
        """
        Пустой reactor владельца.

        Индексы нулевые: при нулевом ray первая синхронизация
        ничего не начисляет и только подтягивает last_seen.
        """
        return Reactor(owner=owner)

    # -------------------------------------------------------------------------
    # RAY стейк
    # -------------------------------------------------------------------------

    def deposit_ray(
        self, now: int, config: ReactorConfig, reactor: Reactor, amount: int
    ) -> ReactorResult:
        """
        Депозит RAY в reactor.

        Returns:
            ReactorResult; transfer_amount = amount (владелец → vault)

        Raises:
            TimestampRegression, IndexRegression
            ArithmeticOverflow: ray или total_ray_deposited вне u64
        """
        validate_u64(amount, "amount")
        config = accrue_rewards(config, now)
        reactor = accrue_reactor(reactor, config)

        reactor = reactor.model_copy(update={"ray": checked_add(reactor.ray, amount, "ray")})
        config = config.model_copy(
            update={
                "total_ray_deposited": checked_add(
                    config.total_ray_deposited, amount, "total_ray_deposited"
                )
            }
        )
        logger.debug("reactor deposit %d RAY for %s at %d", amount, reactor.owner, now)
        return ReactorResult(config=config, reactor=reactor, transfer_amount=amount)

    def withdraw_ray(
        self, now: int, config: ReactorConfig, reactor: Reactor, amount: int
    ) -> ReactorResult:
        """
        Вывод RAY со списанием isoRAY.

        Порядок:
        1. Начисление isoRAY и RAY наград до now
        2. ray < amount → InsufficientRayBalance
        3. iso_ray_decrease = min(ceil(amount / ray * iso_ray), iso_ray)
        4. free_votes < amount + iso_ray_decrease → InsufficientVotesToWithdraw
        5. Checked-списание ray, iso_ray, total_ray_deposited

        Returns:
            ReactorResult; transfer_amount = amount (vault → владелец)
        """
        validate_u64(amount, "amount")
        config = accrue_rewards(config, now)
        reactor = accrue_reactor(reactor, config)

        if reactor.ray < amount:
            raise InsufficientRayBalance(requested=amount, available=reactor.ray)

        iso_ray_decrease = iso_ray_slash_amount(reactor.ray, amount, reactor.iso_ray)

        required_votes = amount + iso_ray_decrease
        if reactor.free_votes < required_votes:
            raise InsufficientVotesToWithdraw(
                requested=required_votes, available=reactor.free_votes
            )

        reactor = reactor.model_copy(
            update={
                "ray": checked_sub(reactor.ray, amount, "ray"),
                "iso_ray": checked_sub(reactor.iso_ray, iso_ray_decrease, "iso_ray"),
            }
        )
        config = config.model_copy(
            update={
                "total_ray_deposited": checked_sub(
                    config.total_ray_deposited, amount, "total_ray_deposited"
                )
            }
        )
        logger.debug(
            "reactor withdraw %d RAY for %s at %d, isoRAY slashed %d",
            amount,
            reactor.owner,
            now,
            iso_ray_decrease,
        )
        return ReactorResult(
            config=config,
            reactor=reactor,
            transfer_amount=amount,
            iso_ray_slashed=iso_ray_decrease,
        )

    def sync_reactor(self, now: int, config: ReactorConfig, reactor: Reactor) -> ReactorResult:
        """Начисление без изменения балансов (депозит нуля)."""
        return self.deposit_ray(now, config, reactor, 0)

    # -------------------------------------------------------------------------
    # Голоса
    # -------------------------------------------------------------------------

    def lock_votes(self, reactor: Reactor, amount: int) -> Reactor:
        """
        Блокировка голосов под gauge.

        Raises:
            InsufficientVotesToLock: amount > free_votes
        """
        validate_u64(amount, "amount")
        if amount > reactor.free_votes:
            raise InsufficientVotesToLock(requested=amount, available=reactor.free_votes)
        return reactor.model_copy(
            update={"locked_votes": checked_add(reactor.locked_votes, amount, "locked_votes")}
        )

    def unlock_votes(self, reactor: Reactor, amount: int) -> Reactor:
        """
        Разблокировка голосов.

        Raises:
            InsufficientVotesToUnlock: amount > locked_votes
        """
        validate_u64(amount, "amount")
        if amount > reactor.locked_votes:
            raise InsufficientVotesToUnlock(requested=amount, available=reactor.locked_votes)
        return reactor.model_copy(
            update={"locked_votes": checked_sub(reactor.locked_votes, amount, "locked_votes")}
        )

    # -------------------------------------------------------------------------
    # RAY награды
    # -------------------------------------------------------------------------

    def collect_ray_rewards(self, reactor: Reactor) -> CollectResult:
        """Выплата накопленных RAY наград (без начисления)."""
        rewards = reactor.ray_stake_rewards
        amount = rewards.uncollected_ray_reward
        reactor = reactor.model_copy(
            update={
                "ray_stake_rewards": rewards.model_copy(update={"uncollected_ray_reward": 0})
            }
        )
        return CollectResult(reactor=reactor, amount=amount)

    def sync_and_collect_ray_rewards(
        self, now: int, config: ReactorConfig, reactor: Reactor
    ) -> ReactorResult:
        """Начисление до now и выплата RAY наград."""
        synced = self.sync_reactor(now, config, reactor)
        collected = self.collect_ray_rewards(synced.reactor)
        return ReactorResult(
            config=synced.config, reactor=collected.reactor, transfer_amount=collected.amount
        )
