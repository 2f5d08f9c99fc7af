"""
Gauge Emission — vote-weighted распределение эмиссии RAY между пулами

Глобальный индекс (RAY на голос):
    index += ray_emission_per_day * (elapsed / day) / total_votes

Gauge пула — share-аккаунт с долей total_votes:
    total_ray_emitted += floor(total_votes * (index - last_seen_global_index))

Голоса меняются на трёх уровнях одновременно (config, gauge, personal),
всегда ПОСЛЕ синхронизации config и gauge до now.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. index и last_updated_ts config-а не убывают
2. total_ray_emitted gauge-а не убывает
3. Σ votes по уровням согласованы после каждого change_votes
4. Сумма эмиссии по пулам не превышает ray_emission_per_day * elapsed / day
   (усечение только вниз)
"""

import logging
from dataclasses import dataclass

from raygauge.core.domain import Gauge, GaugeConfig, PersonalGauge, Reactor
from raygauge.core.errors import (
    InsufficientRayToPledge,
    InsufficientRayToUnpledge,
    RecordMismatch,
)
from raygauge.core.math import (
    Number,
    accrue_share,
    advance_shared_index,
    checked_add,
    checked_sub,
    daily_emission_rate,
    validate_i64,
    validate_u64,
)
from raygauge.reactor import ReactorEngine

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class GaugeSettings:
    """Параметры эмиссии gauge.

    - ray_emission_per_day: RAY, распределяемые между всеми пулами за сутки
    """
    ray_emission_per_day: int = 0

    def __post_init__(self) -> None:
        validate_u64(self.ray_emission_per_day, "ray_emission_per_day")


# =============================================================================
# INDEX / SHARE OPERATIONS
# =============================================================================


def update_gauge_config(config: GaugeConfig, now: int) -> GaugeConfig:
    """
    Продвижение глобального индекса до now.

    Raises:
        TimestampRegression: now < config.last_updated_ts
    """
    advance = advance_shared_index(
        index=config.index,
        last_updated_ts=config.last_updated_ts,
        now=now,
        total_shares=config.total_votes,
        rate_numerator=daily_emission_rate(config.ray_emission_per_day),
        what="gauge config",
    )
    if advance.elapsed == 0:
        return config
    return config.model_copy(update={"index": advance.index, "last_updated_ts": now})


def update_gauge(gauge: Gauge, global_index: Number) -> Gauge:
    """
    Синхронизация gauge пула с глобальным индексом.

    Raises:
        IndexRegression: global_index < gauge.last_seen_global_index
    """
    accrual = accrue_share(
        gauge.total_votes, gauge.last_seen_global_index, global_index, "pool gauge"
    )
    if accrual.last_seen_index == gauge.last_seen_global_index:
        return gauge

    return gauge.model_copy(
        update={
            "last_seen_global_index": accrual.last_seen_index,
            "total_ray_emitted": checked_add(
                gauge.total_ray_emitted, accrual.accrued_units(), "total_ray_emitted"
            ),
        }
    )


def sync_gauge(now: int, config: GaugeConfig, gauge: Gauge) -> tuple[GaugeConfig, Gauge]:
    """Config до now, затем gauge до индекса config-а."""
    config = update_gauge_config(config, now)
    return config, update_gauge(gauge, config.index)


def _apply_vote_change(current: int, amount: int, what: str) -> int:
    if amount >= 0:
        return checked_add(current, amount, what)
    return checked_sub(current, -amount, what)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class GaugeSyncResult:
    """Config и gauge пула после синхронизации."""

    config: GaugeConfig
    gauge: Gauge


@dataclass(frozen=True)
class VoteChangeResult:
    """
    Результат изменения голосов.

    reactor — новая запись reactor-а с изменёнными locked_votes.
    """

    config: GaugeConfig
    gauge: Gauge
    personal_gauge: PersonalGauge
    reactor: Reactor

    @property
    def global_total_votes(self) -> int:
        return self.config.total_votes

    @property
    def pool_total_votes(self) -> int:
        return self.gauge.total_votes

    @property
    def personal_votes(self) -> int:
        return self.personal_gauge.votes


# =============================================================================
# GAUGE EMISSION
# =============================================================================


class GaugeEmission:
    """
    Движок vote-weighted эмиссии.

    Все методы чистые: принимают текущие записи и возвращают новые.
    """

    def __init__(
        self,
        settings: GaugeSettings | None = None,
        reactor_engine: ReactorEngine | None = None,
    ):
        """
        Args:
            settings: Параметры эмиссии для init_gauge_config
            reactor_engine: Движок reactor-а для блокировки голосов
        """
        self.settings = settings or GaugeSettings()
        self.reactor_engine = reactor_engine or ReactorEngine()

    # -------------------------------------------------------------------------
    # Инициализация
    # -------------------------------------------------------------------------

    def init_gauge_config(self, now: int) -> GaugeConfig:
        """Глобальная конфигурация с нулевым индексом, last_updated_ts = now."""
        validate_u64(now, "now")
        return GaugeConfig(
            total_votes=0,
            ray_emission_per_day=self.settings.ray_emission_per_day,
            index=Number.ZERO,
            last_updated_ts=now,
        )

    def init_pool_gauge(self, now: int, config: GaugeConfig, pool_id: str) -> GaugeSyncResult:
        """
        Gauge пула, начинающий с текущего глобального индекса.

        Эмиссия до создания gauge-а пулу не начисляется.
        """
        config = update_gauge_config(config, now)
        gauge = Gauge(
            pool_id=pool_id,
            total_votes=0,
            last_seen_global_index=config.index,
            total_ray_emitted=0,
        )
        return GaugeSyncResult(config=config, gauge=gauge)

    def init_personal_gauge(self, owner: str, gauge: Gauge) -> PersonalGauge:
        return PersonalGauge(owner=owner, pool_gauge=gauge.pool_id, votes=0)

    # -------------------------------------------------------------------------
    # Операции
    # -------------------------------------------------------------------------

    def sync_pool_index(self, now: int, config: GaugeConfig, gauge: Gauge) -> GaugeSyncResult:
        """Продвижение глобального индекса, затем индекса пула."""
        config, gauge = sync_gauge(now, config, gauge)
        return GaugeSyncResult(config=config, gauge=gauge)

    def change_votes(
        self,
        now: int,
        config: GaugeConfig,
        gauge: Gauge,
        personal_gauge: PersonalGauge,
        amount: int,
        reactor: Reactor,
    ) -> VoteChangeResult:
        """
        Изменение голосов владельца за пул.

        Порядок:
        1. Проверка связей и доменных ограничений
        2. Блокировка (amount > 0) или разблокировка (amount < 0) голосов reactor-а
        3. Синхронизация config и gauge до now
        4. Checked-изменение голосов на трёх уровнях

        Args:
            now: Текущий timestamp
            config: Глобальная конфигурация
            gauge: Gauge пула
            personal_gauge: Голоса владельца за пул
            amount: Изменение голосов (i64; 0 — только синхронизация)
            reactor: Reactor владельца (источник голосов)

        Raises:
            InsufficientRayToPledge: amount > free_votes reactor-а
            InsufficientRayToUnpledge: -amount > personal_gauge.votes
            RecordMismatch: записи не связаны между собой
            TypeError: reactor не передан
            TimestampRegression, IndexRegression, ArithmeticOverflow
        """
        validate_i64(amount, "amount")
        if not isinstance(reactor, Reactor):
            raise TypeError(
                f"change_votes requires the owner's Reactor, got {type(reactor).__name__}"
            )
        self._check_links(gauge, personal_gauge, reactor)

        if amount > 0 and reactor.free_votes < amount:
            raise InsufficientRayToPledge(requested=amount, available=reactor.free_votes)
        if amount < 0 and -amount > personal_gauge.votes:
            raise InsufficientRayToUnpledge(requested=-amount, available=personal_gauge.votes)

        if amount > 0:
            reactor = self.reactor_engine.lock_votes(reactor, amount)
        elif amount < 0:
            reactor = self.reactor_engine.unlock_votes(reactor, -amount)

        config, gauge = sync_gauge(now, config, gauge)

        config = config.model_copy(
            update={"total_votes": _apply_vote_change(config.total_votes, amount, "total_votes")}
        )
        gauge = gauge.model_copy(
            update={"total_votes": _apply_vote_change(gauge.total_votes, amount, "pool votes")}
        )
        personal_gauge = personal_gauge.model_copy(
            update={"votes": _apply_vote_change(personal_gauge.votes, amount, "personal votes")}
        )

        logger.debug(
            "votes changed by %d for %s on %s: personal=%d pool=%d global=%d",
            amount,
            personal_gauge.owner,
            gauge.pool_id,
            personal_gauge.votes,
            gauge.total_votes,
            config.total_votes,
        )
        return VoteChangeResult(
            config=config, gauge=gauge, personal_gauge=personal_gauge, reactor=reactor
        )

    def _check_links(
        self, gauge: Gauge, personal_gauge: PersonalGauge, reactor: Reactor
    ) -> None:
        if personal_gauge.pool_gauge != gauge.pool_id:
            raise RecordMismatch(
                f"personal gauge of {personal_gauge.owner} belongs to pool "
                f"{personal_gauge.pool_gauge}, got {gauge.pool_id}"
            )
        if reactor.owner != personal_gauge.owner:
            raise RecordMismatch(
                f"reactor of {reactor.owner} cannot vote for {personal_gauge.owner}"
            )
