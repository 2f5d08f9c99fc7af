"""
Personal Rewarder — rate-matching выплата эмиссии пула LP позициям

Два монотонных счётчика за один и тот же интервал времени:
- total_ray_emitted gauge-а пула (RAY, общий на пул)
- earned_time_units позиции (LP * секунды, персональный)

Выплата позиции:
    ray_rate  = Δ total_ray_emitted / Δ time      (RAY в секунду на пул)
    collected = floor(ray_rate * Δ earned_time_units)

Глобальная сумма time-units всех позиций не нужна: доля позиции
выражена через скорость эмиссии за тот же интервал.

Вариации:
- CP (constant-product): time-units из LP escrow (PersonalPosition)
- CL (concentrated-liquidity): time-units из reward-слота позиции
  внешнего CL пула, слот находится по mint-у time-units

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. total_ray_emitted, now и earned_time_units не убывают относительно
   last_seen_* (иначе fatal)
2. При Δ time == 0 ничего не начисляется и last_seen_* не двигаются
3. collect() возвращает staged_ray и обнуляет его
"""

import logging
from dataclasses import dataclass

from raygauge.core.domain import (
    ClPositionSnapshot,
    Gauge,
    GaugeConfig,
    PersonalPosition,
    PersonalRewarderCl,
    PersonalRewarderCp,
    PersonalRewarderState,
    TimeTracker,
)
from raygauge.core.errors import (
    IndexRegression,
    RecordMismatch,
    RewardSlotNotFound,
    TimestampRegression,
)
from raygauge.core.math import Number, checked_add
from raygauge.escrow import LpEscrow
from raygauge.gauge.emission import sync_gauge

logger = logging.getLogger(__name__)


# =============================================================================
# REWARDER STATE
# =============================================================================


@dataclass(frozen=True)
class StageResult:
    """Новое состояние rewarder-а и RAY, добавленные в staged_ray."""

    state: PersonalRewarderState
    collected: int


@dataclass(frozen=True)
class WithdrawResult:
    """Состояние после выплаты и RAY к переводу владельцу."""

    state: PersonalRewarderState
    amount: int


def sync_and_stage(
    state: PersonalRewarderState,
    now: int,
    gauge_total_ray_emitted: int,
    cur_earned_time_units: Number,
) -> StageResult:
    """
    Синхронизация rewarder-а и начисление RAY в staged_ray.

    Args:
        state: Текущее состояние rewarder-а
        now: Текущий timestamp
        gauge_total_ray_emitted: total_ray_emitted gauge-а (уже синхронизированного до now)
        cur_earned_time_units: Текущие time-units позиции

    Returns:
        StageResult; collected = 0 при Δ time == 0

    Raises:
        IndexRegression: total_ray_emitted или time-units меньше last_seen
        TimestampRegression: now < last_updated_ts
    """
    if gauge_total_ray_emitted < state.last_seen_total_emitted_ray:
        raise IndexRegression(
            f"gauge total emitted must be non-decreasing: "
            f"{gauge_total_ray_emitted} < {state.last_seen_total_emitted_ray}"
        )
    if now < state.last_updated_ts:
        raise TimestampRegression(
            f"cannot update rewarder with older timestamp: now={now} < last={state.last_updated_ts}"
        )
    if cur_earned_time_units < state.last_seen_time_units:
        raise IndexRegression(
            f"earned time units must be non-decreasing: "
            f"{cur_earned_time_units} < {state.last_seen_time_units}"
        )

    delta_ray = gauge_total_ray_emitted - state.last_seen_total_emitted_ray
    delta_time = now - state.last_updated_ts
    if delta_time == 0:
        return StageResult(state=state, collected=0)

    delta_units = cur_earned_time_units - state.last_seen_time_units

    # RAY в секунду по пулу за интервал
    ray_rate = Number.from_ratio(delta_ray, delta_time)
    collected = (ray_rate * delta_units).floor_to_int()

    new_state = state.model_copy(
        update={
            "last_seen_total_emitted_ray": gauge_total_ray_emitted,
            "last_seen_time_units": cur_earned_time_units,
            "last_updated_ts": now,
            "staged_ray": checked_add(state.staged_ray, collected, "staged_ray"),
        }
    )
    return StageResult(state=new_state, collected=collected)


def collect(state: PersonalRewarderState) -> WithdrawResult:
    """Выплата staged_ray (обнуляется)."""
    return WithdrawResult(
        state=state.model_copy(update={"staged_ray": 0}), amount=state.staged_ray
    )


def start_rewarder(now: int, gauge: Gauge, cur_earned_time_units: Number) -> PersonalRewarderState:
    """Начальное состояние: прошлые time-units и эмиссия не начисляются."""
    return PersonalRewarderState(
        last_seen_time_units=cur_earned_time_units,
        last_seen_total_emitted_ray=gauge.total_ray_emitted,
        last_updated_ts=now,
        staged_ray=0,
    )


# =============================================================================
# CL REWARD SLOT
# =============================================================================


def find_time_unit_reward_slot(snapshot: ClPositionSnapshot, time_unit_mint: str) -> int:
    """
    Индекс reward-слота CL позиции, начисляющего time-units.

    Raises:
        RewardSlotNotFound: ни один слот не начисляет time_unit_mint
    """
    for slot, info in enumerate(snapshot.reward_infos):
        if info.mint == time_unit_mint:
            return slot
    raise RewardSlotNotFound(
        f"position {snapshot.position} has no reward slot for mint {time_unit_mint}"
    )


def cl_earned_time_units(snapshot: ClPositionSnapshot, time_unit_mint: str) -> Number:
    slot = find_time_unit_reward_slot(snapshot, time_unit_mint)
    return Number.from_natural(snapshot.reward_infos[slot].reward_amount_owed)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class CpRewarderResult:
    """
    Результат операции CP rewarder-а.

    Кроме rewarder-а возвращаются синхронизированные записи gauge и escrow:
    их нужно сохранить вместе с rewarder-ом.
    """

    config: GaugeConfig
    gauge: Gauge
    time_tracker: TimeTracker
    position: PersonalPosition
    rewarder: PersonalRewarderCp
    collected: int = 0


@dataclass(frozen=True)
class ClRewarderResult:
    """Результат операции CL rewarder-а."""

    config: GaugeConfig
    gauge: Gauge
    rewarder: PersonalRewarderCl
    collected: int = 0


# =============================================================================
# PERSONAL REWARDER
# =============================================================================


class PersonalRewarder:
    """
    Rate-matching rewarder для CP и CL позиций.

    Перед чтением time-units позиция освежается (CP: escrow
    update_personal, CL: снапшот уже актуален), затем gauge
    синхронизируется до now.
    """

    def __init__(self, escrow: LpEscrow | None = None):
        self.escrow = escrow or LpEscrow()

    # -------------------------------------------------------------------------
    # Constant-product
    # -------------------------------------------------------------------------

    def init_cp_rewarder(
        self,
        now: int,
        config: GaugeConfig,
        gauge: Gauge,
        time_tracker: TimeTracker,
        position: PersonalPosition,
    ) -> CpRewarderResult:
        """
        Создание CP rewarder-а владельца позиции.

        Raises:
            RecordMismatch: gauge и трекер относятся к разным пулам
        """
        self._check_cp_pool(gauge, time_tracker)

        escrow = self.escrow.update_personal(now, time_tracker, position)
        config, gauge = sync_gauge(now, config, gauge)

        rewarder = PersonalRewarderCp(
            owner=escrow.position.owner,
            pool_gauge=gauge.pool_id,
            rewarder=start_rewarder(now, gauge, escrow.position.earned_time_units),
        )
        return CpRewarderResult(
            config=config,
            gauge=gauge,
            time_tracker=escrow.time_tracker,
            position=escrow.position,
            rewarder=rewarder,
        )

    def accrue_cp(
        self,
        now: int,
        config: GaugeConfig,
        gauge: Gauge,
        time_tracker: TimeTracker,
        position: PersonalPosition,
        rewarder: PersonalRewarderCp,
    ) -> CpRewarderResult:
        """
        Начисление RAY CP позиции до now.

        Raises:
            RecordMismatch: rewarder, позиция, gauge и трекер не связаны
        """
        self._check_cp_pool(gauge, time_tracker)
        if rewarder.owner != position.owner:
            raise RecordMismatch(
                f"rewarder of {rewarder.owner} cannot accrue position of {position.owner}"
            )
        if rewarder.pool_gauge != gauge.pool_id:
            raise RecordMismatch(
                f"rewarder belongs to gauge {rewarder.pool_gauge}, got {gauge.pool_id}"
            )

        escrow = self.escrow.update_personal(now, time_tracker, position)
        config, gauge = sync_gauge(now, config, gauge)

        staged = sync_and_stage(
            rewarder.rewarder, now, gauge.total_ray_emitted, escrow.position.earned_time_units
        )
        logger.debug("cp rewarder of %s staged %d RAY at %d", rewarder.owner, staged.collected, now)
        return CpRewarderResult(
            config=config,
            gauge=gauge,
            time_tracker=escrow.time_tracker,
            position=escrow.position,
            rewarder=rewarder.model_copy(update={"rewarder": staged.state}),
            collected=staged.collected,
        )

    def collect_cp(self, rewarder: PersonalRewarderCp) -> tuple[PersonalRewarderCp, int]:
        """Выплата staged RAY CP rewarder-а: (новый rewarder, сумма)."""
        withdrawn = collect(rewarder.rewarder)
        return rewarder.model_copy(update={"rewarder": withdrawn.state}), withdrawn.amount

    # -------------------------------------------------------------------------
    # Concentrated-liquidity
    # -------------------------------------------------------------------------

    def init_cl_rewarder(
        self,
        now: int,
        config: GaugeConfig,
        gauge: Gauge,
        snapshot: ClPositionSnapshot,
        time_unit_mint: str,
    ) -> ClRewarderResult:
        """
        Создание CL rewarder-а для позиции.

        Args:
            snapshot: Актуальный снапшот CL позиции (reward-слоты уже обновлены)
            time_unit_mint: Mint, которым CL пул начисляет time-units

        Raises:
            RecordMismatch: позиция не из пула gauge-а
            RewardSlotNotFound: у позиции нет слота time_unit_mint
        """
        self._check_cl_pool(gauge, snapshot)

        config, gauge = sync_gauge(now, config, gauge)
        earned = cl_earned_time_units(snapshot, time_unit_mint)

        rewarder = PersonalRewarderCl(
            pool_position=snapshot.position,
            pool_gauge=gauge.pool_id,
            pool=snapshot.pool,
            rewarder=start_rewarder(now, gauge, earned),
        )
        return ClRewarderResult(config=config, gauge=gauge, rewarder=rewarder)

    def accrue_cl(
        self,
        now: int,
        config: GaugeConfig,
        gauge: Gauge,
        snapshot: ClPositionSnapshot,
        time_unit_mint: str,
        rewarder: PersonalRewarderCl,
    ) -> ClRewarderResult:
        """Начисление RAY CL позиции до now."""
        self._check_cl_pool(gauge, snapshot)
        if rewarder.pool_position != snapshot.position:
            raise RecordMismatch(
                f"rewarder belongs to position {rewarder.pool_position}, got {snapshot.position}"
            )
        if rewarder.pool_gauge != gauge.pool_id:
            raise RecordMismatch(
                f"rewarder belongs to gauge {rewarder.pool_gauge}, got {gauge.pool_id}"
            )

        config, gauge = sync_gauge(now, config, gauge)
        earned = cl_earned_time_units(snapshot, time_unit_mint)

        staged = sync_and_stage(rewarder.rewarder, now, gauge.total_ray_emitted, earned)
        logger.debug(
            "cl rewarder of %s staged %d RAY at %d", rewarder.pool_position, staged.collected, now
        )
        return ClRewarderResult(
            config=config,
            gauge=gauge,
            rewarder=rewarder.model_copy(update={"rewarder": staged.state}),
            collected=staged.collected,
        )

    def collect_cl(self, rewarder: PersonalRewarderCl) -> tuple[PersonalRewarderCl, int]:
        """Выплата staged RAY CL rewarder-а: (новый rewarder, сумма)."""
        withdrawn = collect(rewarder.rewarder)
        return rewarder.model_copy(update={"rewarder": withdrawn.state}), withdrawn.amount

    # -------------------------------------------------------------------------
    # Связи записей
    # -------------------------------------------------------------------------

    def _check_cp_pool(self, gauge: Gauge, time_tracker: TimeTracker) -> None:
        if gauge.pool_id != time_tracker.pool_id:
            raise RecordMismatch(
                f"gauge of pool {gauge.pool_id} cannot reward tracker of {time_tracker.pool_id}"
            )

    def _check_cl_pool(self, gauge: Gauge, snapshot: ClPositionSnapshot) -> None:
        if gauge.pool_id != snapshot.pool:
            raise RecordMismatch(
                f"gauge of pool {gauge.pool_id} cannot reward position in {snapshot.pool}"
            )
