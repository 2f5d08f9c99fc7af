"""
Accrual Primitives — time-weighted индекс и ленивый share-аккаунт

Один обобщённый примитив вместо четырёх копий одной и той же логики:

1. Индекс (TimeTracker / GaugeConfig / ReactorConfig):
   index += rate_numerator(elapsed) / total_shares
   Источник ставки (rate_numerator) — параметр:
   - LP tracker:     elapsed                         (секунды на LP токен)
   - Gauge config:   daily_emission * elapsed / day  (RAY на голос)
   - Reactor RAY:    daily_emission * elapsed / day  (RAY на застейканный RAY)

2. Share-аккаунт (PersonalPosition / Gauge / Reactor):
   accrued = share_amount * (current_index - last_seen_index)
   last_seen_index = current_index

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. now < last_updated_ts → TimestampRegression (fatal)
2. current_index < last_seen_index → IndexRegression (fatal)
3. total_shares == 0 → индекс не растёт, двигается только timestamp
4. Индексы монотонно не убывают
5. Изменение знаменателя (total_shares) допустимо только ПОСЛЕ
   продвижения индекса до now (старый знаменатель — на прошедший
   интервал, новый — только вперёд)
"""

import logging
from dataclasses import dataclass
from typing import Callable, Final

from raygauge.core.errors import IndexRegression
from raygauge.core.math.checked import elapsed_seconds
from raygauge.core.math.precise_number import Number

logger = logging.getLogger(__name__)

# =============================================================================
# ВРЕМЕННЫЕ КОНСТАНТЫ
# =============================================================================

SECONDS_IN_DAY: Final[int] = 86_400
SECONDS_IN_YEAR: Final[int] = SECONDS_IN_DAY * 365

# elapsed_seconds → числитель прироста индекса
RateSource = Callable[[int], Number]


# =============================================================================
# ИСТОЧНИКИ СТАВКИ
# =============================================================================


def elapsed_time_rate(elapsed: int) -> Number:
    """Ставка LP tracker-а: каждая секунда — одна time-unit на весь пул."""
    return Number.from_natural(elapsed)


def daily_emission_rate(daily_emission: int) -> RateSource:
    """
    Ставка равномерной суточной эмиссии.

    rate(elapsed) = daily_emission * (elapsed / SECONDS_IN_DAY)

    Доля дня вычисляется первой (как в on-chain программе), чтобы
    усечение совпадало бит-в-бит.
    """
    emission = Number.from_natural(daily_emission)

    def rate(elapsed: int) -> Number:
        return emission * Number.from_ratio(elapsed, SECONDS_IN_DAY)

    return rate


def annual_rate(apr_bps: int) -> RateSource:
    """
    Ставка годовой доходности (не делится на total_shares).

    rate(elapsed) = (elapsed / SECONDS_IN_YEAR) * (apr_bps / 10_000)
    """
    apr = Number.from_bps(apr_bps)

    def rate(elapsed: int) -> Number:
        return Number.from_ratio(elapsed, SECONDS_IN_YEAR) * apr

    return rate


# =============================================================================
# ИНДЕКС
# =============================================================================


@dataclass(frozen=True)
class IndexAdvance:
    """Результат продвижения индекса до now."""

    index: Number
    last_updated_ts: int
    elapsed: int
    delta: Number


def shared_index_delta(elapsed: int, total_shares: int, rate_numerator: RateSource) -> Number:
    """
    Прирост индекса, разделяемого между total_shares участниками.

    Returns:
        rate_numerator(elapsed) / total_shares, либо ZERO при нулевом
        интервале или отсутствии долей
    """
    if elapsed == 0 or total_shares == 0:
        return Number.ZERO
    return rate_numerator(elapsed) / Number.from_natural(total_shares)


def advance_shared_index(
    index: Number,
    last_updated_ts: int,
    now: int,
    total_shares: int,
    rate_numerator: RateSource,
    what: str = "index",
) -> IndexAdvance:
    """
    Продвижение time-weighted индекса до момента now.

    Args:
        index: Текущее значение индекса
        last_updated_ts: Timestamp последнего обновления
        now: Текущий timestamp
        total_shares: Знаменатель (total LP / total votes / total RAY)
        rate_numerator: Источник ставки
        what: Имя индекса (для сообщений и логов)

    Returns:
        IndexAdvance с новым индексом и last_updated_ts = now

    Raises:
        TimestampRegression: now < last_updated_ts
    """
    elapsed = elapsed_seconds(last_updated_ts, now, what)

    if elapsed > 0 and total_shares == 0:
        # Нет долей: делить не на что, фиксируем только время
        logger.debug("%s: no shares over %ds, index unchanged", what, elapsed)

    delta = shared_index_delta(elapsed, total_shares, rate_numerator)
    return IndexAdvance(
        index=index + delta,
        last_updated_ts=now,
        elapsed=elapsed,
        delta=delta,
    )


def advance_rate_index(
    index: Number,
    elapsed: int,
    total_shares: int,
    rate_numerator: RateSource,
) -> Number:
    """
    Прирост индекса с фиксированной ставкой на единицу доли (isoRAY APR).

    Ставка не делится на total_shares, но при total_shares == 0 индекс
    не растёт: так правило нулевого знаменателя едино для всех индексов.
    """
    if elapsed == 0 or total_shares == 0:
        return index
    return index + rate_numerator(elapsed)


# =============================================================================
# SHARE-АККАУНТ
# =============================================================================


@dataclass(frozen=True)
class ShareAccrual:
    """Результат синхронизации share-аккаунта с индексом."""

    accrued: Number
    last_seen_index: Number

    def accrued_units(self) -> int:
        """Начисление, усечённое до целых единиц (u64)."""
        return self.accrued.floor_to_int()


def accrue_share(
    share_amount: int,
    last_seen_index: Number,
    current_index: Number,
    what: str = "share account",
) -> ShareAccrual:
    """
    Ленивое начисление доли с момента последней синхронизации.

    accrued = share_amount * (current_index - last_seen_index)

    Args:
        share_amount: Собственная доля аккаунта (LP, голоса, RAY)
        last_seen_index: Индекс на момент последней синхронизации
        current_index: Актуальный индекс (уже продвинутый до now)
        what: Имя аккаунта (для сообщения об ошибке)

    Returns:
        ShareAccrual; при нулевой дельте accrued = ZERO, индекс не меняется

    Raises:
        IndexRegression: current_index < last_seen_index
    """
    if current_index < last_seen_index:
        raise IndexRegression(
            f"{what}: index must be non-decreasing, "
            f"current={current_index} < last_seen={last_seen_index}"
        )

    delta = current_index - last_seen_index
    if delta.is_zero():
        return ShareAccrual(accrued=Number.ZERO, last_seen_index=last_seen_index)

    return ShareAccrual(
        accrued=Number.from_natural(share_amount) * delta,
        last_seen_index=current_index,
    )
