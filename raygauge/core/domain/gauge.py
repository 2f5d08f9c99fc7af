"""
Gauge Records — записи vote-weighted эмиссии RAY

Иерархия голосов (три уровня, суммы согласованы):
    GaugeConfig.total_votes = Σ Gauge.total_votes
    Gauge.total_votes       = Σ PersonalGauge.votes (по пулу)

Rate-matching rewarder (CP и CL вариации) делит эмиссию пула
между LP пропорционально заработанным time-units.

Immutable Pydantic модели. Полная совместимость с JSON Schema
(contracts/schema/*.json).
"""

from pydantic import BaseModel, Field

from raygauge.core.domain.types import U64, Address
from raygauge.core.math.precise_number import Number


# =============================================================================
# GAUGE CONFIG
# =============================================================================


class GaugeConfig(BaseModel):
    """
    Глобальная конфигурация эмиссии.

    index — RAY на один голос:
        index += ray_emission_per_day * (elapsed / day) / total_votes
    """

    total_votes: U64 = Field(default=0, description="Сумма голосов по всем пулам")
    ray_emission_per_day: U64 = Field(..., description="Суточная эмиссия RAY")
    index: Number = Field(default=Number.ZERO, description="RAY на один голос")
    last_updated_ts: U64 = Field(..., description="Timestamp последнего обновления индекса")

    model_config = {"frozen": True}


# =============================================================================
# POOL GAUGE
# =============================================================================


class Gauge(BaseModel):
    """Gauge пула: share-аккаунт над индексом GaugeConfig с долей total_votes."""

    pool_id: Address = Field(..., description="Идентификатор пула")
    total_votes: U64 = Field(default=0, description="Голосов за пул")
    last_seen_global_index: Number = Field(
        ..., description="Индекс GaugeConfig при последней синхронизации"
    )
    total_ray_emitted: U64 = Field(default=0, description="Всего RAY, начисленных пулу")

    model_config = {"frozen": True}


class PersonalGauge(BaseModel):
    """Голоса владельца за конкретный пул."""

    owner: Address = Field(..., description="Владелец голосов")
    pool_gauge: Address = Field(..., description="pool_id gauge-а")
    votes: U64 = Field(default=0, description="Голосов владельца за пул")

    model_config = {"frozen": True}


# =============================================================================
# PERSONAL REWARDER
# =============================================================================


class PersonalRewarderState(BaseModel):
    """
    Состояние rate-matching rewarder-а.

    Между синхронизациями:
        ray_rate  = Δ emitted_ray / Δ time
        collected = floor(ray_rate * Δ time_units)
    """

    last_seen_time_units: Number = Field(
        ..., description="Time-units позиции при последней синхронизации"
    )
    last_seen_total_emitted_ray: U64 = Field(
        ..., description="Gauge.total_ray_emitted при последней синхронизации"
    )
    last_updated_ts: U64 = Field(..., description="Timestamp последней синхронизации")
    staged_ray: U64 = Field(default=0, description="RAY, готовые к выплате")

    model_config = {"frozen": True}


class PersonalRewarderCp(BaseModel):
    """Rewarder LP позиции constant-product пула (time-units из escrow)."""

    owner: Address = Field(..., description="Владелец LP позиции")
    pool_gauge: Address = Field(..., description="pool_id gauge-а")
    rewarder: PersonalRewarderState = Field(..., description="Состояние rewarder-а")

    model_config = {"frozen": True}


class PersonalRewarderCl(BaseModel):
    """Rewarder позиции concentrated-liquidity пула (time-units из reward-слота)."""

    pool_position: Address = Field(..., description="Позиция в CL пуле")
    pool_gauge: Address = Field(..., description="pool_id gauge-а")
    pool: Address = Field(..., description="CL пул позиции")
    rewarder: PersonalRewarderState = Field(..., description="Состояние rewarder-а")

    model_config = {"frozen": True}


# =============================================================================
# CL POSITION (READ-ONLY ВХОД)
# =============================================================================


class ClRewardInfo(BaseModel):
    """Reward-слот CL позиции."""

    mint: Address = Field(..., description="Mint токена награды")
    reward_amount_owed: U64 = Field(default=0, description="Накоплено наград в слоте")

    model_config = {"frozen": True}


class ClPositionSnapshot(BaseModel):
    """
    Снапшот позиции внешнего CL пула.

    Только чтение: движок не изменяет и не сохраняет его.
    """

    position: Address = Field(..., description="Идентификатор позиции")
    pool: Address = Field(..., description="CL пул позиции")
    reward_infos: tuple[ClRewardInfo, ...] = Field(
        default=(), max_length=3, description="Reward-слоты позиции"
    )

    model_config = {"frozen": True}
