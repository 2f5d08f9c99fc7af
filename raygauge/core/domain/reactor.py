"""
Reactor Records — записи стейкинга RAY

ReactorConfig: глобальные индексы
    ray_reward_index — RAY награды на один застейканный RAY
    iso_ray_index    — isoRAY на один застейканный RAY (APR)

Reactor: персональный аккаунт с двумя share-аккаунтами (RAY награды
и isoRAY) и блокировкой голосов под gauge.

КРИТИЧЕСКИЙ ИНВАРИАНТ:
locked_votes <= ray + iso_ray (vote_power)

Immutable Pydantic модели. Полная совместимость с JSON Schema
(contracts/schema/reactor_config.json, reactor.json).
"""

from pydantic import BaseModel, Field, field_validator

from raygauge.core.domain.types import U16, U64, Address
from raygauge.core.math.precise_number import Number


# =============================================================================
# REACTOR CONFIG
# =============================================================================


class ReactorConfig(BaseModel):
    """Глобальная конфигурация reactor-а."""

    total_ray_deposited: U64 = Field(default=0, description="Всего застейкано RAY")
    ray_reward_daily_emission: U64 = Field(..., description="Суточная эмиссия RAY наград")
    ray_reward_index: Number = Field(
        default=Number.ZERO, description="RAY наград на один застейканный RAY"
    )
    iso_ray_apr_bps: U16 = Field(..., description="Годовая ставка isoRAY (basis points)")
    iso_ray_index: Number = Field(
        default=Number.ZERO, description="isoRAY на один застейканный RAY"
    )
    rewards_emitted_until: U64 = Field(
        ..., description="Timestamp, до которого оба индекса продвинуты"
    )

    model_config = {"frozen": True}


# =============================================================================
# PERSONAL REACTOR
# =============================================================================


class RayStakeRewards(BaseModel):
    """Share-аккаунт RAY наград."""

    last_seen_index: Number = Field(
        default=Number.ZERO, description="ray_reward_index при последней синхронизации"
    )
    uncollected_ray_reward: U64 = Field(default=0, description="Несобранные RAY награды")

    model_config = {"frozen": True}


class Reactor(BaseModel):
    """Персональный reactor владельца."""

    owner: Address = Field(..., description="Владелец")
    ray: U64 = Field(default=0, description="Застейкано RAY")
    iso_ray: U64 = Field(default=0, description="Начислено isoRAY")
    locked_votes: U64 = Field(default=0, description="Голоса, заблокированные под gauge")
    last_seen_index_iso_ray: Number = Field(
        default=Number.ZERO, description="iso_ray_index при последней синхронизации"
    )
    ray_stake_rewards: RayStakeRewards = Field(
        default_factory=RayStakeRewards, description="Share-аккаунт RAY наград"
    )

    model_config = {"frozen": True}

    @field_validator("locked_votes")
    @classmethod
    def validate_locked_within_vote_power(cls, v: int, info) -> int:
        """Проверка, что заблокировано не больше vote_power"""
        if "ray" in info.data and "iso_ray" in info.data:
            vote_power = info.data["ray"] + info.data["iso_ray"]
            if v > vote_power:
                raise ValueError(f"locked_votes {v} must be <= ray + iso_ray {vote_power}")
        return v

    @property
    def vote_power(self) -> int:
        """Сила голоса: ray + iso_ray."""
        return self.ray + self.iso_ray

    @property
    def free_votes(self) -> int:
        """Незаблокированные голоса: vote_power - locked_votes."""
        return self.vote_power - self.locked_votes
