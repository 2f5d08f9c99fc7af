"""
Escrow Records — записи учёта времени LP депозитов

TimeTracker: один на пул, глобальный индекс time-units на LP токен.
PersonalPosition: одна на (owner, pool), share-аккаунт над индексом трекера.

Immutable Pydantic модели. Полная совместимость с JSON Schema
(contracts/schema/time_tracker.json, personal_position.json).
"""

from pydantic import BaseModel, Field

from raygauge.core.domain.types import U64, Address
from raygauge.core.math.precise_number import Number


# =============================================================================
# TIME TRACKER
# =============================================================================


class TimeTracker(BaseModel):
    """
    Глобальный трекер времени пула.

    index — накопленные секунды на один LP токен:
        index += elapsed / total_lp_deposited
    """

    pool_id: Address = Field(..., description="Идентификатор пула")
    escrow_account: Address = Field(..., description="Счёт, хранящий LP токены пула")
    index: Number = Field(default=Number.ZERO, description="Секунды на один LP токен")
    total_lp_deposited: U64 = Field(default=0, description="Всего LP токенов в escrow")
    last_seen_ts: U64 = Field(..., description="Timestamp последнего обновления индекса")

    model_config = {"frozen": True}


# =============================================================================
# PERSONAL POSITION
# =============================================================================


class PersonalPosition(BaseModel):
    """
    LP позиция владельца в escrow.

    earned_time_units хранится в полной точности Number:
    усечение до целых происходит только у потребителя (rewarder).
    """

    owner: Address = Field(..., description="Владелец позиции")
    time_tracker: Address = Field(..., description="pool_id трекера, к которому привязана позиция")
    amount: U64 = Field(default=0, description="LP токенов владельца в escrow")
    last_seen_index: Number = Field(..., description="Индекс трекера при последней синхронизации")
    earned_time_units: Number = Field(
        default=Number.ZERO, description="Накопленные time-units (LP * секунды)"
    )

    model_config = {"frozen": True}
