"""
Record Layout — фиксированная бинарная раскладка записей

Формат записи (little-endian, без выравнивания):
    [8 байт discriminator][поля в порядке объявления]

discriminator = sha256("account:<RecordName>")[:8]

Кодирование полей:
- Address: 32 байта
- u64:     8 байт  ('<Q')
- u16:     2 байта  ('<H')
- Number:  32 байта (4 little-endian u64 слова)
- вложенная запись: её поля inline, без discriminator

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Размер каждой записи фиксирован (нет полей переменной длины)
2. decode(encode(r)) == r
3. decode проверяет длину буфера и discriminator
"""

import hashlib
import struct
from typing import Any, Dict, Final, Protocol

from pydantic import BaseModel

from raygauge.core.domain import (
    ADDRESS_BYTES,
    Gauge,
    GaugeConfig,
    PersonalGauge,
    PersonalPosition,
    PersonalRewarderCl,
    PersonalRewarderCp,
    PersonalRewarderState,
    RayStakeRewards,
    Reactor,
    ReactorConfig,
    TimeTracker,
    address_from_bytes,
    address_to_bytes,
)
from raygauge.core.math.precise_number import NUMBER_BYTES, Number

DISCRIMINATOR_BYTES: Final[int] = 8


def record_discriminator(record_name: str) -> bytes:
    """Первые 8 байт sha256("account:<RecordName>")."""
    return hashlib.sha256(f"account:{record_name}".encode("utf-8")).digest()[:DISCRIMINATOR_BYTES]


# =============================================================================
# КОДЕКИ ПОЛЕЙ
# =============================================================================


class FieldCodec(Protocol):
    size: int

    def pack(self, value: Any) -> bytes: ...

    def unpack(self, data: bytes, offset: int) -> Any: ...


class _StructCodec:
    def __init__(self, fmt: str):
        self._struct = struct.Struct(fmt)
        self.size = self._struct.size

    def pack(self, value: int) -> bytes:
        return self._struct.pack(value)

    def unpack(self, data: bytes, offset: int) -> int:
        return self._struct.unpack_from(data, offset)[0]


class _AddressCodec:
    size = ADDRESS_BYTES

    def pack(self, value: str) -> bytes:
        return address_to_bytes(value)

    def unpack(self, data: bytes, offset: int) -> str:
        return address_from_bytes(data[offset:offset + ADDRESS_BYTES])


class _NumberCodec:
    size = NUMBER_BYTES

    def pack(self, value: Number) -> bytes:
        return value.to_bytes_le()

    def unpack(self, data: bytes, offset: int) -> Number:
        return Number.from_bytes_le(data[offset:offset + NUMBER_BYTES])


U64_CODEC: Final = _StructCodec("<Q")
U16_CODEC: Final = _StructCodec("<H")
ADDRESS_CODEC: Final = _AddressCodec()
NUMBER_CODEC: Final = _NumberCodec()


# =============================================================================
# RECORD LAYOUT
# =============================================================================


class RecordLayout:
    """
    Раскладка одного типа записи.

    Может использоваться как кодек вложенного поля (без discriminator).
    """

    def __init__(self, record_type: type[BaseModel], fields: tuple[tuple[str, FieldCodec], ...]):
        self.record_type = record_type
        self.fields = fields
        self.discriminator = record_discriminator(record_type.__name__)
        self.size = sum(codec.size for _, codec in fields)

    @property
    def record_size(self) -> int:
        """Полный размер записи вместе с discriminator."""
        return DISCRIMINATOR_BYTES + self.size

    # Кодек вложенного поля
    def pack(self, record: BaseModel) -> bytes:
        return b"".join(codec.pack(getattr(record, name)) for name, codec in self.fields)

    def unpack(self, data: bytes, offset: int) -> BaseModel:
        values: Dict[str, Any] = {}
        for name, codec in self.fields:
            values[name] = codec.unpack(data, offset)
            offset += codec.size
        return self.record_type.model_validate(values)

    def encode(self, record: BaseModel) -> bytes:
        """
        Запись → буфер фиксированного размера.

        Raises:
            TypeError: record не того типа
            struct.error: целое поле вне разрядности
        """
        if not isinstance(record, self.record_type):
            raise TypeError(
                f"expected {self.record_type.__name__}, got {type(record).__name__}"
            )
        return self.discriminator + self.pack(record)

    def decode(self, data: bytes) -> BaseModel:
        """
        Буфер → запись.

        Raises:
            ValueError: неверная длина буфера или discriminator
            pydantic.ValidationError: нарушены инварианты записи
        """
        if len(data) != self.record_size:
            raise ValueError(
                f"{self.record_type.__name__}: expected {self.record_size} bytes, got {len(data)}"
            )
        if data[:DISCRIMINATOR_BYTES] != self.discriminator:
            raise ValueError(f"{self.record_type.__name__}: discriminator mismatch")
        return self.unpack(data, DISCRIMINATOR_BYTES)


# =============================================================================
# РАСКЛАДКИ ЗАПИСЕЙ
# =============================================================================

TIME_TRACKER_LAYOUT: Final = RecordLayout(
    TimeTracker,
    (
        ("pool_id", ADDRESS_CODEC),
        ("escrow_account", ADDRESS_CODEC),
        ("index", NUMBER_CODEC),
        ("total_lp_deposited", U64_CODEC),
        ("last_seen_ts", U64_CODEC),
    ),
)

PERSONAL_POSITION_LAYOUT: Final = RecordLayout(
    PersonalPosition,
    (
        ("owner", ADDRESS_CODEC),
        ("time_tracker", ADDRESS_CODEC),
        ("amount", U64_CODEC),
        ("last_seen_index", NUMBER_CODEC),
        ("earned_time_units", NUMBER_CODEC),
    ),
)

GAUGE_CONFIG_LAYOUT: Final = RecordLayout(
    GaugeConfig,
    (
        ("total_votes", U64_CODEC),
        ("ray_emission_per_day", U64_CODEC),
        ("index", NUMBER_CODEC),
        ("last_updated_ts", U64_CODEC),
    ),
)

GAUGE_LAYOUT: Final = RecordLayout(
    Gauge,
    (
        ("pool_id", ADDRESS_CODEC),
        ("total_votes", U64_CODEC),
        ("last_seen_global_index", NUMBER_CODEC),
        ("total_ray_emitted", U64_CODEC),
    ),
)

PERSONAL_GAUGE_LAYOUT: Final = RecordLayout(
    PersonalGauge,
    (
        ("owner", ADDRESS_CODEC),
        ("pool_gauge", ADDRESS_CODEC),
        ("votes", U64_CODEC),
    ),
)

REWARDER_STATE_LAYOUT: Final = RecordLayout(
    PersonalRewarderState,
    (
        ("last_seen_time_units", NUMBER_CODEC),
        ("last_seen_total_emitted_ray", U64_CODEC),
        ("last_updated_ts", U64_CODEC),
        ("staged_ray", U64_CODEC),
    ),
)

PERSONAL_REWARDER_CP_LAYOUT: Final = RecordLayout(
    PersonalRewarderCp,
    (
        ("owner", ADDRESS_CODEC),
        ("pool_gauge", ADDRESS_CODEC),
        ("rewarder", REWARDER_STATE_LAYOUT),
    ),
)

PERSONAL_REWARDER_CL_LAYOUT: Final = RecordLayout(
    PersonalRewarderCl,
    (
        ("pool_position", ADDRESS_CODEC),
        ("pool_gauge", ADDRESS_CODEC),
        ("pool", ADDRESS_CODEC),
        ("rewarder", REWARDER_STATE_LAYOUT),
    ),
)

REACTOR_CONFIG_LAYOUT: Final = RecordLayout(
    ReactorConfig,
    (
        ("total_ray_deposited", U64_CODEC),
        ("ray_reward_daily_emission", U64_CODEC),
        ("ray_reward_index", NUMBER_CODEC),
        ("iso_ray_apr_bps", U16_CODEC),
        ("iso_ray_index", NUMBER_CODEC),
        ("rewards_emitted_until", U64_CODEC),
    ),
)

RAY_STAKE_REWARDS_LAYOUT: Final = RecordLayout(
    RayStakeRewards,
    (
        ("last_seen_index", NUMBER_CODEC),
        ("uncollected_ray_reward", U64_CODEC),
    ),
)

REACTOR_LAYOUT: Final = RecordLayout(
    Reactor,
    (
        ("owner", ADDRESS_CODEC),
        ("ray", U64_CODEC),
        ("iso_ray", U64_CODEC),
        ("locked_votes", U64_CODEC),
        ("last_seen_index_iso_ray", NUMBER_CODEC),
        ("ray_stake_rewards", RAY_STAKE_REWARDS_LAYOUT),
    ),
)

LAYOUTS: Final[Dict[type[BaseModel], RecordLayout]] = {
    layout.record_type: layout
    for layout in (
        TIME_TRACKER_LAYOUT,
        PERSONAL_POSITION_LAYOUT,
        GAUGE_CONFIG_LAYOUT,
        GAUGE_LAYOUT,
        PERSONAL_GAUGE_LAYOUT,
        PERSONAL_REWARDER_CP_LAYOUT,
        PERSONAL_REWARDER_CL_LAYOUT,
        REACTOR_CONFIG_LAYOUT,
        REACTOR_LAYOUT,
    )
}


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def encode_record(record: BaseModel) -> bytes:
    """Запись → байты по её раскладке."""
    return LAYOUTS[type(record)].encode(record)


def decode_record(record_type: type[BaseModel], data: bytes) -> BaseModel:
    """Байты → запись заданного типа."""
    return LAYOUTS[record_type].decode(data)
