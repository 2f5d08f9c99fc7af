"""
Field Types — общие аннотированные типы полей записей

Все счётчики — беззнаковые целые фиксированной разрядности,
адреса — 32-байтовые идентификаторы в hex-представлении.
Границы проверяются pydantic при создании записи.
"""

from typing import Annotated, Final

from pydantic import Field

from raygauge.core.math.checked import I64_MAX, I64_MIN, U16_MAX, U64_MAX

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

ADDRESS_BYTES: Final[int] = 32
ADDRESS_PATTERN: Final[str] = "^[0-9a-f]{64}$"


# =============================================================================
# ТИПЫ ПОЛЕЙ
# =============================================================================

U64 = Annotated[int, Field(ge=0, le=U64_MAX)]
U16 = Annotated[int, Field(ge=0, le=U16_MAX)]
I64 = Annotated[int, Field(ge=I64_MIN, le=I64_MAX)]

# 32 байта, 64 hex-символа в нижнем регистре
Address = Annotated[str, Field(pattern=ADDRESS_PATTERN)]


def address_from_bytes(data: bytes) -> str:
    """32 байта → hex-адрес."""
    if len(data) != ADDRESS_BYTES:
        raise ValueError(f"address must be {ADDRESS_BYTES} bytes, got {len(data)}")
    return data.hex()


def address_to_bytes(address: str) -> bytes:
    """hex-адрес → 32 байта."""
    data = bytes.fromhex(address)
    if len(data) != ADDRESS_BYTES:
        raise ValueError(f"address must be {ADDRESS_BYTES} bytes, got {len(data)}")
    return data
