"""
Checked Integers — безопасная целочисленная арифметика фиксированной разрядности

Все счётчики записей (балансы, голоса, timestamps) — беззнаковые u64
(APR — u16). Python int не переполняется сам по себе, поэтому разрядность
контролируется явно: любое сложение/вычитание проходит через checked_*.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Результат checked_add никогда не превышает max_value (иначе ArithmeticOverflow)
2. Результат checked_sub никогда не отрицателен (иначе ArithmeticUnderflow)
3. Timestamp никогда не уменьшается (иначе TimestampRegression)
"""

from typing import Final

from raygauge.core.errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    TimestampRegression,
)

# =============================================================================
# ГРАНИЦЫ РАЗРЯДНОСТИ
# =============================================================================

U16_MAX: Final[int] = (1 << 16) - 1
U64_MAX: Final[int] = (1 << 64) - 1
I64_MIN: Final[int] = -(1 << 63)
I64_MAX: Final[int] = (1 << 63) - 1


# =============================================================================
# CHECKED-ОПЕРАЦИИ
# =============================================================================


def checked_add(a: int, b: int, what: str = "value", max_value: int = U64_MAX) -> int:
    """
    Сложение с проверкой переполнения.

    Args:
        a: Первое слагаемое
        b: Второе слагаемое
        what: Имя счётчика (для сообщения об ошибке)
        max_value: Верхняя граница разрядности (default: U64_MAX)

    Raises:
        ArithmeticOverflow: a + b > max_value
    """
    result = a + b
    if result > max_value:
        raise ArithmeticOverflow(f"{what} overflow: {a} + {b} > {max_value}")
    return result


def checked_sub(a: int, b: int, what: str = "value") -> int:
    """
    Вычитание с проверкой underflow.

    Raises:
        ArithmeticUnderflow: b > a
    """
    if b > a:
        raise ArithmeticUnderflow(f"{what} underflow: {a} - {b} < 0")
    return a - b


def elapsed_seconds(last_ts: int, now: int, what: str = "timestamp") -> int:
    """
    Прошедшее время с проверкой монотонности часов.

    Returns:
        now - last_ts (>= 0)

    Raises:
        TimestampRegression: now < last_ts
    """
    if now < last_ts:
        raise TimestampRegression(
            f"cannot update {what} with older timestamp: now={now} < last={last_ts}"
        )
    return now - last_ts


# =============================================================================
# ВАЛИДАЦИЯ ВХОДОВ
# =============================================================================


def validate_u64(value: int, name: str) -> int:
    """
    Валидация, что значение — целое в диапазоне u64.

    Raises:
        ValueError: Если value не int или вне [0, U64_MAX]
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > U64_MAX:
        raise ValueError(f"{name} must be in [0, {U64_MAX}], got {value}")
    return value


def validate_i64(value: int, name: str) -> int:
    """
    Валидация, что значение — целое в диапазоне i64.

    Raises:
        ValueError: Если value не int или вне [I64_MIN, I64_MAX]
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be int, got {type(value).__name__}")
    if value < I64_MIN or value > I64_MAX:
        raise ValueError(f"{name} must be in [{I64_MIN}, {I64_MAX}], got {value}")
    return value
