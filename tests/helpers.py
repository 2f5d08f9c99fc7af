"""Общие helper-ы тестов."""

from raygauge.core.math import Number

# Базовый timestamp тестов
T0 = 1_700_000_000
HOUR = 3_600
DAY = 86_400
YEAR = 365 * DAY


def address(n: int) -> str:
    """Детерминированный 32-байтовый адрес из целого."""
    return f"{n:064x}"


def num(value: str) -> Number:
    """Number из десятичной строки."""
    return Number.from_decimal(value)
