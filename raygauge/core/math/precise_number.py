"""
PreciseNumber — 256-bit беззнаковое fixed-point число

Масштаб: ONE = 10^12 (одна "целая единица" = 10^12 raw).
Хранение: 4 little-endian u64 слова (32 байта).

Все вычисления accrual-движков выражаются в этом типе:
- индексы (time-units на LP, RAY на голос, isoRAY на RAY)
- ставки (RAY в секунду, доля года, APR)
- накопленные time-units позиции

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. 0 <= raw <= 2^256 - 1 для любого экземпляра
2. add/sub/mul/div — checked: выход за диапазон → исключение, без wrap
3. mul делит raw-произведение на масштаб ровно один раз
4. div усекает к нулю (floor для беззнаковых значений)
5. Промежуточные произведения вычисляются без потери точности
   (Python int), проверяется только итоговый результат

ФОРМУЛЫ:
    mul(a, b) = floor(a.raw * b.raw / ONE)
    div(a, b) = floor(a.raw * ONE / b.raw)
    floor(a)  = a.raw - a.raw mod ONE
    ceil(a)   = floor(a) + ONE, если a.raw mod ONE != 0
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, ClassVar, Final

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from raygauge.core.errors import (
    AccrualInvariantViolation,
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivisionByZero,
)

# =============================================================================
# КОНСТАНТЫ ПРЕДСТАВЛЕНИЯ
# =============================================================================

# Количество десятичных знаков дробной части
DECIMAL_PLACES: Final[int] = 12

# Raw-значение одной целой единицы
SCALE: Final[int] = 10**DECIMAL_PLACES

WORD_BITS: Final[int] = 64
WORD_COUNT: Final[int] = 4
WORD_MASK: Final[int] = (1 << WORD_BITS) - 1

U256_MAX: Final[int] = (1 << (WORD_BITS * WORD_COUNT)) - 1

# Размер сериализованного значения в байтах
NUMBER_BYTES: Final[int] = WORD_COUNT * WORD_BITS // 8

BPS_DENOMINATOR: Final[int] = 10_000

# Регулярное выражение JSON-формы (десятичная строка)
DECIMAL_PATTERN: Final[str] = r"^[0-9]+(\.[0-9]{1,12})?$"


# =============================================================================
# NUMBER
# =============================================================================


@dataclass(frozen=True, order=True)
class Number:
    """
    Беззнаковое fixed-point число с масштабом 10^12.

    Immutable (frozen=True). Порядок (<, <=, ==, >=, >) задан по raw.

    Examples:
        >>> Number.from_natural(3) / Number.from_natural(2)
        Number('1.5')
        >>> Number.from_ratio(1, 3).raw
        333333333333
        >>> Number.from_ratio(1, 100).ceil()
        Number('1')
    """

    raw: int = 0

    ZERO: ClassVar["Number"]
    ONE: ClassVar["Number"]

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise TypeError(f"Number raw value must be int, got {type(self.raw).__name__}")
        if self.raw < 0:
            raise ArithmeticUnderflow(f"Number raw value is negative: {self.raw}")
        if self.raw > U256_MAX:
            raise ArithmeticOverflow(f"Number raw value exceeds 256 bits: {self.raw}")

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def from_natural(cls, value: int) -> "Number":
        """
        Целое число единиц → Number (value * ONE).

        Raises:
            ValueError: value не целое или отрицательное
            ArithmeticOverflow: value * ONE не помещается в 256 бит
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"natural value must be int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"natural value must be non-negative, got {value}")
        return cls(value * SCALE)

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> "Number":
        """
        Дробь numerator / denominator с усечением до 12 знаков.

        Raises:
            DivisionByZero: denominator == 0
        """
        return cls.from_natural(numerator).checked_div(cls.from_natural(denominator))

    @classmethod
    def from_bps(cls, bps: int) -> "Number":
        """Basis points → доля (bps / 10_000)."""
        return cls.from_ratio(bps, BPS_DENOMINATOR)

    @classmethod
    def from_words(cls, words: "list[int] | tuple[int, ...]") -> "Number":
        """4 little-endian u64 слова → Number."""
        if len(words) != WORD_COUNT:
            raise ValueError(f"expected {WORD_COUNT} words, got {len(words)}")
        raw = 0
        for i, word in enumerate(words):
            if isinstance(word, bool) or not isinstance(word, int):
                raise ValueError(f"word {i} must be int, got {type(word).__name__}")
            if word < 0 or word > WORD_MASK:
                raise ValueError(f"word {i} out of u64 range: {word}")
            raw |= word << (WORD_BITS * i)
        return cls(raw)

    @classmethod
    def from_bytes_le(cls, data: bytes) -> "Number":
        """32 байта little-endian → Number."""
        if len(data) != NUMBER_BYTES:
            raise ValueError(f"expected {NUMBER_BYTES} bytes, got {len(data)}")
        return cls(int.from_bytes(data, "little"))

    @classmethod
    def from_decimal(cls, value: "str | Decimal") -> "Number":
        """
        Десятичная строка → Number.

        Дробная часть не длиннее 12 знаков: значение представимо точно.

        Raises:
            ValueError: строка не является неотрицательным конечным числом
                или содержит больше 12 знаков после запятой
        """
        try:
            parsed = Decimal(value)
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"invalid decimal value: {value!r}") from exc

        if not parsed.is_finite():
            raise ValueError(f"decimal value must be finite, got {value!r}")
        if parsed < 0:
            raise ValueError(f"decimal value must be non-negative, got {value!r}")
        if -parsed.as_tuple().exponent > DECIMAL_PLACES:
            raise ValueError(
                f"decimal value has more than {DECIMAL_PLACES} fractional digits: {value!r}"
            )

        with localcontext() as ctx:
            ctx.prec = 100
            scaled = parsed * SCALE
        return cls(int(scaled))

    # -------------------------------------------------------------------------
    # Сериализация
    # -------------------------------------------------------------------------

    def to_words(self) -> tuple[int, int, int, int]:
        """Number → 4 little-endian u64 слова."""
        return tuple(  # type: ignore[return-value]
            (self.raw >> (WORD_BITS * i)) & WORD_MASK for i in range(WORD_COUNT)
        )

    def to_bytes_le(self) -> bytes:
        return self.raw.to_bytes(NUMBER_BYTES, "little")

    def __str__(self) -> str:
        whole, frac = divmod(self.raw, SCALE)
        if frac == 0:
            return str(whole)
        return f"{whole}.{frac:0{DECIMAL_PLACES}d}".rstrip("0")

    def __repr__(self) -> str:
        return f"Number('{self}')"

    # -------------------------------------------------------------------------
    # Checked-арифметика
    # -------------------------------------------------------------------------

    def checked_add(self, other: "Number") -> "Number":
        result = self.raw + other.raw
        if result > U256_MAX:
            raise ArithmeticOverflow(f"Number add overflow: {self} + {other}")
        return Number(result)

    def checked_sub(self, other: "Number") -> "Number":
        if other.raw > self.raw:
            raise ArithmeticUnderflow(f"Number sub underflow: {self} - {other}")
        return Number(self.raw - other.raw)

    def checked_mul(self, other: "Number") -> "Number":
        result = self.raw * other.raw // SCALE
        if result > U256_MAX:
            raise ArithmeticOverflow(f"Number mul overflow: {self} * {other}")
        return Number(result)

    def checked_div(self, other: "Number") -> "Number":
        if other.raw == 0:
            raise DivisionByZero(f"Number division by zero: {self} / 0")
        result = self.raw * SCALE // other.raw
        if result > U256_MAX:
            raise ArithmeticOverflow(f"Number div overflow: {self} / {other}")
        return Number(result)

    def __add__(self, other: object) -> "Number":
        if not isinstance(other, Number):
            return NotImplemented
        return self.checked_add(other)

    def __sub__(self, other: object) -> "Number":
        if not isinstance(other, Number):
            return NotImplemented
        return self.checked_sub(other)

    def __mul__(self, other: object) -> "Number":
        if not isinstance(other, Number):
            return NotImplemented
        return self.checked_mul(other)

    def __truediv__(self, other: object) -> "Number":
        if not isinstance(other, Number):
            return NotImplemented
        return self.checked_div(other)

    # -------------------------------------------------------------------------
    # Округление
    # -------------------------------------------------------------------------

    def floor(self) -> "Number":
        """Округление вниз до целой единицы (к −∞)."""
        return Number(self.raw - self.raw % SCALE)

    def ceil(self) -> "Number":
        """
        Округление вверх до целой единицы (к +∞).

        Raises:
            ArithmeticOverflow: округлённое значение не помещается в 256 бит
        """
        remainder = self.raw % SCALE
        if remainder == 0:
            return self
        result = self.raw - remainder + SCALE
        if result > U256_MAX:
            raise ArithmeticOverflow(f"Number ceil overflow: {self}")
        return Number(result)

    def floor_to_int(self, bits: int = 64) -> int:
        """
        Целая часть как беззнаковое целое заданной разрядности.

        Args:
            bits: разрядность целевого типа (64 для u64, 128 для u128)

        Raises:
            ArithmeticOverflow: целая часть не помещается в bits
        """
        value = self.raw // SCALE
        if value > (1 << bits) - 1:
            raise ArithmeticOverflow(f"Number {self} does not fit into u{bits}")
        return value

    def is_zero(self) -> bool:
        return self.raw == 0

    def min(self, other: "Number") -> "Number":
        return self if self.raw <= other.raw else other

    def max(self, other: "Number") -> "Number":
        return self if self.raw >= other.raw else other

    # -------------------------------------------------------------------------
    # Pydantic интеграция
    # -------------------------------------------------------------------------

    @classmethod
    def coerce(cls, value: Any) -> "Number":
        """
        Приведение внешнего значения к Number для pydantic-моделей.

        Допустимо: Number, десятичная строка, 4 u64 слова.
        """
        if isinstance(value, Number):
            return value
        try:
            if isinstance(value, (str, Decimal)):
                return cls.from_decimal(value)
            if isinstance(value, (list, tuple)):
                return cls.from_words(value)
        except AccrualInvariantViolation as exc:
            raise ValueError(str(exc)) from exc
        raise ValueError(
            f"cannot build Number from {type(value).__name__}; "
            "use a decimal string or 4 little-endian u64 words"
        )

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: Any, handler: Any) -> dict[str, Any]:
        return {"type": "string", "pattern": DECIMAL_PATTERN}


Number.ZERO = Number(0)
Number.ONE = Number(SCALE)
