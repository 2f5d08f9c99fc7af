"""
Тесты для модуля PreciseNumber

Проверяет:
1. Конструкторы (natural, ratio, bps, decimal, words, bytes)
2. Checked-арифметику и отсутствие wrap
3. Округление floor/ceil и усечение до u64
4. Текстовую форму
5. Граничные случаи
6. Pydantic core schema и строгий разбор десятичной формы
"""

from decimal import Decimal

import pytest
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from raygauge.core.domain import TimeTracker
from raygauge.core.errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivisionByZero,
)
from raygauge.core.math import SCALE, U256_MAX, Number
from raygauge.core.math.precise_number import DECIMAL_PATTERN
from tests.helpers import T0, address, num

# =============================================================================
# ТЕСТЫ КОНСТРУКТОРОВ
# =============================================================================


class TestConstructors:
    """Тесты конструкторов Number"""

    def test_constants(self) -> None:
        """ZERO и ONE"""
        assert Number.ZERO.raw == 0
        assert Number.ONE.raw == SCALE == 10**12

    def test_from_natural(self) -> None:
        """Целое → raw * 10^12"""
        assert Number.from_natural(5).raw == 5 * 10**12
        assert Number.from_natural(0) == Number.ZERO

    def test_from_natural_rejects_negative_and_float(self) -> None:
        """Отрицательные и нецелые значения отклоняются"""
        with pytest.raises(ValueError):
            Number.from_natural(-1)
        with pytest.raises(ValueError):
            Number.from_natural(1.5)  # type: ignore[arg-type]

    def test_from_ratio_truncates(self) -> None:
        """1/3 усекается до 12 знаков"""
        assert Number.from_ratio(1, 3).raw == 333333333333
        assert Number.from_ratio(2, 3).raw == 666666666666

    def test_from_ratio_exact(self) -> None:
        """Точные дроби"""
        assert Number.from_ratio(180, 300) == num("0.6")
        assert Number.from_ratio(43_200, 86_400) == num("0.5")

    def test_from_ratio_zero_denominator(self) -> None:
        """Знаменатель 0 → DivisionByZero"""
        with pytest.raises(DivisionByZero):
            Number.from_ratio(1, 0)

    def test_from_bps(self) -> None:
        """5000 bps = 0.5"""
        assert Number.from_bps(5000) == num("0.5")
        assert Number.from_bps(10_000) == Number.ONE
        assert Number.from_bps(1) == num("0.0001")

    def test_from_decimal_exact_digits(self) -> None:
        """До 12 знаков после запятой значение представимо точно"""
        assert Number.from_decimal("0.000000000001").raw == 1
        assert Number.from_decimal("1E-12").raw == 1
        assert Number.from_decimal(Decimal("1.25")).raw == 1_250_000_000_000

    @pytest.mark.parametrize("value", ["0.0000000000005", "0.0000000000004", "1E-13", "1.1234567890123"])
    def test_from_decimal_rejects_extra_digits(self, value: str) -> None:
        """13-й знак после запятой не округляется, а отклоняется"""
        with pytest.raises(ValueError, match="fractional digits"):
            Number.from_decimal(value)

    @pytest.mark.parametrize("value", ["-1", "abc", "NaN", "Infinity", ""])
    def test_from_decimal_rejects_invalid(self, value: str) -> None:
        """Отрицательные, нечисловые и бесконечные значения отклоняются"""
        with pytest.raises(ValueError):
            Number.from_decimal(value)

    def test_raw_bounds(self) -> None:
        """raw вне [0, 2^256-1] отклоняется"""
        with pytest.raises(ArithmeticUnderflow):
            Number(-1)
        with pytest.raises(ArithmeticOverflow):
            Number(U256_MAX + 1)
        assert Number(U256_MAX).raw == U256_MAX

    def test_raw_type(self) -> None:
        """raw только int (bool и float отклоняются)"""
        with pytest.raises(TypeError):
            Number(1.5)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            Number(True)


class TestWordsAndBytes:
    """Тесты представления 4 little-endian u64 словами"""

    def test_words(self) -> None:
        assert Number.from_words([1, 0, 0, 0]).raw == 1
        assert Number(1 << 64).to_words() == (0, 1, 0, 0)
        assert Number(U256_MAX).to_words() == (2**64 - 1,) * 4

    def test_words_validation(self) -> None:
        """Неверное число слов или слово вне u64"""
        with pytest.raises(ValueError):
            Number.from_words([1, 2, 3])
        with pytest.raises(ValueError):
            Number.from_words([2**64, 0, 0, 0])

    def test_bytes_little_endian(self) -> None:
        data = Number(1).to_bytes_le()
        assert len(data) == 32
        assert data[0] == 1
        assert data[1:] == bytes(31)
        assert Number.from_bytes_le(data) == Number(1)

    def test_bytes_wrong_length(self) -> None:
        with pytest.raises(ValueError):
            Number.from_bytes_le(bytes(31))


# =============================================================================
# ТЕСТЫ АРИФМЕТИКИ
# =============================================================================


class TestArithmetic:
    """Тесты checked-арифметики"""

    def test_add_sub(self) -> None:
        assert num("1.5") + num("2.25") == num("3.75")
        assert num("3.75") - num("2.25") == num("1.5")

    def test_mul_single_rescale(self) -> None:
        """mul делит произведение на масштаб ровно один раз"""
        assert num("1.5") * num("2") == num("3")
        assert num("0.5") * num("0.5") == num("0.25")

    def test_mul_truncates(self) -> None:
        """Результат ниже 10^-12 усекается к нулю"""
        assert (Number(1) * Number(1)).raw == 0

    def test_div(self) -> None:
        assert num("3") / num("2") == num("1.5")
        assert (Number.ONE / Number.from_natural(3)).raw == 333333333333

    def test_div_by_zero(self) -> None:
        with pytest.raises(DivisionByZero):
            Number.ONE / Number.ZERO

    def test_sub_underflow(self) -> None:
        """Вычитание не уходит в отрицательные значения"""
        with pytest.raises(ArithmeticUnderflow):
            num("1") - num("1.000000000001")

    def test_add_overflow(self) -> None:
        """Сложение не делает wrap"""
        with pytest.raises(ArithmeticOverflow):
            Number(U256_MAX) + Number(1)

    def test_mul_overflow(self) -> None:
        with pytest.raises(ArithmeticOverflow):
            Number(U256_MAX) * Number.from_natural(2)

    def test_div_overflow(self) -> None:
        """Деление большого числа на малое"""
        with pytest.raises(ArithmeticOverflow):
            Number(U256_MAX) / Number(1)

    def test_mul_widening(self) -> None:
        """Промежуточное произведение шире 256 бит не теряет точность"""
        big = Number.from_natural(10**60)
        assert (big * Number.ONE) == big
        assert (big / Number.ONE) == big

    def test_non_number_operand(self) -> None:
        with pytest.raises(TypeError):
            Number.ONE + 1  # type: ignore[operator]


# =============================================================================
# ТЕСТЫ ОКРУГЛЕНИЯ
# =============================================================================


class TestRounding:
    """Тесты floor / ceil / floor_to_int"""

    def test_floor(self) -> None:
        assert num("2.7").floor() == Number.from_natural(2)
        assert num("2").floor() == Number.from_natural(2)

    def test_ceil(self) -> None:
        assert num("2.000000000001").ceil() == Number.from_natural(3)
        assert num("2").ceil() == Number.from_natural(2)
        assert num("0.01").ceil() == Number.ONE

    def test_ceil_overflow(self) -> None:
        """ceil, выходящий за 256 бит, — ошибка"""
        with pytest.raises(ArithmeticOverflow):
            Number(U256_MAX).ceil()

    def test_floor_to_int(self) -> None:
        assert num("89.999999999999").floor_to_int() == 89
        assert Number.ZERO.floor_to_int() == 0

    def test_floor_to_int_width(self) -> None:
        """Целая часть обязана помещаться в u64"""
        big = Number.from_natural(2**64)
        with pytest.raises(ArithmeticOverflow):
            big.floor_to_int()
        assert big.floor_to_int(bits=128) == 2**64

    def test_min_max(self) -> None:
        a, b = num("1"), num("2")
        assert a.min(b) == a
        assert a.max(b) == b


# =============================================================================
# ТЕСТЫ ТЕКСТОВОЙ ФОРМЫ
# =============================================================================


class TestTextForm:
    """Тесты str / repr"""

    @pytest.mark.parametrize(
        "raw, text",
        [
            (0, "0"),
            (10**12, "1"),
            (1_500_000_000_000, "1.5"),
            (1, "0.000000000001"),
            (123_456_789_012_345, "123.456789012345"),
        ],
    )
    def test_str(self, raw: int, text: str) -> None:
        assert str(Number(raw)) == text

    def test_repr(self) -> None:
        assert repr(num("0.6")) == "Number('0.6')"

    def test_ordering(self) -> None:
        assert num("0.5") < num("0.6") <= num("0.6") < Number.ONE
        assert sorted([Number.ONE, Number.ZERO]) == [Number.ZERO, Number.ONE]


# =============================================================================
# ТЕСТЫ PYDANTIC-ИНТЕГРАЦИИ
# =============================================================================


class TestPydanticIntegration:
    """Тесты core schema для полей-Number"""

    def test_json_schema_is_decimal_string(self) -> None:
        assert TypeAdapter(Number).json_schema() == {"type": "string", "pattern": DECIMAL_PATTERN}

    def test_validate_and_dump(self) -> None:
        adapter = TypeAdapter(Number)
        assert adapter.validate_python("1.5") == num("1.5")
        assert adapter.validate_python([1, 0, 0, 0]) == Number(1)
        assert adapter.dump_json(num("1.5")) == b'"1.5"'

    def test_record_rejects_extra_digits(self) -> None:
        """13 знаков в индексе записи отклоняются, а не округляются"""
        with pytest.raises(PydanticValidationError):
            TimeTracker.model_validate(
                {
                    "pool_id": address(0xA),
                    "escrow_account": address(0xE5C),
                    "index": "0.0000000000005",
                    "total_lp_deposited": 0,
                    "last_seen_ts": T0,
                }
            )
