"""
Тесты для LP Escrow

Проверяет:
1. Инициализацию трекера и позиции
2. Рост индекса и начисление time-units
3. Пропорциональность time-units балансам
4. Checked-вывод и неизменность входных записей при ошибке
5. Регрессию времени и связи записей
"""

import pytest

from raygauge.core.errors import (
    ArithmeticUnderflow,
    RecordMismatch,
    TimestampRegression,
)
from raygauge.core.math import Number
from raygauge.escrow import LpEscrow, update_time_tracker
from tests.helpers import T0, address


@pytest.fixture
def escrow() -> LpEscrow:
    return LpEscrow()


@pytest.fixture
def tracker(escrow, pool_a, escrow_account):
    return escrow.init_time_tracker(T0, pool_a, escrow_account)


class TestInit:
    """Тесты инициализации"""

    def test_init_time_tracker(self, tracker, pool_a, escrow_account) -> None:
        assert tracker.pool_id == pool_a
        assert tracker.escrow_account == escrow_account
        assert tracker.index == Number.ZERO
        assert tracker.total_lp_deposited == 0
        assert tracker.last_seen_ts == T0

    def test_init_personal_position(self, escrow, tracker, alice) -> None:
        result = escrow.init_personal_position(T0 + 10, tracker, alice)
        assert result.position.owner == alice
        assert result.position.time_tracker == tracker.pool_id
        assert result.position.amount == 0
        assert result.position.earned_time_units == Number.ZERO
        assert result.time_tracker.last_seen_ts == T0 + 10

    def test_late_position_does_not_earn_past(self, escrow, tracker, alice, bob) -> None:
        """Позиция, созданная позже, стартует с текущего индекса"""
        a = escrow.init_personal_position(T0, tracker, alice)
        a = escrow.deposit(T0, a.time_tracker, a.position, 100)

        b = escrow.init_personal_position(T0 + 100, a.time_tracker, bob)
        assert b.position.last_seen_index == Number.from_natural(1)

        b = escrow.update_personal(T0 + 100, b.time_tracker, b.position)
        assert b.position.earned_time_units == Number.ZERO


class TestDeposit:
    """Тесты депозита и начисления"""

    def test_deposit_into_empty_pool(self, escrow, tracker, alice) -> None:
        """Первый депозит: индекс не растёт (знаменатель был 0)"""
        r = escrow.init_personal_position(T0, tracker, alice)
        r = escrow.deposit(T0 + 50, r.time_tracker, r.position, 100)

        assert r.transfer_amount == 100
        assert r.position.amount == 100
        assert r.time_tracker.total_lp_deposited == 100
        assert r.time_tracker.index == Number.ZERO
        assert r.time_tracker.last_seen_ts == T0 + 50

    def test_time_units_accrue(self, escrow, tracker, alice) -> None:
        """100 LP * 100 секунд → индекс 1, позиция 100"""
        r = escrow.init_personal_position(T0, tracker, alice)
        r = escrow.deposit(T0, r.time_tracker, r.position, 100)
        r = escrow.update_personal(T0 + 100, r.time_tracker, r.position)

        assert r.time_tracker.index == Number.from_natural(1)
        assert r.earned_time_units == Number.from_natural(100)

    def test_time_units_proportional_to_balance(self, escrow, tracker, alice, bob) -> None:
        """Σ earned_time_units == elapsed, доли пропорциональны LP"""
        a = escrow.init_personal_position(T0, tracker, alice)
        a = escrow.deposit(T0, a.time_tracker, a.position, 100)
        b = escrow.init_personal_position(T0, a.time_tracker, bob)
        b = escrow.deposit(T0, b.time_tracker, b.position, 300)

        a = escrow.update_personal(T0 + 400, b.time_tracker, a.position)
        b = escrow.update_personal(T0 + 400, a.time_tracker, b.position)

        assert a.earned_time_units == Number.from_natural(100)
        assert b.earned_time_units == Number.from_natural(300)

    def test_denominator_change_after_index_update(self, escrow, tracker, alice, bob) -> None:
        """Новый депозит влияет на индекс только вперёд"""
        a = escrow.init_personal_position(T0, tracker, alice)
        a = escrow.deposit(T0, a.time_tracker, a.position, 100)

        # 100 секунд при total=100 → +1
        b = escrow.init_personal_position(T0 + 100, a.time_tracker, bob)
        b = escrow.deposit(T0 + 100, b.time_tracker, b.position, 100)
        assert b.time_tracker.index == Number.from_natural(1)

        # 100 секунд при total=200 → +0.5
        a = escrow.update_personal(T0 + 200, b.time_tracker, a.position)
        assert a.time_tracker.index == Number.from_ratio(3, 2)
        assert a.earned_time_units == Number.from_natural(150)

    def test_update_personal_idempotent(self, escrow, tracker, alice) -> None:
        r = escrow.init_personal_position(T0, tracker, alice)
        r = escrow.deposit(T0, r.time_tracker, r.position, 100)
        first = escrow.update_personal(T0 + 100, r.time_tracker, r.position)
        second = escrow.update_personal(T0 + 100, first.time_tracker, first.position)
        assert second.position == first.position
        assert second.time_tracker == first.time_tracker

    def test_earned_keeps_fraction(self, escrow, tracker, alice, bob) -> None:
        """earned_time_units хранится в полной точности"""
        a = escrow.init_personal_position(T0, tracker, alice)
        a = escrow.deposit(T0, a.time_tracker, a.position, 1)
        b = escrow.init_personal_position(T0, a.time_tracker, bob)
        b = escrow.deposit(T0, b.time_tracker, b.position, 2)

        a = escrow.update_personal(T0 + 1, b.time_tracker, a.position)
        assert a.time_tracker.index == Number.from_ratio(1, 3)
        assert a.earned_time_units == Number.from_ratio(1, 3)


class TestWithdraw:
    """Тесты вывода"""

    def test_withdraw(self, escrow, tracker, alice) -> None:
        r = escrow.init_personal_position(T0, tracker, alice)
        r = escrow.deposit(T0, r.time_tracker, r.position, 100)
        r = escrow.withdraw(T0 + 100, r.time_tracker, r.position, 40)

        assert r.transfer_amount == 40
        assert r.position.amount == 60
        assert r.time_tracker.total_lp_deposited == 60
        assert r.earned_time_units == Number.from_natural(100)

    def test_withdraw_more_than_balance(self, escrow, tracker, alice) -> None:
        """Вывод сверх баланса → fatal underflow, входные записи не изменены"""
        r = escrow.init_personal_position(T0, tracker, alice)
        r = escrow.deposit(T0, r.time_tracker, r.position, 100)
        before_tracker, before_position = r.time_tracker, r.position

        with pytest.raises(ArithmeticUnderflow):
            escrow.withdraw(T0 + 10, r.time_tracker, r.position, 101)

        assert r.time_tracker == before_tracker
        assert r.position == before_position
        assert r.position.amount == 100


class TestInvariants:
    """Тесты fatal-инвариантов"""

    def test_timestamp_regression(self, escrow, tracker, alice) -> None:
        r = escrow.init_personal_position(T0 + 100, tracker, alice)
        with pytest.raises(TimestampRegression):
            escrow.deposit(T0 + 99, r.time_tracker, r.position, 1)

    def test_tracker_update_regression(self, tracker) -> None:
        with pytest.raises(TimestampRegression):
            update_time_tracker(tracker, T0 - 1)

    def test_position_of_other_pool(self, escrow, tracker, alice, escrow_account) -> None:
        other = escrow.init_time_tracker(T0, address(0xDEAD), escrow_account)
        r = escrow.init_personal_position(T0, other, alice)
        with pytest.raises(RecordMismatch):
            escrow.deposit(T0, tracker, r.position, 1)

    def test_index_non_decreasing(self, escrow, tracker, alice) -> None:
        r = escrow.init_personal_position(T0, tracker, alice)
        r = escrow.deposit(T0, r.time_tracker, r.position, 7)
        last = r.time_tracker.index
        for step in range(1, 6):
            r = escrow.update_personal(T0 + step * 13, r.time_tracker, r.position)
            assert r.time_tracker.index >= last
            last = r.time_tracker.index
