"""
LP Escrow — учёт времени удержания LP токенов

Глобальный индекс пула:
    index += elapsed / total_lp_deposited

Позиция зарабатывает time-units пропорционально LP балансу:
    earned_time_units += amount * (index - last_seen_index)

Порядок любой операции, меняющей total_lp_deposited:
1. TimeTracker продвигается до now (старый знаменатель)
2. Позиция синхронизируется с новым индексом (старый amount)
3. Только затем меняются amount и total_lp_deposited

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. last_seen_ts и index трекера не убывают
2. earned_time_units позиции не убывает
3. Сумма amount всех позиций пула == total_lp_deposited
4. amount никогда не отрицателен (checked subtraction)
"""

import logging
from dataclasses import dataclass

from raygauge.core.domain import PersonalPosition, TimeTracker
from raygauge.core.errors import RecordMismatch
from raygauge.core.math import (
    Number,
    accrue_share,
    advance_shared_index,
    checked_add,
    checked_sub,
    elapsed_time_rate,
    validate_u64,
)

logger = logging.getLogger(__name__)


# =============================================================================
# INDEX / SHARE OPERATIONS
# =============================================================================


def update_time_tracker(tracker: TimeTracker, now: int) -> TimeTracker:
    """
    Продвижение индекса трекера до now.

    Raises:
        TimestampRegression: now < tracker.last_seen_ts
    """
    advance = advance_shared_index(
        index=tracker.index,
        last_updated_ts=tracker.last_seen_ts,
        now=now,
        total_shares=tracker.total_lp_deposited,
        rate_numerator=elapsed_time_rate,
        what="time tracker",
    )
    return tracker.model_copy(update={"index": advance.index, "last_seen_ts": now})


def update_position(position: PersonalPosition, tracker: TimeTracker) -> PersonalPosition:
    """
    Синхронизация позиции с (уже продвинутым) индексом трекера.

    Raises:
        RecordMismatch: позиция привязана к другому трекеру
        IndexRegression: индекс трекера меньше last_seen_index позиции
    """
    _check_link(tracker, position)

    accrual = accrue_share(
        share_amount=position.amount,
        last_seen_index=position.last_seen_index,
        current_index=tracker.index,
        what="personal position",
    )
    if accrual.accrued.is_zero() and accrual.last_seen_index == position.last_seen_index:
        return position

    return position.model_copy(
        update={
            "last_seen_index": accrual.last_seen_index,
            "earned_time_units": position.earned_time_units + accrual.accrued,
        }
    )


def _check_link(tracker: TimeTracker, position: PersonalPosition) -> None:
    if position.time_tracker != tracker.pool_id:
        raise RecordMismatch(
            f"position of {position.owner} belongs to tracker {position.time_tracker}, "
            f"got {tracker.pool_id}"
        )


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class EscrowResult:
    """
    Результат операции escrow.

    Attributes:
        time_tracker: Новая запись трекера
        position: Новая запись позиции
        transfer_amount: LP токенов к переводу (в escrow при deposit,
            владельцу при withdraw; 0 для синхронизации)
    """

    time_tracker: TimeTracker
    position: PersonalPosition
    transfer_amount: int = 0

    @property
    def earned_time_units(self) -> Number:
        return self.position.earned_time_units


# =============================================================================
# LP ESCROW
# =============================================================================


class LpEscrow:
    """
    Escrow LP токенов с учётом времени удержания.

    Все методы чистые: принимают текущие записи и возвращают новые.
    """

    def init_time_tracker(self, now: int, pool_id: str, escrow_account: str) -> TimeTracker:
        """Создание трекера пула (index = 0, last_seen_ts = now)."""
        validate_u64(now, "now")
        return TimeTracker(
            pool_id=pool_id,
            escrow_account=escrow_account,
            index=Number.ZERO,
            total_lp_deposited=0,
            last_seen_ts=now,
        )

    def init_personal_position(self, now: int, tracker: TimeTracker, owner: str) -> EscrowResult:
        """
        Создание позиции владельца.

        Трекер продвигается до now, позиция начинает с текущего индекса:
        прошлые интервалы новой позиции не начисляются.
        """
        tracker = update_time_tracker(tracker, now)
        position = PersonalPosition(
            owner=owner,
            time_tracker=tracker.pool_id,
            amount=0,
            last_seen_index=tracker.index,
            earned_time_units=Number.ZERO,
        )
        return EscrowResult(time_tracker=tracker, position=position)

    def deposit(
        self, now: int, tracker: TimeTracker, position: PersonalPosition, amount: int
    ) -> EscrowResult:
        """
        Депозит LP токенов в escrow.

        Args:
            now: Текущий timestamp
            tracker: Трекер пула
            position: Позиция владельца
            amount: LP токенов к депозиту

        Returns:
            EscrowResult; transfer_amount = amount (владелец → escrow)

        Raises:
            TimestampRegression, IndexRegression, RecordMismatch
            ArithmeticOverflow: amount или total_lp_deposited вне u64
        """
        validate_u64(amount, "amount")
        tracker, position = self._sync(now, tracker, position)

        position = position.model_copy(
            update={"amount": checked_add(position.amount, amount, "position amount")}
        )
        tracker = tracker.model_copy(
            update={
                "total_lp_deposited": checked_add(
                    tracker.total_lp_deposited, amount, "total_lp_deposited"
                )
            }
        )
        logger.debug("escrow deposit %d LP for %s at %d", amount, position.owner, now)
        return EscrowResult(time_tracker=tracker, position=position, transfer_amount=amount)

    def withdraw(
        self, now: int, tracker: TimeTracker, position: PersonalPosition, amount: int
    ) -> EscrowResult:
        """
        Вывод LP токенов из escrow.

        Returns:
            EscrowResult; transfer_amount = amount (escrow → владелец)

        Raises:
            ArithmeticUnderflow: amount > position.amount
        """
        validate_u64(amount, "amount")
        tracker, position = self._sync(now, tracker, position)

        position = position.model_copy(
            update={"amount": checked_sub(position.amount, amount, "position amount")}
        )
        tracker = tracker.model_copy(
            update={
                "total_lp_deposited": checked_sub(
                    tracker.total_lp_deposited, amount, "total_lp_deposited"
                )
            }
        )
        logger.debug("escrow withdraw %d LP for %s at %d", amount, position.owner, now)
        return EscrowResult(time_tracker=tracker, position=position, transfer_amount=amount)

    def update_personal(
        self, now: int, tracker: TimeTracker, position: PersonalPosition
    ) -> EscrowResult:
        """Синхронизация earned_time_units позиции без изменения балансов."""
        tracker, position = self._sync(now, tracker, position)
        return EscrowResult(time_tracker=tracker, position=position)

    def _sync(
        self, now: int, tracker: TimeTracker, position: PersonalPosition
    ) -> tuple[TimeTracker, PersonalPosition]:
        _check_link(tracker, position)
        tracker = update_time_tracker(tracker, now)
        return tracker, update_position(position, tracker)
