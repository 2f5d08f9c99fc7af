"""
Errors — двухуровневая иерархия ошибок accrual-движков

Уровень 1 (FATAL): AccrualInvariantViolation и наследники.
    Регрессия индекса или timestamp, overflow/underflow checked-арифметики,
    деление на ноль, несогласованные связи между записями.
    Трактуются как баг вызывающего кода или аномалия часов:
    операция прерывается целиком, ни одна новая запись не возвращается.
    Автоматический retry запрещён.

Уровень 2 (RECOVERABLE): AccrualDomainError и наследники.
    Ожидаемые, вызываемые пользователем условия (недостаточно RAY,
    недостаточно свободных голосов). Несут стабильный ErrorCode,
    чтобы внешний слой мог отличить их от fatal-ошибок.

КРИТИЧЕСКИЙ ИНВАРИАНТ:
Ни одна операция не clamp-ит значение вне диапазона молча:
любое нарушение границ — явное исключение одного из двух уровней.
"""

from enum import IntEnum


# =============================================================================
# FATAL: НАРУШЕНИЯ ИНВАРИАНТОВ
# =============================================================================


class AccrualInvariantViolation(Exception):
    """
    Базовый класс fatal-нарушений.

    При возникновении вся операция прерывается без частичного эффекта.
    """

    pass


class ArithmeticOverflow(AccrualInvariantViolation):
    """Результат checked-операции не помещается в целевую разрядность."""

    pass


class ArithmeticUnderflow(AccrualInvariantViolation):
    """Результат checked-вычитания стал бы отрицательным."""

    pass


class DivisionByZero(AccrualInvariantViolation):
    """Деление fixed-point значения на ноль."""

    pass


class IndexRegression(AccrualInvariantViolation):
    """Текущий индекс меньше последнего увиденного share-аккаунтом."""

    pass


class TimestampRegression(AccrualInvariantViolation):
    """Переданный timestamp меньше последнего зафиксированного."""

    pass


class RecordMismatch(AccrualInvariantViolation):
    """Записи, переданные в операцию, не связаны друг с другом."""

    pass


class RewardSlotNotFound(AccrualInvariantViolation):
    """В CL позиции нет reward-слота для mint-а time-units."""

    pass


# =============================================================================
# RECOVERABLE: ДОМЕННЫЕ ОШИБКИ
# =============================================================================


class ErrorCode(IntEnum):
    """
    Стабильные коды доменных ошибок.

    Значения совпадают с кодами on-chain программы reactor,
    чтобы клиенты могли сопоставлять ошибки без таблиц перевода.
    """

    INSUFFICIENT_RAY_BALANCE = 6001
    INSUFFICIENT_RAY_TO_PLEDGE = 6002
    INSUFFICIENT_RAY_TO_UNPLEDGE = 6003
    INSUFFICIENT_VOTES_TO_LOCK = 6004
    INSUFFICIENT_VOTES_TO_UNLOCK = 6005
    INSUFFICIENT_VOTES_TO_WITHDRAW = 6006


class AccrualDomainError(Exception):
    """
    Базовый класс recoverable доменных ошибок.

    Attributes:
        code: стабильный ErrorCode
        requested: запрошенное количество
        available: доступное количество на момент проверки
    """

    code: ErrorCode
    default_message: str = "accrual domain error"

    def __init__(self, requested: int, available: int, message: str | None = None):
        self.requested = requested
        self.available = available
        text = message or self.default_message
        super().__init__(
            f"{int(self.code)}: {text} (requested={requested}, available={available})"
        )


class InsufficientRayBalance(AccrualDomainError):
    code = ErrorCode.INSUFFICIENT_RAY_BALANCE
    default_message = "Insufficient RAY balance for withdrawal"


class InsufficientRayToPledge(AccrualDomainError):
    code = ErrorCode.INSUFFICIENT_RAY_TO_PLEDGE
    default_message = "Insufficient RAY to pledge"


class InsufficientRayToUnpledge(AccrualDomainError):
    code = ErrorCode.INSUFFICIENT_RAY_TO_UNPLEDGE
    default_message = "Insufficient RAY to unpledge"


class InsufficientVotesToLock(AccrualDomainError):
    code = ErrorCode.INSUFFICIENT_VOTES_TO_LOCK
    default_message = "Insufficient votes to lock"


class InsufficientVotesToUnlock(AccrualDomainError):
    code = ErrorCode.INSUFFICIENT_VOTES_TO_UNLOCK
    default_message = "Insufficient votes to unlock"


class InsufficientVotesToWithdraw(AccrualDomainError):
    code = ErrorCode.INSUFFICIENT_VOTES_TO_WITHDRAW
    default_message = "Insufficient unlocked votes to withdraw"
