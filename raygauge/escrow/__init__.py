"""LP Escrow — учёт time-units LP позиций.

- TimeTracker индекс пула (секунды на LP токен)
- PersonalPosition share-аккаунт владельца
"""

from .time_tracker import (
    EscrowResult,
    LpEscrow,
    update_position,
    update_time_tracker,
)

__all__ = [
    "LpEscrow",
    "EscrowResult",
    "update_time_tracker",
    "update_position",
]
