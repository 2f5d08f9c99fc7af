"""Reactor — стейкинг RAY, эмиссия isoRAY, блокировка голосов.

- Глобальные индексы RAY наград и isoRAY
- Пропорциональное списание isoRAY при выводе
- Блокировка голосов под gauge
"""

from .engine import (
    CollectResult,
    ReactorEngine,
    ReactorResult,
    ReactorSettings,
    accrue_iso_ray,
    accrue_ray_rewards,
    accrue_reactor,
    accrue_rewards,
)
from .slashing import iso_ray_slash_amount, iso_ray_slash_ratio

__all__ = [
    "ReactorEngine",
    "ReactorSettings",
    "ReactorResult",
    "CollectResult",
    "accrue_rewards",
    "accrue_iso_ray",
    "accrue_ray_rewards",
    "accrue_reactor",
    "iso_ray_slash_ratio",
    "iso_ray_slash_amount",
]
