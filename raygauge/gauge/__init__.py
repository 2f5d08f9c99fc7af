"""Gauge — vote-weighted эмиссия RAY и персональные rewarder-ы.

- Глобальный индекс RAY на голос, gauge-и пулов, голоса владельцев
- Rate-matching rewarder-ы для CP и CL позиций
"""

from .emission import (
    GaugeEmission,
    GaugeSettings,
    GaugeSyncResult,
    VoteChangeResult,
    sync_gauge,
    update_gauge,
    update_gauge_config,
)
from .rewarder import (
    ClRewarderResult,
    CpRewarderResult,
    PersonalRewarder,
    StageResult,
    WithdrawResult,
    cl_earned_time_units,
    collect,
    find_time_unit_reward_slot,
    start_rewarder,
    sync_and_stage,
)

__all__ = [
    # Emission
    "GaugeEmission",
    "GaugeSettings",
    "GaugeSyncResult",
    "VoteChangeResult",
    "sync_gauge",
    "update_gauge",
    "update_gauge_config",
    # Rewarder
    "PersonalRewarder",
    "CpRewarderResult",
    "ClRewarderResult",
    "StageResult",
    "WithdrawResult",
    "sync_and_stage",
    "collect",
    "start_rewarder",
    "find_time_unit_reward_slot",
    "cl_earned_time_units",
]
