"""
Domain records.

Immutable state records of the escrow, gauge and reactor engines.
"""

from raygauge.core.domain.escrow import PersonalPosition, TimeTracker
from raygauge.core.domain.gauge import (
    ClPositionSnapshot,
    ClRewardInfo,
    Gauge,
    GaugeConfig,
    PersonalGauge,
    PersonalRewarderCl,
    PersonalRewarderCp,
    PersonalRewarderState,
)
from raygauge.core.domain.reactor import RayStakeRewards, Reactor, ReactorConfig
from raygauge.core.domain.types import (
    ADDRESS_BYTES,
    I64,
    U16,
    U64,
    Address,
    address_from_bytes,
    address_to_bytes,
)

__all__ = [
    # Field types
    "ADDRESS_BYTES",
    "Address",
    "I64",
    "U16",
    "U64",
    "address_from_bytes",
    "address_to_bytes",
    # Escrow records
    "TimeTracker",
    "PersonalPosition",
    # Gauge records
    "GaugeConfig",
    "Gauge",
    "PersonalGauge",
    "PersonalRewarderState",
    "PersonalRewarderCp",
    "PersonalRewarderCl",
    "ClRewardInfo",
    "ClPositionSnapshot",
    # Reactor records
    "ReactorConfig",
    "Reactor",
    "RayStakeRewards",
]
