"""
Core math modules для raygauge

Fixed-point число, checked-целые и обобщённый accrual-примитив.
"""

# PreciseNumber
from raygauge.core.math.precise_number import (
    BPS_DENOMINATOR,
    DECIMAL_PLACES,
    NUMBER_BYTES,
    SCALE,
    U256_MAX,
    Number,
)

# Checked integers
from raygauge.core.math.checked import (
    I64_MAX,
    I64_MIN,
    U16_MAX,
    U64_MAX,
    checked_add,
    checked_sub,
    elapsed_seconds,
    validate_i64,
    validate_u64,
)

# Accrual primitives
from raygauge.core.math.accrual import (
    SECONDS_IN_DAY,
    SECONDS_IN_YEAR,
    IndexAdvance,
    RateSource,
    ShareAccrual,
    accrue_share,
    advance_rate_index,
    advance_shared_index,
    annual_rate,
    daily_emission_rate,
    elapsed_time_rate,
    shared_index_delta,
)

__all__ = [
    # PreciseNumber
    "BPS_DENOMINATOR",
    "DECIMAL_PLACES",
    "NUMBER_BYTES",
    "SCALE",
    "U256_MAX",
    "Number",
    # Checked integers
    "I64_MAX",
    "I64_MIN",
    "U16_MAX",
    "U64_MAX",
    "checked_add",
    "checked_sub",
    "elapsed_seconds",
    "validate_i64",
    "validate_u64",
    # Accrual primitives — Constants
    "SECONDS_IN_DAY",
    "SECONDS_IN_YEAR",
    # Accrual primitives — Types
    "IndexAdvance",
    "RateSource",
    "ShareAccrual",
    # Accrual primitives — Functions
    "accrue_share",
    "advance_rate_index",
    "advance_shared_index",
    "annual_rate",
    "daily_emission_rate",
    "elapsed_time_rate",
    "shared_index_delta",
]
