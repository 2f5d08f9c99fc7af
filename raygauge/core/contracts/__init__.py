"""
Contract Validation Module

JSON Schema контракты и фиксированная бинарная раскладка записей.
"""

from .layout import (
    DISCRIMINATOR_BYTES,
    LAYOUTS,
    RecordLayout,
    decode_record,
    encode_record,
    record_discriminator,
)
from .validators import (
    RECORD_SCHEMAS,
    ContractValidator,
    SchemaLoader,
    load_record,
    validate_gauge,
    validate_gauge_config,
    validate_personal_gauge,
    validate_personal_position,
    validate_personal_rewarder_cl,
    validate_personal_rewarder_cp,
    validate_reactor,
    validate_reactor_config,
    validate_record,
    validate_time_tracker,
    validator_for,
)

__all__ = [
    # Layout
    "DISCRIMINATOR_BYTES",
    "LAYOUTS",
    "RecordLayout",
    "decode_record",
    "encode_record",
    "record_discriminator",
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "RECORD_SCHEMAS",
    # Functions
    "load_record",
    "validate_record",
    "validator_for",
    "validate_time_tracker",
    "validate_personal_position",
    "validate_gauge_config",
    "validate_gauge",
    "validate_personal_gauge",
    "validate_personal_rewarder_cp",
    "validate_personal_rewarder_cl",
    "validate_reactor_config",
    "validate_reactor",
]
