"""
JSON Schema Contract Validators

Валидация JSON-формы записей (model_dump(mode="json")) согласно
формальным JSON Schema контрактам. Использует библиотеку jsonschema.

Схемы (contracts/schema/):
- time_tracker.json, personal_position.json (escrow)
- gauge_config.json, gauge.json, personal_gauge.json (gauge)
- personal_rewarder_cp.json, personal_rewarder_cl.json (rewarder)
- reactor_config.json, reactor.json (reactor)

Number сериализуется как десятичная строка, адреса как 64 hex-символа.
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator
from pydantic import BaseModel

from raygauge.core.domain import (
    Gauge,
    GaugeConfig,
    PersonalGauge,
    PersonalPosition,
    PersonalRewarderCl,
    PersonalRewarderCp,
    Reactor,
    ReactorConfig,
    TimeTracker,
)


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются внутри пакета (contracts/schema/ рядом с модулем).
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'reactor')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()

# Запись → имя схемы
RECORD_SCHEMAS: Dict[type[BaseModel], str] = {
    TimeTracker: "time_tracker",
    PersonalPosition: "personal_position",
    GaugeConfig: "gauge_config",
    Gauge: "gauge",
    PersonalGauge: "personal_gauge",
    PersonalRewarderCp: "personal_rewarder_cp",
    PersonalRewarderCl: "personal_rewarder_cl",
    ReactorConfig: "reactor_config",
    Reactor: "reactor",
}


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Валидатор одного контракта.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


def validator_for(record_type: type[BaseModel]) -> ContractValidator:
    """
    Валидатор контракта для типа записи.

    Raises:
        KeyError: Для типа записи нет контракта
    """
    return ContractValidator(RECORD_SCHEMAS[record_type])


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_record(record: BaseModel) -> Dict[str, Any]:
    """
    Сериализация записи в JSON-форму с проверкой контракта.

    Returns:
        JSON-совместимый dict записи

    Raises:
        jsonschema.ValidationError: Если JSON-форма не соответствует схеме
    """
    data = record.model_dump(mode="json")
    validator_for(type(record)).validate(data)
    return data


def load_record(record_type: type[BaseModel], data: Dict[str, Any]) -> BaseModel:
    """
    Восстановление записи из JSON-формы.

    Сначала проверяется контракт, затем pydantic-валидация модели.

    Raises:
        jsonschema.ValidationError: Нарушение контракта
        pydantic.ValidationError: Нарушение инвариантов модели
    """
    validator_for(record_type).validate(data)
    return record_type.model_validate(data)


def validate_time_tracker(data: Dict[str, Any]) -> None:
    ContractValidator("time_tracker").validate(data)


def validate_personal_position(data: Dict[str, Any]) -> None:
    ContractValidator("personal_position").validate(data)


def validate_gauge_config(data: Dict[str, Any]) -> None:
    ContractValidator("gauge_config").validate(data)


def validate_gauge(data: Dict[str, Any]) -> None:
    ContractValidator("gauge").validate(data)


def validate_personal_gauge(data: Dict[str, Any]) -> None:
    ContractValidator("personal_gauge").validate(data)


def validate_reactor_config(data: Dict[str, Any]) -> None:
    ContractValidator("reactor_config").validate(data)


def validate_reactor(data: Dict[str, Any]) -> None:
    ContractValidator("reactor").validate(data)


def validate_personal_rewarder_cp(data: Dict[str, Any]) -> None:
    ContractValidator("personal_rewarder_cp").validate(data)


def validate_personal_rewarder_cl(data: Dict[str, Any]) -> None:
    ContractValidator("personal_rewarder_cl").validate(data)
