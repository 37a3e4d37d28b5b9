from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict
from .utils import col_letter_to_index, load_json, rules_path

logger = logging.getLogger(__name__)

# Значения формы по умолчанию (перекрываются data/rules.json)
DEFAULT_SETTINGS: Dict[str, Any] = {
    "header_row": 1,
    "primary_key_column": "E",
    "name_column": "B",
    "status_column": "H",
    "condition": "approved",
}

DEFAULT_OUTPUT_FILES: Dict[str, str] = {
    "master": "master_counts.csv",
    "summary": "summary.csv",
    "excel": "attendance_report.xlsx",
}


class InvalidConfiguration(ValueError):
    """Настройки расчёта некорректны, запускать агрегацию нельзя."""


class InvalidColumnSpecification(InvalidConfiguration):
    """Одна из колонок (ключ/имя/статус) не распознана."""


def load_settings() -> Dict[str, Any]:
    rules = load_json(rules_path(), {})
    if not isinstance(rules, dict):
        logger.warning("rules.json повреждён, используются значения по умолчанию")
        rules = {}

    settings = dict(DEFAULT_SETTINGS)
    overrides = rules.get("defaults", {})
    if isinstance(overrides, dict):
        settings.update({k: v for k, v in overrides.items() if k in DEFAULT_SETTINGS})

    files = dict(DEFAULT_OUTPUT_FILES)
    out = rules.get("output_files", {})
    if isinstance(out, dict):
        files.update({k: str(v) for k, v in out.items() if k in DEFAULT_OUTPUT_FILES and v})
    settings["output_files"] = files
    return settings


@dataclass(frozen=True)
class AggregationConfig:
    """
    Параметры одного запуска.

    header_row - сколько первых строк файла отбросить (с 1);
    *_column   - индексы колонок с нуля (см. col_letter_to_index);
    condition  - значение статуса, означающее посещение (без учёта регистра).
    """

    header_row: int
    primary_key_column: int
    name_column: int
    status_column: int
    condition: str

    def __post_init__(self):
        if not isinstance(self.header_row, int) or self.header_row < 1:
            raise InvalidConfiguration(f"header_row must be >= 1, got {self.header_row!r}")
        for field_name in ("primary_key_column", "name_column", "status_column"):
            idx = getattr(self, field_name)
            if not isinstance(idx, int) or idx < 0:
                raise InvalidColumnSpecification(f"{field_name} must be a non-negative column index, got {idx!r}")
        if not str(self.condition or "").strip():
            raise InvalidConfiguration("condition cannot be empty")

    @classmethod
    def from_labels(
        cls,
        header_row: int,
        primary_key_column: str,
        name_column: str,
        status_column: str,
        condition: str,
    ) -> "AggregationConfig":
        # Буквы колонок из формы -> индексы; ошибки ловятся в __post_init__
        return cls(
            header_row=header_row,
            primary_key_column=col_letter_to_index(primary_key_column),
            name_column=col_letter_to_index(name_column),
            status_column=col_letter_to_index(status_column),
            condition=str(condition or "").strip(),
        )

    @property
    def normalized_condition(self) -> str:
        return self.condition.strip().casefold()
