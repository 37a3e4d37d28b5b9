from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Sequence, Set
from .config import AggregationConfig
from .models import EventResult, Row
from .utils import cell_text


@dataclass
class RowCounters:
    """Счётчики отброшенных строк за весь запуск (по всем файлам)."""

    ignored_no_key: int = 0
    ignored_no_name: int = 0


def _cell(row: Row, idx: int) -> str:
    # Ячейка за пределами строки = пустая
    if row is None or idx < 0 or idx >= len(row):
        return ""
    return cell_text(row[idx])


def process_event_rows(
    rows: Sequence[Row],
    config: AggregationConfig,
    first_names: Dict[str, str],
    counters: RowCounters,
) -> EventResult:
    """
    Обрабатывает строки одного файла (одного мероприятия).

    - первые config.header_row строк - заголовок, отбрасываются
    - нет ключа -> counters.ignored_no_key, строка пропускается
    - есть ключ, нет имени -> counters.ignored_no_name, строка пропускается
    - иначе ключ попадает в заявки; если статус совпал с условием
      (trim + без учёта регистра) - ещё и в посещения

    first_names общий на весь запуск: имя записывается только при первом
    появлении ключа и дальше не меняется (разное написание ФИО не важно).
    Повторные строки с тем же ключом внутри файла считаются один раз.
    """
    applicants: Set[str] = set()
    attendees: Set[str] = set()
    condition = config.normalized_condition

    for row in list(rows)[config.header_row:]:
        pk = _cell(row, config.primary_key_column)
        name = _cell(row, config.name_column)
        status = _cell(row, config.status_column)

        if not pk:
            counters.ignored_no_key += 1
            continue
        if not name:
            counters.ignored_no_name += 1
            continue

        if pk not in first_names:
            first_names[pk] = name

        applicants.add(pk)
        if status.casefold() == condition:
            attendees.add(pk)

    return EventResult(unique_applicants=frozenset(applicants), unique_attendees=frozenset(attendees))
