"""
Модели данных агрегации.

Файлы, записи сводного реестра участников, результаты по событию и итог запуска.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple, FrozenSet

REASON_DUPLICATE_FILENAME = "duplicate_filename"
REASON_PARSE_ERROR = "parse_error"

Row = Sequence[Any]


@dataclass(frozen=True)
class SourceFile:
    """
    Один загруженный файл = одно мероприятие.

    Идентичность - только имя: два файла с одинаковым именем неразличимы,
    даже если содержимое разное. rows заполняется, если файл уже разобран.
    """

    name: str
    data: bytes = b""
    rows: Optional[Tuple[Row, ...]] = None

    @classmethod
    def from_upload(cls, upload) -> "SourceFile":
        # UploadedFile из streamlit: .name + .getvalue()
        return cls(name=str(upload.name), data=upload.getvalue())

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Row]) -> "SourceFile":
        return cls(name=name, rows=tuple(rows))


@dataclass(frozen=True)
class SkippedFile:
    name: str
    reason: str


@dataclass(frozen=True)
class ParticipantRecord:
    primary_key: str
    name: str
    attendance_count: int = 0

    def __post_init__(self):
        if not self.primary_key:
            raise ValueError("primary_key cannot be empty")
        if self.attendance_count < 0:
            raise ValueError(f"attendance_count must be non-negative, got {self.attendance_count}")

    def as_row(self) -> List[Any]:
        return [self.primary_key, self.name, self.attendance_count]


@dataclass(frozen=True)
class EventResult:
    """Уникальные заявки и посещения одного мероприятия."""

    unique_applicants: FrozenSet[str] = field(default_factory=frozenset)
    unique_attendees: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def applicant_count(self) -> int:
        return len(self.unique_applicants)

    @property
    def attendee_count(self) -> int:
        return len(self.unique_attendees)


@dataclass(frozen=True)
class Summary:
    gross_total: int
    attend_total: int
    attend_unique: int
    rate: float
    ignored_no_key: int
    ignored_no_name: int


@dataclass(frozen=True)
class AggregationResult:
    processed_count: int
    skipped_files: Tuple[SkippedFile, ...]
    master_rows: Tuple[ParticipantRecord, ...]
    summary: Summary

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_files)

    def duplicate_names(self) -> List[str]:
        return [s.name for s in self.skipped_files if s.reason == REASON_DUPLICATE_FILENAME]
