from __future__ import annotations
from typing import Dict, Iterable, List, Set, Tuple
from .models import EventResult, ParticipantRecord
from .utils import collation_key


def sort_master_rows(records: Iterable[ParticipantRecord]) -> List[ParticipantRecord]:
    # число посещений по убыванию, при равенстве - ключ по возрастанию
    return sorted(records, key=lambda r: (-r.attendance_count, collation_key(r.primary_key)))


class MasterLedger:
    """
    Сводный реестр участников за один запуск: ключ -> (имя, число посещений).

    Создаётся заново на каждый запуск, наружу отдаётся только снимок
    (snapshot), сам реестр никуда не сохраняется.
    """

    def __init__(self):
        self._names: Dict[str, str] = {}
        self._counts: Dict[str, int] = {}
        self._attend_unique: Set[str] = set()
        self.gross_total = 0
        self.attend_total = 0
        self.processed_count = 0

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, key: str) -> bool:
        return key in self._names

    @property
    def attend_unique(self) -> int:
        return len(self._attend_unique)

    def fold(self, event: EventResult, first_names: Dict[str, str]) -> None:
        """
        Добавляет итоги одного мероприятия.

        Каждый ключ из посещений получает +1 ровно один раз за мероприятие:
        множества в EventResult уже без повторов. Заявители без посещения
        тоже попадают в реестр (с нулём), имя берётся из first_names и
        больше не меняется.
        """
        self.gross_total += event.applicant_count
        self.attend_total += event.attendee_count

        for pk in event.unique_applicants:
            self._register(pk, first_names)

        for pk in event.unique_attendees:
            self._register(pk, first_names)
            self._counts[pk] += 1
            self._attend_unique.add(pk)

        self.processed_count += 1

    def _register(self, pk: str, first_names: Dict[str, str]) -> None:
        if pk in self._names:
            return
        self._names[pk] = first_names.get(pk, "")
        self._counts[pk] = 0

    def snapshot(self) -> Tuple[ParticipantRecord, ...]:
        records = (
            ParticipantRecord(primary_key=pk, name=name, attendance_count=self._counts[pk])
            for pk, name in self._names.items()
        )
        return tuple(sort_master_rows(records))
