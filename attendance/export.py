from __future__ import annotations
import csv
from io import BytesIO, StringIO
from typing import Any, Iterable, List, Optional, Sequence
import pandas as pd
from .ledger import sort_master_rows
from .models import AggregationResult, ParticipantRecord
from .summary import format_rate
from .utils import iso_now

BOM = "\ufeff"

MASTER_HEADERS = ["Ключ", "Имя", "Число посещений"]
SUMMARY_HEADERS = [
    "Дата расчёта",
    "Обработано файлов",
    "Пропущено файлов",
    "Всего заявок",
    "Посещений всего",
    "Уникальных участников",
    "Доля посещений",
    "Пропущено строк (нет ключа)",
    "Пропущено строк (нет имени)",
]
SKIPPED_HEADERS = ["Файл", "Причина"]

SHEET_MASTER = "Участники"
SHEET_SUMMARY = "Итоги"
SHEET_SKIPPED = "Пропущенные файлы"


def _field(v: Any) -> str:
    return "" if v is None else str(v)


def build_csv(headers: Sequence[Any], rows: Iterable[Sequence[Any]], delimiter: str = ",") -> str:
    """
    Таблица -> текст CSV.
    В кавычки берутся только поля с разделителем, кавычкой или переводом строки
    (кавычки внутри удваиваются), остальное пишется как есть.
    Строки через "\\n", без перевода строки в конце.
    """
    lines = [_csv_line(headers, delimiter)]
    for row in rows:
        lines.append(_csv_line(row, delimiter))
    return "\n".join(lines)


def _csv_line(values: Sequence[Any], delimiter: str) -> str:
    # "\r\n" в lineterminator: csv.writer берёт в кавычки поля и с "\r", и с "\n"
    buf = StringIO()
    writer = csv.writer(buf, delimiter=delimiter, quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow([_field(v) for v in values])
    return buf.getvalue()[:-2]


def build_master_csv(rows: Iterable[ParticipantRecord]) -> str:
    return build_csv(MASTER_HEADERS, [r.as_row() for r in sort_master_rows(rows)])


def summary_values(result: AggregationResult, timestamp: Optional[str] = None) -> List[Any]:
    # время ставится в момент выгрузки, а не в момент расчёта
    s = result.summary
    return [
        timestamp or iso_now(),
        result.processed_count,
        result.skipped_count,
        s.gross_total,
        s.attend_total,
        s.attend_unique,
        format_rate(s),
        s.ignored_no_key,
        s.ignored_no_name,
    ]


def build_summary_csv(result: AggregationResult, timestamp: Optional[str] = None) -> str:
    return build_csv(SUMMARY_HEADERS, [summary_values(result, timestamp)])


def with_bom(text: str) -> bytes:
    # Excel открывает UTF-8 CSV корректно только с BOM
    return (BOM + text).encode("utf-8")
# =========================

# pandas: для экрана и Excel
# =========================
def master_frame(result: AggregationResult) -> pd.DataFrame:
    return pd.DataFrame([r.as_row() for r in result.master_rows], columns=MASTER_HEADERS)


def summary_frame(result: AggregationResult, timestamp: Optional[str] = None) -> pd.DataFrame:
    return pd.DataFrame([summary_values(result, timestamp)], columns=SUMMARY_HEADERS)


def skipped_frame(result: AggregationResult) -> pd.DataFrame:
    return pd.DataFrame([[s.name, s.reason] for s in result.skipped_files], columns=SKIPPED_HEADERS)


def export_to_excel_bytes(result: AggregationResult, timestamp: Optional[str] = None) -> bytes:
    master_df = master_frame(result)
    summary_df = summary_frame(result, timestamp)
    skipped_df = skipped_frame(result)

    bio = BytesIO()

    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        master_df.to_excel(writer, index=False, sheet_name=SHEET_MASTER)
        summary_df.to_excel(writer, index=False, sheet_name=SHEET_SUMMARY)

        if not skipped_df.empty:
            skipped_df.to_excel(writer, index=False, sheet_name=SHEET_SKIPPED)

        wb = writer.book
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})

        def format_df_sheet(sheet_name: str, df: pd.DataFrame, default_width: int = 22, max_width: int = 60):
            ws = writer.sheets.get(sheet_name)
            if ws is None:
                return
            ws.freeze_panes(1, 0)
            ws.autofilter(0, 0, max(1, len(df)), max(0, len(df.columns) - 1))
            for col, name in enumerate(df.columns):
                ws.write(0, col, name, fmt_header)
                w = max(10, min(max_width, int(len(str(name)) * 1.2) + 10))
                ws.set_column(col, col, max(default_width, w))

        format_df_sheet(SHEET_MASTER, master_df, default_width=20, max_width=40)
        format_df_sheet(SHEET_SUMMARY, summary_df, default_width=18, max_width=40)
        if not skipped_df.empty:
            format_df_sheet(SHEET_SKIPPED, skipped_df, default_width=30, max_width=60)

    return bio.getvalue()
