from __future__ import annotations
import csv
import logging
from io import BytesIO, StringIO
from typing import List, Any, Optional
import pandas as pd
from openpyxl import load_workbook
from .models import SourceFile

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")


class IngestError(Exception):
    """Файл не удалось разобрать в строки."""
# =========================

# Excel: первый лист как матрица, merged cells разворачиваем
# =========================
def _excel_value(v: Any) -> str:
    if v is None:
        return ""
    # 12345.0 из Excel -> "12345" (номера/ID)
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def _sheet_to_matrix_with_merged(wb_bytes: bytes, max_rows: Optional[int] = None) -> List[List[str]]:
    wb = load_workbook(BytesIO(wb_bytes), read_only=False, data_only=True)
    ws = wb.worksheets[0]
    merged_map = {}
    for r in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = r.bounds
        top_val = ws.cell(min_row, min_col).value
        for rr in range(min_row, max_row + 1):
            for cc in range(min_col, max_col + 1):
                merged_map[(rr, cc)] = top_val

    rows = []
    max_r = ws.max_row
    max_c = ws.max_column
    if max_rows is not None:
        max_r = min(max_r, max_rows)

    for r in range(1, max_r + 1):
        row_vals = []
        for c in range(1, max_c + 1):
            v = ws.cell(r, c).value
            if (r, c) in merged_map and (v is None or str(v).strip() == ""):
                v = merged_map[(r, c)]
            row_vals.append(_excel_value(v))
        # полностью пустые строки пропускаем, как и в CSV
        if any(x.strip() for x in row_vals):
            rows.append(row_vals)

    return rows
# =========================

# CSV: устойчивое чтение из bytes (выгрузки форм/сервисов регистрации)
# =========================
def _guess_delimiter(sample_text: str) -> str:
    # разделитель: ',' (en-US) или ';' (локали с запятой в числах), иногда табы
    try:
        dialect = csv.Sniffer().sniff(sample_text, delimiters=";,\t|")
        if dialect.delimiter:
            return dialect.delimiter
    except csv.Error:
        pass

    # fallback по количеству в первых строках
    candidates = [",", ";", "\t", "|"]
    lines = [ln for ln in sample_text.splitlines() if ln.strip()][:20]
    if not lines:
        return ","

    scores = {}
    for d in candidates:
        cnts = [ln.count(d) for ln in lines]
        scores[d] = sum(cnts) / max(1, len(cnts))

    best = max(scores.items(), key=lambda x: x[1])[0]
    return best if scores.get(best, 0) > 0 else ","


def _max_width(text: str, delim: str) -> int:
    # строки выгрузок бывают разной длины, pandas нужна ширина заранее
    return max((len(r) for r in csv.reader(StringIO(text), delimiter=delim)), default=0)


def _frame_to_rows(df: pd.DataFrame) -> List[List[str]]:
    return df.fillna("").astype(str).values.tolist()


def _read_csv_bytes(data: bytes) -> List[List[str]]:
    encodings = ["utf-8-sig", "utf-8", "cp1251"]
    last_err: Exception | None = None

    for enc in encodings:
        try:
            text = data.decode(enc)
        except UnicodeDecodeError as e:
            last_err = e
            continue

        if not text.strip():
            return []

        delim = _guess_delimiter(text[:65536])
        width = _max_width(text, delim)
        if width == 0:
            return []

        # читаем как матрицу, БЕЗ header: заголовки отбрасываются по header_row
        df = pd.read_csv(
            StringIO(text),
            header=None,
            names=list(range(width)),
            sep=delim,
            engine="python",
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
        logger.debug("csv decoded: encoding=%s delimiter=%r rows=%d", enc, delim, len(df))
        return _frame_to_rows(df)

    raise IngestError(f"cannot decode CSV: {last_err}")
# =========================

# Main: SourceFile -> rows
# =========================
def decode_rows(source: SourceFile) -> List[List[Any]]:
    """
    Разбирает файл в список строк (каждая строка - список ячеек-строк).
    Уже разобранные строки (SourceFile.rows) возвращаются как есть.
    Любая ошибка разбора пробрасывается: файл целиком считается испорченным.
    """
    if source.rows is not None:
        return [list(r) for r in source.rows]

    if source.name.lower().endswith(EXCEL_SUFFIXES):
        try:
            return _sheet_to_matrix_with_merged(source.data)
        except Exception as e:
            raise IngestError(f"cannot read workbook {source.name}: {e}") from e

    return _read_csv_bytes(source.data)


def load_sources_from_uploads(uploads) -> List[SourceFile]:
    # Порядок загрузок сохраняется: от него зависит, какое написание имени "первое"
    return [SourceFile.from_upload(up) for up in uploads or []]
