import re
import json
import unicodedata
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Tuple
from dateutil import tz

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except Exception:
        return default

def rules_path() -> Path:
    return DEFAULT_DATA_DIR / "rules.json"

_NON_LETTERS_RE = re.compile(r"[^A-Z]")


def col_letter_to_index(label: Any) -> int:
    """
    Буквенное обозначение колонки (как в Excel) -> индекс с нуля:
    A=0, B=1, ..., Z=25, AA=26, AB=27 ...
    Регистр не важен, всё кроме латинских букв выбрасывается.
    Пустое/некорректное обозначение -> -1.
    """
    if label is None:
        return -1
    col = _NON_LETTERS_RE.sub("", str(label).upper().strip())
    if not col:
        return -1

    idx = 0
    for ch in col:
        idx = idx * 26 + (ord(ch) - 64)
    return idx - 1

def cell_text(v: Any) -> str:
    # Значение ячейки -> строка без пробелов по краям; None/NaN считаются пустыми
    if v is None:
        return ""
    if isinstance(v, float) and v != v:
        return ""
    return str(v).strip()

def collation_key(s: Any) -> Tuple[str, str, str]:
    # Сравнение "как у людей": сначала без диакритики (ё ~ е, é ~ e) и регистра,
    # затем NFKC + casefold, исходная строка добивает ничьи
    raw = "" if s is None else str(s)
    base = "".join(ch for ch in unicodedata.normalize("NFKD", raw) if not unicodedata.combining(ch))
    return base.casefold(), unicodedata.normalize("NFKC", raw).casefold(), raw

def iso_now(now: Optional[datetime] = None) -> str:
    """
    Текущее время в ISO-8601 с явным смещением от UTC, до секунд:
      2026-10-18T12:30:05+03:00
    """
    if now is None:
        now = datetime.now(tz.tzlocal())
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz.tzlocal())
    return now.isoformat(timespec="seconds")
