from __future__ import annotations
from typing import Union
from .models import Summary

Number = Union[int, float]


def compute_rate(gross_total: int, attend_total: int) -> Number:
    # доля посещений, 6 знаков; без заявок - ровно 0, а не результат деления
    if gross_total > 0:
        return round(attend_total / gross_total, 6)
    return 0


def build_summary(
    gross_total: int,
    attend_total: int,
    attend_unique: int,
    ignored_no_key: int,
    ignored_no_name: int,
) -> Summary:
    return Summary(
        gross_total=gross_total,
        attend_total=attend_total,
        attend_unique=attend_unique,
        rate=compute_rate(gross_total, attend_total),
        ignored_no_key=ignored_no_key,
        ignored_no_name=ignored_no_name,
    )


def format_rate(summary: Summary) -> str:
    # для CSV: "0.500000", при отсутствии заявок - "0"
    if summary.gross_total > 0:
        return f"{summary.rate:.6f}"
    return "0"


def format_rate_percent(summary: Summary, placeholder: str = "—") -> str:
    # для экрана: ×100, один знак после запятой
    if summary.gross_total > 0:
        return f"{summary.rate * 100:.1f}%"
    return placeholder
