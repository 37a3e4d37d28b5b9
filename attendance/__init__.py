"""
Этот пакет содержит:
- загрузку выгрузок мероприятий (CSV/XLSX)
- отсев файлов с одинаковыми именами
- разбор строк мероприятия (заявки / посещения)
- сводный реестр участников по всем мероприятиям
- итоговую статистику
- экспорт результатов (CSV/Excel)
"""
from .config import AggregationConfig, InvalidConfiguration, InvalidColumnSpecification, load_settings
from .models import SourceFile, ParticipantRecord, EventResult, SkippedFile, Summary, AggregationResult
from .ingest import decode_rows, load_sources_from_uploads, IngestError
from .dedupe import filter_duplicate_files
from .events import process_event_rows, RowCounters
from .ledger import MasterLedger, sort_master_rows
from .summary import build_summary, compute_rate, format_rate_percent
from .aggregate import aggregate
from .export import build_master_csv, build_summary_csv, with_bom, export_to_excel_bytes
from .utils import col_letter_to_index, iso_now

__all__ = [
    "AggregationConfig",
    "InvalidConfiguration",
    "InvalidColumnSpecification",
    "load_settings",
    "SourceFile",
    "ParticipantRecord",
    "EventResult",
    "SkippedFile",
    "Summary",
    "AggregationResult",
    "decode_rows",
    "load_sources_from_uploads",
    "IngestError",
    "filter_duplicate_files",
    "process_event_rows",
    "RowCounters",
    "MasterLedger",
    "sort_master_rows",
    "build_summary",
    "compute_rate",
    "format_rate_percent",
    "aggregate",
    "build_master_csv",
    "build_summary_csv",
    "with_bom",
    "export_to_excel_bytes",
    "col_letter_to_index",
    "iso_now",
]
