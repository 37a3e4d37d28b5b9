from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Optional, Sequence
from .config import AggregationConfig, InvalidConfiguration
from .dedupe import filter_duplicate_files
from .events import RowCounters, process_event_rows
from .ingest import decode_rows
from .ledger import MasterLedger
from .models import AggregationResult, SkippedFile, SourceFile, REASON_PARSE_ERROR
from .summary import build_summary

logger = logging.getLogger(__name__)

Decoder = Callable[[SourceFile], Sequence[Sequence[Any]]]


def aggregate(
    files: Sequence[SourceFile],
    config: AggregationConfig,
    decoder: Optional[Decoder] = None,
) -> AggregationResult:
    """
    Полный расчёт по набору файлов.

    1) файлы с повторяющимися именами отбрасываются целиком (duplicate_filename)
    2) остальные по очереди: разбор -> строки события -> добавление в реестр
       файл, который не разобрался, пропускается (parse_error), расчёт идёт дальше
    3) итоговая статистика

    Все файлы обрабатываются строго последовательно, в порядке загрузки.
    """
    if not isinstance(config, AggregationConfig):
        raise InvalidConfiguration("config must be an AggregationConfig")
    if decoder is None:
        decoder = decode_rows

    to_process, skipped = filter_duplicate_files(files)
    skipped = list(skipped)
    for s in skipped:
        logger.warning("skip %s: %s", s.name, s.reason)

    logger.info("aggregation started: files=%d to_process=%d", len(files), len(to_process))

    ledger = MasterLedger()
    counters = RowCounters()
    first_names: Dict[str, str] = {}

    for f in to_process:
        try:
            rows = decoder(f)
        except Exception as e:
            logger.warning("skip %s: %s (%s: %s)", f.name, REASON_PARSE_ERROR, type(e).__name__, e)
            skipped.append(SkippedFile(name=f.name, reason=REASON_PARSE_ERROR))
            continue

        event = process_event_rows(rows, config, first_names, counters)
        ledger.fold(event, first_names)
        logger.debug(
            "%s: applicants=%d attendees=%d",
            f.name,
            event.applicant_count,
            event.attendee_count,
        )

    summary = build_summary(
        gross_total=ledger.gross_total,
        attend_total=ledger.attend_total,
        attend_unique=ledger.attend_unique,
        ignored_no_key=counters.ignored_no_key,
        ignored_no_name=counters.ignored_no_name,
    )

    logger.info(
        "aggregation finished: processed=%d skipped=%d gross=%d attend=%d unique=%d",
        ledger.processed_count,
        len(skipped),
        summary.gross_total,
        summary.attend_total,
        summary.attend_unique,
    )

    return AggregationResult(
        processed_count=ledger.processed_count,
        skipped_files=tuple(skipped),
        master_rows=ledger.snapshot(),
        summary=summary,
    )
