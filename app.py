from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from attendance.config import AggregationConfig, InvalidConfiguration, load_settings
from attendance.ingest import load_sources_from_uploads
from attendance.dedupe import duplicate_names
from attendance.aggregate import aggregate
from attendance.summary import format_rate_percent
from attendance.export import (
    build_master_csv,
    build_summary_csv,
    export_to_excel_bytes,
    master_frame,
    skipped_frame,
    with_bom,
)
from attendance.models import REASON_DUPLICATE_FILENAME, REASON_PARSE_ERROR
from attendance.utils import iso_now

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SETTINGS = load_settings()
OUTPUT_FILES = SETTINGS["output_files"]

st.set_page_config(page_title="Сводка посещаемости", layout="wide")
st.title("Сводка участников и посещаемости по выгрузкам мероприятий")
# =========================

# Helpers
# =========================
REASON_MAP = {
    REASON_DUPLICATE_FILENAME: "Имя файла повторяется: пропущены все файлы с этим именем",
    REASON_PARSE_ERROR: "Файл не удалось прочитать",
}

def _header_row(value) -> int:
    # как в форме: всё нечисловое/меньше 1 -> 1
    try:
        return max(1, int(value) or 1)
    except (TypeError, ValueError):
        return 1

def _fmt_int(n: int) -> str:
    return f"{int(n):,}".replace(",", " ")
# =========================

# Uploads
# =========================
uploads = st.file_uploader(
    "Загрузите выгрузки мероприятий (CSV/XLSX, можно несколько)",
    type=["csv", "xlsx", "xlsm"],
    accept_multiple_files=True
)

sources = load_sources_from_uploads(uploads)

if sources:
    dups = set(duplicate_names(sources))
    files_df = pd.DataFrame([
        {"Файл": s.name, "Повтор имени": "да" if s.name in dups else ""}
        for s in sources
    ])
    st.dataframe(files_df, width="stretch", hide_index=True)
    if dups:
        st.warning("Есть файлы с одинаковыми именами, при расчёте они будут пропущены: " + ", ".join(sorted(dups)))


# Настройки
st.subheader("Настройки")
c1, c2, c3, c4, c5 = st.columns(5)
with c1:
    header_row_in = st.number_input("Строк заголовка", min_value=1, value=_header_row(SETTINGS["header_row"]), step=1)
with c2:
    pk_col_in = st.text_input("Колонка ключа", value=str(SETTINGS["primary_key_column"])).upper()
with c3:
    name_col_in = st.text_input("Колонка имени", value=str(SETTINGS["name_column"])).upper()
with c4:
    status_col_in = st.text_input("Колонка статуса", value=str(SETTINGS["status_column"])).upper()
with c5:
    condition_in = st.text_input("Статус посещения", value=str(SETTINGS["condition"]))

st.caption("Колонки задаются буквами, как в Excel: A, B, ..., Z, AA, AB ... Статус сравнивается без учёта регистра.")

required_ok = bool(sources) and all(x.strip() for x in [pk_col_in, name_col_in, status_col_in, condition_in])

st.session_state.setdefault("result", None)

if st.button("Рассчитать", type="primary", disabled=not required_ok):
    st.session_state["result"] = None
    try:
        config = AggregationConfig.from_labels(
            header_row=_header_row(header_row_in),
            primary_key_column=pk_col_in,
            name_column=name_col_in,
            status_column=status_col_in,
            condition=condition_in,
        )
    except InvalidConfiguration as e:
        logger.warning("invalid configuration: %s", e)
        st.error("Колонки указаны неверно. Используйте буквы A–Z или AA–AZ и т.п. " f"({e})")
        st.stop()

    with st.spinner("Считаем…"):
        try:
            st.session_state["result"] = aggregate(sources, config)
        except Exception as e:
            logger.exception("aggregation failed")
            st.error(f"Ошибка при расчёте: {type(e).__name__}: {e}")

if not sources:
    st.info("Загрузите файлы.")
    st.stop()


result = st.session_state.get("result")
if result is not None:
    summary = result.summary

    st.divider()
    st.subheader("Результат")

    m1, m2, m3, m4, m5, m6 = st.columns(6)
    with m1:
        st.metric("Обработано файлов", result.processed_count)
    with m2:
        st.metric("Пропущено файлов", result.skipped_count)
    with m3:
        st.metric("Всего заявок", _fmt_int(summary.gross_total))
    with m4:
        st.metric("Посещений всего", _fmt_int(summary.attend_total))
    with m5:
        st.metric("Уникальных участников", _fmt_int(summary.attend_unique))
    with m6:
        st.metric("Доля посещений", format_rate_percent(summary))

    if summary.ignored_no_key or summary.ignored_no_name:
        st.caption(
            f"Пропущено строк: без ключа — {summary.ignored_no_key}, без имени — {summary.ignored_no_name}"
        )

    dup_names = result.duplicate_names()
    if dup_names:
        st.warning("Пропущены файлы с одинаковыми именами:\n" + "\n".join(f"- {n}" for n in dup_names))

    if result.skipped_files:
        sk = skipped_frame(result)
        sk["Причина"] = sk["Причина"].map(lambda r: REASON_MAP.get(r, r))
        with st.expander("Пропущенные файлы", expanded=False):
            st.dataframe(sk, width="stretch", hide_index=True)

    st.subheader("Участники")
    q = st.text_input("Поиск по ключу или имени", value="")
    view = master_frame(result)
    if q.strip():
        mask = (
            view.iloc[:, 0].astype(str).str.contains(q.strip(), case=False, na=False, regex=False)
            | view.iloc[:, 1].astype(str).str.contains(q.strip(), case=False, na=False, regex=False)
        )
        view = view[mask]
    st.dataframe(view.head(1000), width="stretch", hide_index=True)

    # время в итогах - момент выгрузки
    stamp = iso_now()
    d1, d2, d3 = st.columns(3)
    with d1:
        st.download_button(
            "Скачать участников (CSV)",
            data=with_bom(build_master_csv(result.master_rows)),
            file_name=OUTPUT_FILES["master"],
            mime="text/csv",
        )
    with d2:
        st.download_button(
            "Скачать итоги (CSV)",
            data=with_bom(build_summary_csv(result, timestamp=stamp)),
            file_name=OUTPUT_FILES["summary"],
            mime="text/csv",
        )
    with d3:
        st.download_button(
            "Скачать Excel-отчёт",
            data=export_to_excel_bytes(result, timestamp=stamp),
            file_name=OUTPUT_FILES["excel"],
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    if REASON_DUPLICATE_FILENAME in {s.reason for s in result.skipped_files}:
        st.caption("Переименуйте повторяющиеся файлы и загрузите их снова, если это разные мероприятия.")
