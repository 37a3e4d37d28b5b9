from __future__ import annotations
from collections import Counter
from typing import List, Sequence, Tuple
from .models import SourceFile, SkippedFile, REASON_DUPLICATE_FILENAME


def duplicate_names(files: Sequence[SourceFile]) -> List[str]:
    # Имена, встречающиеся больше одного раза, в порядке первого появления
    counts = Counter(f.name for f in files)
    seen = set()
    out: List[str] = []
    for f in files:
        if counts[f.name] > 1 and f.name not in seen:
            seen.add(f.name)
            out.append(f.name)
    return out


def filter_duplicate_files(files: Sequence[SourceFile]) -> Tuple[List[SourceFile], List[SkippedFile]]:
    """
    Делит загрузки на "можно обрабатывать" и "пропущены из-за совпадения имени".
    Возвращает:
      - to_process: файлы с уникальными именами (исходный порядок сохраняется)
      - skipped: по одной записи на каждое повторяющееся имя

    Если имя встречается дважды, пропускаются ВСЕ файлы с этим именем, а не только
    повторы: непонятно, какая из выгрузок правильная. Содержимое не читается.
    """
    dup = duplicate_names(files)
    dup_set = set(dup)

    to_process = [f for f in files if f.name not in dup_set]
    skipped = [SkippedFile(name=n, reason=REASON_DUPLICATE_FILENAME) for n in dup]
    return to_process, skipped
