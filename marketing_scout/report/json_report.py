# marketing_scout/report/json_report.py

"""
Сохранение и чтение итогового JSON-файла с найденными маркетинговыми URL.

Файл пишется целиком во временный файл рядом с целевым и затем атомарно
переименовывается, поэтому недописанный отчёт никогда не лежит под итоговым
именем.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import List, Sequence, Union

from marketing_scout.crawler.models import MatchRecord
from marketing_scout.errors import PersistenceError
from marketing_scout.logger import logger


def persist(records: Sequence[MatchRecord], destination: Union[Path, str]) -> Path:
    """
    Сохраняет records в формате JSON по указанному пути.

    :param records: упорядоченная коллекция MatchRecord
    :param destination: путь к JSON-файлу
    :return: Path сохранённого файла
    :raises PersistenceError: если файл записать не удалось; records не меняются

    Пример:
    ```python
    from marketing_scout.report.json_report import persist
    path = persist(records, "marketing_urls.json")
    ```
    """
    output = Path(destination)
    tmp_name = None
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{output.name}.", suffix=".tmp", dir=output.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, output)
    except (OSError, TypeError, ValueError) as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceError(f"there was an error saving URLs to {output}: {exc}") from exc

    logger.info("Сохранено %d URL в %s", len(records), output)
    return output


def load_records(path: Union[Path, str]) -> List[MatchRecord]:
    """Читает ранее сохранённый файл и возвращает записи в исходном порядке."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"cannot read {p}: {exc}") from exc
    if not isinstance(data, list):
        raise PersistenceError(f"{p}: top level must be a JSON array, got {type(data).__name__}")
    try:
        return [MatchRecord.from_dict(item) for item in data]
    except (KeyError, TypeError) as exc:
        raise PersistenceError(f"{p}: malformed record: {exc}") from exc
