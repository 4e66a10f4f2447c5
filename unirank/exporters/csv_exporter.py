from __future__ import annotations

"""
总览表单的扁平 CSV 导出：每行 "字段,值"，只含一条记录，不参与往返导入约定。
"""

import csv
import io
from pathlib import Path
from typing import Any, Mapping, Union

from unirank.config import CSV_MIME
from unirank.records import UniversityRecord

CSV_FILENAME = "university-data.csv"


def _fmt(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_record_csv(record: Union[UniversityRecord, Mapping[str, Any]]) -> str:
    """按字段声明顺序输出 "field,value" 行，行间以 \\n 分隔，末尾不带换行；含逗号、引号或换行的值按 CSV 规则加引号。"""
    items = record.to_dict() if isinstance(record, UniversityRecord) else dict(record)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    for key, value in items.items():
        writer.writerow([key, _fmt(value)])
    text = buf.getvalue()
    return text[:-1] if text.endswith("\n") else text


def write_record_csv(record: Union[UniversityRecord, Mapping[str, Any]], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_record_csv(record), encoding="utf-8")
    return path


__all__ = ["CSV_MIME", "CSV_FILENAME", "export_record_csv", "write_record_csv"]
