from __future__ import annotations

"""
Excel 导出与示例文件生成。

输出布局与导入约定一致：第 1–3 行留空，第 4 行表头，第 5 行起为数据，
因此导出的文件可以原样再导入。
"""

import io
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from unirank.config import HEADER_ROW_OFFSET, XLSX_MIME
from unirank.schema import FIELD_MAPPING, HEADERS, rows_to_matrix

SHEET_TITLE = "University Rankings"
SAMPLE_FILENAME = "university_rankings_sample.xlsx"

# 示例数据（表头顺序见 unirank.schema.HEADERS），仅用于上手演示
SAMPLE_ROWS: List[List[Any]] = [
    [1, 1, 1, "Massachusetts Institute of Technology", "United States", "North America", "Medium", "Focused", "High Research", "Private", 100.0, 1, 100.0, 1, 100.0, 1, 100.0, 1, 95.2, 5, 90.1, 8, 88.5, 12, 92.3, 3, 85.7, 15, 78.9, 25, 100.0, "", 1],
    [2, 2, 3, "University of Cambridge", "United Kingdom", "Europe", "Large", "Comprehensive", "High Research", "Public", 99.2, 2, 99.8, 2, 98.5, 3, 99.1, 2, 98.7, 1, 95.3, 2, 91.2, 8, 95.8, 1, 88.4, 8, 82.1, 18, 99.2, "", 2],
    [3, 3, 2, "Stanford University", "United States", "North America", "Large", "Comprehensive", "High Research", "Private", 98.9, 3, 99.5, 3, 97.8, 4, 98.7, 3, 92.1, 8, 88.9, 12, 89.7, 10, 94.2, 2, 87.3, 10, 80.5, 20, 98.9, "", 3],
    [4, 4, 4, "University of Oxford", "United Kingdom", "Europe", "Large", "Comprehensive", "High Research", "Public", 98.5, 4, 99.1, 4, 99.2, 2, 97.9, 4, 97.8, 2, 94.7, 3, 90.8, 9, 93.5, 4, 86.9, 12, 81.7, 19, 98.5, "", 4],
    [5, 5, 5, "Harvard University", "United States", "North America", "Large", "Comprehensive", "High Research", "Private", 98.1, 5, 98.7, 5, 96.3, 6, 97.2, 5, 89.4, 15, 87.2, 18, 88.1, 14, 91.8, 6, 84.6, 18, 79.3, 23, 98.1, "", 5],
    [6, 6, 6, "Imperial College London", "United Kingdom", "Europe", "Medium", "Focused", "High Research", "Public", 97.8, 6, 98.3, 6, 95.7, 8, 96.8, 6, 96.5, 3, 93.1, 4, 87.9, 15, 90.7, 8, 83.2, 22, 78.8, 24, 97.8, "", 6],
    [7, 7, 7, "UCL", "United Kingdom", "Europe", "Large", "Comprehensive", "High Research", "Public", 97.2, 7, 97.9, 7, 94.8, 12, 96.1, 7, 95.8, 4, 92.6, 5, 86.7, 18, 89.9, 9, 82.5, 24, 77.9, 26, 97.2, "", 7],
    [8, 8, 8, "ETH Zurich", "Switzerland", "Europe", "Medium", "Focused", "High Research", "Public", 96.9, 8, 97.5, 8, 96.8, 5, 95.7, 8, 94.2, 6, 91.8, 6, 85.3, 22, 88.4, 11, 81.7, 26, 76.5, 28, 96.9, "", 8],
    [9, 9, 10, "University of Chicago", "United States", "North America", "Medium", "Comprehensive", "High Research", "Private", 96.5, 9, 97.1, 9, 95.2, 10, 95.3, 9, 88.7, 18, 86.9, 19, 84.8, 24, 87.6, 12, 80.9, 28, 75.8, 30, 96.5, "", 9],
    [10, 10, 9, "National University of Singapore", "Singapore", "Asia", "Large", "Comprehensive", "High Research", "Public", 96.1, 10, 96.7, 10, 94.5, 13, 94.9, 10, 93.6, 7, 90.4, 7, 83.2, 28, 86.8, 13, 79.4, 30, 74.2, 35, 96.1, "", 10],
]


def sample_records() -> List[dict]:
    """示例数据按表头打包成字典。"""
    return [dict(zip(HEADERS, row)) for row in SAMPLE_ROWS]


def _write_matrix(matrix: Sequence[Sequence[Any]], sheet_title: str) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title

    for _ in range(HEADER_ROW_OFFSET):
        ws.append([])
    ws.append(list(HEADERS))
    for row in matrix:
        # 空值写为空单元格
        ws.append([None if v == "" else v for v in row])
        # 以 "=" 开头的文本按字符串写入，不当作公式
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"

    for i, spec in enumerate(FIELD_MAPPING, start=1):
        ws.column_dimensions[get_column_letter(i)].width = spec.width

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def build_workbook(
    records: Iterable[Mapping[str, Any]],
    sheet_title: str = SHEET_TITLE,
) -> bytes:
    """把记录（键为表头名）写成固定布局的 xlsx 字节。"""
    return _write_matrix(rows_to_matrix(records), sheet_title)


def build_sample_workbook(sheet_title: str = SHEET_TITLE) -> bytes:
    return _write_matrix(SAMPLE_ROWS, sheet_title)


def write_workbook(records: Iterable[Mapping[str, Any]], path: Path, sheet_title: str = SHEET_TITLE) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_workbook(records, sheet_title=sheet_title))
    return path


def write_sample_workbook(path: Path, sheet_title: str = SHEET_TITLE) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_sample_workbook(sheet_title=sheet_title))
    return path


__all__ = [
    "XLSX_MIME",
    "SHEET_TITLE",
    "SAMPLE_FILENAME",
    "SAMPLE_ROWS",
    "sample_records",
    "build_workbook",
    "build_sample_workbook",
    "write_workbook",
    "write_sample_workbook",
]
