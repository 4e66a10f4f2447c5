from __future__ import annotations

"""
Excel 表格加载。

固定布局：第 1–3 行留空，第 4 行为表头，第 5 行起为数据。
本模块负责：
    bytes -> 二维数组（从表头行开始） -> RawRow 列表（键为 Column，值为原始单元格）
不做类型转换，也不做业务映射（见 unirank.importer / unirank.schema）。
"""

import io
import logging
import zipfile
from typing import Any, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from unirank.config import HEADER_ROW_OFFSET
from unirank.errors import MalformedFileError
from unirank.schema import Cell, Column, RawRow, is_empty, normalize_cell, spec_for

logger = logging.getLogger(__name__)

MIN_ROWS_MESSAGE = "Excel file must contain headers and at least one data row"


def _row_is_empty(row: Sequence[Any]) -> bool:
    return all(is_empty(v) for v in row)


def _first_populated_sheet(workbook):
    for ws in workbook.worksheets:
        for row in ws.iter_rows(min_row=1, values_only=True):
            if not _row_is_empty(row):
                return ws
    return workbook.worksheets[0] if workbook.worksheets else None


def read_sheet(content: bytes, header_offset: int = HEADER_ROW_OFFSET) -> List[List[Cell]]:
    """
    读取工作簿中第一个有内容的工作表，返回从 header_offset 行开始的二维数组。

    - 空行原样保留，交给 filter_empty_rows 处理；
    - 文件无法作为 xlsx 解析时抛出 MalformedFileError。
    """
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise MalformedFileError(f"Unable to read Excel file: {e}") from e

    try:
        ws = _first_populated_sheet(wb)
        if ws is None:
            return []
        matrix: List[List[Cell]] = [
            [normalize_cell(v) for v in row]
            for row in ws.iter_rows(min_row=header_offset + 1, values_only=True)
        ]
    finally:
        wb.close()

    logger.debug("read %d row(s) from sheet starting at offset %d", len(matrix), header_offset)
    return matrix


def parse_rows(matrix: Sequence[Sequence[Any]], header_offset: int = HEADER_ROW_OFFSET) -> List[RawRow]:
    """
    第 0 行为表头，其余行按表头打包成 RawRow。

    缺失的单元格补 None；不在映射表中的表头被丢弃（记 warning），缺少的列按 None 处理。
    只有表头行中没有任何已知列时才视为布局不符；部分列缺失或多出不算失败。
    header_offset 仅用于错误信息中的行号。
    """
    if len(matrix) < 2:
        raise MalformedFileError(MIN_ROWS_MESSAGE)

    headers: List[Optional[Column]] = []
    unknown: List[str] = []
    for h in matrix[0]:
        spec = spec_for(h)
        headers.append(spec.column if spec else None)
        if spec is None and not is_empty(h):
            unknown.append(str(h))
    if not any(headers):
        raise MalformedFileError(
            f"Header row {header_offset + 1} does not match the expected column layout"
        )
    if unknown:
        logger.warning("ignoring unknown column(s): %s", ", ".join(unknown))

    rows: List[RawRow] = []
    for cells in matrix[1:]:
        row: RawRow = {}
        for i, column in enumerate(headers):
            if column is None:
                continue
            value = cells[i] if i < len(cells) else None
            row[column] = normalize_cell(value)
        rows.append(row)
    return rows


def filter_empty_rows(rows: Sequence[RawRow]) -> List[RawRow]:
    """去掉所有字段都为空的行。"""
    kept = [r for r in rows if not all(is_empty(v) for v in r.values())]
    dropped = len(rows) - len(kept)
    if dropped:
        logger.debug("discarded %d empty row(s)", dropped)
    return kept


__all__ = ["MIN_ROWS_MESSAGE", "read_sheet", "parse_rows", "filter_empty_rows"]
