from __future__ import annotations

"""
Excel 导入流水线。

    bytes -> read_sheet -> parse_rows -> filter_empty_rows -> to_payload -> store.bulk_insert

任一环节失败都会整体中止，不做部分写入；存储层返回的错误原样透传。
同一个 SpreadsheetImporter 实例同一时间只允许一次导入（busy 标记，不排队）。
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from unirank.config import HEADER_ROW_OFFSET
from unirank.errors import (
    ImportBusyError,
    NoValidRowsError,
    NotAuthenticatedError,
    PersistenceError,
)
from unirank.loaders import filter_empty_rows, parse_rows, read_sheet
from unirank.schema import RawRow, to_payload
from unirank.store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "university_excel_data"
NO_VALID_ROWS_MESSAGE = "No valid data found in the Excel file"


@dataclass
class ImportResult:
    inserted_count: int
    rows_read: int
    rows_discarded: int
    inserted: List[Dict[str, Any]] = field(default_factory=list)


def map_rows(rows: Sequence[RawRow], user_id: str) -> List[Dict[str, Any]]:
    """把过滤后的 RawRow 映射为写入字典（附带导入用户）。"""
    return [to_payload(row, user_id=user_id) for row in rows]


def build_payloads(content: bytes, user_id: str, header_offset: int = HEADER_ROW_OFFSET) -> List[Dict[str, Any]]:
    """只做解析与映射，不写存储；便于预览或测试。"""
    rows = parse_rows(read_sheet(content, header_offset=header_offset), header_offset=header_offset)
    valid = filter_empty_rows(rows)
    if not valid:
        raise NoValidRowsError(NO_VALID_ROWS_MESSAGE)
    return map_rows(valid, user_id)


class SpreadsheetImporter:
    def __init__(
        self,
        store: RecordStore,
        table: str = DEFAULT_TABLE,
        header_offset: int = HEADER_ROW_OFFSET,
    ) -> None:
        self.store = store
        self.table = table
        self.header_offset = header_offset
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def run(self, content: bytes, user_id: Optional[str]) -> ImportResult:
        """
        导入一份 Excel 文件。

        返回 ImportResult，其中 inserted_count 为存储层确认写入的行数。
        失败时抛出：
            NotAuthenticatedError  未提供用户标识
            ImportBusyError        已有导入在进行
            MalformedFileError     文件无法解析，或表头 + 数据不足两行
            NoValidRowsError       过滤空行后没有剩余数据
            PersistenceError       存储层拒绝写入
        """
        if not user_id:
            raise NotAuthenticatedError("Please select a file and ensure you are logged in")
        if self._busy:
            raise ImportBusyError("An import is already in progress")

        self._busy = True
        try:
            return self._run(content, user_id)
        except Exception as e:
            logger.error("import failed: %s", e)
            raise
        finally:
            self._busy = False

    def _run(self, content: bytes, user_id: str) -> ImportResult:
        logger.info("importing %d byte(s) into %s", len(content), self.table)
        rows = parse_rows(
            read_sheet(content, header_offset=self.header_offset),
            header_offset=self.header_offset,
        )
        valid = filter_empty_rows(rows)
        if not valid:
            raise NoValidRowsError(NO_VALID_ROWS_MESSAGE)

        payloads = map_rows(valid, user_id)
        result = self.store.bulk_insert(self.table, payloads)
        if result.error is not None:
            raise PersistenceError(result.error.message, error=result.error)

        inserted = list(result.inserted or [])
        logger.info(
            "imported %d record(s) (%d row(s) read, %d empty row(s) discarded)",
            len(inserted),
            len(rows),
            len(rows) - len(valid),
        )
        return ImportResult(
            inserted_count=len(inserted),
            rows_read=len(rows),
            rows_discarded=len(rows) - len(valid),
            inserted=inserted,
        )


__all__ = [
    "DEFAULT_TABLE",
    "NO_VALID_ROWS_MESSAGE",
    "ImportResult",
    "map_rows",
    "build_payloads",
    "SpreadsheetImporter",
]
