from __future__ import annotations

"""
存储协作方接口与两个实现。

核心只依赖两个形状：
    bulk_insert(table, records) -> InsertResult(inserted, error)
    select_one(table, filters)  -> SelectResult(record, error)
错误以返回值的形式给出（不抛出），由调用方决定如何上报。

- MemoryStore：进程内字典，用于测试与演示；
- SQLiteStore：标准库 sqlite3，每行存一份 JSON 文档，表按需创建。
"""

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


@dataclass
class StoreError:
    message: str
    code: Optional[str] = None


@dataclass
class InsertResult:
    inserted: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[StoreError] = None


@dataclass
class SelectResult:
    record: Optional[Dict[str, Any]] = None
    error: Optional[StoreError] = None


class RecordStore(Protocol):
    def bulk_insert(self, table: str, records: Sequence[Mapping[str, Any]]) -> InsertResult:
        ...

    def select_one(self, table: str, filters: Mapping[str, Any]) -> SelectResult:
        ...


def _matches(record: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    return all(record.get(k) == v for k, v in filters.items())


def _select_single(rows: List[Dict[str, Any]], filters: Mapping[str, Any]) -> SelectResult:
    found = [r for r in rows if _matches(r, filters)]
    if len(found) > 1:
        return SelectResult(error=StoreError("multiple rows match filters", code="multiple_rows"))
    return SelectResult(record=dict(found[0]) if found else None)


class MemoryStore:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}

    def bulk_insert(self, table: str, records: Sequence[Mapping[str, Any]]) -> InsertResult:
        rows = self.tables.setdefault(table, [])
        inserted = [dict(r) for r in records]
        rows.extend(inserted)
        return InsertResult(inserted=[dict(r) for r in inserted])

    def select_one(self, table: str, filters: Mapping[str, Any]) -> SelectResult:
        return _select_single(self.tables.get(table, []), filters)


class SQLiteStore:
    """
    以 JSON 文档形式存储记录：表结构固定为 (id INTEGER PRIMARY KEY, doc TEXT)。

    表名只接受字母、数字与下划线；select_one 在 Python 侧按 filters 做等值匹配。
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(self.path))

    @staticmethod
    def _check_table(table: str) -> None:
        if not table or not table.replace("_", "").isalnum():
            raise ValueError(f"Invalid table name: {table!r}")

    def _ensure_table(self, conn: sqlite3.Connection, table: str) -> None:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS %s (id INTEGER PRIMARY KEY AUTOINCREMENT, doc TEXT NOT NULL)" % table
        )

    def bulk_insert(self, table: str, records: Sequence[Mapping[str, Any]]) -> InsertResult:
        self._check_table(table)
        docs = [dict(r) for r in records]
        conn = self._connect()
        try:
            with conn:
                self._ensure_table(conn, table)
                conn.executemany(
                    "INSERT INTO %s (doc) VALUES (?)" % table,
                    [(json.dumps(d, ensure_ascii=False),) for d in docs],
                )
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error("bulk insert into %s failed: %s", table, e)
            return InsertResult(error=StoreError(str(e), code=type(e).__name__))
        finally:
            conn.close()
        return InsertResult(inserted=docs)

    def select_one(self, table: str, filters: Mapping[str, Any]) -> SelectResult:
        self._check_table(table)
        conn = self._connect()
        try:
            self._ensure_table(conn, table)
            rows = [json.loads(doc) for (doc,) in conn.execute("SELECT doc FROM %s ORDER BY id" % table)]
        except sqlite3.Error as e:
            return SelectResult(error=StoreError(str(e), code=type(e).__name__))
        finally:
            conn.close()
        return _select_single(rows, filters)


__all__ = [
    "StoreError",
    "InsertResult",
    "SelectResult",
    "RecordStore",
    "MemoryStore",
    "SQLiteStore",
]
