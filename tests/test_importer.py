"""测试导入流水线：解析、过滤、映射、写入与错误上报。"""

import pytest

from unirank.errors import (
    ImportBusyError,
    MalformedFileError,
    NoValidRowsError,
    NotAuthenticatedError,
    PersistenceError,
)
from unirank.exporters import build_sample_workbook
from unirank.importer import NO_VALID_ROWS_MESSAGE, SpreadsheetImporter, build_payloads
from unirank.schema import HEADERS, USER_ID_FIELD
from unirank.store import InsertResult, MemoryStore, StoreError


class FailingStore(MemoryStore):
    def bulk_insert(self, table, records):
        return InsertResult(error=StoreError("duplicate key value violates unique constraint", code="23505"))


def test_import_sample_workbook_into_memory_store() -> None:
    store = MemoryStore()
    result = SpreadsheetImporter(store).run(build_sample_workbook(), "u-1")

    assert result.inserted_count == 10
    assert result.rows_read == 10
    assert result.rows_discarded == 0
    rows = store.tables["university_excel_data"]
    assert len(rows) == 10
    first = rows[0]
    assert first[USER_ID_FIELD] == "u-1"
    assert set(first) == set(HEADERS) | {USER_ID_FIELD}
    assert first["Name"] == "Massachusetts Institute of Technology"
    assert first["AR SCORE"] == 100
    assert first["Column2"] is None
    assert first["Rank_Duplicate"] == 1


def test_blank_rows_between_data_are_discarded(make_xlsx, header_row) -> None:
    data = [None] * len(header_row)
    data[header_row.index("Name")] = "UCL"
    data[header_row.index("Rank")] = 7
    content = make_xlsx([header_row, data, ["  "] * 3, data])

    store = MemoryStore()
    result = SpreadsheetImporter(store, table="t").run(content, "u-1")
    assert result.inserted_count == 2
    assert result.rows_discarded == 1


def test_header_with_only_blank_row_reports_no_valid_rows(make_xlsx, header_row) -> None:
    content = make_xlsx([header_row, [" ", "  "]])
    store = MemoryStore()
    with pytest.raises(NoValidRowsError) as exc:
        SpreadsheetImporter(store).run(content, "u-1")
    assert str(exc.value) == NO_VALID_ROWS_MESSAGE
    assert store.tables == {}


def test_headers_only_and_empty_sheet_are_malformed(make_xlsx, header_row) -> None:
    importer = SpreadsheetImporter(MemoryStore())
    with pytest.raises(MalformedFileError):
        importer.run(make_xlsx([header_row]), "u-1")
    with pytest.raises(MalformedFileError):
        importer.run(make_xlsx([]), "u-1")


def test_headers_on_wrong_row_are_rejected(make_xlsx, header_row) -> None:
    """表头放在第 1 行：第 4 行读到的是数据，导入直接失败，不做猜测。"""
    data = [1] * len(header_row)
    content = make_xlsx([header_row, data, data, data, data], blank_rows=0)
    with pytest.raises(MalformedFileError):
        SpreadsheetImporter(MemoryStore()).run(content, "u-1")


def test_store_error_is_propagated_verbatim() -> None:
    with pytest.raises(PersistenceError) as exc:
        SpreadsheetImporter(FailingStore()).run(build_sample_workbook(), "u-1")
    assert str(exc.value) == "duplicate key value violates unique constraint"
    assert exc.value.error.code == "23505"


def test_missing_user_is_rejected_before_reading() -> None:
    with pytest.raises(NotAuthenticatedError):
        SpreadsheetImporter(MemoryStore()).run(b"whatever", None)


def test_second_import_while_busy_is_rejected() -> None:
    importer = SpreadsheetImporter(MemoryStore())
    importer._busy = True
    with pytest.raises(ImportBusyError):
        importer.run(build_sample_workbook(), "u-1")


def test_busy_flag_is_cleared_after_failure() -> None:
    importer = SpreadsheetImporter(MemoryStore())
    with pytest.raises(MalformedFileError):
        importer.run(b"broken", "u-1")
    assert importer.busy is False
    assert importer.run(build_sample_workbook(), "u-1").inserted_count == 10


def test_build_payloads_does_not_touch_store() -> None:
    payloads = build_payloads(build_sample_workbook(), "u-2")
    assert len(payloads) == 10
    assert {p[USER_ID_FIELD] for p in payloads} == {"u-2"}
