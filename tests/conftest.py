"""pytest 配置：保证从项目根可导入，并提供构造测试用 xlsx 的工具。"""
import io
import os
import sys
from typing import Any, List, Sequence

import pytest
from openpyxl import Workbook

# 项目根目录加入 path，便于从 tests/ 运行时能 import 到模块
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)


def _build_xlsx(rows: Sequence[Sequence[Any]], blank_rows: int = 3) -> bytes:
    wb = Workbook()
    ws = wb.active
    for _ in range(blank_rows):
        ws.append([])
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def make_xlsx():
    """返回一个函数：rows（含表头）-> xlsx 字节，默认在前面留 3 行空行。"""
    return _build_xlsx


@pytest.fixture
def header_row() -> List[str]:
    from unirank.schema import HEADERS

    return list(HEADERS)
