"""
数据加载模块。

把上传的 Excel 字节流解析为 RawRow 列表。
"""

from .xlsx_loader import filter_empty_rows, parse_rows, read_sheet  # noqa: F401

__all__ = ["read_sheet", "parse_rows", "filter_empty_rows"]
