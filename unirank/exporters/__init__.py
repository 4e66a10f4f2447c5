"""
导出模块。

负责把记录写出为固定布局的 xlsx（可再导入），以及单条记录的扁平 CSV。
"""

from .csv_exporter import export_record_csv, write_record_csv  # noqa: F401
from .xlsx_exporter import (  # noqa: F401
    build_sample_workbook,
    build_workbook,
    sample_records,
    write_sample_workbook,
    write_workbook,
)

__all__ = [
    "export_record_csv",
    "write_record_csv",
    "build_workbook",
    "build_sample_workbook",
    "sample_records",
    "write_workbook",
    "write_sample_workbook",
]
