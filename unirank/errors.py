"""
异常与校验错误定义。

三类错误：
- 输入校验（ValidationError）：以列表形式返回，不抛出，计算结果置为 None；
- 交换格式（InterchangeError 及其子类）：表格布局不对、行数不足、过滤后无有效行；
- 协作方失败（PersistenceError）：存储层拒绝写入/读取，原样透传错误信息。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ValidationError:
    kind: str
    message: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "path": self.path}


class InterchangeError(ValueError):
    """表格文件不符合固定布局约定。"""


class MalformedFileError(InterchangeError):
    pass


class NoValidRowsError(InterchangeError):
    pass


class ImportBusyError(RuntimeError):
    """同一个导入器上已有一次导入在进行中。"""


class NotAuthenticatedError(PermissionError):
    pass


class PersistenceError(RuntimeError):
    """存储协作方返回的错误；message 原样保留，原始错误对象挂在 .error 上。"""

    def __init__(self, message: str, error: Any = None) -> None:
        super().__init__(message)
        self.error = error


class RecordNotFoundError(LookupError):
    pass


__all__ = [
    "ValidationError",
    "InterchangeError",
    "MalformedFileError",
    "NoValidRowsError",
    "ImportBusyError",
    "NotAuthenticatedError",
    "PersistenceError",
    "RecordNotFoundError",
]
