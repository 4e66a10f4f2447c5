"""
表格交换的字段映射表（固定 schema）。

表头名即存储列名。导入（表头 -> 字段）与导出（字段 -> 表头）都从 FIELD_MAPPING 派生，
新增列只改这里。缺失值一律为 None，不以 0 代替，以便区分「无数据」与「实测为 0」。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

Cell = Union[int, float, str, None]
RawRow = Dict["Column", Cell]

USER_ID_FIELD = "user_id"


class Column(str, Enum):
    INDEX = "Index"
    RANK = "Rank"
    PREVIOUS_RANK = "Previous Rank"
    NAME = "Name"
    COUNTRY = "Country/Territory"
    REGION = "Region"
    SIZE = "Size"
    FOCUS = "Focus"
    RESEARCH = "Research"
    STATUS = "Status"
    AR_SCORE = "AR SCORE"
    AR_RANK = "AR RANK"
    ER_SCORE = "ER SCORE"
    ER_RANK = "ER RANK"
    FSR_SCORE = "FSR SCORE"
    FSR_RANK = "FSR RANK"
    CPF_SCORE = "CPF SCORE"
    CPF_RANK = "CPF RANK"
    IFR_SCORE = "IFR SCORE"
    IFR_RANK = "IFR RANK"
    ISR_SCORE = "ISR SCORE"
    ISR_RANK = "ISR RANK"
    ISD_SCORE = "ISD SCORE"
    ISD_RANK = "ISD RANK"
    IRN_SCORE = "IRN SCORE"
    IRN_RANK = "IRN RANK"
    EO_SCORE = "EO SCORE"
    EO_RANK = "EO RANK"
    SUS_SCORE = "SUS SCORE"
    SUS_RANK = "SUS RANK"
    OVERALL_SCORE = "Overall SCORE"
    COLUMN2 = "Column2"
    RANK_DUPLICATE = "Rank_Duplicate"


@dataclass(frozen=True)
class FieldSpec:
    column: Column
    kind: str  # identity / classification / score / rank / legacy
    width: int
    # 对应 UniversityRecord 上的字段（仅 score / classification / 排名相关列）
    record_field: Optional[str] = None

    @property
    def header(self) -> str:
        return self.column.value


def _pair(prefix: str, record_field: str) -> List[FieldSpec]:
    return [
        FieldSpec(Column(f"{prefix} SCORE"), "score", 10, record_field),
        FieldSpec(Column(f"{prefix} RANK"), "rank", 10),
    ]


FIELD_MAPPING: List[FieldSpec] = [
    FieldSpec(Column.INDEX, "identity", 8),
    FieldSpec(Column.RANK, "identity", 8, "ranking"),
    FieldSpec(Column.PREVIOUS_RANK, "identity", 12),
    FieldSpec(Column.NAME, "identity", 35),
    FieldSpec(Column.COUNTRY, "identity", 18),
    FieldSpec(Column.REGION, "identity", 15),
    FieldSpec(Column.SIZE, "classification", 10, "size"),
    FieldSpec(Column.FOCUS, "classification", 15, "focus"),
    FieldSpec(Column.RESEARCH, "classification", 15, "research"),
    FieldSpec(Column.STATUS, "classification", 12, "status"),
    *_pair("AR", "academic_reputation"),
    *_pair("ER", "employer_reputation"),
    *_pair("FSR", "faculty_student_ratio"),
    *_pair("CPF", "citations_per_faculty"),
    *_pair("IFR", "international_faculty"),
    *_pair("ISR", "international_students"),
    *_pair("ISD", "international_students_diversity"),
    *_pair("IRN", "international_research_network"),
    *_pair("EO", "employment_outcomes"),
    *_pair("SUS", "sustainability"),
    FieldSpec(Column.OVERALL_SCORE, "score", 12),
    FieldSpec(Column.COLUMN2, "legacy", 10, "overall_score"),
    FieldSpec(Column.RANK_DUPLICATE, "legacy", 8),
]

HEADERS: List[str] = [spec.header for spec in FIELD_MAPPING]
_BY_HEADER: Dict[str, FieldSpec] = {spec.header: spec for spec in FIELD_MAPPING}


def spec_for(header: Any) -> Optional[FieldSpec]:
    if not isinstance(header, str):
        return None
    return _BY_HEADER.get(header.strip())


def is_empty(value: Any) -> bool:
    """None、空串与纯空白字符串视为空；0 不是空。"""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def normalize_cell(value: Any) -> Cell:
    """单元格原样透传，仅把空值统一成 None；日期等其他类型转为字符串。"""
    if is_empty(value):
        return None
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, (int, float, str)):
        return value
    return str(value)


def derive_legacy(payload: Dict[str, Cell]) -> Dict[str, Cell]:
    """Rank_Duplicate 为空时回填 Rank。"""
    if payload.get(Column.RANK_DUPLICATE.value) is None:
        payload[Column.RANK_DUPLICATE.value] = payload.get(Column.RANK.value)
    return payload


def to_payload(row: Mapping[Any, Any], user_id: Optional[str] = None) -> Dict[str, Cell]:
    """
    按映射表把一行（键为 Column 或表头字符串）转换为固定 schema 的写入字典。

    映射表之外的键被丢弃，缺失列补 None；user_id 非空时附加到结果中。
    """
    by_header = {
        (k.value if isinstance(k, Column) else str(k)): v for k, v in row.items()
    }
    payload: Dict[str, Cell] = {}
    if user_id is not None:
        payload[USER_ID_FIELD] = user_id
    for spec in FIELD_MAPPING:
        payload[spec.header] = normalize_cell(by_header.get(spec.header))
    return derive_legacy(payload)


def rows_to_matrix(records: Iterable[Mapping[Any, Any]]) -> List[List[Cell]]:
    """导出方向：记录 -> 按 HEADERS 顺序排列的行。"""
    matrix: List[List[Cell]] = []
    for record in records:
        payload = to_payload(record)
        matrix.append([payload[h] for h in HEADERS])
    return matrix


__all__ = [
    "Cell",
    "RawRow",
    "USER_ID_FIELD",
    "Column",
    "FieldSpec",
    "FIELD_MAPPING",
    "HEADERS",
    "spec_for",
    "is_empty",
    "normalize_cell",
    "derive_legacy",
    "to_payload",
    "rows_to_matrix",
]
