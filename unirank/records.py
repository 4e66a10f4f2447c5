"""
总览表单记录（UniversityRecord）：十项指标得分、四个分类字段、排名与总分。

- validate()：范围与枚举校验，返回 ValidationError 列表；
- from_stored_row()：把存储中的一行 Excel 数据投影为表单记录（load named record）；
- to_row()：反向投影为按表头命名的字典，可直接交给 xlsx 导出。
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional

from unirank.compute.ratios import round_half_up
from unirank.config import CLASSIFICATIONS, SCORE_MAX, SCORE_MIN
from unirank.errors import PersistenceError, RecordNotFoundError, ValidationError
from unirank.schema import FIELD_MAPPING, USER_ID_FIELD, Column, is_empty
from unirank.store import RecordStore

INDICATOR_FIELDS = (
    "academic_reputation",
    "employer_reputation",
    "faculty_student_ratio",
    "citations_per_faculty",
    "international_faculty",
    "international_students",
    "international_students_diversity",
    "international_research_network",
    "employment_outcomes",
    "sustainability",
)

INDICATOR_LABELS = {
    "academic_reputation": "Academic Reputation",
    "employer_reputation": "Employer Reputation",
    "faculty_student_ratio": "Faculty Student Ratio",
    "citations_per_faculty": "Citations Per Faculty",
    "international_faculty": "International Faculty",
    "international_students": "International Students",
    "international_students_diversity": "International Students Diversity",
    "international_research_network": "International Research Network",
    "employment_outcomes": "Employment Outcomes",
    "sustainability": "Sustainability",
}

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")


def parse_float(value: Any) -> float:
    """取字符串开头的数值部分（类似 parseFloat）；空值或无法解析时为 0。"""
    if is_empty(value) or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    m = _FLOAT_PREFIX.match(str(value))
    return float(m.group(0)) if m else 0.0


def parse_int(value: Any) -> int:
    """取整数部分（类似 parseInt，向零截断）；空值或无法解析时为 0。"""
    if is_empty(value) or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    m = _INT_PREFIX.match(str(value))
    return int(m.group(0)) if m else 0


@dataclass
class UniversityRecord:
    academic_reputation: Optional[float] = None
    employer_reputation: Optional[float] = None
    faculty_student_ratio: Optional[float] = None
    citations_per_faculty: Optional[float] = None
    international_faculty: Optional[float] = None
    international_students: Optional[float] = None
    international_students_diversity: Optional[float] = None
    international_research_network: Optional[float] = None
    employment_outcomes: Optional[float] = None
    sustainability: Optional[float] = None

    size: Optional[str] = None
    focus: Optional[str] = None
    research: Optional[str] = None
    status: Optional[str] = None

    ranking: Optional[int] = None
    overall_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def update(self, **values: Any) -> "UniversityRecord":
        """浅合并：只覆盖传入的字段。"""
        names = {f.name for f in fields(self)}
        unknown = set(values) - names
        if unknown:
            raise KeyError(f"Unknown record field(s): {', '.join(sorted(unknown))}")
        for k, v in values.items():
            setattr(self, k, v)
        return self

    def validate(self) -> List[ValidationError]:
        errors: List[ValidationError] = []
        for name in INDICATOR_FIELDS + ("overall_score",):
            _check_range(errors, name, getattr(self, name))
        for name, options in CLASSIFICATIONS.items():
            value = getattr(self, name)
            if value is None:
                errors.append(ValidationError("missing_field", "Required", name))
            elif value not in options:
                errors.append(
                    ValidationError("value_error", f"Must be one of: {', '.join(options)}", name)
                )
        if self.ranking is None:
            errors.append(ValidationError("missing_field", "Required", "ranking"))
        elif isinstance(self.ranking, bool) or not isinstance(self.ranking, int):
            errors.append(ValidationError("type_error", "Expected integer", "ranking"))
        elif self.ranking < 1:
            errors.append(ValidationError("value_error", "Must be at least 1", "ranking"))
        return errors

    @classmethod
    def from_stored_row(cls, row: Mapping[str, Any]) -> "UniversityRecord":
        """
        把存储中的一行投影为表单记录。

        指标得分取 "<XX> SCORE" 列（字符串按数值前缀解析，空为 0）；
        分类字段原样（空为 ""）；排名取 Rank 的整数部分；
        总分取 Column2，为空时回退到 Overall SCORE，保留两位小数。
        """
        values: Dict[str, Any] = {}
        for spec in FIELD_MAPPING:
            if spec.record_field is None:
                continue
            raw = row.get(spec.header)
            if spec.kind == "score":
                values[spec.record_field] = parse_float(raw)
            elif spec.kind == "classification":
                values[spec.record_field] = "" if is_empty(raw) else str(raw)
        values["ranking"] = parse_int(row.get(Column.RANK.value))
        overall_raw = row.get(Column.COLUMN2.value)
        if is_empty(overall_raw):
            overall_raw = row.get(Column.OVERALL_SCORE.value)
        values["overall_score"] = round_half_up(parse_float(overall_raw), 2)
        return cls(**values)

    def to_row(self, **identity: Any) -> Dict[str, Any]:
        """
        反向投影为按表头命名的字典；identity 以表头名传入 Name、Region 等身份列。

        overall_score 同时写入 Overall SCORE 与 Column2。
        """
        row: Dict[str, Any] = dict(identity)
        for spec in FIELD_MAPPING:
            if spec.record_field is not None:
                row[spec.header] = getattr(self, spec.record_field)
        row[Column.OVERALL_SCORE.value] = self.overall_score
        return row


def _check_range(errors: List[ValidationError], name: str, value: Any) -> None:
    if value is None:
        errors.append(ValidationError("missing_field", "Required", name))
    elif isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        errors.append(ValidationError("type_error", "Expected number", name))
    elif not (SCORE_MIN <= value <= SCORE_MAX):
        errors.append(
            ValidationError("value_error", f"Must be between {SCORE_MIN:g} and {SCORE_MAX:g}", name)
        )


def load_named_record(
    store: RecordStore,
    table: str,
    name: str,
    user_id: str,
) -> UniversityRecord:
    """按机构名称读取当前用户导入的一行，并投影为 UniversityRecord。"""
    result = store.select_one(table, {Column.NAME.value: name, USER_ID_FIELD: user_id})
    if result.error is not None:
        raise PersistenceError(result.error.message, error=result.error)
    if result.record is None:
        raise RecordNotFoundError(f"No data found for {name}")
    return UniversityRecord.from_stored_row(result.record)


__all__ = [
    "INDICATOR_FIELDS",
    "INDICATOR_LABELS",
    "UniversityRecord",
    "parse_float",
    "parse_int",
    "load_named_record",
]
