from __future__ import annotations

"""
比例类指标计算：FSR（师生比）、IFR（国际教师比）、ISR（国际学生比）。

每个指标族都是纯函数：输入人数 -> {ratio, percentage, score}。
输入缺失、非数值、分母 <= 0 或未通过业务校验（国际人数 > 总人数）时返回 None。

取整沿用原有口径：round_half_up(x * 10^n) / 10^n，score 基于未取整的 ratio/percentage 计算。
percentage 不做截断，只有 score 被限制在 [0, 100]。
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from unirank.errors import ValidationError


class IndicatorFamily(str, Enum):
    FSR = "fsr"
    IFR = "ifr"
    ISR = "isr"


# 各指标族的输入字段（顺序即表单顺序）
FAMILY_FIELDS: Dict[IndicatorFamily, tuple] = {
    IndicatorFamily.FSR: ("total_academic_staff", "total_students"),
    IndicatorFamily.IFR: ("international_staff", "total_academic_staff"),
    IndicatorFamily.ISR: ("international_students", "total_students"),
}

RATIO_DECIMALS = {
    IndicatorFamily.FSR: 2,
    IndicatorFamily.IFR: 3,
    IndicatorFamily.ISR: 3,
}
PERCENT_DECIMALS = 2
SCORE_DECIMALS = 2

# FSR：以 20:1 为满分基准
FSR_BENCHMARK_RATIO = 20.0
IFR_SCORE_MULTIPLIER = 2.0
ISR_SCORE_MULTIPLIER = 3.0


@dataclass(frozen=True)
class CalculationResult:
    ratio: float
    percentage: float
    score: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def round_half_up(value: float, decimals: int) -> float:
    """与 Math.round(x * 10^n) / 10^n 一致的取整（.5 向正无穷方向）。"""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, value))


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _check_min(errors: List[ValidationError], name: str, value: Any, minimum: float, message: str) -> None:
    if value is None:
        errors.append(ValidationError(kind="missing_field", message="Required", path=name))
    elif not _is_number(value):
        errors.append(ValidationError(kind="type_error", message="Expected number", path=name))
    elif value < minimum:
        errors.append(ValidationError(kind="value_error", message=message, path=name))


def validate_fsr(total_academic_staff: Any, total_students: Any) -> List[ValidationError]:
    errors: List[ValidationError] = []
    _check_min(errors, "total_academic_staff", total_academic_staff, 1, "Must be at least 1")
    _check_min(errors, "total_students", total_students, 1, "Must be at least 1")
    return errors


def validate_ifr(international_staff: Any, total_academic_staff: Any) -> List[ValidationError]:
    errors: List[ValidationError] = []
    _check_min(errors, "international_staff", international_staff, 0, "Cannot be negative")
    _check_min(errors, "total_academic_staff", total_academic_staff, 1, "Must be at least 1")
    if not errors and international_staff > total_academic_staff:
        errors.append(
            ValidationError(
                kind="value_error",
                message="International staff cannot exceed total academic staff",
                path="international_staff",
            )
        )
    return errors


def validate_isr(international_students: Any, total_students: Any) -> List[ValidationError]:
    errors: List[ValidationError] = []
    _check_min(errors, "international_students", international_students, 0, "Cannot be negative")
    _check_min(errors, "total_students", total_students, 1, "Must be at least 1")
    if not errors and international_students > total_students:
        errors.append(
            ValidationError(
                kind="value_error",
                message="International students cannot exceed total students",
                path="international_students",
            )
        )
    return errors


def calculate_fsr(total_academic_staff: Any, total_students: Any) -> Optional[CalculationResult]:
    """师生比：ratio = 学生/教师，percentage = 教师/学生 × 100，score = (20 / ratio) × 100。"""
    if validate_fsr(total_academic_staff, total_students):
        return None
    ratio = total_students / total_academic_staff
    percentage = total_academic_staff / total_students * 100
    score = clamp_score(FSR_BENCHMARK_RATIO / ratio * 100)
    return CalculationResult(
        ratio=round_half_up(ratio, RATIO_DECIMALS[IndicatorFamily.FSR]),
        percentage=round_half_up(percentage, PERCENT_DECIMALS),
        score=round_half_up(score, SCORE_DECIMALS),
    )


def _share_result(family: IndicatorFamily, part: float, total: float, multiplier: float) -> CalculationResult:
    ratio = part / total
    percentage = ratio * 100
    score = clamp_score(percentage * multiplier)
    return CalculationResult(
        ratio=round_half_up(ratio, RATIO_DECIMALS[family]),
        percentage=round_half_up(percentage, PERCENT_DECIMALS),
        score=round_half_up(score, SCORE_DECIMALS),
    )


def calculate_ifr(international_staff: Any, total_academic_staff: Any) -> Optional[CalculationResult]:
    """国际教师比：score = percentage × 2（上限 100）。"""
    if validate_ifr(international_staff, total_academic_staff):
        return None
    return _share_result(IndicatorFamily.IFR, international_staff, total_academic_staff, IFR_SCORE_MULTIPLIER)


def calculate_isr(international_students: Any, total_students: Any) -> Optional[CalculationResult]:
    """国际学生比：score = percentage × 3（上限 100）。"""
    if validate_isr(international_students, total_students):
        return None
    return _share_result(IndicatorFamily.ISR, international_students, total_students, ISR_SCORE_MULTIPLIER)


_CALCULATORS: Dict[IndicatorFamily, Callable[..., Optional[CalculationResult]]] = {
    IndicatorFamily.FSR: calculate_fsr,
    IndicatorFamily.IFR: calculate_ifr,
    IndicatorFamily.ISR: calculate_isr,
}

_VALIDATORS: Dict[IndicatorFamily, Callable[..., List[ValidationError]]] = {
    IndicatorFamily.FSR: validate_fsr,
    IndicatorFamily.IFR: validate_ifr,
    IndicatorFamily.ISR: validate_isr,
}


def _args(family: IndicatorFamily, inputs: Mapping[str, Any]) -> List[Any]:
    return [inputs.get(name) for name in FAMILY_FIELDS[family]]


def validate(family: IndicatorFamily | str, inputs: Mapping[str, Any]) -> List[ValidationError]:
    fam = IndicatorFamily(family)
    return _VALIDATORS[fam](*_args(fam, inputs))


def calculate(family: IndicatorFamily | str, inputs: Mapping[str, Any]) -> Optional[CalculationResult]:
    """按指标族分派；inputs 以字段名为键（见 FAMILY_FIELDS）。"""
    fam = IndicatorFamily(family)
    return _CALCULATORS[fam](*_args(fam, inputs))


__all__ = [
    "IndicatorFamily",
    "FAMILY_FIELDS",
    "CalculationResult",
    "round_half_up",
    "clamp_score",
    "validate_fsr",
    "validate_ifr",
    "validate_isr",
    "calculate_fsr",
    "calculate_ifr",
    "calculate_isr",
    "validate",
    "calculate",
]
