"""
指标计算模块。

封装 FSR / IFR / ISR 三个比例类指标的计算与表单状态。
"""

from .ratios import (  # noqa: F401
    CalculationResult,
    IndicatorFamily,
    calculate,
    calculate_fsr,
    calculate_ifr,
    calculate_isr,
    validate,
)
from .forms import IndicatorForm, make_forms  # noqa: F401

__all__ = [
    "CalculationResult",
    "IndicatorFamily",
    "calculate",
    "calculate_fsr",
    "calculate_ifr",
    "calculate_isr",
    "validate",
    "IndicatorForm",
    "make_forms",
]
