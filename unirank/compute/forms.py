from __future__ import annotations

"""
单个指标族的表单状态。

每个指标族各自持有一份输入（不再共享全局 store），每次 update 后同步重算，
并把新结果（CalculationResult 或 None）推送给订阅者。
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from unirank.compute.ratios import (
    FAMILY_FIELDS,
    CalculationResult,
    IndicatorFamily,
    calculate,
    validate,
)
from unirank.errors import ValidationError

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[CalculationResult]], None]


class IndicatorForm:
    def __init__(self, family: IndicatorFamily | str, **initial: Any) -> None:
        self.family = IndicatorFamily(family)
        self._data: Dict[str, Any] = {}
        self._listeners: List[Listener] = []
        self._result: Optional[CalculationResult] = None
        self._errors: List[ValidationError] = []
        if initial:
            self.update(**initial)

    @property
    def data(self) -> Dict[str, Any]:
        return dict(self._data)

    @property
    def result(self) -> Optional[CalculationResult]:
        return self._result

    @property
    def errors(self) -> List[ValidationError]:
        """当前输入的校验错误（只报告已填写的字段，便于在字段旁内联显示）。"""
        return list(self._errors)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """注册订阅者，返回取消订阅的函数。"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **fields: Any) -> Optional[CalculationResult]:
        unknown = set(fields) - set(FAMILY_FIELDS[self.family])
        if unknown:
            raise KeyError(f"Unknown field(s) for {self.family.value}: {', '.join(sorted(unknown))}")
        self._data.update(fields)
        self._recompute()
        return self._result

    def reset(self) -> None:
        self._data.clear()
        self._recompute()

    def _recompute(self) -> None:
        self._result = calculate(self.family, self._data)
        self._errors = [
            e for e in validate(self.family, self._data)
            if self._data.get(e.path) is not None
        ]
        logger.debug("%s recomputed: %s", self.family.value, self._result)
        for listener in list(self._listeners):
            listener(self._result)


def make_forms() -> Dict[IndicatorFamily, IndicatorForm]:
    """为三个指标族各建一份独立的表单状态。"""
    return {family: IndicatorForm(family) for family in IndicatorFamily}


__all__ = ["IndicatorForm", "Listener", "make_forms"]
