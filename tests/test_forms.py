"""测试 IndicatorForm：独立状态、同步重算与订阅通知。"""

import pytest

from unirank.compute.forms import IndicatorForm, make_forms
from unirank.compute.ratios import CalculationResult, IndicatorFamily


def test_update_recomputes_and_notifies_subscribers() -> None:
    form = IndicatorForm("fsr")
    seen = []
    form.subscribe(seen.append)

    form.update(total_academic_staff=100)
    form.update(total_students=2000)

    assert seen == [None, CalculationResult(ratio=20.0, percentage=5.0, score=100.0)]
    assert form.result == seen[-1]
    assert form.data == {"total_academic_staff": 100, "total_students": 2000}


def test_unsubscribe_stops_notifications() -> None:
    form = IndicatorForm(IndicatorFamily.ISR)
    seen = []
    unsubscribe = form.subscribe(seen.append)
    form.update(international_students=30, total_students=100)
    unsubscribe()
    form.update(total_students=200)
    assert len(seen) == 1
    assert form.result.score == 45.0


def test_errors_only_for_filled_fields() -> None:
    """只填了国际人数时不报「总人数缺失」；国际 > 总数时报在国际人数字段上。"""
    form = IndicatorForm("ifr", international_staff=5)
    assert form.errors == []
    assert form.result is None

    form.update(total_academic_staff=2)
    assert form.result is None
    assert [e.path for e in form.errors] == ["international_staff"]

    form.update(total_academic_staff=10)
    assert form.errors == []
    assert form.result.score == 100.0


def test_unknown_field_raises() -> None:
    with pytest.raises(KeyError):
        IndicatorForm("fsr").update(international_staff=1)


def test_make_forms_gives_independent_state() -> None:
    forms = make_forms()
    forms[IndicatorFamily.FSR].update(total_academic_staff=1, total_students=20)
    assert forms[IndicatorFamily.FSR].result is not None
    assert forms[IndicatorFamily.IFR].result is None
    assert forms[IndicatorFamily.ISR].data == {}


def test_reset_clears_inputs_and_result() -> None:
    form = IndicatorForm("isr", international_students=1, total_students=10)
    assert form.result is not None
    form.reset()
    assert form.result is None
    assert form.data == {}
