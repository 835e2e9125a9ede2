"""
Tests for elapsed-time calculation and the 365/30 day convention.
"""
import pytest

from hobong.calculators.tenure import (
    ZERO_PERIOD,
    Period,
    calculate,
    calculate_days,
    format_period,
    from_days,
    parse_period_text,
    sum_days,
    to_days,
)
from hobong.errors import DateInvalid


def test_calculate_whole_years():
    assert calculate("2020-01-10", "2023-01-10") == Period(3, 0, 0)


def test_calculate_borrows_a_month_when_day_is_short():
    assert calculate("2020-01-15", "2020-03-10") == Period(0, 1, 24)


def test_same_day_is_zero():
    assert calculate("2024-05-05", "2024-05-05") == ZERO_PERIOD


def test_end_before_start_returns_non_positive_period():
    period = calculate("2024-01-10", "2023-01-10")
    assert period == Period(-1, 0, 0)
    assert to_days(period) <= 0


def test_inclusive_counts_the_end_date():
    assert calculate("2020-01-01", "2020-12-31", inclusive=True) == Period(1, 0, 0)
    assert calculate("2020-01-01", "2020-12-31") == Period(0, 11, 30)


def test_malformed_dates_raise():
    with pytest.raises(DateInvalid):
        calculate("2020-02-30", "2021-01-01")


def test_day_convention_round_trip():
    assert to_days(Period(1, 2, 3)) == 428
    assert from_days(428) == Period(1, 2, 3)
    assert from_days(0) == ZERO_PERIOD
    # 365 = 12 * 30 + 5
    assert from_days(364) == Period(0, 12, 4)
    assert from_days(-40) == Period(0, -1, -10)


def test_calculate_days_uses_the_convention():
    assert calculate_days("2020-01-01", "2022-01-01") == 730
    assert calculate_days("2020-01-01", "2020-03-01") == 60
    assert sum_days([Period(1, 0, 0), Period(0, 1, 1)]) == 396


def test_normalized_carries_components():
    assert Period(0, 14, 35).normalized() == Period(1, 3, 0)


def test_format_period():
    assert format_period(Period(3, 2, 0)) == "3년 2개월 0일"
    assert format_period(Period(3, 2, 0), elide_zero=True) == "3년 2개월"
    assert format_period(ZERO_PERIOD, elide_zero=True) == "0일"
    assert format_period(Period(1, 0, 5), locale="en") == "1 years 0 months 5 days"
    assert str(Period(1, 0, 0)) == "1년 0개월 0일"
    with pytest.raises(ValueError):
        format_period(Period(1, 0, 0), locale="fr")


def test_parse_period_text():
    assert parse_period_text("3년 2개월 5일") == Period(3, 2, 5)
    assert parse_period_text("경력 0년 11개월 30일") == Period(0, 11, 30)
    with pytest.raises(DateInvalid):
        parse_period_text("three years")
    with pytest.raises(DateInvalid):
        parse_period_text("")


def test_period_dict_round_trip():
    period = Period(2, 3, 4)
    assert Period.from_dict(period.as_dict()) == period
    assert Period.from_dict({"years": 1}) == Period(1, 0, 0)
