"""
Tests for the pay-step progression functions.
"""
import datetime as dt

import pytest

from hobong.calculators.rank import (
    RankPosition,
    calculate,
    calculate_current_rank,
    calculate_first_upgrade_date,
    calculate_initial_rank,
    calculate_next_upgrade_date,
    derive_rank_info,
    parse_upgrade_date,
    validate_rank_inputs,
)
from hobong.calculators.tenure import Period
from hobong.errors import RankCalculationError


def test_step_is_granted_on_the_anniversary_itself():
    assert calculate_current_rank(5, "2024-03-01", "2024-03-01") == 6


def test_no_step_the_day_before_the_anniversary():
    assert calculate_current_rank(5, "2024-03-01", "2024-02-28") == 5


def test_one_more_step_per_full_year():
    assert calculate_current_rank(5, "2024-03-01", "2025-02-28") == 6
    assert calculate_current_rank(5, "2024-03-01", "2025-03-01") == 7
    assert calculate_current_rank(5, "2024-03-01", "2034-03-01") == 16


@pytest.mark.parametrize("none_marker", [None, "-", "", "null"])
def test_no_first_upgrade_date_keeps_the_start_step(none_marker):
    assert calculate_current_rank(3, none_marker, "2030-01-01") == 3
    assert calculate_next_upgrade_date(none_marker, "2030-01-01") is None


def test_current_rank_is_idempotent():
    first = calculate_current_rank(2, "2021-07-15", "2026-01-01")
    second = calculate_current_rank(2, "2021-07-15", "2026-01-01")
    assert first == second == 7


def test_current_rank_is_monotonic_in_target_date():
    target = dt.date(2019, 1, 1)
    previous = calculate_current_rank(1, "2020-02-29", target)
    while target < dt.date(2030, 1, 1):
        target += dt.timedelta(days=17)
        current = calculate_current_rank(1, "2020-02-29", target)
        assert current >= previous
        previous = current


def test_entry_without_prior_career_scenario():
    entry = "2020-01-10"
    start_rank = calculate_initial_rank(0)
    first = calculate_first_upgrade_date(entry)
    assert start_rank == 1
    assert first == dt.date(2021, 1, 10)
    assert calculate_current_rank(start_rank, first, "2023-01-10") == start_rank + 3
    assert calculate_next_upgrade_date(first, "2023-01-10") == dt.date(2024, 1, 10)


def test_initial_rank_counts_whole_prior_years():
    assert calculate_initial_rank(0) == 1
    assert calculate_initial_rank(1) == 2
    assert calculate_initial_rank(None) == 1


def test_prior_months_and_days_shorten_the_first_wait():
    # 12 - 3 months = 9 months; 10 leftover days shorten the last month to 20 days
    assert calculate_first_upgrade_date("2020-01-10", 0, 3, 10) == dt.date(2020, 9, 30)
    # 45 days carry into 1 month 15 days
    assert calculate_first_upgrade_date("2020-01-10", 0, 0, 45) == dt.date(2020, 11, 25)


def test_whole_prior_years_are_counted_in_the_start_step():
    assert calculate_first_upgrade_date("2020-01-10", 1, 0, 0) == dt.date(2021, 1, 10)


def test_subtracting_whole_years_can_put_first_upgrade_before_entry():
    assert calculate_first_upgrade_date(
        "2020-01-10", 1, 0, 0, years_in_start_rank=False
    ) == dt.date(2020, 1, 10)
    assert calculate_first_upgrade_date(
        "2020-01-10", 2, 0, 0, years_in_start_rank=False
    ) == dt.date(2019, 1, 10)


def test_snap_to_month_start():
    assert calculate_first_upgrade_date("2020-01-10", snap_to_month_start=True) == dt.date(2021, 2, 1)
    assert calculate_first_upgrade_date("2020-01-01", snap_to_month_start=True) == dt.date(2021, 1, 1)


def test_first_upgrade_date_rejects_bad_inputs():
    with pytest.raises(RankCalculationError):
        calculate_first_upgrade_date("2020-01-10", 0, -1, 0)
    with pytest.raises(RankCalculationError):
        calculate_first_upgrade_date("2020-02-30")


def test_next_upgrade_date():
    assert calculate_next_upgrade_date("2024-03-01", "2024-03-01") == dt.date(2025, 3, 1)
    assert calculate_next_upgrade_date("2024-03-01", "2024-02-28") == dt.date(2024, 3, 1)
    assert calculate_next_upgrade_date("2024-03-01", "2026-07-01") == dt.date(2027, 3, 1)


def test_leap_day_first_upgrade_does_not_drift():
    assert calculate_current_rank(1, "2024-02-29", "2025-02-27") == 2
    assert calculate_current_rank(1, "2024-02-29", "2025-02-28") == 3
    assert calculate_next_upgrade_date("2024-02-29", "2025-03-01") == dt.date(2026, 2, 28)
    assert calculate_next_upgrade_date("2024-02-29", "2027-03-01") == dt.date(2028, 2, 29)


def test_longer_upgrade_interval():
    assert calculate_current_rank(1, "2020-01-01", "2023-06-01", interval_years=2) == 3
    assert calculate_next_upgrade_date("2020-01-01", "2023-06-01", interval_years=2) == dt.date(
        2024, 1, 1
    )


def test_calculate_combines_both_figures():
    assert calculate(5, "2024-03-01", "2024-03-01") == RankPosition(6, dt.date(2025, 3, 1))


def test_derive_rank_info():
    derived = derive_rank_info(dt.date(2020, 1, 1), Period(3, 0, 0))
    assert derived.start_rank == 4
    assert derived.first_upgrade_date == dt.date(2021, 1, 1)
    assert derived.prior_period == Period(3, 0, 0)


def test_malformed_inputs_raise_rank_errors():
    with pytest.raises(RankCalculationError):
        calculate_current_rank(5, "2024-99-01", "2024-03-01")
    with pytest.raises(RankCalculationError):
        calculate_current_rank(5, "2024-03-01", "03/01/2024")
    with pytest.raises(RankCalculationError):
        calculate_current_rank(0, "2024-03-01", "2024-03-01")
    with pytest.raises(RankCalculationError):
        calculate_current_rank("5", "2024-03-01", "2024-03-01")


def test_parse_upgrade_date():
    assert parse_upgrade_date("-") is None
    assert parse_upgrade_date("none") is None
    assert parse_upgrade_date("2021-01-10") == dt.date(2021, 1, 10)


def test_validate_rank_inputs_chronology():
    validate_rank_inputs(1, "2021-01-01", "2020-01-01")
    validate_rank_inputs(1, None, "2020-01-01")
    validate_rank_inputs(10, "1995-01-01", "2020-01-01")
    with pytest.raises(RankCalculationError):
        validate_rank_inputs(1, "1960-01-01", "2020-01-01")
    validate_rank_inputs(1, "2021-07-01", "2020-01-10")
    with pytest.raises(RankCalculationError):
        validate_rank_inputs(0, "2021-01-01", "2020-01-01")
