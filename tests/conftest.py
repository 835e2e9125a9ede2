"""Shared fixtures for the hobong test suite."""
import datetime as dt

import pytest

from hobong.calculators.career import sum_periods
from hobong.calculators.rank import derive_rank_info
from hobong.calculators.tenure import Period
from hobong.schema.employee import (
    Assignment,
    Employee,
    PriorCareerRate,
    PriorCareerRecord,
    RankInfo,
)


def stored_employee(
    employee_id="E001",
    entry="2020-01-01",
    careers=None,
    assignments=None,
    **rank_overrides,
):
    """
    Build an Employee whose stored start step and first-upgrade date are the
    ones a save through the edit workflow would have produced.
    """
    entry_date = dt.date.fromisoformat(entry) if entry else None
    careers = careers or []
    rank = RankInfo(is_rank_based=True)
    if entry_date is not None:
        derived = derive_rank_info(
            entry_date, sum_periods(c.converted_period for c in careers)
        )
        rank.start_rank = derived.start_rank
        rank.first_upgrade_date = derived.first_upgrade_date
    for key, value in rank_overrides.items():
        setattr(rank, key, value)
    return Employee(
        id=employee_id,
        name=f"Employee {employee_id}",
        entry_date=entry_date,
        rank=rank,
        career_details=careers,
        assignments=assignments or [],
    )


@pytest.fixture
def make_employee():
    """Factory for Employee objects with consistent stored step figures."""
    return stored_employee


@pytest.fixture
def two_assignments_half_rate():
    """Entry 2020-01-01; second assignment from 2022-01-01 recognises the first at 50%."""
    return [
        Assignment(id="A1", start_date=dt.date(2020, 1, 1), department="Admin"),
        Assignment(
            id="A2",
            start_date=dt.date(2022, 1, 1),
            department="Finance",
            prior_career_rates={"A1": PriorCareerRate(rate=50, note="transfer")},
        ),
    ]


@pytest.fixture
def full_time_career():
    """Two years of prior career at 50%, full time: one recognised year."""
    return PriorCareerRecord(original_period=Period(2, 0, 0), recognition_rate=50, name="Clinic")


@pytest.fixture
def raw_legacy_record():
    """A stored record in the older nested shape."""
    return {
        "uniqueCode": "L-7",
        "personalInfo": {"name": "Kim"},
        "employment": {"entryDate": "2021-03-02"},
        "rank": {"startRank": "2", "firstUpgradeDate": "2022-03-02", "salaryType": "호봉제"},
        "careerDetails": [
            {
                "name": "Prior Org",
                "startDate": "2019-01-01",
                "endDate": "2019-12-31",
                "recognitionRate": "100%",
                "weeklyWorkingHours": 40,
            }
        ],
        "assignments": [
            {"assignmentDate": "2021-03-02", "dept": "Nursing"},
            {"assignmentDate": "2023-03-01", "newDept": "Ward B", "priorCareerRate": 80},
        ],
    }
