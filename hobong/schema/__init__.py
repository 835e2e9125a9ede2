from .employee import Assignment, Employee, PriorCareerRate, PriorCareerRecord, RankInfo, SalaryType
from .migration import employee_to_dict, normalize_employee

__all__ = [
    "Assignment",
    "Employee",
    "PriorCareerRate",
    "PriorCareerRecord",
    "RankInfo",
    "SalaryType",
    "employee_to_dict",
    "normalize_employee",
]
