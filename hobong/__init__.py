"""Tenure and pay-step (호봉) calculation engine."""

from hobong.calculators.rank import (
    calculate_current_rank,
    calculate_first_upgrade_date,
    calculate_next_upgrade_date,
)
from hobong.engines.dynamic_rank import get_dynamic_rank_info
from hobong.engines.service import RankService

__version__ = "1.0.0"

__all__ = [
    "calculate_current_rank",
    "calculate_first_upgrade_date",
    "calculate_next_upgrade_date",
    "get_dynamic_rank_info",
    "RankService",
]
