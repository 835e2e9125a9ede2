# hobong/engines/__init__.py
"""
Per-employee and batch evaluation of step figures.
"""

from .batch import compute_batch_locally, serve_rank_batch
from .cache import RankCache
from .dynamic_rank import (
    RankOutcome,
    get_current_rank,
    get_dynamic_rank_info,
    get_next_upgrade_date,
    is_rank_based,
)
from .remote import RemoteRankClient
from .service import RankService

__all__ = [
    "RankCache",
    "RankOutcome",
    "RankService",
    "RemoteRankClient",
    "compute_batch_locally",
    "get_current_rank",
    "get_dynamic_rank_info",
    "get_next_upgrade_date",
    "is_rank_based",
    "serve_rank_batch",
]
