from .rank_table import build_rank_frame, status_counts, summarize_rank_distribution

__all__ = ["build_rank_frame", "status_counts", "summarize_rank_distribution"]
