# hobong/config/models.py
"""
Pydantic models for validating the engine configuration loaded from YAML
(e.g., hobong.yaml).
"""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from hobong.constants import (
    MAX_RANK,
    MIN_RANK,
    UPGRADE_INTERVAL_YEARS,
)

logger = logging.getLogger(__name__)


class RankRules(BaseModel):
    """Step progression rules."""

    min_rank: int = Field(MIN_RANK, ge=1, description="Lowest valid step")
    max_rank: int = Field(MAX_RANK, ge=1, description="Highest valid step")
    upgrade_interval_years: int = Field(
        UPGRADE_INTERVAL_YEARS, ge=1, description="Years between step increases"
    )
    snap_upgrade_to_month_start: bool = Field(
        False,
        description="Move computed first-upgrade dates to the 1st of the following month",
    )
    max_prior_career_years: int = Field(
        50, ge=0, description="Largest recognised prior career accepted, in years"
    )

    @model_validator(mode="after")
    def check_bounds(self) -> "RankRules":
        if self.min_rank > self.max_rank:
            raise ValueError(
                f"min_rank ({self.min_rank}) cannot exceed max_rank ({self.max_rank})"
            )
        return self


class RemoteSettings(BaseModel):
    """Where batch calculations run and how the remote service is called."""

    mode: Literal["local", "remote"] = "local"
    base_url: Optional[str] = Field(None, description="Base URL of the calculation service")
    endpoint: str = "calculate-rank-batch"
    api_key: Optional[str] = Field(None, description="Bearer token for the service")
    timeout_seconds: float = Field(30.0, gt=0.0)
    max_attempts: int = Field(3, ge=1)
    backoff_min_seconds: float = Field(0.5, ge=0.0)
    backoff_max_seconds: float = Field(3.0, ge=0.0)

    @model_validator(mode="after")
    def check_remote(self) -> "RemoteSettings":
        if self.mode == "remote" and not self.base_url:
            raise ValueError("base_url must be set when mode is 'remote'")
        if self.backoff_min_seconds > self.backoff_max_seconds:
            raise ValueError("backoff_min_seconds cannot exceed backoff_max_seconds")
        return self

    @property
    def url(self) -> str:
        return f"{(self.base_url or '').rstrip('/')}/{self.endpoint.lstrip('/')}"


class EngineConfig(BaseModel):
    """Top-level configuration."""

    rank: RankRules = Field(default_factory=RankRules)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    cache_enabled: bool = True


__all__ = ["RankRules", "RemoteSettings", "EngineConfig"]
