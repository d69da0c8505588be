"""
Application configuration loaded from environment variables.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AtlasSettings(BaseSettings):
    """Runtime configuration for the causal map engine."""

    model_config = SettingsConfigDict(env_prefix="ATLAS_", env_file=".env", extra="ignore")

    data_dir: Path = Field(default=Path("data/graph"), description="Directory holding the static graph dataset.")
    scenario_max_depth: int = Field(default=3, ge=1, description="Default hop bound for scenario propagation.")
    scenario_edge_order: Literal["dataset", "edge_id"] = Field(
        default="dataset",
        description="Order in which causal edges are expanded (authored order or lexical edge id).",
    )
    risk_free_rate: float = Field(default=0.035, description="Annual risk-free rate used by the Sharpe ratio.")
    layout_seed: int = Field(default=42, description="Seed for initial layout positions and 3D jitter.")
    log_level: str = Field(default="INFO", description="Root log level.")


@lru_cache
def get_settings() -> AtlasSettings:
    """Return cached settings instance."""

    return AtlasSettings()
