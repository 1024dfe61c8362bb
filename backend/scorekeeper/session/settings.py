"""Scorekeeper runtime configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ScorekeeperSettings(BaseSettings):
    model_config = {"env_prefix": "SCOREKEEPER_"}

    snapshot_dir: str = Field(default="backend/data/snapshots", min_length=1)
    # file name without suffix; one snapshot holds players and the active game
    snapshot_name: str = Field(default="scorekeeper", min_length=1)
    log_dir: str = Field(default="backend/logs/scorekeeper", min_length=1)
