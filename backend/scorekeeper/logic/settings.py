"""Centralized game settings for Binokel - all configurable scoring rules."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from scorekeeper.logic.exceptions import UnsupportedSettingsError

PLAYERS_PER_TEAM = 2
NUM_TEAMS = 2


class GameSettings(BaseModel):
    """
    Centralized configuration for Binokel scoring rules.

    All fields have default values matching the standard four-player game.
    """

    model_config = ConfigDict(frozen=True)

    # --- Game Structure ---
    players_per_team: int = PLAYERS_PER_TEAM
    default_target_score: int = 1500

    # --- Bidding ---
    default_bid_value: int = 150
    failed_bid_multiplier: int = 2  # bid team loses this many times the bid
    abandoned_bid_multiplier: int = 1  # penalty when the bidder gives up

    # --- Tricks ---
    trick_pool_total: int = 240  # card points available across all tricks
    enforce_trick_pool: bool = True  # caller-side admission check before preview


def validate_settings(settings: GameSettings) -> None:
    """Validate that all settings values are supported by the rule engine.

    Raises UnsupportedSettingsError for any value the engine cannot honor.
    """
    if settings.players_per_team != PLAYERS_PER_TEAM:
        raise UnsupportedSettingsError(
            f"players_per_team must be {PLAYERS_PER_TEAM}, got {settings.players_per_team}",
        )
    positive_fields = {
        "default_target_score": settings.default_target_score,
        "default_bid_value": settings.default_bid_value,
        "failed_bid_multiplier": settings.failed_bid_multiplier,
        "abandoned_bid_multiplier": settings.abandoned_bid_multiplier,
        "trick_pool_total": settings.trick_pool_total,
    }
    for name, value in positive_fields.items():
        if value <= 0:
            raise UnsupportedSettingsError(f"{name} must be positive, got {value}")
