"""Game configuration."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigInvalid


class GameConfig(BaseModel):
    """Parameters of one game, fixed once the game is created.

    Durations are in seconds, the entry fee is in the smallest currency unit.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_players: int = Field(default=3, ge=3)
    max_players: int = 15
    commit_duration: int = Field(default=120, gt=0)
    reveal_duration: int = Field(default=120, gt=0)
    entry_fee: int = Field(default=10**16, ge=0)
    service_fee_percent: int = Field(default=5, ge=0, le=20)
    auto_start_delay: int = Field(default=60, gt=0)

    @model_validator(mode="after")
    def _check_player_bounds(self) -> "GameConfig":
        if self.max_players <= self.min_players:
            raise ValueError(
                f"max_players ({self.max_players}) must be greater than "
                f"min_players ({self.min_players})"
            )
        return self


def build_config(data: dict[str, Any]) -> GameConfig:
    """Build a GameConfig from a mapping (e.g. the YAML defaults section).

    Raises:
        ConfigInvalid: If any parameter is missing a constraint.
    """
    try:
        return GameConfig(**data)
    except ValidationError as e:
        raise ConfigInvalid(str(e)) from e


def validate_config(config: GameConfig) -> GameConfig:
    """Re-run validation on an existing config.

    A GameConfig built through ``model_construct`` skips validation, so the
    registry checks every config it receives.
    """
    return build_config(config.model_dump())
