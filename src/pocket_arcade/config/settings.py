"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
The engines never read these directly; hosts turn them into the frozen
engine configs with ``runner_config()`` / ``snake_config()``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pocket_arcade.games.runner import RunnerConfig
from pocket_arcade.games.snake import SnakeConfig


class RunnerSettings(BaseModel):
    """Runner world geometry and physics."""

    # World (portrait phone screen)
    width: int = Field(default=360, gt=0)
    height: int = Field(default=640, gt=0)
    ground_height: int = Field(default=120, gt=0)

    # Player sprite box
    player_x: float = 56
    player_width: int = Field(default=92, gt=0)
    player_height: int = Field(default=148, gt=0)

    # Physics (per tick)
    gravity: float = Field(default=0.62, gt=0.0)
    jump_velocity: float = Field(default=-16.1, lt=0.0)
    base_speed: float = Field(default=4.4, gt=0.0)

    @model_validator(mode="after")
    def _ground_fits(self) -> "RunnerSettings":
        if self.ground_height >= self.height:
            raise ValueError("ground_height must be smaller than height")
        return self


class SnakeSettings(BaseModel):
    """Snake grid and food timing."""

    width: int = Field(default=20, ge=2)
    height: int = Field(default=20, ge=2)

    # Shrink food lifetime in ticks
    shrink_ttl_min: int = Field(default=22, ge=1)
    shrink_ttl_max: int = Field(default=36, ge=1)

    @model_validator(mode="after")
    def _ttl_range(self) -> "SnakeSettings":
        if self.shrink_ttl_min > self.shrink_ttl_max:
            raise ValueError("shrink_ttl_min must not exceed shrink_ttl_max")
        return self


class SessionSettings(BaseModel):
    """Host loop timing."""

    runner_tick_ms: float = Field(default=1000.0 / 60.0, gt=0.0)  # ~16.67 ms
    snake_tick_ms: float = Field(default=140.0, gt=0.0)

    # Caps catch-up after a long frame
    max_steps_per_update: int = Field(default=8, ge=1)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="POCKET_ARCADE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False

    # Headless demo defaults
    default_game: Literal["runner", "snake"] = "runner"
    seed: int | None = None
    max_ticks: int = Field(default=20_000, gt=0)

    # Leaderboard
    max_score: int = Field(default=1_000_000, gt=0)
    top_limit: int = Field(default=10, gt=0)

    # Nested settings
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    snake: SnakeSettings = Field(default_factory=SnakeSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

    def runner_config(self) -> RunnerConfig:
        """Frozen engine config for the runner."""
        return RunnerConfig(**self.runner.model_dump())

    def snake_config(self) -> SnakeConfig:
        """Frozen engine config for the snake."""
        return SnakeConfig(**self.snake.model_dump())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
