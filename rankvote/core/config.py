from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./rankvote.db",
        alias="DATABASE_URL",
    )

    tournament_win_points: int = Field(default=3, alias="TOURNAMENT_WIN_POINTS")
    tournament_draw_points: int = Field(default=1, alias="TOURNAMENT_DRAW_POINTS")
    tournament_loss_points: int = Field(default=0, alias="TOURNAMENT_LOSS_POINTS")
    tournament_swiss_min_rounds: int = Field(default=1, alias="TOURNAMENT_SWISS_MIN_ROUNDS")
    tournament_swiss_max_rounds: int = Field(default=12, alias="TOURNAMENT_SWISS_MAX_ROUNDS")
    tournament_bracket_size: int = Field(default=16, alias="TOURNAMENT_BRACKET_SIZE")
    tournament_grand_final_reset: bool = Field(
        default=True,
        alias="TOURNAMENT_GRAND_FINAL_RESET",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
