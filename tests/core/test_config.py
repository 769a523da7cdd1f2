from __future__ import annotations

import pytest

from rankvote.core.config import Settings, get_settings
from rankvote.tournament.types import EngineConfig


def test_settings_read_tournament_overrides_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TOURNAMENT_WIN_POINTS", "2")
    monkeypatch.setenv("TOURNAMENT_BRACKET_SIZE", "8")
    monkeypatch.setenv("TOURNAMENT_GRAND_FINAL_RESET", "false")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        config = EngineConfig.from_settings(settings)
    finally:
        get_settings.cache_clear()

    assert settings.tournament_win_points == 2
    assert config.win_points == 2
    assert config.bracket_size == 8
    assert config.grand_final_reset is False
    assert config.swiss_max_rounds == 12


def test_engine_config_defaults_match_settings_defaults() -> None:
    settings = Settings(_env_file=None)

    assert EngineConfig.from_settings(settings) == EngineConfig()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"win_points": 1, "draw_points": 1},
        {"draw_points": 0, "loss_points": 1},
        {"bracket_size": 12},
        {"bracket_size": 1},
        {"swiss_min_rounds": 0},
        {"swiss_min_rounds": 5, "swiss_max_rounds": 4},
    ],
)
def test_engine_config_rejects_invalid_values(kwargs: dict[str, int]) -> None:
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)
