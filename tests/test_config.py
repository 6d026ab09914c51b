import json

from plex_wrapped.config import Config, EngineSettings, RuleThresholds, TopLimits, load_config, load_engine_settings


def test_missing_file_gives_defaults(tmp_path) -> None:
    cfg = load_config(tmp_path / "config.json")

    assert cfg == Config()
    assert cfg.engine == EngineSettings()
    assert cfg.engine.binge_gap_seconds == 3600
    assert cfg.engine.thresholds.marathon_badge_minutes == 240
    assert not cfg.overseerr_enabled


def test_nested_engine_settings_and_unknown_keys(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "user_id": 12,
        "year": 2024,
        "timezone": "Europe/Berlin",
        "mystery": True,
        "engine": {
            "binge_gap_seconds": 1800,
            "limits": {"movies": 3, "bogus": 1},
            "thresholds": {"curator_badge_requests": 10},
        },
    }))

    cfg = load_config(path)

    assert cfg.user_id == 12
    assert cfg.year == 2024
    assert not hasattr(cfg, "mystery")
    assert cfg.engine.binge_gap_seconds == 1800
    assert cfg.engine.limits == TopLimits(movies=3)
    assert cfg.engine.thresholds == RuleThresholds(curator_badge_requests=10)


def test_engine_settings_take_run_timezone() -> None:
    cfg = Config(timezone="Asia/Tokyo", engine=load_engine_settings({"timezone": "UTC", "strict": True}))

    settings = cfg.engine_settings()

    assert settings.timezone == "Asia/Tokyo"
    assert settings.strict


def test_overseerr_needs_url_key_and_toggle() -> None:
    assert not Config(enable_overseerr=True, overseerr_url="http://o").overseerr_enabled
    assert Config(enable_overseerr=True, overseerr_url="http://o", overseerr_api_key="k").overseerr_enabled
