# # Config loader: JSON -> dataclasses (run config + engine settings)

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, Optional


@dataclasses.dataclass(frozen=True)
class TopLimits:
    movies: int = 10
    shows: int = 10
    episodes: int = 5
    genres: int = 10
    actors: int = 5
    directors: int = 5
    devices: int = 5
    platforms: int = 5
    person_titles: int = 5


@dataclasses.dataclass(frozen=True)
class RuleThresholds:
    # # Binge
    marathon_fact_minutes: float = 180
    marathon_badge_minutes: float = 240

    # # Hour bands (inclusive)
    night_owl_start_hour: int = 22
    night_owl_end_hour: int = 4
    early_bird_start_hour: int = 5
    early_bird_end_hour: int = 8

    # # Activity
    dedicated_days: int = 300
    streak_badge_days: int = 30
    tv_episodes: int = 500
    movies: int = 100

    # # Requests (enrichment)
    curator_fact_requests: int = 20
    curator_badge_requests: int = 50
    vip_approval_hours: float = 2


@dataclasses.dataclass(frozen=True)
class EngineSettings:
    timezone: str = "UTC"
    binge_gap_seconds: int = 3600
    # # Fail fast on multi-user / out-of-year input
    strict: bool = False
    limits: TopLimits = dataclasses.field(default_factory=TopLimits)
    thresholds: RuleThresholds = dataclasses.field(default_factory=RuleThresholds)


@dataclasses.dataclass
class Config:
    # # Tautulli
    tautulli_url: str = ""
    tautulli_api_key: str = ""
    page_size: int = 1000

    # # Overseerr
    overseerr_url: str = ""
    overseerr_api_key: str = ""
    enable_overseerr: bool = False

    # # Data
    user_id: Optional[int] = None
    user_name: str = ""
    year: int = 2025
    timezone: str = "UTC"
    history_file: str = ""
    enrichment_file: str = ""

    # # Output
    out_dir: str = "./out"

    # # Network
    http_timeout_seconds: int = 25

    # # Engine
    engine: EngineSettings = dataclasses.field(default_factory=EngineSettings)

    @property
    def overseerr_enabled(self) -> bool:
        return bool(self.enable_overseerr and self.overseerr_url and self.overseerr_api_key)

    def engine_settings(self) -> EngineSettings:
        # # The run-level timezone wins so history filtering and analysis agree
        return dataclasses.replace(self.engine, timezone=self.timezone)


def _known(cls: type, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in dataclasses.fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def load_engine_settings(data: Dict[str, Any]) -> EngineSettings:
    data = dict(data or {})
    limits = TopLimits(**_known(TopLimits, data.pop("limits", None) or {}))
    thresholds = RuleThresholds(**_known(RuleThresholds, data.pop("thresholds", None) or {}))
    return EngineSettings(limits=limits, thresholds=thresholds, **_known(EngineSettings, data))


def load_config(path: Path) -> Config:
    cfg = Config()
    if not path.exists():
        return cfg

    data = json.loads(path.read_text(encoding="utf-8"))
    for k, v in _known(Config, data).items():
        if k == "engine":
            cfg.engine = load_engine_settings(v)
        else:
            setattr(cfg, k, v)
    return cfg
