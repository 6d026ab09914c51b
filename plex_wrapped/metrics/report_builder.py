# # Build a per-user wrapped report: normalize events, run every aggregator, apply rules.

from __future__ import annotations

import dataclasses
import datetime as dt
import logging
import time
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import pandas as pd

from ..config import EngineSettings
from .basic import BasicStats, compute_basic_stats
from .enrichment import RequestStats
from .events import PlayEvent, events_frame, normalize_events
from .fun import FunStats, compute_fun_stats
from .patterns import ViewingPatterns, compute_viewing_patterns
from .rankings import (
    DeviceStat,
    MonthlyStat,
    PlatformStat,
    QualityStats,
    TopContent,
    TopEpisode,
    TopGenre,
    TopMovie,
    TopPerson,
    TopShow,
    compute_top_content,
)
from .rules import Badge, RuleInputs, generate_badges, generate_fun_facts

log = logging.getLogger(__name__)

EnrichmentProvider = Callable[[], Optional[RequestStats]]


@dataclasses.dataclass(frozen=True)
class WrappedReport:
    user_id: Optional[int]
    year: int

    # # Core totals
    total_watch_time_minutes: int = 0
    total_plays: int = 0
    total_movies: int = 0
    total_tv_episodes: int = 0
    unique_movies: int = 0
    unique_shows: int = 0
    days_active: int = 0

    # # Viewing patterns
    most_active_month: str = "January"
    most_active_day_of_week: str = "Saturday"
    most_active_hour: int = 20
    longest_streak_days: int = 0
    longest_binge_minutes: int = 0
    longest_binge_show: Optional[str] = None

    # # Top lists
    top_movies: Tuple[TopMovie, ...] = ()
    top_shows: Tuple[TopShow, ...] = ()
    top_episodes: Tuple[TopEpisode, ...] = ()
    top_genres: Tuple[TopGenre, ...] = ()
    top_actors: Tuple[TopPerson, ...] = ()
    top_directors: Tuple[TopPerson, ...] = ()

    # # Devices / quality
    top_devices: Tuple[DeviceStat, ...] = ()
    top_platforms: Tuple[PlatformStat, ...] = ()
    quality_stats: QualityStats = dataclasses.field(default_factory=QualityStats)

    # # Distributions
    monthly_stats: Tuple[MonthlyStat, ...] = ()

    # # Fun
    rewatches: int = 0
    first_watch_title: Optional[str] = None
    first_watch_date: Optional[dt.datetime] = None
    last_watch_title: Optional[str] = None
    last_watch_date: Optional[dt.datetime] = None
    most_memorable_day_date: Optional[dt.date] = None
    most_memorable_day_minutes: int = 0

    fun_facts: Tuple[str, ...] = ()
    badges: Tuple[Badge, ...] = ()

    # # Enrichment (absent when the request service is disabled or failed)
    request_stats: Optional[RequestStats] = None

    @property
    def is_empty(self) -> bool:
        return self.total_plays == 0


def empty_report(user_id: Optional[int], year: int) -> WrappedReport:
    return WrappedReport(user_id=user_id, year=int(year))


def resolve_enrichment(
    enrichment: Optional[RequestStats] = None,
    provider: Optional[EnrichmentProvider] = None,
) -> Optional[RequestStats]:
    """Return the enrichment block, or None when it is unavailable.

    A provided value wins over the provider. Provider failures are logged and
    swallowed: a report without request stats is still a complete report.
    """
    if enrichment is not None or provider is None:
        return enrichment
    try:
        return provider()
    except Exception as exc:
        log.warning("Request stats unavailable, continuing without them: %s", exc)
        return None


def _check_contract(df: pd.DataFrame, year: int) -> None:
    users = df["user_id"].dropna().unique()
    if len(users) > 1:
        raise ValueError(f"Events span {len(users)} users; expected a single user")
    outside = int((df["started_at"].dt.year != int(year)).sum())
    if outside:
        raise ValueError(f"{outside} event(s) started outside {year}")


def _fields(obj: Any) -> Dict[str, Any]:
    # # Shallow: keep nested dataclasses (dataclasses.asdict would flatten them to dicts)
    return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}


def build_wrapped_report(
    events: Iterable[PlayEvent],
    *,
    user_id: Optional[int],
    year: int,
    enrichment: Optional[RequestStats] = None,
    enrichment_provider: Optional[EnrichmentProvider] = None,
    settings: Optional[EngineSettings] = None,
) -> WrappedReport:
    """Compute the wrapped report for one user's events within one year.

    ``events`` must already be filtered to the user and the year; their order
    does not matter except as the tie-break for equal ranking metrics. With no
    well-formed events the empty report is returned and nothing else runs.
    """
    settings = settings or EngineSettings()
    started = time.perf_counter()
    log.info("Calculating stats for user %s for year %s", user_id, year)

    events = normalize_events(events)
    if not events:
        log.warning("No history found for user %s in year %s", user_id, year)
        return empty_report(user_id, year)

    df = events_frame(events, settings.timezone)
    if settings.strict:
        _check_contract(df, year)

    basic: BasicStats = compute_basic_stats(df)
    patterns: ViewingPatterns = compute_viewing_patterns(df, settings)
    content: TopContent = compute_top_content(df, settings.limits)
    fun: FunStats = compute_fun_stats(df)

    request_stats = resolve_enrichment(enrichment, enrichment_provider)

    inputs = RuleInputs(basic=basic, patterns=patterns, thresholds=settings.thresholds, requests=request_stats)

    report = WrappedReport(
        user_id=user_id,
        year=int(year),
        **_fields(basic),
        **_fields(patterns),
        **_fields(content),
        **_fields(fun),
        fun_facts=generate_fun_facts(inputs),
        badges=generate_badges(inputs),
        request_stats=request_stats,
    )

    elapsed_ms = (time.perf_counter() - started) * 1000
    log.info("Stats calculation completed in %.0fms for user %s", elapsed_ms, user_id)
    return report


# # Serialization

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _jsonable(v: Any) -> Any:
    if isinstance(v, QualityStats):
        return {
            "directPlay": v.direct_play,
            "directStream": v.direct_stream,
            "transcode": v.transcode,
            "resolutions": dict(v.resolutions),
        }
    if dataclasses.is_dataclass(v):
        return {_camel(f.name): _jsonable(getattr(v, f.name)) for f in dataclasses.fields(v)}
    if isinstance(v, (dt.datetime, dt.date)):
        return v.isoformat()
    if isinstance(v, (tuple, list)):
        return [_jsonable(x) for x in v]
    return v


def report_to_dict(report: WrappedReport) -> Dict[str, Any]:
    """JSON-ready dict with camelCase keys and ISO-8601 dates."""
    return _jsonable(report)
