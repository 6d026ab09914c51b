# # Temporal patterns: activity peaks, consecutive-day streaks, binge sessions.

from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from ..config import EngineSettings
from ..util import DOW_ORDER, MONTH_NAMES, round_minutes


@dataclasses.dataclass(frozen=True)
class BingeSession:
    show_key: int
    show: str
    episodes: int
    minutes: float
    started: int
    stopped: int

    @property
    def rounded_minutes(self) -> int:
        return round_minutes(self.minutes)


@dataclasses.dataclass(frozen=True)
class ViewingPatterns:
    most_active_month: str = "January"
    most_active_day_of_week: str = "Saturday"
    most_active_hour: int = 20
    longest_streak_days: int = 0
    longest_binge_minutes: int = 0
    longest_binge_show: Optional[str] = None


def _first_peak(counts: pd.Series, order: Iterable[int]) -> int:
    # # idxmax returns the first label holding the max, i.e. the lowest calendar index
    return int(counts.reindex(list(order), fill_value=0).idxmax())


def activity_peaks(df: pd.DataFrame) -> Tuple[str, str, int]:
    """Busiest month name, weekday name and hour by play count."""
    month = _first_peak(df.groupby("month_num").size(), range(1, 13))
    dow = _first_peak(df.groupby("dow").size(), range(7))
    hour = _first_peak(df.groupby("hour").size(), range(24))
    return MONTH_NAMES[month - 1], DOW_ORDER[dow], hour


def longest_streak(dates: Iterable[dt.date]) -> int:
    days = sorted(set(dates))
    if not days:
        return 0

    best = run = 1
    for prev, cur in zip(days, days[1:]):
        run = run + 1 if (cur - prev).days == 1 else 1
        best = max(best, run)
    return best


def _close_session(show_key: int, rows: list) -> BingeSession:
    return BingeSession(
        show_key=int(show_key),
        show=rows[-1].grandparent_title,
        episodes=len(rows),
        minutes=float(sum(r.minutes for r in rows)),
        started=int(rows[0].started),
        stopped=int(rows[-1].stopped),
    )


def detect_binge_sessions(df: pd.DataFrame, max_gap_seconds: int = 3600) -> List[BingeSession]:
    """Split each show's episode plays into sessions.

    Shows are visited in first-encounter order and their episodes by
    ``started``. A gap (next ``started`` minus previous ``stopped``) above
    ``max_gap_seconds`` closes the running session; a gap equal to it does not.
    Episodes without a show key cannot be attributed and are skipped.
    """
    episodes = df[df["media_type"].eq("episode") & df["grandparent_rating_key"].notna()]
    sessions: List[BingeSession] = []

    for show_key, grp in episodes.groupby("grandparent_rating_key", sort=False):
        ordered = grp.sort_values("started", kind="stable")
        run: list = []
        for row in ordered.itertuples(index=False):
            if run and row.started - run[-1].stopped > max_gap_seconds:
                sessions.append(_close_session(show_key, run))
                run = []
            run.append(row)
        if run:
            sessions.append(_close_session(show_key, run))

    return sessions


def longest_binge(sessions: Iterable[BingeSession]) -> Optional[BingeSession]:
    best: Optional[BingeSession] = None
    for s in sessions:
        if best is None or s.minutes > best.minutes:
            best = s
    return best


def compute_viewing_patterns(df: pd.DataFrame, settings: EngineSettings) -> ViewingPatterns:
    month, dow, hour = activity_peaks(df)
    best = longest_binge(detect_binge_sessions(df, settings.binge_gap_seconds))

    return ViewingPatterns(
        most_active_month=month,
        most_active_day_of_week=dow,
        most_active_hour=hour,
        longest_streak_days=longest_streak(df["date"]),
        longest_binge_minutes=best.rounded_minutes if best else 0,
        longest_binge_show=best.show if best else None,
    )
