# # Play events: immutable input records, normalization, and the per-call working frame.

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from ..util import DOW_ORDER, MONTH_NAMES

log = logging.getLogger(__name__)

MEDIA_TYPES = ("movie", "episode", "track", "photo", "clip")

UNKNOWN_DEVICE = "Unknown"
UNKNOWN_RESOLUTION = "unknown"


@dataclasses.dataclass(frozen=True)
class PlayEvent:
    """One recorded playback for a single user within the analysis year.

    Timestamps are Unix seconds; ``duration`` is the played seconds and may be
    shorter than ``stopped - started`` when the stream was paused.
    """

    started: int
    stopped: int
    duration: float
    media_type: str

    # # Identity (season/album and show/artist ancestors)
    rating_key: Optional[int] = None
    parent_rating_key: Optional[int] = None
    grandparent_rating_key: Optional[int] = None

    # # Descriptive
    title: str = ""
    parent_title: str = ""
    grandparent_title: str = ""
    year: Optional[int] = None
    genres: Tuple[str, ...] = ()
    actors: Tuple[str, ...] = ()
    directors: Tuple[str, ...] = ()
    thumb: str = ""
    grandparent_thumb: str = ""
    media_index: Optional[int] = None
    parent_media_index: Optional[int] = None

    # # Playback context
    player: str = ""
    platform: str = ""
    transcode_decision: str = ""
    stream_video_resolution: str = ""

    user_id: Optional[int] = None


def is_well_formed(ev: PlayEvent) -> bool:
    try:
        duration = float(ev.duration)
        started = float(ev.started)
        stopped = float(ev.stopped)
    except (TypeError, ValueError):
        return False
    if not all(math.isfinite(v) for v in (duration, started, stopped)):
        return False
    return duration >= 0 and started <= stopped


def normalize_events(events: Iterable[PlayEvent]) -> List[PlayEvent]:
    """Drop malformed events, keeping the caller's order."""
    events = list(events)
    kept = [ev for ev in events if is_well_formed(ev)]
    dropped = len(events) - len(kept)
    if dropped:
        log.debug("Dropped %d malformed play event(s) of %d", dropped, len(events))
    return kept


_KEY_COLUMNS = ("rating_key", "parent_rating_key", "grandparent_rating_key", "media_index", "parent_media_index")


def events_frame(events: Sequence[PlayEvent], timezone: str = "UTC") -> pd.DataFrame:
    """Working table for one invocation, one row per event in input order.

    Adds ``seq`` (input position, the tie-break for rankings), ``minutes`` and
    the calendar columns derived from ``started`` in ``timezone``.
    """
    df = pd.DataFrame([dataclasses.asdict(ev) for ev in events])
    df.insert(0, "seq", range(len(df)))

    # # Nullable ids stay integers (a plain column would turn them into floats around None)
    for col in _KEY_COLUMNS:
        df[col] = pd.array([getattr(ev, col) for ev in events], dtype="Int64")

    df["duration"] = df["duration"].astype(float)
    df["minutes"] = df["duration"] / 60.0

    for col in ("player", "platform"):
        df[col] = df[col].fillna("").astype(str).str.strip().replace("", UNKNOWN_DEVICE)
    df["stream_video_resolution"] = (
        df["stream_video_resolution"].fillna("").astype(str).str.strip().replace("", UNKNOWN_RESOLUTION)
    )

    started_at = pd.to_datetime(df["started"], unit="s", utc=True).dt.tz_convert(timezone)
    df["started_at"] = started_at
    df["date"] = started_at.dt.date
    df["month_key"] = started_at.dt.strftime("%Y-%m")
    df["month_num"] = started_at.dt.month.astype(int)
    df["month_name"] = df["month_num"].map(lambda m: MONTH_NAMES[m - 1])
    # # pandas: Monday=0; shift to Sunday=0
    df["dow"] = ((started_at.dt.dayofweek + 1) % 7).astype(int)
    df["day_name"] = df["dow"].map(lambda d: DOW_ORDER[d])
    df["hour"] = started_at.dt.hour.astype(int)

    return df
