# # Load Tautulli history records (API payloads or JSON exports) into PlayEvents.

from __future__ import annotations

import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from ..metrics.events import MEDIA_TYPES, PlayEvent
from ..util import norm_str, safe_isna

log = logging.getLogger(__name__)

# # Older/newer Tautulli versions disagree on a few key names
DURATION_KEYS = ("duration", "play_duration")
TRANSCODE_KEYS = ("transcode_decision", "video_decision")


def _first(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for k in keys:
        v = raw.get(k)
        if v is not None and v != "":
            return v
    return None


def _float(v: Any) -> Optional[float]:
    if v is None or safe_isna(v):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _int(v: Any) -> Optional[int]:
    f = _float(v)
    return None if f is None else int(f)


def _names(v: Any) -> Tuple[str, ...]:
    # # Lists of strings, lists of {"tag": ...} dicts, or a comma-separated string
    if v is None:
        return ()
    if isinstance(v, str):
        items: Iterable[Any] = v.split(",")
    elif isinstance(v, (list, tuple)):
        items = v
    else:
        return ()

    out = []
    for item in items:
        name = norm_str(item.get("tag") if isinstance(item, dict) else item)
        if name:
            out.append(name)
    return tuple(out)


def parse_history_record(raw: Mapping[str, Any]) -> Optional[PlayEvent]:
    """Map one history record to a PlayEvent; None when it cannot be used."""
    started = _int(raw.get("started"))
    stopped = _int(raw.get("stopped"))
    duration = _float(_first(raw, DURATION_KEYS))
    media_type = norm_str(raw.get("media_type")).lower()

    if started is None or stopped is None or duration is None:
        return None
    if media_type not in MEDIA_TYPES:
        return None

    return PlayEvent(
        started=started,
        stopped=stopped,
        duration=duration,
        media_type=media_type,
        rating_key=_int(raw.get("rating_key")),
        parent_rating_key=_int(raw.get("parent_rating_key")),
        grandparent_rating_key=_int(raw.get("grandparent_rating_key")),
        title=norm_str(raw.get("title") or raw.get("full_title")),
        parent_title=norm_str(raw.get("parent_title")),
        grandparent_title=norm_str(raw.get("grandparent_title")),
        year=_int(raw.get("year")),
        genres=_names(raw.get("genres")),
        actors=_names(raw.get("actors")),
        directors=_names(raw.get("directors")),
        thumb=norm_str(raw.get("thumb")),
        grandparent_thumb=norm_str(raw.get("grandparent_thumb")),
        media_index=_int(raw.get("media_index")),
        parent_media_index=_int(raw.get("parent_media_index")),
        player=norm_str(raw.get("player")),
        platform=norm_str(raw.get("platform")),
        transcode_decision=norm_str(_first(raw, TRANSCODE_KEYS)).lower(),
        stream_video_resolution=norm_str(raw.get("stream_video_resolution")),
        user_id=_int(raw.get("user_id")),
    )


def parse_history_records(records: Iterable[Mapping[str, Any]]) -> List[PlayEvent]:
    events: List[PlayEvent] = []
    skipped = 0
    for raw in records:
        ev = parse_history_record(raw) if isinstance(raw, Mapping) else None
        if ev is None:
            skipped += 1
            continue
        events.append(ev)
    if skipped:
        log.debug("Skipped %d unusable history record(s)", skipped)
    return events


def _unwrap(payload: Any) -> List[Any]:
    # # Accept: [...] | {"data": [...]} | {"response": {"data": {"data": [...]}}}
    if isinstance(payload, dict) and "response" in payload:
        payload = (payload.get("response") or {}).get("data")
    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list):
        raise ValueError("History file does not contain a list of history records")
    return payload


def load_history_file(path: str | Path) -> List[PlayEvent]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"History file not found: {p}")

    records = _unwrap(json.loads(p.read_text(encoding="utf-8")))
    events = parse_history_records(records)
    log.info("Loaded %d play event(s) from %s", len(events), p)
    return events


def year_bounds(year: int, timezone: str = "UTC") -> Tuple[float, float]:
    """[start, end) of the calendar year in ``timezone`` as Unix seconds."""
    start = pd.Timestamp(dt.datetime(year, 1, 1), tz=timezone)
    end = pd.Timestamp(dt.datetime(year + 1, 1, 1), tz=timezone)
    return start.timestamp(), end.timestamp()


def filter_to_year(events: Iterable[PlayEvent], year: int, timezone: str = "UTC") -> List[PlayEvent]:
    start, end = year_bounds(year, timezone)
    return [ev for ev in events if start <= ev.started < end]


def filter_to_user(events: Iterable[PlayEvent], user_id: Optional[int]) -> List[PlayEvent]:
    if user_id is None:
        return list(events)
    return [ev for ev in events if ev.user_id is None or ev.user_id == user_id]
