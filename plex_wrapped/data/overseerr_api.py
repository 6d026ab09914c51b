# # Minimal Overseerr API client + summarizing a user's requests into RequestStats.

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd
import requests

from ..metrics.enrichment import GenreCount, MonthCount, RequestStats, TopRequest
from ..util import norm_str

log = logging.getLogger(__name__)

# # Request status / media status codes
REQUEST_PENDING = 1
REQUEST_APPROVED = 2
REQUEST_DECLINED = 3
MEDIA_AVAILABLE = 5

TOP_GENRES = 5
TOP_REQUESTS = 10


@dataclass
class OverseerrConn:
    server_url: str
    api_key: str
    timeout_seconds: int = 25

    @property
    def base(self) -> str:
        return self.server_url.rstrip("/") + "/api/v1"


class OverseerrClient:
    def __init__(self, conn: OverseerrConn, session: Optional[requests.Session] = None):
        self.conn = conn
        self.session = session or requests.Session()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        r = self.session.get(
            self.conn.base + path,
            params=dict(params or {}),
            headers={"X-Api-Key": self.conn.api_key},
            timeout=self.conn.timeout_seconds,
        )
        r.raise_for_status()
        return r.json()

    def fetch_user_requests(self, user_id: int, take: int = 1000) -> List[Dict[str, Any]]:
        data = self._get(
            "/request",
            params={"take": take, "skip": 0, "filter": "all", "sort": "added", "requestedBy": user_id},
        )
        return list((data or {}).get("results") or [])

    def fetch_user_request_stats(self, user_id: int, year: Optional[int] = None) -> RequestStats:
        reqs = self.fetch_user_requests(user_id)
        if year is not None:
            reqs = filter_requests_to_year(reqs, year)
        return summarize_requests(reqs, user_id=user_id, year=year)


def _ts(v: Any) -> Optional[pd.Timestamp]:
    ts = pd.to_datetime(v, utc=True, errors="coerce")
    return None if pd.isna(ts) else ts


def filter_requests_to_year(reqs: Sequence[Mapping[str, Any]], year: int) -> List[Mapping[str, Any]]:
    lo = pd.Timestamp(f"{year}-01-01T00:00:00Z")
    hi = pd.Timestamp(f"{year}-12-31T23:59:59Z")
    out = []
    for r in reqs:
        created = _ts(r.get("createdAt"))
        if created is not None and lo <= created <= hi:
            out.append(r)
    return out


def _approval_hours(r: Mapping[str, Any]) -> Optional[float]:
    created = _ts(r.get("createdAt"))
    updated = _ts(r.get("updatedAt"))
    if created is None or updated is None:
        return None
    hours = (updated - created).total_seconds() / 3600
    return hours if hours > 0 else None


def _genres(r: Mapping[str, Any]) -> List[str]:
    details = r.get("movie") or r.get("tv") or {}
    out = []
    for g in details.get("genres") or []:
        name = norm_str(g.get("name") if isinstance(g, dict) else g)
        if name:
            out.append(name)
    return out


def _top_request(r: Mapping[str, Any]) -> TopRequest:
    media = r.get("media") or {}
    title = (
        r.get("title")
        or (r.get("movie") or {}).get("title")
        or (r.get("tv") or {}).get("name")
        or "Unknown"
    )
    tmdb_id = media.get("tmdbId")
    return TopRequest(
        title=str(title),
        type=norm_str(r.get("type")),
        status=media.get("status"),
        requested_at=norm_str(r.get("createdAt")),
        tmdb_id=int(tmdb_id) if tmdb_id is not None else None,
        poster_path=r.get("posterPath"),
    )


def summarize_requests(
    reqs: Sequence[Mapping[str, Any]],
    user_id: Optional[int] = None,
    year: Optional[int] = None,
) -> RequestStats:
    reqs = list(reqs)
    status = [r.get("status") for r in reqs]
    media_status = [(r.get("media") or {}).get("status") for r in reqs]

    approval = [h for h in (_approval_hours(r) for r, s in zip(reqs, status) if s == REQUEST_APPROVED) if h is not None]

    by_month: Dict[str, int] = {}
    if year is not None:
        for r in reqs:
            month = norm_str(r.get("createdAt"))[:7]
            if month:
                by_month[month] = by_month.get(month, 0) + 1

    genre_counts: Dict[str, int] = {}
    for r in reqs:
        for g in _genres(r):
            genre_counts[g] = genre_counts.get(g, 0) + 1
    # # sorted() is stable: equal counts keep first-encounter order
    top_genres = sorted(genre_counts.items(), key=lambda kv: -kv[1])[:TOP_GENRES]

    return RequestStats(
        user_id=user_id,
        total_requests=len(reqs),
        movie_requests=sum(1 for r in reqs if r.get("type") == "movie"),
        tv_requests=sum(1 for r in reqs if r.get("type") == "tv"),
        approved_requests=status.count(REQUEST_APPROVED),
        pending_requests=status.count(REQUEST_PENDING),
        declined_requests=status.count(REQUEST_DECLINED),
        available_requests=media_status.count(MEDIA_AVAILABLE),
        average_approval_time_hours=sum(approval) / len(approval) if approval else None,
        fastest_approval_time_hours=min(approval) if approval else None,
        slowest_approval_time_hours=max(approval) if approval else None,
        requests_by_month=tuple(MonthCount(month=m, count=c) for m, c in by_month.items()),
        top_genres=tuple(GenreCount(genre=g, count=c) for g, c in top_genres),
        top_requests=tuple(_top_request(r) for r in reqs[:TOP_REQUESTS]),
    )


def request_stats_from_dict(data: Mapping[str, Any]) -> RequestStats:
    """Build RequestStats from an already-summarized camelCase payload."""
    def opt_float(key: str) -> Optional[float]:
        v = data.get(key)
        return None if v is None else float(v)

    return RequestStats(
        user_id=data.get("userId"),
        total_requests=int(data.get("totalRequests") or 0),
        movie_requests=int(data.get("movieRequests") or 0),
        tv_requests=int(data.get("tvRequests") or 0),
        approved_requests=int(data.get("approvedRequests") or 0),
        pending_requests=int(data.get("pendingRequests") or 0),
        declined_requests=int(data.get("declinedRequests") or 0),
        available_requests=int(data.get("availableRequests") or 0),
        average_approval_time_hours=opt_float("averageApprovalTimeHours"),
        fastest_approval_time_hours=opt_float("fastestApprovalTimeHours"),
        slowest_approval_time_hours=opt_float("slowestApprovalTimeHours"),
        requests_by_month=tuple(MonthCount(str(m["month"]), int(m["count"])) for m in data.get("requestsByMonth") or []),
        top_genres=tuple(GenreCount(str(g["genre"]), int(g["count"])) for g in data.get("topGenres") or []),
        top_requests=tuple(
            TopRequest(
                title=str(t.get("title") or "Unknown"),
                type=norm_str(t.get("type")),
                status=t.get("status"),
                requested_at=norm_str(t.get("requestedAt")),
                tmdb_id=t.get("tmdbId"),
                poster_path=t.get("posterPath"),
            )
            for t in data.get("topRequests") or []
        ),
    )


def load_request_stats_file(path: str | Path, user_id: Optional[int] = None, year: Optional[int] = None) -> RequestStats:
    """Read enrichment from JSON: a summarized stats object or raw request results."""
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))

    if isinstance(data, dict) and "totalRequests" in data:
        return request_stats_from_dict(data)

    reqs = data.get("results") if isinstance(data, dict) else data
    if not isinstance(reqs, list):
        raise ValueError(f"Unrecognized request stats file: {p}")
    if year is not None:
        reqs = filter_requests_to_year(reqs, year)
    return summarize_requests(reqs, user_id=user_id, year=year)
