# # Optional enrichment block: per-user request statistics from the request service.

from __future__ import annotations

import dataclasses
from typing import Optional, Tuple


@dataclasses.dataclass(frozen=True)
class MonthCount:
    month: str  # # YYYY-MM
    count: int


@dataclasses.dataclass(frozen=True)
class GenreCount:
    genre: str
    count: int


@dataclasses.dataclass(frozen=True)
class TopRequest:
    title: str
    type: str
    status: Optional[int]
    requested_at: str
    tmdb_id: Optional[int] = None
    poster_path: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class RequestStats:
    user_id: Optional[int] = None
    total_requests: int = 0
    movie_requests: int = 0
    tv_requests: int = 0
    approved_requests: int = 0
    pending_requests: int = 0
    declined_requests: int = 0
    available_requests: int = 0

    # # Hours between request and approval (approved requests only)
    average_approval_time_hours: Optional[float] = None
    fastest_approval_time_hours: Optional[float] = None
    slowest_approval_time_hours: Optional[float] = None

    requests_by_month: Tuple[MonthCount, ...] = ()
    top_genres: Tuple[GenreCount, ...] = ()
    top_requests: Tuple[TopRequest, ...] = ()
