# # Minimal Tautulli API v2 client for users and per-user play history.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .history import year_bounds

log = logging.getLogger(__name__)


class TautulliError(RuntimeError):
    pass


@dataclass
class TautulliConn:
    server_url: str
    api_key: str
    timeout_seconds: int = 25

    @property
    def base(self) -> str:
        return self.server_url.rstrip("/") + "/api/v2"


class TautulliClient:
    def __init__(self, conn: TautulliConn, session: Optional[requests.Session] = None):
        self.conn = conn
        self.session = session or requests.Session()

    def _call(self, cmd: str, **params: Any) -> Any:
        query: Dict[str, Any] = {"apikey": self.conn.api_key, "cmd": cmd}
        query.update(params)
        r = self.session.get(self.conn.base, params=query, timeout=self.conn.timeout_seconds)
        r.raise_for_status()

        body = (r.json() or {}).get("response") or {}
        if body.get("result") != "success":
            raise TautulliError(body.get("message") or f"Tautulli API call failed: {cmd}")
        return body.get("data")

    def fetch_users(self) -> List[Dict[str, Any]]:
        data = self._call("get_users_table", length=1000, order_column="friendly_name", order_dir="asc")
        return list((data or {}).get("data") or [])

    def fetch_history_page(self, user_id: int, start: int, length: int) -> Dict[str, Any]:
        return self._call(
            "get_history",
            user_id=user_id,
            start=start,
            length=length,
            order_column="date",
            order_dir="desc",
        ) or {}

    def fetch_history_for_year(
        self, user_id: int, year: int, page_size: int = 1000, timezone: str = "UTC"
    ) -> List[Dict[str, Any]]:
        # # Server-side date filters are unreliable: page through everything, filter on "date" here
        # # against the calendar year in the report timezone
        year_start, year_end = year_bounds(year, timezone)

        out: List[Dict[str, Any]] = []
        start = 0
        while True:
            page = self.fetch_history_page(user_id, start=start, length=page_size)
            rows = list(page.get("data") or [])
            out.extend(r for r in rows if _in_range(r.get("date"), year_start, year_end))
            start += page_size

            log.debug("History page: %d row(s), %d kept so far for user %s", len(rows), len(out), user_id)
            if len(rows) < page_size or start >= int(page.get("recordsFiltered") or 0):
                break

        log.info("Fetched %d history record(s) for user %s in %s", len(out), user_id, year)
        return out


def _in_range(ts: Any, lo: float, hi: float) -> bool:
    try:
        v = int(ts)
    except (TypeError, ValueError):
        return False
    return lo <= v < hi
