# # Orchestrates: load play history (file or Tautulli), wire the optional request-stats source,
# # build the wrapped report, write JSON, print a summary.

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .config import Config
from .data.history import filter_to_user, filter_to_year, load_history_file, parse_history_records
from .data.overseerr_api import OverseerrClient, OverseerrConn, load_request_stats_file
from .data.tautulli_api import TautulliClient, TautulliConn
from .debug_views import render_report_summary
from .metrics.events import PlayEvent
from .metrics.report_builder import EnrichmentProvider, WrappedReport, build_wrapped_report
from .output.report_writer import ReportWriter
from .util import norm_str

log = logging.getLogger(__name__)


def resolve_user_id(cfg: Config, client: TautulliClient) -> int:
    """cfg.user_id, or the Tautulli user whose friendly name or username matches cfg.user_name."""
    if cfg.user_id is not None:
        return cfg.user_id
    name = norm_str(cfg.user_name).lower()
    if not name:
        raise ValueError("user_id or user_name is required to fetch history from Tautulli")

    for user in client.fetch_users():
        names = {norm_str(user.get("friendly_name")).lower(), norm_str(user.get("username")).lower()}
        if name in names and user.get("user_id") is not None:
            log.info("Resolved Tautulli user %r to id %s", cfg.user_name, user["user_id"])
            return int(user["user_id"])
    raise ValueError(f"No Tautulli user named {cfg.user_name!r}")


def load_events(cfg: Config, tautulli: Optional[TautulliClient] = None) -> List[PlayEvent]:
    """Events for cfg.user_id within cfg.year, from the configured history source.

    With Tautulli and only a user name, cfg.user_id is filled in from the users table.
    """
    if cfg.history_file:
        events = load_history_file(cfg.history_file)
    elif tautulli is not None or (cfg.tautulli_url and cfg.tautulli_api_key):
        client = tautulli or TautulliClient(
            TautulliConn(
                server_url=cfg.tautulli_url,
                api_key=cfg.tautulli_api_key,
                timeout_seconds=cfg.http_timeout_seconds,
            )
        )
        cfg.user_id = resolve_user_id(cfg, client)
        records = client.fetch_history_for_year(cfg.user_id, cfg.year, cfg.page_size, timezone=cfg.timezone)
        events = parse_history_records(records)
    else:
        raise ValueError("No history source: set history_file, or tautulli_url and tautulli_api_key")

    events = filter_to_user(events, cfg.user_id)
    return filter_to_year(events, cfg.year, cfg.timezone)


def make_enrichment_provider(cfg: Config) -> Optional[EnrichmentProvider]:
    if cfg.enrichment_file:
        path = cfg.enrichment_file
        return lambda: load_request_stats_file(path, user_id=cfg.user_id, year=cfg.year)

    if cfg.overseerr_enabled and cfg.user_id is not None:
        client = OverseerrClient(
            OverseerrConn(
                server_url=cfg.overseerr_url,
                api_key=cfg.overseerr_api_key,
                timeout_seconds=cfg.http_timeout_seconds,
            )
        )
        user_id = cfg.user_id
        return lambda: client.fetch_user_request_stats(user_id, cfg.year)

    log.info("Request stats integration is disabled")
    return None


def run(cfg: Config, *, console: Console | None = None, show_summary: bool = True) -> WrappedReport:
    events = load_events(cfg)

    report = build_wrapped_report(
        events,
        user_id=cfg.user_id,
        year=cfg.year,
        enrichment_provider=make_enrichment_provider(cfg),
        settings=cfg.engine_settings(),
    )

    user_out = Path(cfg.out_dir) / _safe_name(cfg.user_name or str(cfg.user_id or ""))
    path = ReportWriter(root=user_out).write_report(report)
    log.info("Wrote %s", path)

    if show_summary:
        render_report_summary(report, console)
    return report


def _safe_name(s: str) -> str:
    out = "".join(ch for ch in s if ch.isalnum() or ch in ("-", "_")).strip()
    return out or "user"
