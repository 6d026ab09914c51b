from __future__ import annotations

from typing import Iterable, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .console import ConsoleOptions, make_console
from .metrics.events import PlayEvent, events_frame
from .metrics.report_builder import WrappedReport
from .util import format_hour_12h, format_minutes


def _safe_str(v: object) -> str:
    if v is None:
        return ""
    return str(v)


def _table(title: str, columns: Sequence[tuple]) -> Table:
    t = Table(title=title, box=box.SIMPLE_HEAVY, show_lines=False, expand=False, padding=(0, 1))
    for name, justify, max_width in columns:
        t.add_column(name, justify=justify, max_width=max_width, no_wrap=True, overflow="ellipsis")
    return t


def render_debug_sample(
    events: Sequence[PlayEvent],
    *,
    width: int | None = None,
    no_color: bool = False,
    timezone: str = "UTC",
    sample_rows: int = 25,
) -> None:
    console = make_console(ConsoleOptions(width=width, no_color=no_color))

    if not events:
        console.print(Panel.fit("[warn]No play events loaded[/warn]", border_style="warn"))
        return

    df = events_frame(events, timezone)
    console.print(
        Panel.fit(
            f"[k]Debug Sample[/k]\n"
            f"[info]Events[/info]: {len(df):,}  "
            f"[info]Users[/info]: {df['user_id'].nunique():,}  "
            f"[info]Items[/info]: {df['rating_key'].nunique():,}",
            border_style="info",
        )
    )

    # Column widths tuned for a ~120-col terminal; truncation via ellipsis.
    t = _table(
        "Sample events",
        [
            ("Started", "left", 19),
            ("Type", "left", 8),
            ("Title", "left", 34),
            ("Show", "left", 22),
            ("Min", "right", 7),
            ("Player", "left", 16),
            ("Decision", "left", 12),
            ("Res", "left", 7),
        ],
    )
    for r in df.head(sample_rows).itertuples(index=False):
        cells = [
            str(r.started_at)[:19],
            r.media_type,
            r.title,
            r.grandparent_title,
            f"{r.minutes:.1f}",
            r.player,
            r.transcode_decision,
            r.stream_video_resolution,
        ]
        t.add_row(*[escape(_safe_str(c)) for c in cells])
    console.print(t)


def _top_rows(t: Table, rows: Iterable[Sequence[object]]) -> Table:
    empty = True
    for row in rows:
        t.add_row(*[escape(_safe_str(v)) for v in row])
        empty = False
    if empty:
        t.add_row(*(["—"] * len(t.columns)))
    return t


def render_report_summary(report: WrappedReport, console: Console | None = None) -> None:
    console = console or make_console()

    if report.is_empty:
        console.print(Panel.fit(f"[warn]No activity for user {report.user_id} in {report.year}[/warn]", border_style="warn"))
        return

    console.print(
        Panel.fit(
            f"[k]Plex Wrapped {report.year}[/k]  user {report.user_id}\n"
            f"[info]Watch time[/info]: {format_minutes(report.total_watch_time_minutes)}  "
            f"[info]Plays[/info]: {report.total_plays:,}  "
            f"[info]Movies[/info]: {report.total_movies:,} ({report.unique_movies:,} unique)  "
            f"[info]Episodes[/info]: {report.total_tv_episodes:,} ({report.unique_shows:,} shows)\n"
            f"[info]Days active[/info]: {report.days_active}  "
            f"[info]Longest streak[/info]: {report.longest_streak_days}d  "
            f"[info]Peak[/info]: {report.most_active_month} / {report.most_active_day_of_week} / "
            f"{format_hour_12h(report.most_active_hour)}",
            border_style="info",
        )
    )

    console.print(_top_rows(
        _table("Top movies", [("Title", "left", 40), ("Year", "right", 6), ("Plays", "right", 6), ("Min", "right", 7)]),
        ((m.title, m.year or "", m.plays, m.duration_minutes) for m in report.top_movies),
    ))
    console.print(_top_rows(
        _table("Top shows", [("Title", "left", 40), ("Eps", "right", 5), ("Plays", "right", 6), ("Min", "right", 7)]),
        ((s.title, s.episodes, s.plays, s.duration_minutes) for s in report.top_shows),
    ))
    console.print(_top_rows(
        _table("Top genres", [("Genre", "left", 24), ("Min", "right", 7), ("%", "right", 6)]),
        ((g.genre, g.minutes, f"{g.percentage:.1f}") for g in report.top_genres),
    ))
    console.print(_top_rows(
        _table("Devices", [("Player", "left", 28), ("Platform", "left", 16), ("Plays", "right", 6)]),
        ((d.device, d.platform, d.plays) for d in report.top_devices),
    ))

    if report.longest_binge_show:
        console.print(f"[info]Longest binge[/info]: {escape(report.longest_binge_show)} ({format_minutes(report.longest_binge_minutes)})")
    for fact in report.fun_facts:
        console.print(f"[fact]•[/fact] {escape(fact)}")
    for badge in report.badges:
        console.print(f"{badge.icon} [k]{escape(badge.name)}[/k] [dim]{escape(badge.description)}[/dim]")
