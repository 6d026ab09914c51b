# # Ranked top lists (titles, genres, people, devices), quality and monthly breakdowns.
#
# Every ranking is ordered by (metric desc, first_seen asc) where first_seen is the
# input position of the group's first event, so equal metrics keep encounter order.

from __future__ import annotations

import dataclasses
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ..config import TopLimits
from ..util import round_half_up, round_minutes, safe_isna


@dataclasses.dataclass(frozen=True)
class TopMovie:
    title: str
    year: Optional[int]
    plays: int
    duration_minutes: int
    thumb: str
    rating_key: int
    genres: Tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class TopShow:
    title: str
    plays: int
    episodes: int
    duration_minutes: int
    thumb: str
    rating_key: int
    genres: Tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class TopEpisode:
    title: str
    show: str
    season: Optional[int]
    episode: Optional[int]
    plays: int
    thumb: str


@dataclasses.dataclass(frozen=True)
class TopGenre:
    genre: str
    count: int
    minutes: int
    percentage: float


@dataclasses.dataclass(frozen=True)
class TopPerson:
    name: str
    count: int
    titles: Tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class DeviceStat:
    device: str
    platform: str
    plays: int
    minutes: int


@dataclasses.dataclass(frozen=True)
class PlatformStat:
    platform: str
    plays: int
    minutes: int


@dataclasses.dataclass(frozen=True)
class QualityStats:
    direct_play: int = 0
    direct_stream: int = 0
    transcode: int = 0
    # # (resolution, plays) in first-encounter order
    resolutions: Tuple[Tuple[str, int], ...] = ()


@dataclasses.dataclass(frozen=True)
class MonthlyStat:
    month: str
    month_name: str
    plays: int
    minutes: int


@dataclasses.dataclass(frozen=True)
class TopContent:
    top_movies: Tuple[TopMovie, ...] = ()
    top_shows: Tuple[TopShow, ...] = ()
    top_episodes: Tuple[TopEpisode, ...] = ()
    top_genres: Tuple[TopGenre, ...] = ()
    top_actors: Tuple[TopPerson, ...] = ()
    top_directors: Tuple[TopPerson, ...] = ()
    top_devices: Tuple[DeviceStat, ...] = ()
    top_platforms: Tuple[PlatformStat, ...] = ()
    quality_stats: QualityStats = dataclasses.field(default_factory=QualityStats)
    monthly_stats: Tuple[MonthlyStat, ...] = ()


def _opt_int(v: Any) -> Optional[int]:
    if v is None or safe_isna(v):
        return None
    return int(v)


def _rank(grouped: pd.DataFrame, metric: str, n: int) -> pd.DataFrame:
    # # Two stable passes == sort by (metric desc, first_seen asc)
    ordered = grouped.sort_values("first_seen", kind="stable")
    ordered = ordered.sort_values(metric, ascending=False, kind="stable")
    return ordered.head(max(int(n), 0))


def _group_plays(df: pd.DataFrame, key: Any) -> pd.DataFrame:
    return df.groupby(key, sort=False).agg(
        plays=("seq", "size"),
        seconds=("duration", "sum"),
        first_seen=("seq", "min"),
    )


def top_movies(df: pd.DataFrame, n: int) -> Tuple[TopMovie, ...]:
    movies = df[df["media_type"].eq("movie") & df["rating_key"].notna()]
    if movies.empty:
        return ()

    firsts = movies.drop_duplicates("rating_key").set_index("rating_key")
    out: List[TopMovie] = []
    for key, g in _rank(_group_plays(movies, "rating_key"), "plays", n).iterrows():
        rec = firsts.loc[key]
        out.append(TopMovie(
            title=rec["title"],
            year=_opt_int(rec["year"]),
            plays=int(g["plays"]),
            duration_minutes=round_minutes(g["seconds"] / 60),
            thumb=rec["thumb"],
            rating_key=int(key),
            genres=tuple(rec["genres"]),
        ))
    return tuple(out)


def top_shows(df: pd.DataFrame, n: int) -> Tuple[TopShow, ...]:
    episodes = df[df["media_type"].eq("episode") & df["grandparent_rating_key"].notna()]
    if episodes.empty:
        return ()

    grouped = _group_plays(episodes, "grandparent_rating_key")
    grouped["episodes"] = episodes.groupby("grandparent_rating_key", sort=False)["rating_key"].nunique()
    firsts = episodes.drop_duplicates("grandparent_rating_key").set_index("grandparent_rating_key")

    out: List[TopShow] = []
    for key, g in _rank(grouped, "plays", n).iterrows():
        rec = firsts.loc[key]
        out.append(TopShow(
            title=rec["grandparent_title"],
            plays=int(g["plays"]),
            episodes=int(g["episodes"]),
            duration_minutes=round_minutes(g["seconds"] / 60),
            thumb=rec["grandparent_thumb"],
            rating_key=int(key),
            genres=tuple(rec["genres"]),
        ))
    return tuple(out)


def top_episodes(df: pd.DataFrame, n: int) -> Tuple[TopEpisode, ...]:
    episodes = df[df["media_type"].eq("episode") & df["rating_key"].notna()]
    if episodes.empty:
        return ()

    firsts = episodes.drop_duplicates("rating_key").set_index("rating_key")
    out: List[TopEpisode] = []
    for key, g in _rank(_group_plays(episodes, "rating_key"), "plays", n).iterrows():
        rec = firsts.loc[key]
        out.append(TopEpisode(
            title=rec["title"],
            show=rec["grandparent_title"],
            season=_opt_int(rec["parent_media_index"]),
            episode=_opt_int(rec["media_index"]),
            plays=int(g["plays"]),
            thumb=rec["thumb"],
        ))
    return tuple(out)


def _explode_names(df: pd.DataFrame, column: str) -> pd.DataFrame:
    # # Empty tuples explode to NaN; blank names are missing metadata, not a bucket
    ex = df[["seq", "title", "minutes", column]].explode(column)
    ex = ex[ex[column].notna()].copy()
    ex[column] = ex[column].astype(str).str.strip()
    return ex[ex[column].ne("")]


def top_genres(df: pd.DataFrame, n: int) -> Tuple[TopGenre, ...]:
    """Genres by summed minutes; an event counts toward each of its genres."""
    ex = _explode_names(df, "genres")
    if ex.empty:
        return ()

    total_minutes = float(df["minutes"].sum())
    grouped = ex.groupby("genres", sort=False).agg(
        plays=("seq", "size"),
        minutes=("minutes", "sum"),
        first_seen=("seq", "min"),
    )

    out: List[TopGenre] = []
    for genre, g in _rank(grouped, "minutes", n).iterrows():
        pct = g["minutes"] / total_minutes * 100 if total_minutes > 0 else 0.0
        out.append(TopGenre(
            genre=str(genre),
            count=int(g["plays"]),
            minutes=round_minutes(g["minutes"]),
            percentage=round_half_up(pct, 1),
        ))
    return tuple(out)


def top_people(df: pd.DataFrame, column: str, n: int, max_titles: int = 5) -> Tuple[TopPerson, ...]:
    ex = _explode_names(df, column)
    if ex.empty:
        return ()

    titles: Dict[str, List[str]] = {}
    for name, title in zip(ex[column], ex["title"]):
        seen = titles.setdefault(name, [])
        if title and title not in seen and len(seen) < max_titles:
            seen.append(title)

    grouped = ex.groupby(column, sort=False).agg(plays=("seq", "size"), first_seen=("seq", "min"))
    return tuple(
        TopPerson(name=str(name), count=int(g["plays"]), titles=tuple(titles.get(name, ())))
        for name, g in _rank(grouped, "plays", n).iterrows()
    )


def top_devices(df: pd.DataFrame, n: int) -> Tuple[DeviceStat, ...]:
    grouped = _group_plays(df, ["player", "platform"])
    return tuple(
        DeviceStat(
            device=str(player),
            platform=str(platform),
            plays=int(g["plays"]),
            minutes=round_minutes(g["seconds"] / 60),
        )
        for (player, platform), g in _rank(grouped, "plays", n).iterrows()
    )


def top_platforms(df: pd.DataFrame, n: int) -> Tuple[PlatformStat, ...]:
    grouped = _group_plays(df, "platform")
    return tuple(
        PlatformStat(platform=str(platform), plays=int(g["plays"]), minutes=round_minutes(g["seconds"] / 60))
        for platform, g in _rank(grouped, "plays", n).iterrows()
    )


def quality_stats(df: pd.DataFrame) -> QualityStats:
    decision = df["transcode_decision"].fillna("").astype(str).str.strip().str.lower()
    transcode = int(decision.eq("transcode").sum())
    direct_stream = int(decision.eq("copy").sum())

    resolutions = df.groupby("stream_video_resolution", sort=False).size()
    return QualityStats(
        direct_play=int(len(df)) - transcode - direct_stream,
        direct_stream=direct_stream,
        transcode=transcode,
        resolutions=tuple((str(k), int(v)) for k, v in resolutions.items()),
    )


def monthly_stats(df: pd.DataFrame) -> Tuple[MonthlyStat, ...]:
    """Per ``YYYY-MM`` plays and minutes, chronological."""
    grouped = df.groupby("month_key", sort=True).agg(
        month_name=("month_name", "first"),
        plays=("seq", "size"),
        minutes=("minutes", "sum"),
    )
    return tuple(
        MonthlyStat(month=str(month), month_name=str(g["month_name"]), plays=int(g["plays"]), minutes=round_minutes(g["minutes"]))
        for month, g in grouped.iterrows()
    )


def compute_top_content(df: pd.DataFrame, limits: TopLimits) -> TopContent:
    return TopContent(
        top_movies=top_movies(df, limits.movies),
        top_shows=top_shows(df, limits.shows),
        top_episodes=top_episodes(df, limits.episodes),
        top_genres=top_genres(df, limits.genres),
        top_actors=top_people(df, "actors", limits.actors, limits.person_titles),
        top_directors=top_people(df, "directors", limits.directors, limits.person_titles),
        top_devices=top_devices(df, limits.devices),
        top_platforms=top_platforms(df, limits.platforms),
        quality_stats=quality_stats(df),
        monthly_stats=monthly_stats(df),
    )
