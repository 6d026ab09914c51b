# # Scalar totals: plays, watch time, unique titles, active days.

from __future__ import annotations

import dataclasses

import pandas as pd

from ..util import round_minutes


@dataclasses.dataclass(frozen=True)
class BasicStats:
    total_watch_time_minutes: int = 0
    total_plays: int = 0
    total_movies: int = 0
    total_tv_episodes: int = 0
    unique_movies: int = 0
    unique_shows: int = 0
    days_active: int = 0


def compute_basic_stats(df: pd.DataFrame) -> BasicStats:
    movies = df[df["media_type"].eq("movie")]
    episodes = df[df["media_type"].eq("episode")]

    return BasicStats(
        total_watch_time_minutes=round_minutes(df["minutes"].sum()),
        total_plays=int(len(df)),
        total_movies=int(len(movies)),
        total_tv_episodes=int(len(episodes)),
        unique_movies=int(movies["rating_key"].nunique()),
        unique_shows=int(episodes["grandparent_rating_key"].nunique()),
        days_active=int(df["date"].nunique()),
    )
