# # Fun stats: rewatches, first/last watch, most memorable day.

from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Optional

import pandas as pd

from ..util import round_minutes


@dataclasses.dataclass(frozen=True)
class FunStats:
    rewatches: int = 0
    first_watch_title: Optional[str] = None
    first_watch_date: Optional[dt.datetime] = None
    last_watch_title: Optional[str] = None
    last_watch_date: Optional[dt.datetime] = None
    most_memorable_day_date: Optional[dt.date] = None
    most_memorable_day_minutes: int = 0


def compute_fun_stats(df: pd.DataFrame) -> FunStats:
    # # Rewatches: distinct items played more than once
    plays = df[df["rating_key"].notna()].groupby("rating_key").size()
    rewatches = int((plays > 1).sum())

    # # Stable sort: ties on started keep input order at both ends
    ordered = df.sort_values("started", kind="stable")
    first = ordered.iloc[0]
    last = ordered.iloc[-1]

    # # Most minutes in a single day; sorted index so the earliest date wins ties
    by_day = df.groupby("date", sort=True)["minutes"].sum()
    best_day = by_day.idxmax()

    return FunStats(
        rewatches=rewatches,
        first_watch_title=first["title"] or None,
        first_watch_date=first["started_at"].to_pydatetime(),
        last_watch_title=last["title"] or None,
        last_watch_date=last["started_at"].to_pydatetime(),
        most_memorable_day_date=best_day,
        most_memorable_day_minutes=round_minutes(by_day.loc[best_day]),
    )
