# # Shared helpers: rounding, duration formatting, safe string normalization, calendar orders.

from __future__ import annotations

import math
from typing import Any

import pandas as pd


def safe_isna(v: Any) -> bool:
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        return False


def norm_str(v: Any) -> str:
    # # Robust against pandas NaN / float values
    if v is None:
        return ""
    if safe_isna(v):
        return ""
    return str(v).strip()


def round_half_up(value: float, ndigits: int = 0) -> float:
    # # Half away from zero for positives (builtin round() is banker's rounding)
    factor = 10 ** ndigits
    return math.floor(float(value) * factor + 0.5) / factor


def round_minutes(value: float) -> int:
    return int(round_half_up(value))


def format_duration_dhms(seconds: float) -> str:
    if seconds is None or safe_isna(seconds):
        seconds = 0.0

    total = int(round(float(seconds)))
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{days}d {hours:02}h {minutes:02}m {secs:02}s"


def format_minutes(minutes: float) -> str:
    return format_duration_dhms(float(minutes) * 60)


def format_hour_12h(hour: int) -> str:
    h = int(hour) % 24
    ampm = "AM" if h < 12 else "PM"
    h12 = 12 if (h % 12) == 0 else (h % 12)
    return f"{h12} {ampm}"


# # Canonical orders; index 0 wins activity-peak ties
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
DOW_ORDER = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
