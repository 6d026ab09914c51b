import datetime as dt

from plex_wrapped.metrics.events import PlayEvent, events_frame, normalize_events

from factories import movie, play, ts


def test_normalize_drops_malformed_and_keeps_order() -> None:
    good_a = movie(1, ts(2024, 2, 1))
    good_b = movie(2, ts(2024, 1, 1))
    negative = PlayEvent(started=ts(2024, 1, 5), stopped=ts(2024, 1, 5) + 60, duration=-1, media_type="movie")
    backwards = PlayEvent(started=ts(2024, 1, 6), stopped=ts(2024, 1, 5), duration=60, media_type="movie")
    nan = PlayEvent(started=ts(2024, 1, 7), stopped=ts(2024, 1, 7), duration=float("nan"), media_type="movie")

    kept = normalize_events([good_a, negative, backwards, good_b, nan])

    assert kept == [good_a, good_b]


def test_normalize_accepts_zero_duration_and_instant_events() -> None:
    ev = PlayEvent(started=ts(2024, 1, 1), stopped=ts(2024, 1, 1), duration=0, media_type="clip")
    assert normalize_events([ev]) == [ev]


def test_frame_derives_calendar_columns_in_utc() -> None:
    # 2024-03-10 was a Sunday
    df = events_frame([play(ts(2024, 3, 10, 23, 30), 90)])
    row = df.iloc[0]

    assert row["seq"] == 0
    assert row["minutes"] == 1.5
    assert row["date"] == dt.date(2024, 3, 10)
    assert row["month_key"] == "2024-03"
    assert row["month_name"] == "March"
    assert row["day_name"] == "Sunday"
    assert row["dow"] == 0
    assert row["hour"] == 23


def test_frame_respects_timezone() -> None:
    df = events_frame([play(ts(2024, 1, 1, 2, 0))], timezone="America/New_York")
    row = df.iloc[0]

    assert row["date"] == dt.date(2023, 12, 31)
    assert row["hour"] == 21
    assert row["month_key"] == "2023-12"


def test_frame_fills_unknown_device_and_resolution() -> None:
    df = events_frame([
        play(ts(2024, 1, 1), player="", platform="  ", stream_video_resolution=""),
        play(ts(2024, 1, 2), player="Roku", platform="Roku", stream_video_resolution="1080"),
    ])

    assert df["player"].tolist() == ["Unknown", "Roku"]
    assert df["platform"].tolist() == ["Unknown", "Roku"]
    assert df["stream_video_resolution"].tolist() == ["unknown", "1080"]
