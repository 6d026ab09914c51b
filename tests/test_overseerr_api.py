import json

from plex_wrapped.data.overseerr_api import (
    OverseerrClient,
    OverseerrConn,
    filter_requests_to_year,
    load_request_stats_file,
    summarize_requests,
)


def _req(created: str, *, status: int = 2, updated: str = None, kind: str = "movie", media_status: int = 5, genres=(), title="T") -> dict:
    return {
        "type": kind,
        "status": status,
        "createdAt": created,
        "updatedAt": updated or created,
        "media": {"status": media_status, "tmdbId": 100},
        "movie" if kind == "movie" else "tv": {"genres": [{"name": g} for g in genres], "title": title, "name": title},
    }


def _requests() -> list:
    return [
        _req("2024-01-10T10:00:00Z", updated="2024-01-10T11:00:00Z", genres=("Action", "Drama"), title="A"),
        _req("2024-01-20T10:00:00Z", updated="2024-01-20T13:00:00Z", genres=("Drama",), title="B"),
        _req("2024-03-01T10:00:00Z", status=1, kind="tv", media_status=3, genres=("Comedy",), title="C"),
        _req("2024-04-01T10:00:00Z", status=3, media_status=1, title="D"),
    ]


def test_summarize_counts_and_approval_times() -> None:
    stats = summarize_requests(_requests(), user_id=4, year=2024)

    assert stats.user_id == 4
    assert stats.total_requests == 4
    assert (stats.movie_requests, stats.tv_requests) == (3, 1)
    assert (stats.approved_requests, stats.pending_requests, stats.declined_requests) == (2, 1, 1)
    assert stats.available_requests == 2
    assert stats.average_approval_time_hours == 2.0
    assert stats.fastest_approval_time_hours == 1.0
    assert stats.slowest_approval_time_hours == 3.0


def test_summarize_months_genres_and_top_requests() -> None:
    stats = summarize_requests(_requests(), year=2024)

    assert [(m.month, m.count) for m in stats.requests_by_month] == [("2024-01", 2), ("2024-03", 1), ("2024-04", 1)]
    assert [(g.genre, g.count) for g in stats.top_genres] == [("Drama", 2), ("Action", 1), ("Comedy", 1)]
    assert [r.title for r in stats.top_requests] == ["A", "B", "C", "D"]
    assert stats.top_requests[0].tmdb_id == 100


def test_summarize_without_year_skips_months_and_empty_input() -> None:
    assert summarize_requests(_requests()).requests_by_month == ()

    empty = summarize_requests([])
    assert empty.total_requests == 0
    assert empty.average_approval_time_hours is None


def test_filter_requests_to_year() -> None:
    reqs = [_req("2023-12-31T23:59:59Z"), _req("2024-06-01T00:00:00Z"), {"createdAt": None}]

    assert [r["createdAt"] for r in filter_requests_to_year(reqs, 2024)] == ["2024-06-01T00:00:00Z"]


def test_load_request_stats_file_summary_and_raw(tmp_path) -> None:
    summary = tmp_path / "summary.json"
    summary.write_text(json.dumps({
        "totalRequests": 25,
        "averageApprovalTimeHours": 1.5,
        "topGenres": [{"genre": "Drama", "count": 4}],
    }))
    stats = load_request_stats_file(summary)
    assert stats.total_requests == 25
    assert stats.average_approval_time_hours == 1.5
    assert stats.top_genres[0].genre == "Drama"

    raw = tmp_path / "raw.json"
    raw.write_text(json.dumps({"results": _requests() + [_req("2023-05-01T00:00:00Z")]}))
    stats = load_request_stats_file(raw, user_id=4, year=2024)
    assert stats.total_requests == 4
    assert stats.user_id == 4


def test_client_sends_api_key_header() -> None:
    seen = {}

    class Resp:
        def raise_for_status(self) -> None:
            pass

        def json(self) -> dict:
            return {"results": _requests()}

    class Session:
        def get(self, url, params=None, headers=None, timeout=None):
            seen.update(url=url, params=params, headers=headers, timeout=timeout)
            return Resp()

    client = OverseerrClient(OverseerrConn("http://overseerr:5055", "k3y", 7), session=Session())
    stats = client.fetch_user_request_stats(4, year=2024)

    assert stats.total_requests == 4
    assert seen["url"] == "http://overseerr:5055/api/v1/request"
    assert seen["headers"] == {"X-Api-Key": "k3y"}
    assert seen["params"]["requestedBy"] == 4
    assert seen["timeout"] == 7
