import pytest

from plex_wrapped.data.tautulli_api import TautulliClient, TautulliConn, TautulliError

from factories import ts


class FakeResponse:
    def __init__(self, body: dict):
        self.body = body

    def raise_for_status(self) -> None:
        pass

    def json(self) -> dict:
        return self.body


class FakeSession:
    def __init__(self, pages: list):
        self.pages = list(pages)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, dict(params or {}), timeout))
        return FakeResponse(self.pages.pop(0))


def _page(rows: list, total: int) -> dict:
    return {"response": {"result": "success", "data": {"recordsFiltered": total, "data": rows}}}


def _client(session: FakeSession) -> TautulliClient:
    return TautulliClient(TautulliConn("http://tautulli:8181/", "secret", timeout_seconds=5), session=session)


def test_history_pages_until_records_filtered_and_filters_by_year() -> None:
    session = FakeSession([
        _page([{"date": ts(2025, 1, 2), "id": 1}, {"date": ts(2024, 12, 31, 23, 59, 59), "id": 2}], 3),
        _page([{"date": ts(2023, 12, 31, 23, 59, 59), "id": 3}], 3),
    ])

    rows = _client(session).fetch_history_for_year(user_id=9, year=2024, page_size=2)

    assert [r["id"] for r in rows] == [2]
    assert len(session.calls) == 2
    url, params, timeout = session.calls[1]
    assert url == "http://tautulli:8181/api/v2"
    assert params["apikey"] == "secret"
    assert params["cmd"] == "get_history"
    assert params["user_id"] == 9
    assert params["start"] == 2
    assert params["length"] == 2
    assert timeout == 5


def test_history_stops_on_short_page() -> None:
    session = FakeSession([_page([{"date": ts(2024, 6, 1)}], 50)])

    rows = _client(session).fetch_history_for_year(user_id=9, year=2024, page_size=2)

    assert len(rows) == 1
    assert len(session.calls) == 1


def test_rows_without_a_date_are_dropped() -> None:
    session = FakeSession([_page([{"date": None}, {"date": "x"}, {"date": str(ts(2024, 3, 1))}], 3)])

    rows = _client(session).fetch_history_for_year(user_id=1, year=2024, page_size=10)

    assert len(rows) == 1


def test_failed_result_raises() -> None:
    session = FakeSession([{"response": {"result": "error", "message": "Invalid apikey"}}])

    with pytest.raises(TautulliError, match="Invalid apikey"):
        _client(session).fetch_users()


def test_fetch_users() -> None:
    session = FakeSession([_page([{"user_id": 1, "friendly_name": "alice"}], 1)])

    users = _client(session).fetch_users()

    assert users == [{"user_id": 1, "friendly_name": "alice"}]
    assert session.calls[0][1]["cmd"] == "get_users_table"


def test_history_year_follows_report_timezone() -> None:
    # 2024-12-31 20:00 in Chicago is 2025-01-01 02:00 UTC
    late_local = ts(2025, 1, 1, 2)
    early_utc = ts(2024, 1, 1, 3)
    rows = [{"date": late_local, "id": 1}, {"date": early_utc, "id": 2}]

    chicago = _client(FakeSession([_page(rows, 2)])).fetch_history_for_year(1, 2024, page_size=10, timezone="America/Chicago")
    utc = _client(FakeSession([_page(rows, 2)])).fetch_history_for_year(1, 2024, page_size=10)

    assert [r["id"] for r in chicago] == [1]
    assert [r["id"] for r in utc] == [2]
