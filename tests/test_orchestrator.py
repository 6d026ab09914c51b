import json

import pytest

from plex_wrapped import cli
from plex_wrapped.config import Config
from plex_wrapped.orchestrator import load_events, make_enrichment_provider, run

from factories import ts


def _history(tmp_path, records: list):
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"data": records}))
    return path


def _record(started: int, **kw) -> dict:
    rec = {
        "started": started,
        "stopped": started + 3600,
        "duration": 3600,
        "media_type": "movie",
        "rating_key": 1,
        "title": "Heat",
        "user_id": 5,
    }
    rec.update(kw)
    return rec


def test_load_events_filters_user_and_year(tmp_path) -> None:
    path = _history(tmp_path, [
        _record(ts(2024, 3, 1)),
        _record(ts(2024, 3, 2), user_id=6),
        _record(ts(2023, 3, 1)),
    ])

    events = load_events(Config(history_file=str(path), user_id=5, year=2024))

    assert [ev.started for ev in events] == [ts(2024, 3, 1)]


def test_load_events_needs_a_source() -> None:
    with pytest.raises(ValueError):
        load_events(Config())
    with pytest.raises(ValueError):
        load_events(Config(tautulli_url="http://t", tautulli_api_key="k"))


def test_enrichment_provider_from_file(tmp_path) -> None:
    path = tmp_path / "requests.json"
    path.write_text(json.dumps({"totalRequests": 21}))

    provider = make_enrichment_provider(Config(enrichment_file=str(path)))

    assert provider().total_requests == 21
    assert make_enrichment_provider(Config()) is None


def test_run_writes_report(tmp_path) -> None:
    history = _history(tmp_path, [_record(ts(2024, 3, 1, 22)), _record(ts(2024, 3, 2, 22))])
    cfg = Config(history_file=str(history), user_id=5, user_name="ann/ie", year=2024, out_dir=str(tmp_path / "out"))

    report = run(cfg, show_summary=False)

    out = tmp_path / "out" / "annie" / "wrapped_2024.json"
    data = json.loads(out.read_text(encoding="utf-8"))
    assert report.total_plays == 2
    assert data["totalPlays"] == 2
    assert data["userId"] == 5
    assert data["mostActiveHour"] == 22


def test_run_with_no_events_writes_empty_report(tmp_path) -> None:
    history = _history(tmp_path, [])
    cfg = Config(history_file=str(history), user_id=5, year=2024, out_dir=str(tmp_path / "out"))

    report = run(cfg, show_summary=False)

    assert report.is_empty
    data = json.loads((tmp_path / "out" / "5" / "wrapped_2024.json").read_text(encoding="utf-8"))
    assert data["totalPlays"] == 0
    assert data["topMovies"] == []


def test_cli_main(tmp_path) -> None:
    history = _history(tmp_path, [_record(ts(2024, 7, 4, 21))])
    out = tmp_path / "out"

    cli.main([
        "--config", str(tmp_path / "none.json"),
        "--history-file", str(history),
        "--user-id", "5",
        "--user-name", "sam",
        "--year", "2024",
        "--out", str(out),
        "--quiet",
    ])

    assert (out / "sam" / "wrapped_2024.json").exists()


def test_cli_reports_bad_input_as_exit(tmp_path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--config", str(tmp_path / "none.json"), "--history-file", str(tmp_path / "missing.json"), "--quiet"])

    assert "History file not found" in str(exc.value)


class StubTautulli:
    def __init__(self, users: list, history: list):
        self.users = users
        self.history = history
        self.calls = []

    def fetch_users(self) -> list:
        return self.users

    def fetch_history_for_year(self, user_id, year, page_size=1000, timezone="UTC") -> list:
        self.calls.append((user_id, year, timezone))
        return self.history


def test_tautulli_user_resolved_by_name_and_local_year_kept() -> None:
    # Dec 31 20:00 in Chicago, already 2025 in UTC
    record = _record(ts(2025, 1, 1, 2), user_id=8)
    client = StubTautulli([{"user_id": 3, "friendly_name": "bob"}, {"user_id": 8, "friendly_name": "Ann", "username": "ann99"}], [record])
    cfg = Config(user_name="ann99", year=2024, timezone="America/Chicago")

    events = load_events(cfg, tautulli=client)

    assert cfg.user_id == 8
    assert client.calls == [(8, 2024, "America/Chicago")]
    assert len(events) == 1


def test_unknown_tautulli_user_name_is_an_error() -> None:
    client = StubTautulli([{"user_id": 3, "friendly_name": "bob"}], [])

    with pytest.raises(ValueError, match="No Tautulli user"):
        load_events(Config(user_name="carol", year=2024), tautulli=client)
