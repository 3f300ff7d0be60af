from __future__ import annotations

import json

from shaihulud.session import HighScore, HighScoreStore, SessionState, state_dir


def test_state_dir_honours_env_override(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("SHAIHULUD_STATE_DIR", str(tmp_path))
    assert state_dir() == tmp_path
    assert HighScoreStore().path == tmp_path / "highscores.json"


def test_missing_file_loads_empty(tmp_path) -> None:
    assert HighScoreStore(tmp_path / "nope.json").load() == []


def test_corrupt_file_loads_empty(tmp_path) -> None:
    p = tmp_path / "scores.json"
    p.write_text("{not json", encoding="utf-8")
    assert HighScoreStore(p).load() == []
    p.write_text(json.dumps({"score": 5}), encoding="utf-8")
    assert HighScoreStore(p).load() == []


def test_bad_entries_are_dropped_and_table_sorted(tmp_path) -> None:
    p = tmp_path / "scores.json"
    p.write_text(json.dumps([
        {"score": 100, "loop": 1, "initials": "AAA"},
        {"score": "lots"},
        {"score": True, "loop": 1},
        "junk",
        {"score": 400, "loop": 0, "initials": ""},
    ]), encoding="utf-8")
    assert HighScoreStore(p).load() == [HighScore(400, 1, "---"), HighScore(100, 1, "AAA")]


def test_save_then_load_through_session(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("SHAIHULUD_STATE_DIR", str(tmp_path / "nested"))
    store = HighScoreStore()
    s = SessionState(score=1200, loop=3)
    s.save_high_scores(store, "ABC")

    fresh = SessionState()
    fresh.load_high_scores(store)
    assert fresh.high_scores == [HighScore(1200, 3, "ABC")]
    assert fresh.high_score == 1200
    assert not list((tmp_path / "nested").glob("*.tmp"))


def test_save_keeps_only_top_five(tmp_path) -> None:
    store = HighScoreStore(tmp_path / "scores.json")
    store.save([HighScore(10 * i, 1) for i in range(8, 0, -1)])
    assert [h.score for h in store.load()] == [80, 70, 60, 50, 40]


def test_unwritable_location_is_ignored(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = HighScoreStore(blocker / "scores.json")
    store.save([HighScore(10, 1)])
    assert store.load() == []
