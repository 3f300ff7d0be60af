from __future__ import annotations

import pytest

from shaihulud.session import HighScore, SessionState


def test_reset_game_restores_defaults() -> None:
    s = SessionState(lives=-1, score=900, loop=4, high_score=900)
    s.reset_game()
    assert (s.lives, s.score, s.loop) == (3, 0, 1)
    assert s.high_score == 900


def test_lose_life_reports_exhaustion_only_below_zero() -> None:
    s = SessionState()
    results = [s.lose_life() for _ in range(4)]
    assert results == [True, True, True, False]
    assert s.lives == -1


def test_lose_life_counts_down_regardless_of_other_mutations() -> None:
    s = SessionState(lives=2)
    s.lose_life()
    s.add_score(50)
    s.add_life()
    s.next_loop()
    s.lose_life()
    assert s.lives == 1
    assert s.lose_life() is True
    assert s.lose_life() is False


def test_add_score_tracks_running_max() -> None:
    s = SessionState()
    s.add_score(100)
    s.add_score(0)
    s.add_score(250)
    assert s.score == 350
    assert s.high_score == 350
    s.reset_game()
    s.add_score(10)
    assert s.high_score == 350


def test_negative_score_is_rejected() -> None:
    s = SessionState()
    with pytest.raises(ValueError):
        s.add_score(-1)
    assert s.score == 0


def test_next_loop_increments() -> None:
    s = SessionState()
    s.next_loop()
    s.next_loop()
    assert s.loop == 3


def test_record_high_score_sorts_truncates_and_keeps_insertion_order_on_ties() -> None:
    s = SessionState(high_scores=[HighScore(500, 2, "AAA"), HighScore(300, 1, "BBB")])
    for score, initials in ((300, "CCC"), (700, "DDD"), (100, "EEE"), (50, "FFF")):
        s.score = score
        s.record_high_score(initials)
    assert [h.initials for h in s.high_scores] == ["DDD", "AAA", "BBB", "CCC", "EEE"]
    assert s.high_score == 700


def test_record_high_score_defaults_initials_and_skips_zero() -> None:
    s = SessionState()
    s.record_high_score()
    assert s.high_scores == []
    s.score = 40
    s.loop = 2
    s.record_high_score()
    assert s.high_scores == [HighScore(40, 2, "---")]


def test_score_qualifies() -> None:
    s = SessionState()
    assert s.score_qualifies() is False
    s.score = 10
    assert s.score_qualifies() is True
    s.high_scores = [HighScore(100 * i, 1) for i in range(5, 0, -1)]
    assert s.score_qualifies() is False
    s.score = 101
    assert s.score_qualifies() is True
