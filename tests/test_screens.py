from __future__ import annotations

from shaihulud.config import GAMEOVER, LEVEL1, TITLE
from shaihulud.inputs import NO_INPUT
from shaihulud.session import HighScore


def test_title_starts_a_fresh_game(ctx, keys) -> None:
    ctx.session.lives, ctx.session.score, ctx.session.loop = -1, 900, 4
    ctx.switch_state(TITLE)
    assert ctx.audio.music == "title"
    ctx.tick(0.016, NO_INPUT)
    assert ctx.machine.current == TITLE
    ctx.tick(0.016, keys("confirm"))
    assert ctx.machine.current == LEVEL1
    assert (ctx.session.lives, ctx.session.score, ctx.session.loop) == (3, 0, 1)


def test_title_ignores_the_mute_key(ctx, keys) -> None:
    ctx.switch_state(TITLE)
    ctx.tick(0.016, keys("mute"))
    assert ctx.machine.current == TITLE


def test_title_lists_high_scores(ctx) -> None:
    ctx.session.high_scores = [HighScore(1500, 3, "MUA")]
    ctx.session.high_score = 1500
    ctx.switch_state(TITLE)
    ctx.draw()
    texts = ctx.renderer.texts()
    assert "SHAI-HULUD" in texts
    assert any("MUA" in t and "1500" in t for t in texts)


def test_gameover_without_qualifying_score_returns_to_title(ctx, keys) -> None:
    ctx.switch_state(GAMEOVER)
    ctx.tick(0.1, keys("jump"))
    assert ctx.machine.current == GAMEOVER
    ctx.tick(0.5, NO_INPUT)
    ctx.tick(0.016, keys("jump"))
    assert ctx.machine.current == TITLE
    assert ctx.store.saves == 0


def test_gameover_initials_entry_saves_table(ctx, keys) -> None:
    ctx.session.score = 500
    ctx.session.loop = 2
    ctx.switch_state(GAMEOVER)
    screen = ctx.machine.get(GAMEOVER)
    assert screen.entering
    ctx.tick(0.6, NO_INPUT)
    ctx.tick(0.016, keys("up"))
    ctx.tick(0.016, keys("jump"))
    ctx.tick(0.016, keys("down"))
    ctx.tick(0.016, keys("confirm"))
    assert screen.initials == "BZA"
    ctx.tick(0.016, keys("jump"))
    assert not screen.entering
    assert ctx.store.table == [HighScore(500, 2, "BZA")]
    assert ctx.session.high_scores == ctx.store.table
    assert ctx.machine.current == GAMEOVER
    ctx.tick(0.016, keys("confirm"))
    assert ctx.machine.current == TITLE


def test_gameover_renders_score(ctx) -> None:
    ctx.session.score = 42
    ctx.switch_state(GAMEOVER)
    ctx.draw()
    texts = ctx.renderer.texts()
    assert "GAME OVER" in texts
    assert any("42" in t for t in texts)


def test_title_glow_is_a_colour(ctx) -> None:
    ctx.switch_state(TITLE)
    ctx.draw()
    glow = next(c[4] for c in ctx.renderer.calls if c[0] == "text" and c[1] == "SHAI-HULUD")
    assert isinstance(glow, tuple) and len(glow) == 3


def test_returning_to_title_clears_leftover_effects(ctx) -> None:
    ctx.effects.spawn_particles((0, 0), 12)
    ctx.switch_state(TITLE)
    assert ctx.effects.cleared == 1
    assert ctx.effects.particles == 0
