from __future__ import annotations

import random

import pygame
import pytest

from shaihulud.config import GAMEOVER, GROUND_Y, LEVEL1, LEVEL2, QTE_POOL
from shaihulud.inputs import NO_INPUT
from shaihulud.levels import mount
from shaihulud.levels.mount import ChallengeSequence, challenge_length, challenge_time


def _mounted(ctx):
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    level.begin_challenge(ctx, 3)
    return level


def test_loop_scaling() -> None:
    assert (challenge_length(1), challenge_time(1)) == (3, 3.5)
    assert (challenge_length(2), challenge_time(2)) == (4, 3.0)
    assert challenge_length(50) == 8
    assert challenge_time(50) == 1.5
    assert mount.zone_half_width(50) == 50
    assert mount.traverse_speed(1) < mount.traverse_speed(2)


def test_generated_sequence_uses_pool() -> None:
    seq = ChallengeSequence.generate(random.Random(0), 3)
    assert len(seq.symbols) == 5
    assert set(seq.symbols) <= set(QTE_POOL)


def test_sequence_success_in_order() -> None:
    seq = ChallengeSequence(("up", "left", "down"), 3.5)
    assert seq.advance(0.1, ("up",)) is None
    assert seq.advance(0.1, ("left", "down")) == "success"


def test_sequence_wrong_symbol_fails_immediately() -> None:
    seq = ChallengeSequence(("up", "left"), 3.5)
    assert seq.advance(0.1, ("left",)) == "wrong"
    assert seq.advance(0.1, ("up", "left")) == "wrong"


def test_sequence_ignores_keys_outside_pool() -> None:
    seq = ChallengeSequence(("up",), 3.5)
    assert seq.advance(0.1, ("jump", "confirm")) is None
    assert seq.advance(0.1, ("up",)) == "success"


def test_sequence_timeout_beats_late_correct_press() -> None:
    seq = ChallengeSequence(("up",), 1.0)
    assert seq.advance(0.9, ()) is None
    assert seq.advance(0.2, ("up",)) == "timeout"


def test_enter_builds_attempt_from_loop(ctx) -> None:
    ctx.switch_state(LEVEL1)
    st = ctx.machine.get(LEVEL1).state
    assert st.phase == mount.WAIT
    assert st.player.y == GROUND_Y
    assert ctx.audio.music == "level1"


def test_layout_is_deterministic_for_seed_loop_attempt(ctx) -> None:
    ctx.switch_state(LEVEL1)
    first = ctx.machine.get(LEVEL1).state.zone_center
    ctx.switch_state(LEVEL1)
    assert ctx.machine.get(LEVEL1).state.zone_center == first


def test_jump_rises_and_lands(ctx, keys) -> None:
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    level.state.zone_center = 10_000  # keep the worm buried
    ctx.tick(0.016, keys("jump"))
    assert level.state.phase == mount.JUMP
    assert "jump" in ctx.audio.played
    peak = GROUND_Y
    for _ in range(120):
        ctx.tick(0.016, NO_INPUT)
        peak = min(peak, level.state.player.y)
    assert peak < GROUND_Y - 50
    assert level.state.phase == mount.WAIT
    assert level.state.player.y == GROUND_Y


def test_landing_on_body_starts_challenge(ctx) -> None:
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    st = level.state
    st.surfaced = [True] * len(st.worm)
    st.player.update(st.worm.segments[4])
    st.vy = 50.0
    st.phase = mount.JUMP
    level.check_worm(ctx, st)
    assert st.phase == mount.CHALLENGE
    assert st.mounted is not None and st.mounted >= 1
    assert len(st.challenge.symbols) == 3
    assert st.challenge.budget == 3.5


def test_completing_challenge_scores_and_moves_to_level2(ctx, keys) -> None:
    level = _mounted(ctx)
    for sym in level.state.challenge.symbols:
        ctx.tick(0.01, keys(sym))
    assert level.state.phase == mount.SUCCESS
    assert ctx.session.score == 100
    for _ in range(45):
        ctx.tick(0.05, NO_INPUT)
    assert ctx.machine.current == LEVEL2


def test_wrong_key_costs_one_life_and_retries(ctx, keys) -> None:
    level = _mounted(ctx)
    first = level.state.challenge.symbols[0]
    wrong = next(s for s in QTE_POOL if s != first)
    ctx.tick(0.01, keys(wrong))
    assert level.state.phase == mount.DEATH
    assert level.state.cause == "lost your grip"
    assert ctx.session.lives == 2
    for _ in range(45):
        ctx.tick(0.05, NO_INPUT)
    assert ctx.machine.current == LEVEL1
    assert level.state.phase == mount.WAIT
    assert level.state.attempt == 1
    assert ctx.session.lives == 2


def test_timeout_kills(ctx) -> None:
    level = _mounted(ctx)
    for _ in range(80):
        ctx.tick(0.05, NO_INPUT)
        if level.state.phase != mount.CHALLENGE:
            break
    assert level.state.cause == "too slow to hold on"


def test_last_life_goes_to_gameover(ctx, keys) -> None:
    ctx.session.lives = 0
    level = _mounted(ctx)
    first = level.state.challenge.symbols[0]
    ctx.tick(0.01, keys(next(s for s in QTE_POOL if s != first)))
    assert ctx.session.lives == -1
    for _ in range(45):
        ctx.tick(0.05, NO_INPUT)
    assert ctx.machine.current == GAMEOVER


def test_render_shows_challenge_symbols(ctx) -> None:
    level = _mounted(ctx)
    ctx.draw()
    texts = ctx.renderer.texts()
    for sym in level.state.challenge.symbols:
        assert mount.LABELS[sym] in texts
    assert any(t.startswith("Lives") for t in texts)


@pytest.mark.parametrize("loop", [1, 2, 5])
def test_success_points_scale_with_loop(ctx, keys, loop) -> None:
    ctx.session.loop = loop
    level = _mounted(ctx)
    for sym in level.state.challenge.symbols:
        ctx.tick(0.001, keys(sym))
    assert ctx.session.score == 100 * loop


def _pass(ctx, level, head_x, zone_center=300, zone_half=110):
    """Freeze the worm with its head at *head_x* and rebuild its shape."""
    st = level.state
    st.zone_center, st.zone_half = zone_center, zone_half
    st.travel = head_x + 40
    level.place_worm(st)
    return st


def test_head_contact_crushes_the_player(ctx) -> None:
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    st = _pass(ctx, level, head_x=300)
    assert st.surfaced[0]
    st.player.update(st.worm.head.x, st.worm.head.y + 20)
    level.check_worm(ctx, st)
    assert st.phase == mount.DEATH
    assert st.cause == "crushed by the worm"
    assert ctx.session.lives == 2


def test_head_near_miss_survives(ctx) -> None:
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    st = _pass(ctx, level, head_x=300)
    head = st.worm.head
    st.player.update(head.x + 19, head.y + 20)
    level.check_worm(ctx, st)
    assert st.phase == mount.WAIT
    assert ctx.session.lives == 3


def test_head_contact_is_round_not_boxy() -> None:
    feet = pygame.Vector2(100, 300)
    # diagonal off the torso's top end: inside the old box, outside the padded circle
    assert not mount.head_hits_torso(pygame.Vector2(115, 269), feet)
    assert mount.head_hits_torso(pygame.Vector2(110, 270), feet)
    assert mount.head_hits_torso(pygame.Vector2(100, 287), feet)
    assert not mount.head_hits_torso(pygame.Vector2(119, 287), feet)


def test_buried_head_never_crushes(ctx) -> None:
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    st = _pass(ctx, level, head_x=450)
    assert not st.surfaced[0]
    assert any(st.surfaced)
    st.player.update(st.worm.head)
    level.check_worm(ctx, st)
    assert st.phase == mount.WAIT
    assert ctx.session.lives == 3


def test_segment_outside_zone_cannot_be_mounted(ctx) -> None:
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    st = _pass(ctx, level, head_x=300)
    assert st.surfaced[6] and not st.surfaced[8]
    st.player.update(st.worm.segments[8])
    st.vy = 50.0
    st.phase = mount.JUMP
    level.check_worm(ctx, st)
    assert st.phase == mount.JUMP
    assert st.mounted is None


def test_tail_segments_never_surface(ctx) -> None:
    ctx.switch_state(LEVEL1)
    level = ctx.machine.get(LEVEL1)
    st = _pass(ctx, level, head_x=480)
    seg = st.worm.segments[10]
    assert abs(seg.x - st.zone_center) < st.zone_half
    assert not st.surfaced[10]
    assert seg.y == GROUND_Y
    st.player.update(seg)
    st.vy = 50.0
    st.phase = mount.JUMP
    level.check_worm(ctx, st)
    assert st.phase == mount.JUMP
