"""
Level 1 - mount the worm.

The worm breaches through a surfaced zone on every pass. The player jumps
and has to come down on its body (not its head), then hold on by keying an
ordered sequence of directions before the time budget runs out.

Phases: WAIT -> JUMP -> CHALLENGE -> SUCCESS | DEATH
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import pygame

from shaihulud.config import (
    BLOOD, BONE, BURNT, DEEP_BROWN, GAMEOVER, GRAVITY, GROUND_Y, HEAD_RADIUS,
    JUMP_VELOCITY, LEVEL1, LEVEL2, MOUNT_GAP, MOUNT_RADIUS, MOUNT_RISE,
    MOUNT_SEGMENTS, MOUNT_SPEED_BASE, MOUNT_SPEED_MAX, MOUNT_SPEED_PER_LOOP,
    MOUNT_TAIL_CUTOFF, OCHRE, PLAYER_H, PLAYER_MAX_X, PLAYER_MIN_X,
    PLAYER_SPEED, PLAYER_START_X, PLAYER_W, QTE_LEN_BASE, QTE_LEN_MAX,
    QTE_LEN_PER_LOOP, QTE_POINTS, QTE_POOL, QTE_TIME_BASE, QTE_TIME_DECAY,
    QTE_TIME_MIN, RESULT_PAUSE, SAND, SPICE_BLUE, TORSO_BOTTOM, TORSO_TOP,
    W, WORM_DARK, WORM_SKIN, ZONE_CENTER_RANGE, ZONE_HALF_BASE, ZONE_HALF_MIN,
    ZONE_HALF_PER_LOOP,
)
from shaihulud.fsm import State
from shaihulud.geometry import clamp, rand_between
from shaihulud.hud import render_banner, render_hud
from shaihulud.worm import Worm

logger = logging.getLogger(__name__)

WAIT, JUMP, CHALLENGE, SUCCESS, DEATH = "wait", "jump", "challenge", "success", "death"

CYCLE = W + MOUNT_SEGMENTS * MOUNT_GAP + 80
LABELS = {"up": "UP", "down": "DOWN", "left": "LEFT", "right": "RIGHT"}


# ---------- Loop scaling ----------
def challenge_length(loop):
    return min(QTE_LEN_BASE + QTE_LEN_PER_LOOP * (loop - 1), QTE_LEN_MAX)


def challenge_time(loop):
    return max(QTE_TIME_BASE - QTE_TIME_DECAY * (loop - 1), QTE_TIME_MIN)


def traverse_speed(loop):
    return min(MOUNT_SPEED_BASE + MOUNT_SPEED_PER_LOOP * (loop - 1), MOUNT_SPEED_MAX)


def zone_half_width(loop):
    return max(ZONE_HALF_BASE - ZONE_HALF_PER_LOOP * (loop - 1), ZONE_HALF_MIN)


def head_hits_torso(head, feet):
    """Head circle, padded by half the player's width, against the torso line."""
    nearest = pygame.Vector2(feet.x, clamp(head.y, feet.y - TORSO_TOP, feet.y - TORSO_BOTTOM))
    return head.distance_to(nearest) < HEAD_RADIUS + PLAYER_W / 2


# ---------- Ordered-sequence challenge ----------
class ChallengeSequence:
    """Key the symbols in order before *budget* seconds pass; one slip fails."""

    def __init__(self, symbols, budget):
        self.symbols = tuple(symbols)
        self.budget = budget
        self.elapsed = 0.0
        self.cursor = 0
        self.result = None      # "success" | "wrong" | "timeout"

    @classmethod
    def generate(cls, rng, loop):
        return cls([rng.choice(QTE_POOL) for _ in range(challenge_length(loop))],
                   challenge_time(loop))

    @property
    def remaining(self):
        return max(0.0, self.budget - self.elapsed)

    def advance(self, dt, presses):
        if self.result is not None:
            return self.result
        # the clock runs before any key counts, so a long frame cannot skip it
        self.elapsed += dt
        if self.elapsed >= self.budget:
            self.result = "timeout"
            return self.result
        for sym in presses:
            if sym not in QTE_POOL:
                continue
            if sym != self.symbols[self.cursor]:
                self.result = "wrong"
                return self.result
            self.cursor += 1
            if self.cursor == len(self.symbols):
                self.result = "success"
                return self.result
        return None


# ---------- Level state ----------
@dataclass
class MountState:
    attempt: int
    zone_center: float
    zone_half: float
    speed: float
    worm: Worm
    player: pygame.Vector2
    rng: object
    vy: float = 0.0
    travel: float = 0.0
    phase: str = WAIT
    surfaced: List[bool] = field(default_factory=list)
    mounted: Optional[int] = None
    challenge: Optional[ChallengeSequence] = None
    timer: float = 0.0
    cause: str = ""
    retry: bool = True


class MountLevel(State):
    def __init__(self):
        self.state = None
        self.attempt = 0

    # ---- Lifecycle ----
    def enter(self, ctx):
        self.attempt = 0
        self.state = self.new_attempt(ctx)
        ctx.audio.play_music("level1")
        ctx.audio.set_music_intensity(0.0)

    def exit(self, ctx):
        self.state = None

    def new_attempt(self, ctx):
        loop = ctx.session.loop
        rng = ctx.layout_rng(LEVEL1, self.attempt)
        st = MountState(
            attempt=self.attempt,
            zone_center=rand_between(rng, ZONE_CENTER_RANGE),
            zone_half=zone_half_width(loop),
            speed=traverse_speed(loop),
            worm=Worm([(0, GROUND_Y)] * MOUNT_SEGMENTS),
            player=pygame.Vector2(PLAYER_START_X, GROUND_Y),
            rng=rng,
        )
        self.place_worm(st)
        logger.debug("mount attempt %d: zone %.0f +/- %.0f", st.attempt, st.zone_center, st.zone_half)
        return st

    # ---- Worm ----
    def is_surfaced(self, st, i, x):
        return i < MOUNT_TAIL_CUTOFF and abs(x - st.zone_center) < st.zone_half

    def place_worm(self, st):
        head_x = -40 + st.travel % CYCLE
        left = st.zone_center - st.zone_half
        st.surfaced = []

        def at(i):
            x = head_x - i * MOUNT_GAP
            up = self.is_surfaced(st, i, x)
            st.surfaced.append(up)
            if not up:
                return (x, GROUND_Y)
            u = (x - left) / (2.0 * st.zone_half)
            return (x, GROUND_Y - MOUNT_RISE * math.sin(math.pi * u))

        st.worm.place(at)

    # ---- Update ----
    def update(self, ctx, dt, inp):
        st = self.state
        if st is None:
            return
        if st.phase in (WAIT, JUMP):
            st.travel += st.speed * dt
            self.place_worm(st)
            self.move_player(ctx, st, dt, inp)
            self.check_worm(ctx, st)
        elif st.phase == CHALLENGE:
            self.update_challenge(ctx, st, dt, inp)
        elif st.phase == DEATH:
            st.travel += st.speed * dt
            self.place_worm(st)
            st.timer += dt
            if st.timer >= RESULT_PAUSE:
                if st.retry:
                    self.attempt += 1
                    self.state = self.new_attempt(ctx)
                else:
                    ctx.switch_state(GAMEOVER)
        elif st.phase == SUCCESS:
            st.timer += dt
            if st.timer >= RESULT_PAUSE:
                ctx.audio.play("transition")
                ctx.switch_state(LEVEL2)

    def move_player(self, ctx, st, dt, inp):
        p = st.player
        move = 0
        if inp.is_down("left"):
            move -= 1
        if inp.is_down("right"):
            move += 1
        p.x = clamp(p.x + move * PLAYER_SPEED * dt, PLAYER_MIN_X, PLAYER_MAX_X)

        if st.phase == WAIT:
            if inp.was_pressed("jump"):
                st.vy = JUMP_VELOCITY
                st.phase = JUMP
                ctx.audio.play("jump")
            return
        # semi-implicit Euler
        st.vy += GRAVITY * dt
        p.y += st.vy * dt
        if p.y >= GROUND_Y:
            p.y = GROUND_Y
            st.vy = 0.0
            st.phase = WAIT
            ctx.effects.spawn_particles(p, 4, color=SAND, speed=(10, 40), life=0.4)

    def check_worm(self, ctx, st):
        if not any(st.surfaced):
            return
        p = st.player
        head = st.worm.head
        if st.surfaced[0] and head_hits_torso(head, p):
            self.die(ctx, "crushed by the worm")
            return
        if st.vy > 0:
            body = [i for i in range(1, len(st.worm)) if st.surfaced[i]]
            i, d = st.worm.nearest(p, body)
            if i is not None and d < MOUNT_RADIUS:
                self.begin_challenge(ctx, i)

    # ---- Challenge ----
    def begin_challenge(self, ctx, segment):
        st = self.state
        st.mounted = segment
        st.player.update(st.worm.segments[segment])
        st.vy = 0.0
        st.phase = CHALLENGE
        st.challenge = ChallengeSequence.generate(st.rng, ctx.session.loop)
        ctx.audio.play("hook")
        ctx.audio.set_music_intensity(0.6)
        ctx.effects.spawn_particles(st.player, 10, color=SAND, speed=(30, 90), life=0.5)
        logger.info("mounted segment %d, challenge %s in %.1fs",
                    segment, "-".join(st.challenge.symbols), st.challenge.budget)

    def update_challenge(self, ctx, st, dt, inp):
        st.player.update(st.worm.segments[st.mounted])
        ch = st.challenge
        before = ch.cursor
        result = ch.advance(dt, inp.presses)
        if ch.cursor > before:
            ctx.audio.play("key")
        if result == "success":
            points = QTE_POINTS * ctx.session.loop
            ctx.session.add_score(points)
            st.phase = SUCCESS
            st.timer = 0.0
            ctx.audio.play("success")
            ctx.audio.set_music_intensity(0.0)
            ctx.effects.trigger_flash(SAND, 0.2)
            logger.info("mount complete, +%d", points)
        elif result == "wrong":
            self.die(ctx, "lost your grip")
        elif result == "timeout":
            self.die(ctx, "too slow to hold on")

    # ---- Outcomes ----
    def die(self, ctx, cause):
        st = self.state
        st.phase = DEATH
        st.cause = cause
        st.timer = 0.0
        st.retry = ctx.session.lose_life()
        ctx.audio.play("death")
        ctx.audio.set_music_intensity(0.0)
        ctx.effects.trigger_shake(8.0, 0.4)
        ctx.effects.trigger_flash(BLOOD, 0.25)
        ctx.effects.spawn_particles(st.player, 16, color=BLOOD, speed=(40, 120))
        logger.info("level 1 death: %s (lives %d)", cause, ctx.session.lives)

    # ---- Render ----
    def render(self, ctx):
        st = self.state
        r = ctx.renderer
        r.clear(OCHRE)
        if st is None:
            return
        r.ellipse(BURNT, (-80, GROUND_Y - 70, 360, 140))
        r.ellipse(BURNT, (360, GROUND_Y - 50, 400, 120))
        r.rect(SAND, (0, GROUND_Y, W, 360 - GROUND_Y))
        left = st.zone_center - st.zone_half
        r.rect(BURNT, (left, GROUND_Y, 2 * st.zone_half, 3))

        for i in range(len(st.worm) - 1, -1, -1):
            seg = st.worm.segments[i]
            if not -20 < seg.x < W + 20:
                continue
            if st.surfaced[i]:
                rad = HEAD_RADIUS if i == 0 else 10
                r.circle(WORM_SKIN if i else WORM_DARK, seg, rad)
            else:
                r.ellipse(DEEP_BROWN, (seg.x - 8, GROUND_Y - 3, 16, 6))

        p = st.player
        r.rect(SPICE_BLUE, (p.x - PLAYER_W / 2, p.y - PLAYER_H, PLAYER_W, PLAYER_H))
        r.circle(BONE, (p.x, p.y - PLAYER_H - 4), 4)

        if st.phase == CHALLENGE:
            self.render_challenge(ctx, st.challenge)
        elif st.phase == DEATH:
            render_banner(ctx, "YOU FELL", st.cause, color=BLOOD)
        elif st.phase == SUCCESS:
            render_banner(ctx, "MOUNTED!", f"+{QTE_POINTS * ctx.session.loop}", color=SAND)
        elif st.phase == WAIT and st.attempt == 0:
            r.draw_text("SPACE to jump - land on the body, not the head", W // 2, 40,
                        color=DEEP_BROWN, size=18)
        render_hud(ctx)

    def render_challenge(self, ctx, ch):
        r = ctx.renderer
        n = len(ch.symbols)
        x0 = W // 2 - (n - 1) * 35
        for i, sym in enumerate(ch.symbols):
            col = SAND if i < ch.cursor else (BONE if i == ch.cursor else DEEP_BROWN)
            r.draw_text(LABELS[sym], x0 + i * 70, 60, color=col, size=20)
        frac = ch.remaining / ch.budget if ch.budget else 0.0
        r.rect(DEEP_BROWN, (W // 2 - 100, 80, 200, 6))
        r.rect(BLOOD if frac < 0.3 else SAND, (W // 2 - 100, 80, int(200 * frac), 6))
