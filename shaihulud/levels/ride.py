"""
Level 2 - ride the worm.

Top-down desert that wraps on both axes. Steer the worm through waves of
Harkonnen troops: small ones are eaten for points (more when large ones are
close by), large ones are lethal. Clear every wave's small enemies to win.

Every proximity test goes through geometry.wrap_delta / wrap_distance so
nothing is missed across the seams.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import pygame

from shaihulud.config import (
    BASE_POINTS, BLOOD, BONE, BURNT, CLOSE_CALL_BONUS, COMBO_STEP,
    COMBO_WINDOW, DANGER_BASE, DANGER_RADIUS, DEEP_BROWN, ENEMY_R,
    ENEMY_SPEED, ENEMY_SPEED_PER_LOOP, FLEE_RADIUS, FLEE_SPEED, GAMEOVER,
    LARGE_KINDS, LEVEL2, LEVEL3, OCHRE, RESULT_PAUSE, RESUME_GRACE,
    RIDE_BASE_SPEED, RIDE_HEAD_R, RIDE_MAX_SEGMENTS, RIDE_SPACING,
    RIDE_SPEED_CHANGE, RIDE_SPEED_RANGE, RIDE_START_SEGMENTS, ROCK_GREY,
    SAND, SMALL_KINDS, SPAWN_CLEARANCE, SPICE_BLUE, TURN_BASE, TURN_MIN,
    TURN_PER_SEGMENT, WAVE_INTERVAL_BASE, WAVE_INTERVAL_MIN, WAVE_TABLES,
    WORLD_H, WORLD_W, WORM_DARK, WORM_SKIN,
)
from shaihulud.fsm import State
from shaihulud.geometry import clamp, from_angle, wrap_delta, wrap_distance, wrap_position
from shaihulud.hud import render_banner, render_hud
from shaihulud.worm import Worm

logger = logging.getLogger(__name__)

RIDE, DEATH, SUCCESS = "ride", "death", "success"

SIZE = (WORLD_W, WORLD_H)
W_RIGHT = WORLD_W - 8
CENTER = pygame.Vector2(WORLD_W / 2, WORLD_H / 2)


# ---------- Loop scaling ----------
def wave_table(loop):
    return WAVE_TABLES[min(loop, len(WAVE_TABLES)) - 1]


def wave_interval(loop):
    return max(WAVE_INTERVAL_MIN, WAVE_INTERVAL_BASE - (loop - 1))


def turn_rate(segments):
    return max(TURN_MIN, TURN_BASE - TURN_PER_SEGMENT * (segments - RIDE_START_SEGMENTS))


def enemy_speed(kind, loop):
    return ENEMY_SPEED[kind] * (1.0 + ENEMY_SPEED_PER_LOOP * (loop - 1))


# ---------- Scoring ----------
class ComboCounter:
    """Kills less than *window* seconds apart chain into a growing multiplier."""

    def __init__(self, window=COMBO_WINDOW, step=COMBO_STEP):
        self.window = window
        self.step = step
        self.count = 0
        self.since = 0.0

    @property
    def multiplier(self):
        return 1.0 + (max(self.count, 1) - 1) * self.step

    def tick(self, dt):
        if self.count:
            self.since += dt
            if self.since > self.window:
                self.count = 0

    def register_kill(self):
        self.count += 1
        self.since = 0.0
        return self.multiplier

    def reset(self):
        self.count = 0
        self.since = 0.0


def kill_points(kind, multiplier, nearby_large):
    return int(round(BASE_POINTS[kind] * multiplier * DANGER_BASE ** nearby_large))


# ---------- Entities ----------
@dataclass
class Enemy:
    pos: pygame.Vector2
    vel: pygame.Vector2
    kind: str
    size: str
    alive: bool = True

    @property
    def radius(self):
        return ENEMY_R[self.size]

    @property
    def large(self):
        return self.size == "large"

    def copy(self):
        return Enemy(pygame.Vector2(self.pos), pygame.Vector2(self.vel), self.kind, self.size, self.alive)


def count_nearby_large(head, enemies, radius=DANGER_RADIUS):
    return sum(1 for e in enemies
               if e.alive and e.large and wrap_distance(head, e.pos, SIZE) < radius)


@dataclass
class Snapshot:
    enemies: List[Enemy]
    wave: int
    wave_timer: float
    length: int


@dataclass
class RideState:
    worm: Worm
    rng: object
    table: tuple
    heading: float = 0.0
    speed_factor: float = 1.0
    enemies: List[Enemy] = field(default_factory=list)
    wave: int = 0                 # waves spawned so far
    wave_timer: float = 0.0
    combo: ComboCounter = field(default_factory=ComboCounter)
    in_danger: bool = False
    danger_peak: int = 0
    grace: float = 0.0
    phase: str = RIDE
    timer: float = 0.0
    cause: str = ""
    retry: bool = True
    snapshot: Optional[Snapshot] = None


class RideLevel(State):
    def __init__(self):
        self.state = None

    # ---- Lifecycle ----
    def enter(self, ctx):
        loop = ctx.session.loop
        self.state = RideState(
            worm=Worm.straight(CENTER, RIDE_START_SEGMENTS, RIDE_SPACING),
            rng=ctx.layout_rng(LEVEL2),
            table=wave_table(loop),
        )
        self.spawn_wave(ctx)
        ctx.audio.play_music("level2")
        ctx.audio.set_music_intensity(0.0)

    def exit(self, ctx):
        self.state = None

    # ---- Waves ----
    def spawn_point(self, st):
        head = st.worm.head
        pos = None
        for _ in range(20):
            t = st.rng.random()
            edge = st.rng.randrange(4)
            if edge == 0:
                pos = pygame.Vector2(t * WORLD_W, 0)
            elif edge == 1:
                pos = pygame.Vector2(t * WORLD_W, WORLD_H - 1)
            elif edge == 2:
                pos = pygame.Vector2(0, t * WORLD_H)
            else:
                pos = pygame.Vector2(WORLD_W - 1, t * WORLD_H)
            if wrap_distance(pos, head, SIZE) >= SPAWN_CLEARANCE:
                break
        return pos

    def make_enemy(self, ctx, st, size):
        kind = st.rng.choice(LARGE_KINDS if size == "large" else SMALL_KINDS)
        pos = self.spawn_point(st)
        drift = CENTER - pos
        if drift.length_squared() > 0:
            drift.scale_to_length(enemy_speed(kind, ctx.session.loop))
        return Enemy(pos, drift, kind, size)

    def spawn_wave(self, ctx):
        st = self.state
        large, small = st.table[st.wave]
        for _ in range(large):
            st.enemies.append(self.make_enemy(ctx, st, "large"))
        for _ in range(small):
            st.enemies.append(self.make_enemy(ctx, st, "small"))
        st.wave += 1
        st.wave_timer = 0.0
        ctx.audio.play("wave")
        logger.info("wave %d/%d: %d large, %d small", st.wave, len(st.table), large, small)

    def smalls_alive(self, st):
        return sum(1 for e in st.enemies if e.alive and not e.large)

    # ---- Update ----
    def update(self, ctx, dt, inp):
        st = self.state
        if st is None:
            return
        if st.phase == RIDE:
            self.update_ride(ctx, st, dt, inp)
        elif st.phase == DEATH:
            st.timer += dt
            if st.timer >= RESULT_PAUSE:
                if st.retry:
                    self.resume(ctx, st)
                else:
                    ctx.switch_state(GAMEOVER)
        elif st.phase == SUCCESS:
            st.timer += dt
            if st.timer >= RESULT_PAUSE:
                ctx.audio.play("transition")
                ctx.switch_state(LEVEL3)

    def update_ride(self, ctx, st, dt, inp):
        st.combo.tick(dt)
        st.grace = max(0.0, st.grace - dt)
        self.steer(st, dt, inp)
        self.move_enemies(ctx, st, dt)
        if self.resolve_contacts(ctx, st):
            return
        self.track_danger(ctx, st)

        st.wave_timer += dt
        remaining = self.smalls_alive(st)
        if st.wave < len(st.table) and (remaining == 0 or st.wave_timer >= wave_interval(ctx.session.loop)):
            self.spawn_wave(ctx)
        elif st.wave >= len(st.table) and remaining == 0:
            self.succeed(ctx, st)

    def steer(self, st, dt, inp):
        turn = turn_rate(len(st.worm))
        if inp.is_down("left"):
            st.heading -= turn * dt
        if inp.is_down("right"):
            st.heading += turn * dt
        if inp.is_down("up"):
            st.speed_factor += RIDE_SPEED_CHANGE * dt
        if inp.is_down("down"):
            st.speed_factor -= RIDE_SPEED_CHANGE * dt
        st.speed_factor = clamp(st.speed_factor, *RIDE_SPEED_RANGE)
        step = from_angle(st.heading, RIDE_BASE_SPEED * st.speed_factor * dt)
        st.worm.head = wrap_position(st.worm.head + step, SIZE)
        st.worm.follow(RIDE_SPACING, SIZE)

    def move_enemies(self, ctx, st, dt):
        head = st.worm.head
        for e in st.enemies:
            if not e.alive:
                continue
            vel = e.vel
            if e.kind == "soldier" and not e.large:
                away = wrap_delta(e.pos, head, SIZE)
                if 0 < away.length() < FLEE_RADIUS:
                    vel = away.normalize() * FLEE_SPEED
            e.pos = wrap_position(e.pos + vel * dt, SIZE)

    def resolve_contacts(self, ctx, st):
        """Eat or die. True when the ride ended this tick."""
        head = st.worm.head
        for e in st.enemies:
            if not e.alive:
                continue
            if wrap_distance(head, e.pos, SIZE) >= RIDE_HEAD_R + e.radius:
                continue
            if e.large:
                if st.grace > 0.0:
                    continue
                self.die(ctx, st, f"crashed into a {e.kind}")
                return True
            self.eat(ctx, st, e)
        st.enemies = [e for e in st.enemies if e.alive]
        return False

    def eat(self, ctx, st, e):
        nearby = count_nearby_large(st.worm.head, st.enemies)
        mult = st.combo.register_kill()
        points = kill_points(e.kind, mult, nearby)
        ctx.session.add_score(points)
        e.alive = False
        if len(st.worm) < RIDE_MAX_SEGMENTS:
            st.worm.grow()
        ctx.audio.play("eat")
        ctx.effects.spawn_particles(e.pos, 8, color=BLOOD, speed=(30, 90), life=0.5)
        if nearby:
            ctx.effects.trigger_shake(3.0 + nearby, 0.2)
        logger.debug("ate %s x%.1f near %d large: +%d", e.kind, mult, nearby, points)

    def track_danger(self, ctx, st):
        nearby = count_nearby_large(st.worm.head, st.enemies)
        ctx.audio.set_music_intensity(min(1.0, nearby / 3.0))
        if nearby >= 2:
            st.in_danger = True
            st.danger_peak = max(st.danger_peak, nearby)
        elif st.in_danger:
            bonus = CLOSE_CALL_BONUS * st.danger_peak
            ctx.session.add_score(bonus)
            st.in_danger = False
            st.danger_peak = 0
            ctx.audio.play("close_call")
            ctx.effects.trigger_flash(BONE, 0.1)
            logger.debug("close call bonus +%d", bonus)

    # ---- Outcomes ----
    def die(self, ctx, st, cause):
        st.phase = DEATH
        st.cause = cause
        st.timer = 0.0
        st.retry = ctx.session.lose_life()
        st.snapshot = Snapshot(
            enemies=[e.copy() for e in st.enemies if e.alive],
            wave=st.wave,
            wave_timer=st.wave_timer,
            length=len(st.worm),
        )
        ctx.audio.play("death")
        ctx.audio.set_music_intensity(0.0)
        ctx.effects.trigger_shake(10.0, 0.5)
        ctx.effects.trigger_flash(BLOOD, 0.25)
        ctx.effects.spawn_particles(st.worm.head, 20, color=WORM_SKIN, speed=(40, 140))
        logger.info("level 2 death: %s (lives %d)", cause, ctx.session.lives)

    def resume(self, ctx, st):
        snap = st.snapshot
        st.worm = Worm.straight(CENTER, snap.length, RIDE_SPACING)
        st.heading = 0.0
        st.speed_factor = 1.0
        st.enemies = [e.copy() for e in snap.enemies]
        st.wave = snap.wave
        st.wave_timer = snap.wave_timer
        st.combo.reset()
        st.in_danger = False
        st.danger_peak = 0
        st.grace = RESUME_GRACE
        st.phase = RIDE
        st.snapshot = None
        logger.info("resuming wave %d with %d enemies", st.wave, len(st.enemies))

    def succeed(self, ctx, st):
        st.phase = SUCCESS
        st.timer = 0.0
        ctx.audio.play("success")
        ctx.audio.set_music_intensity(0.0)
        ctx.effects.trigger_flash(SAND, 0.2)
        logger.info("level 2 cleared")

    # ---- Render ----
    def render(self, ctx):
        st = self.state
        r = ctx.renderer
        r.clear(SAND)
        if st is None:
            return
        for e in st.enemies:
            self.render_enemy(r, e)

        blink = st.grace > 0.0 and int(st.grace * 10) % 2 == 0
        n = len(st.worm)
        for i in range(n - 1, -1, -1):
            seg = st.worm.segments[i]
            rad = RIDE_HEAD_R if i == 0 else max(4, RIDE_HEAD_R - 1 - i * 3 // n)
            col = WORM_DARK if i == 0 else WORM_SKIN
            if not blink:
                r.circle(col, seg, rad)
        r.circle(BONE, st.worm.head + from_angle(st.heading, 4), 2)

        r.draw_text(f"Wave {st.wave}/{len(st.table)}", 8, 30, color=DEEP_BROWN, size=16, align="left")
        if st.combo.count > 1:
            r.draw_text(f"Combo x{st.combo.multiplier:.1f}", W_RIGHT, 30, color=BURNT, size=16, align="right")
        if st.in_danger:
            r.draw_text("DANGER!", WORLD_W // 2, 34, color=BLOOD, size=20)

        if st.phase == DEATH:
            render_banner(ctx, "DEVOURED", st.cause, color=BLOOD)
        elif st.phase == SUCCESS:
            render_banner(ctx, "THE DESERT IS YOURS", "prepare to dismount", color=SAND)
        render_hud(ctx)

    def render_enemy(self, r, e):
        rad = e.radius
        p = e.pos
        if e.kind == "harvester":
            r.rect(ROCK_GREY, (p.x - rad, p.y - rad * 0.7, rad * 2, rad * 1.4))
            r.rect(DEEP_BROWN, (p.x - rad, p.y - rad * 0.7, rad * 2, rad * 1.4), 2)
        elif e.kind == "ornithopter":
            r.line(DEEP_BROWN, (p.x - rad * 1.6, p.y), (p.x + rad * 1.6, p.y), 2)
            r.circle(SPICE_BLUE if e.large else OCHRE, p, rad)
        else:
            r.rect(BLOOD, (p.x - rad / 2, p.y - rad, rad, rad * 2))

