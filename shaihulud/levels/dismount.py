"""
Level 3 - dismount the worm.

The worm crosses a rock field and dives head first. Get off before the
sand takes the segment you stand on: walk to a rock that is close enough
(safe, no points) or charge a jump, aim it, and land on a rock for a
score that grows with the charge.

Phases: RIDE -> CHARGING -> JUMPING -> SUCCESS | DEATH
        RIDE -> WALKING -> SUCCESS
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

import pygame

from shaihulud.config import (
    AIM_TURN_RATE, BLOOD, BONE, CHARGE_TIME, DEEP_BROWN, DIVE_HEAD_START,
    DIVE_SEGMENTS, DIVE_SPACING, DIVE_SPEED_BASE, DIVE_SPEED_MAX,
    DIVE_SPEED_PER_LOOP, DIVE_START, DIVE_WEAVE, DIVE_WORM_SPEED, GAMEOVER,
    GEYSER_ACTIVE, GEYSER_CYAN, GEYSER_PERIOD, GEYSER_R, H, JUMP_ARC,
    JUMP_DURATION, JUMP_MARGIN, LEVEL1, LEVEL3, MAX_JUMP_POWER,
    MAX_LAND_POINTS, OCHRE, QUICKSAND, QUICKSAND_R, RESULT_PAUSE, ROCK_GREY,
    ROCK_HIT_FRACTION, ROCK_HIT_PAD, ROCK_RADIUS_BASE, ROCK_RADIUS_DECAY,
    ROCK_RADIUS_MIN, SAND, SEGMENT_DELAY_BASE, SEGMENT_DELAY_DECAY,
    SEGMENT_DELAY_MIN, SHUFFLE_SPEED, SPICE_BLUE, SUBMERGE_THRESHOLD, W,
    WALK_RANGE_BASE, WALK_RANGE_DECAY, WALK_RANGE_MIN, WALK_SPEED, WORM_DARK,
    WORM_SKIN,
)
from shaihulud.fsm import State
from shaihulud.geometry import clamp, ease_in, from_angle
from shaihulud.hud import render_banner, render_hud
from shaihulud.inputs import DIRECTIONS
from shaihulud.worm import Worm

logger = logging.getLogger(__name__)

RIDE, CHARGING, JUMPING, WALKING, SUCCESS, DEATH = (
    "ride", "charging", "jumping", "walking", "success", "death")

PATH_Y = DIVE_HEAD_START[1]


# ---------- Loop scaling ----------
def dive_speed(loop):
    return min(DIVE_SPEED_BASE + DIVE_SPEED_PER_LOOP * (loop - 1), DIVE_SPEED_MAX)


def segment_delay(loop):
    return max(SEGMENT_DELAY_BASE - SEGMENT_DELAY_DECAY * (loop - 1), SEGMENT_DELAY_MIN)


def walk_range(loop):
    return max(WALK_RANGE_MIN, WALK_RANGE_BASE - WALK_RANGE_DECAY * (loop - 1))


def rock_radius(loop):
    return max(ROCK_RADIUS_MIN, ROCK_RADIUS_BASE - ROCK_RADIUS_DECAY * (loop - 1))


def rock_count(loop):
    return max(2, 5 - (loop - 1) // 2)


def quicksand_count(loop):
    return min(loop, 5)


def geyser_count(loop):
    return min(1 + loop // 2, 4)


def land_points(charge, loop):
    return int(math.floor(charge * charge * MAX_LAND_POINTS * loop))


# ---------- Layout ----------
@dataclass
class Hazard:
    pos: pygame.Vector2
    radius: float
    kind: str                 # "rock" | "quicksand" | "geyser"
    phase: float = 0.0

    def active(self, t):
        if self.kind != "geyser":
            return True
        return (t + self.phase) % GEYSER_PERIOD < GEYSER_ACTIVE

    def hit_radius(self):
        if self.kind == "rock":
            return ROCK_HIT_PAD + ROCK_HIT_FRACTION * self.radius
        return self.radius


def build_layout(rng, loop):
    """Rocks alternate above and below the worm's path; hazards fill the gaps."""
    rocks = []
    n = rock_count(loop)
    rad = rock_radius(loop)
    for k in range(n):
        x = 140 + 460 * (k + 0.5) / n + rng.uniform(-20, 20)
        side = -1 if k % 2 == 0 else 1
        y = PATH_Y + side * (DIVE_WEAVE + rad + rng.uniform(10, 90))
        rocks.append(Hazard(pygame.Vector2(x, clamp(y, rad + 24, H - rad - 4)), rad, "rock"))

    hazards = []

    def free_spot(radius):
        pos = None
        for _ in range(30):
            pos = pygame.Vector2(rng.uniform(60, W - 40), rng.uniform(40, H - 30))
            if all(pos.distance_to(o.pos) > radius + o.radius + 10 for o in rocks + hazards):
                break
        return pos

    for _ in range(quicksand_count(loop)):
        hazards.append(Hazard(free_spot(QUICKSAND_R), QUICKSAND_R, "quicksand"))
    for _ in range(geyser_count(loop)):
        hazards.append(Hazard(free_spot(GEYSER_R), GEYSER_R, "geyser",
                              phase=rng.uniform(0.0, GEYSER_PERIOD)))
    return rocks, hazards


# ---------- Level state ----------
@dataclass
class JumpTrajectory:
    start: pygame.Vector2
    target: pygame.Vector2
    charge: float
    progress: float = 0.0

    def position(self):
        return self.start.lerp(self.target, clamp(self.progress, 0.0, 1.0))

    def height(self):
        return JUMP_ARC * math.sin(math.pi * clamp(self.progress, 0.0, 1.0))


@dataclass
class Walk:
    start: pygame.Vector2
    rock: Hazard
    duration: float
    progress: float = 0.0

    def position(self):
        return self.start.lerp(self.rock.pos, clamp(self.progress, 0.0, 1.0))


@dataclass
class DismountState:
    attempt: int
    worm: Worm
    rocks: List[Hazard]
    hazards: List[Hazard]
    dive_speed: float
    segment_delay: float
    walk_range: float
    ride_pos: float
    t: float = 0.0
    phase: str = RIDE
    hold: float = 0.0
    charge: float = 0.0
    aim: float = -math.pi / 2
    jump: Optional[JumpTrajectory] = None
    walk: Optional[Walk] = None
    timer: float = 0.0
    cause: str = ""
    retry: bool = True
    land_score: int = 0


class DismountLevel(State):
    def __init__(self):
        self.state = None
        self.attempt = 0

    # ---- Lifecycle ----
    def enter(self, ctx):
        self.attempt = 0
        self.state = self.new_attempt(ctx)
        ctx.audio.play_music("level3")
        ctx.audio.set_music_intensity(0.0)
        ctx.audio.play("rumble")

    def exit(self, ctx):
        self.state = None

    def new_attempt(self, ctx):
        loop = ctx.session.loop
        rocks, hazards = build_layout(ctx.layout_rng(LEVEL3, self.attempt), loop)
        return DismountState(
            attempt=self.attempt,
            worm=Worm.straight(DIVE_HEAD_START, DIVE_SEGMENTS, DIVE_SPACING),
            rocks=rocks,
            hazards=hazards,
            dive_speed=dive_speed(loop),
            segment_delay=segment_delay(loop),
            walk_range=walk_range(loop),
            ride_pos=DIVE_SEGMENTS - 1.0,
        )

    # ---- Queries ----
    def player_pos(self, st=None):
        st = st or self.state
        if st.phase == JUMPING:
            return st.jump.position()
        if st.phase == WALKING:
            return st.walk.position()
        if st.phase in (RIDE, CHARGING):
            return st.worm.point_at(st.ride_pos)
        if st.walk is not None:
            return st.walk.position()
        if st.jump is not None:
            return st.jump.position()
        return st.worm.point_at(st.ride_pos)

    def occupied_segment(self, st):
        return int(round(st.ride_pos))

    def walkable_rock(self, st, pos):
        best, best_d = None, float("inf")
        for rock in st.rocks:
            gap = pos.distance_to(rock.pos) - rock.radius
            if gap <= st.walk_range and gap < best_d:
                best, best_d = rock, gap
        return best

    # ---- Worm ----
    def move_worm(self, st, dt):
        st.t += dt
        head = pygame.Vector2(DIVE_HEAD_START[0] + DIVE_WORM_SPEED * st.t,
                              PATH_Y + DIVE_WEAVE * math.sin(st.t * 1.3))
        st.worm.head = head
        st.worm.follow(DIVE_SPACING)
        for i in range(len(st.worm)):
            sub = (st.t - DIVE_START - i * st.segment_delay) * st.dive_speed
            # never resurfaces
            st.worm.submersion[i] = max(st.worm.submersion[i], clamp(sub, 0.0, 1.0))

    # ---- Update ----
    def update(self, ctx, dt, inp):
        st = self.state
        if st is None:
            return
        self.move_worm(st, dt)
        if st.phase == RIDE:
            self.update_ride(ctx, st, dt, inp)
        elif st.phase == CHARGING:
            self.update_charging(ctx, st, dt, inp)
        elif st.phase == JUMPING:
            st.jump.progress = min(1.0, st.jump.progress + dt / JUMP_DURATION)
            if st.jump.progress >= 1.0:
                self.land(ctx, st)
        elif st.phase == WALKING:
            st.walk.progress = min(1.0, st.walk.progress + dt / st.walk.duration)
            if st.walk.progress >= 1.0:
                logger.info("walked off onto a rock")
                self.succeed(ctx, st, 0)
        elif st.phase in (DEATH, SUCCESS):
            st.timer += dt
            if st.timer >= RESULT_PAUSE:
                self.finish(ctx, st)

    def update_ride(self, ctx, st, dt, inp):
        if inp.was_pressed("jump"):
            st.phase = CHARGING
            st.hold = 0.0
            st.charge = 0.0
            st.aim = -math.pi / 2
            ctx.audio.play("charge")
            return
        pos = st.worm.point_at(st.ride_pos)
        if any(inp.was_pressed(d) for d in DIRECTIONS):
            rock = self.walkable_rock(st, pos)
            if rock is not None:
                dist = pos.distance_to(rock.pos)
                st.walk = Walk(start=pos, rock=rock, duration=max(dist / WALK_SPEED, 1e-3))
                st.phase = WALKING
                ctx.audio.play("jump")
                return
        if inp.is_down("left"):
            st.ride_pos += SHUFFLE_SPEED * dt
        if inp.is_down("right"):
            st.ride_pos -= SHUFFLE_SPEED * dt
        st.ride_pos = clamp(st.ride_pos, 0.0, len(st.worm) - 1.0)
        self.check_dive(ctx, st)

    def update_charging(self, ctx, st, dt, inp):
        if inp.is_down("left"):
            st.aim -= AIM_TURN_RATE * dt
        if inp.is_down("right"):
            st.aim += AIM_TURN_RATE * dt
        if inp.is_down("jump"):
            st.hold += dt
            st.charge = ease_in(min(st.hold / CHARGE_TIME, 1.0))
            ctx.audio.set_music_intensity(st.charge)
            self.check_dive(ctx, st)
            return
        self.launch(ctx, st)

    def check_dive(self, ctx, st):
        seg = self.occupied_segment(st)
        if st.worm.submersion[seg] >= SUBMERGE_THRESHOLD:
            self.die(ctx, st, "dragged under by the worm")
            return True
        return False

    def launch(self, ctx, st):
        start = st.worm.point_at(st.ride_pos)
        target = start + from_angle(st.aim, st.charge * MAX_JUMP_POWER)
        target.x = clamp(target.x, JUMP_MARGIN, W - JUMP_MARGIN)
        target.y = clamp(target.y, JUMP_MARGIN, H - JUMP_MARGIN)
        st.jump = JumpTrajectory(start=start, target=target, charge=st.charge)
        st.phase = JUMPING
        ctx.audio.play("jump")
        ctx.audio.set_music_intensity(0.0)
        logger.debug("jump charge %.2f aim %.2f -> (%.0f, %.0f)", st.charge, st.aim, target.x, target.y)

    def land(self, ctx, st):
        target = st.jump.target
        for rock in st.rocks:
            if target.distance_to(rock.pos) <= rock.hit_radius():
                points = land_points(st.jump.charge, ctx.session.loop)
                logger.info("landed on rock, charge %.2f", st.jump.charge)
                self.succeed(ctx, st, points)
                return
        cause = "lost in the open sand"
        for hz in st.hazards:
            if target.distance_to(hz.pos) < hz.hit_radius() and hz.active(st.t):
                cause = "sank in quicksand" if hz.kind == "quicksand" else "blown away by a geyser"
                break
        self.die(ctx, st, cause)

    # ---- Outcomes ----
    def succeed(self, ctx, st, points):
        ctx.session.add_score(points)
        ctx.session.add_life()
        ctx.session.next_loop()
        st.land_score = points
        st.phase = SUCCESS
        st.timer = 0.0
        ctx.audio.play("success")
        ctx.effects.trigger_flash(SAND, 0.25)
        ctx.effects.spawn_particles(self.player_pos(st), 14, color=SAND, speed=(30, 100))
        logger.info("dismounted: +%d, loop now %d", points, ctx.session.loop)

    def die(self, ctx, st, cause):
        pos = self.player_pos(st)
        st.phase = DEATH
        st.cause = cause
        st.timer = 0.0
        st.retry = ctx.session.lose_life()
        ctx.audio.play("death")
        ctx.audio.set_music_intensity(0.0)
        ctx.effects.trigger_shake(8.0, 0.4)
        ctx.effects.trigger_flash(BLOOD, 0.25)
        ctx.effects.spawn_particles(pos, 16, color=OCHRE, speed=(30, 110))
        logger.info("level 3 death: %s (lives %d)", cause, ctx.session.lives)

    def finish(self, ctx, st):
        if st.phase == SUCCESS:
            ctx.audio.play("transition")
            ctx.switch_state(LEVEL1)
        elif st.retry:
            self.attempt += 1
            self.state = self.new_attempt(ctx)
        else:
            ctx.switch_state(GAMEOVER)

    # ---- Render ----
    def render(self, ctx):
        st = self.state
        r = ctx.renderer
        r.clear(SAND)
        if st is None:
            return
        for hz in st.hazards:
            if hz.kind == "quicksand":
                r.ellipse(QUICKSAND, (hz.pos.x - hz.radius, hz.pos.y - hz.radius * 0.7,
                                      hz.radius * 2, hz.radius * 1.4))
            else:
                r.circle(GEYSER_CYAN, hz.pos, hz.radius, 0 if hz.active(st.t) else 2)

        pos = self.player_pos(st)
        for rock in st.rocks:
            r.circle(ROCK_GREY, rock.pos, rock.radius)
            if st.phase == RIDE and pos.distance_to(rock.pos) - rock.radius <= st.walk_range:
                r.circle(BONE, rock.pos, rock.radius + 3, 1)

        for i in range(len(st.worm) - 1, -1, -1):
            seg = st.worm.segments[i]
            scale = st.worm.scale(i)
            if scale <= 0.05:
                r.ellipse(DEEP_BROWN, (seg.x - 6, seg.y - 2, 12, 4))
                continue
            r.circle(WORM_DARK if i == 0 else WORM_SKIN, seg, 10 * scale)

        if st.phase == CHARGING:
            aim_to = pos + from_angle(st.aim, max(12.0, st.charge * MAX_JUMP_POWER))
            r.line(BONE, pos, aim_to, 1)
            r.rect(DEEP_BROWN, (pos.x - 15, pos.y - 22, 30, 4))
            r.rect(BLOOD, (pos.x - 15, pos.y - 22, int(30 * st.charge), 4))
        if st.phase == JUMPING:
            r.ellipse(DEEP_BROWN, (pos.x - 5, pos.y - 2, 10, 4))
            pos = pos - pygame.Vector2(0, st.jump.height())
        if st.phase != DEATH:
            r.circle(SPICE_BLUE, pos, 5)

        if st.phase == DEATH:
            render_banner(ctx, "SWALLOWED BY THE DESERT", st.cause, color=BLOOD)
        elif st.phase == SUCCESS:
            sub = f"+{st.land_score}  +1 life" if st.land_score else "walked off safely  +1 life"
            render_banner(ctx, "DISMOUNTED!", sub, color=SAND)
        elif st.phase == RIDE and st.attempt == 0 and st.t < 3.0:
            r.draw_text("Hold SPACE to charge, arrows to aim - or walk to a near rock",
                        W // 2, 40, color=DEEP_BROWN, size=18)
        render_hud(ctx)
