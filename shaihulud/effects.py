"""
Cosmetic feedback: screen shake, full-screen flash and sand particles.

Nothing here feeds back into the simulation; levels call the trigger_*
and spawn_* methods at deaths, kills, landings and near misses.
"""

import math
import random

import pygame

from shaihulud.config import SAND, TAU, W, H
from shaihulud.geometry import clamp, lerp

SHAKE_DEFAULT = 5.0
SHAKE_DURATION = 0.3
FLASH_DURATION = 0.15
FLASH_ALPHA = 0.6
PARTICLE_GRAVITY = 50.0


class Particle:
    __slots__ = ("pos", "vel", "life", "age", "color", "size")

    def __init__(self, pos, vel, life, color, size=2):
        self.pos = pygame.Vector2(pos)
        self.vel = pygame.Vector2(vel)
        self.life = life
        self.age = 0.0
        self.color = color
        self.size = size

    def update(self, dt):
        self.age += dt
        self.pos += self.vel * dt
        self.vel.y += PARTICLE_GRAVITY * dt
        return self.age < self.life

    def draw(self, renderer):
        t = clamp(1.0 - self.age / self.life, 0.0, 1.0)
        s = max(1, int(self.size * (0.5 + 0.5 * t)))
        renderer.rect(self.color, (self.pos.x - s / 2, self.pos.y - s / 2, s, s))


class Effects:
    def __init__(self, rng=None, enabled=True):
        self.rng = rng if rng is not None else random.Random()
        self.enabled = enabled
        self.particles = []
        self.shake = 0.0
        self.shake_time = 0.0
        self.shake_duration = 0.0
        self.flash_color = None
        self.flash_time = 0.0
        self.flash_duration = 0.0

    # ---- Triggers ----
    def trigger_shake(self, intensity=SHAKE_DEFAULT, duration=SHAKE_DURATION):
        if not self.enabled:
            return
        self.shake = max(self.shake, intensity) if self.shake_time < self.shake_duration else intensity
        self.shake_time = 0.0
        self.shake_duration = duration

    def trigger_flash(self, color=(255, 255, 255), duration=FLASH_DURATION):
        self.flash_color = color
        self.flash_time = 0.0
        self.flash_duration = duration

    def spawn_particles(self, pos, count, color=SAND, speed=(20, 80), life=0.8, size=(1, 4)):
        for _ in range(count):
            ang = self.rng.random() * TAU
            spd = self.rng.uniform(*speed)
            vel = pygame.Vector2(math.cos(ang), math.sin(ang)) * spd
            self.particles.append(Particle(pos, vel, life, color, size=self.rng.uniform(*size)))

    def clear(self):
        self.particles.clear()
        self.shake_time = self.shake_duration = 0.0
        self.flash_time = self.flash_duration = 0.0

    # ---- Frame ----
    def update(self, dt):
        if self.shake_time < self.shake_duration:
            self.shake_time += dt
        if self.flash_time < self.flash_duration:
            self.flash_time += dt
        self.particles = [p for p in self.particles if p.update(dt)]

    def shake_offset(self):
        if self.shake_time >= self.shake_duration:
            return (0, 0)
        t = 1.0 - self.shake_time / self.shake_duration
        amp = lerp(0.0, self.shake, t)
        return (int(self.rng.uniform(-1.0, 1.0) * amp),
                int(self.rng.uniform(-1.0, 1.0) * amp))

    def flash_alpha(self):
        if self.flash_color is None or self.flash_time >= self.flash_duration:
            return 0.0
        return lerp(FLASH_ALPHA, 0.0, self.flash_time / self.flash_duration)

    def draw(self, renderer):
        for p in self.particles:
            p.draw(renderer)
        alpha = self.flash_alpha()
        if alpha > 0.0:
            renderer.overlay(self.flash_color, alpha, (0, 0, W, H))
