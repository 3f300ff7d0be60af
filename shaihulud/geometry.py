"""
Small math helpers shared by the levels.

The wrap_* functions implement shortest-path arithmetic on a torus: on an
axis of length ``size`` the signed delta from b to a is
``((a - b + size/2) mod size) - size/2``.
"""

import math

import pygame


def clamp(v, a, b):
    return a if v < a else b if v > b else v


def lerp(a, b, t):
    return a + (b - a) * t


def ease_in(t):
    """Quadratic ease-in over [0, 1]."""
    t = clamp(t, 0.0, 1.0)
    return t * t


def rand_between(rng, a_b):
    return rng.uniform(a_b[0], a_b[1])


def wrap_axis(a, b, size):
    """Signed shortest delta a - b on an axis of length *size*."""
    return (a - b + size / 2.0) % size - size / 2.0


def wrap_delta(a, b, size):
    """Shortest vector from b to a in a field of *size* (w, h)."""
    return pygame.Vector2(wrap_axis(a[0], b[0], size[0]),
                          wrap_axis(a[1], b[1], size[1]))


def wrap_distance(a, b, size):
    return wrap_delta(a, b, size).length()


def wrap_position(p, size):
    """Fold *p* back into [0, w) x [0, h)."""
    return pygame.Vector2(p[0] % size[0], p[1] % size[1])


def from_angle(angle, length=1.0):
    return pygame.Vector2(math.cos(angle) * length, math.sin(angle) * length)
