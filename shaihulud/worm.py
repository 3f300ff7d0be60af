"""
The sandworm as an ordered chain of segments, head first.

The head position is authoritative. Body segments are either dragged
behind their predecessor (follow) or laid out by a placement function
(place). Each segment also carries a submersion value: 0 on the surface,
1 fully under the sand.
"""

import math

import pygame

from shaihulud.geometry import clamp, wrap_delta, wrap_position


class Worm:
    def __init__(self, segments):
        self.segments = [pygame.Vector2(p) for p in segments]
        self.submersion = [0.0] * len(self.segments)

    @classmethod
    def straight(cls, head, count, spacing, heading=0.0):
        """A worm laid out in a line trailing away from *heading*."""
        back = pygame.Vector2(-math.cos(heading), -math.sin(heading)) * spacing
        head = pygame.Vector2(head)
        return cls([head + back * i for i in range(count)])

    def __len__(self):
        return len(self.segments)

    @property
    def head(self):
        return self.segments[0]

    @head.setter
    def head(self, pos):
        self.segments[0] = pygame.Vector2(pos)

    def follow(self, spacing, size=None):
        """Pull every segment to within *spacing* of the one ahead of it."""
        for i in range(1, len(self.segments)):
            lead = self.segments[i - 1]
            if size is None:
                d = self.segments[i] - lead
            else:
                d = wrap_delta(self.segments[i], lead, size)
            dist = d.length()
            if dist > spacing:
                p = lead + d * (spacing / dist)
                self.segments[i] = wrap_position(p, size) if size is not None else p

    def place(self, fn):
        for i in range(len(self.segments)):
            self.segments[i] = pygame.Vector2(fn(i))

    def grow(self, n=1):
        for _ in range(n):
            self.segments.append(pygame.Vector2(self.segments[-1]))
            self.submersion.append(self.submersion[-1])

    def point_at(self, s):
        """Interpolated position at fractional segment index *s*."""
        s = clamp(s, 0.0, len(self.segments) - 1.0)
        i = int(math.floor(s))
        if i >= len(self.segments) - 1:
            return pygame.Vector2(self.segments[-1])
        return self.segments[i].lerp(self.segments[i + 1], s - i)

    def scale(self, i):
        return 1.0 - self.submersion[i]

    def nearest(self, point, indices=None, size=None):
        """(index, distance) of the closest segment among *indices*."""
        best, best_d = None, float("inf")
        for i in (range(len(self.segments)) if indices is None else indices):
            seg = self.segments[i]
            d = wrap_delta(point, seg, size).length() if size is not None else seg.distance_to(point)
            if d < best_d:
                best, best_d = i, d
        return best, best_d
