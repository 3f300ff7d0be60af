from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from shaihulud.context import GameContext
from shaihulud.inputs import InputSnapshot
from shaihulud.levels import register_levels


class _FakeRenderer:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)

    def clear(self, color) -> None:
        self._record("clear", color)

    def draw_text(self, text, x, y, color=None, size=16, align="center", glow=None) -> None:
        self._record("text", str(text), x, y, glow)

    def circle(self, color, center, radius, width=0) -> None:
        self._record("circle", color, center, radius)

    def rect(self, color, rect, width=0) -> None:
        self._record("rect", color, rect)

    def line(self, color, a, b, width=1) -> None:
        self._record("line", color, a, b)

    def ellipse(self, color, rect, width=0) -> None:
        self._record("ellipse", color, rect)

    def overlay(self, color, alpha, rect=None) -> None:
        self._record("overlay", color, alpha)

    def texts(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "text"]


class _FakeAudio:
    def __init__(self) -> None:
        self.played: list[str] = []
        self.music = None
        self.intensity = 0.0
        self.muted = False

    def play(self, key) -> None:
        self.played.append(key)

    def play_music(self, name) -> None:
        self.music = name

    def stop_music(self) -> None:
        self.music = None

    def set_music_intensity(self, value) -> None:
        self.intensity = max(0.0, min(1.0, float(value)))

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        return self.muted

    def update(self, dt) -> None:
        pass


class _FakeEffects:
    def __init__(self) -> None:
        self.shakes: list[tuple] = []
        self.flashes: list[tuple] = []
        self.particles = 0
        self.cleared = 0

    def clear(self) -> None:
        self.particles = 0
        self.cleared += 1

    def trigger_shake(self, intensity=5.0, duration=0.3) -> None:
        self.shakes.append((intensity, duration))

    def trigger_flash(self, color=(255, 255, 255), duration=0.15) -> None:
        self.flashes.append((color, duration))

    def spawn_particles(self, pos, count, **kwargs) -> None:
        self.particles += count

    def update(self, dt) -> None:
        pass

    def shake_offset(self):
        return (0, 0)

    def draw(self, renderer) -> None:
        pass


class _MemoryStore:
    def __init__(self, table=None) -> None:
        self.table = list(table or [])
        self.saves = 0

    def load(self):
        return list(self.table)

    def save(self, table) -> None:
        self.table = list(table)
        self.saves += 1


def _keys(*presses, held=()) -> InputSnapshot:
    """One frame of input: *presses* are edge presses, also counted as held."""
    return InputSnapshot(held=frozenset(held) | frozenset(presses),
                         presses=tuple(presses),
                         any_key=bool(presses))


@pytest.fixture
def ctx() -> GameContext:
    c = GameContext(renderer=_FakeRenderer(), audio=_FakeAudio(), effects=_FakeEffects(),
                    store=_MemoryStore(), seed=7)
    register_levels(c.machine)
    return c


@pytest.fixture
def keys():
    return _keys
