"""
Keyboard input, frozen into one InputSnapshot per frame.

Levels only ever see symbols ("left", "jump", ...), never pygame key codes.
"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple

import pygame

KEYMAP = {
    pygame.K_UP: "up", pygame.K_w: "up",
    pygame.K_DOWN: "down", pygame.K_s: "down",
    pygame.K_LEFT: "left", pygame.K_a: "left",
    pygame.K_RIGHT: "right", pygame.K_d: "right",
    pygame.K_SPACE: "jump",
    pygame.K_RETURN: "confirm", pygame.K_KP_ENTER: "confirm",
    pygame.K_m: "mute",
}

DIRECTIONS = ("up", "down", "left", "right")


@dataclass(frozen=True)
class InputSnapshot:
    held: FrozenSet[str] = frozenset()
    presses: Tuple[str, ...] = ()     # edge presses this frame, in order
    any_key: bool = False             # includes keys with no symbol

    def is_down(self, sym):
        return sym in self.held

    def was_pressed(self, sym):
        return sym in self.presses

    def any_key_pressed(self):
        return self.any_key or bool(self.presses)


NO_INPUT = InputSnapshot()


class Keyboard:
    """Collects pygame key events between frames."""

    def __init__(self, keymap=None):
        self.keymap = dict(KEYMAP if keymap is None else keymap)
        self._held = set()
        self._presses = []
        self._any = False

    def feed(self, event):
        if event.type == pygame.KEYDOWN:
            sym = self.keymap.get(event.key)
            self._any = True
            if sym is None:
                return
            # key repeat must not count as a new press
            if sym not in self._held:
                self._presses.append(sym)
            self._held.add(sym)
        elif event.type == pygame.KEYUP:
            sym = self.keymap.get(event.key)
            if sym is not None:
                self._held.discard(sym)

    def release_all(self):
        self._held.clear()

    def snapshot(self):
        snap = InputSnapshot(held=frozenset(self._held),
                             presses=tuple(self._presses),
                             any_key=self._any)
        self._presses = []
        self._any = False
        return snap
