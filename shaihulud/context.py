"""
GameContext: everything a screen may touch, owned by the host and handed
to every update/render call.
"""

import random
from dataclasses import dataclass, field
from typing import Any

from shaihulud.fsm import StateMachine
from shaihulud.session import HighScoreStore, SessionState


@dataclass
class GameContext:
    renderer: Any
    audio: Any
    effects: Any
    store: Any = field(default_factory=HighScoreStore)
    session: SessionState = field(default_factory=SessionState)
    machine: StateMachine = field(default_factory=StateMachine)
    seed: int = 0

    def switch_state(self, name):
        self.machine.switch_state(name, self)

    def layout_rng(self, level, attempt=0):
        """Deterministic RNG for a level layout: same (seed, level, loop, attempt), same layout."""
        return random.Random(f"{self.seed}:{level}:{self.session.loop}:{attempt}")

    def tick(self, dt, inp):
        self.machine.update_state(self, dt, inp)

    def draw(self):
        self.machine.render_state(self)
