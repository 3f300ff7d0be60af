"""
Screen/level state machine.

Each screen is a State with required update/render and optional
enter/exit hooks. Exactly one state is active; switch_state runs the
outgoing exit, flips the active name, then runs the incoming enter, all
before it returns.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class UnknownStateError(KeyError):
    pass


class State(ABC):
    def enter(self, ctx):
        pass

    def exit(self, ctx):
        pass

    @abstractmethod
    def update(self, ctx, dt, inp):
        ...

    @abstractmethod
    def render(self, ctx):
        ...


class StateMachine:
    def __init__(self):
        self._states = {}
        self._current = None

    @property
    def current(self):
        return self._current

    def get(self, name):
        try:
            return self._states[name]
        except KeyError:
            raise UnknownStateError(name) from None

    def register_state(self, name, state):
        if not isinstance(state, State):
            raise TypeError(f"{name!r} must be a State, got {type(state).__name__}")
        self._states[name] = state

    def switch_state(self, name, ctx):
        incoming = self.get(name)
        if self._current is not None:
            self._states[self._current].exit(ctx)
        logger.info("state %s -> %s", self._current, name)
        self._current = name
        incoming.enter(ctx)

    def update_state(self, ctx, dt, inp):
        if self._current is not None:
            self._states[self._current].update(ctx, dt, inp)

    def render_state(self, ctx):
        if self._current is not None:
            self._states[self._current].render(ctx)
