"""The five screens of the game, keyed by state name."""

from shaihulud.config import GAMEOVER, LEVEL1, LEVEL2, LEVEL3, TITLE
from shaihulud.levels.dismount import DismountLevel
from shaihulud.levels.mount import MountLevel
from shaihulud.levels.ride import RideLevel
from shaihulud.levels.screens import GameOverScreen, TitleScreen


def register_levels(machine):
    machine.register_state(TITLE, TitleScreen())
    machine.register_state(LEVEL1, MountLevel())
    machine.register_state(LEVEL2, RideLevel())
    machine.register_state(LEVEL3, DismountLevel())
    machine.register_state(GAMEOVER, GameOverScreen())
    return machine
