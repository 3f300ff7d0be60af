"""
pygame host: window, frame clock, event pump.

The Game owns the GameContext and drives it once per frame:
    events -> InputSnapshot -> ctx.tick(dt, inp) -> ctx.draw() -> effects -> flip
"""

import logging

import pygame

from shaihulud.audio import Audio
from shaihulud.config import FPS, MAX_DT, NIGHT, TITLE, W, H
from shaihulud.context import GameContext
from shaihulud.effects import Effects
from shaihulud.inputs import Keyboard
from shaihulud.levels import register_levels
from shaihulud.render import Renderer

logger = logging.getLogger(__name__)


class Game:
    def __init__(self, seed=0, fps=FPS, mute=False, store=None):
        pygame.init()
        pygame.display.set_caption("SHAI-HULUD")
        self.screen = pygame.display.set_mode((W, H))
        self.clock = pygame.time.Clock()
        self.fps = fps
        self.world = pygame.Surface((W, H))

        self.keyboard = Keyboard()
        audio = Audio()
        if mute:
            audio.toggle_mute()
        kwargs = {"store": store} if store is not None else {}
        self.ctx = GameContext(renderer=Renderer(self.world), audio=audio,
                               effects=Effects(), seed=seed, **kwargs)
        self.ctx.session.load_high_scores(self.ctx.store)
        register_levels(self.ctx.machine)
        logger.info("starting: seed %s, %d high scores loaded", seed, len(self.ctx.session.high_scores))
        self.ctx.switch_state(TITLE)

    # ---- Game Loop ----
    def run(self):
        while True:
            dt = min(self.clock.tick(self.fps) / 1000.0, MAX_DT)
            if not self.handle_events():
                return
            self.step(dt, self.keyboard.snapshot())

    def step(self, dt, inp):
        ctx = self.ctx
        if inp.was_pressed("mute"):
            ctx.audio.toggle_mute()
        ctx.effects.update(dt)
        ctx.audio.update(dt)
        ctx.tick(dt, inp)
        self.draw()

    # ---- Draw ----
    def draw(self):
        self.ctx.draw()
        self.ctx.effects.draw(self.ctx.renderer)
        # shake moves the world, the letterbox stays put
        ox, oy = self.ctx.effects.shake_offset()
        self.screen.fill(NIGHT)
        self.screen.blit(self.world, (int(ox), int(oy)))
        pygame.display.flip()

    # ---- Input ----
    def handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                return False
            if e.type == pygame.KEYDOWN and e.key == pygame.K_ESCAPE:
                return False
            if e.type == pygame.WINDOWFOCUSLOST:
                self.keyboard.release_all()
            self.keyboard.feed(e)
        return True

    def close(self):
        self.ctx.audio.stop_music()
        pygame.quit()
