"""Title and game-over screens that bracket the mount/ride/dismount loop."""

import logging
import string

from shaihulud.config import (
    BONE, BURNT, DEEP_BROWN, GAMEOVER_BG, LEVEL1, OCHRE, SAND, TITLE, W, H,
)
from shaihulud.fsm import State

logger = logging.getLogger(__name__)

LETTERS = string.ascii_uppercase
INITIALS_LEN = 3
INPUT_LOCK = 0.5         # ignore keys still being mashed from the fatal moment


def start_pressed(inp):
    """Any key counts, except the mute toggle the host already handled."""
    return inp.any_key_pressed() and not inp.was_pressed("mute")


def render_table(ctx, top):
    r = ctx.renderer
    table = ctx.session.high_scores
    if not table:
        return
    r.draw_text("HIGH SCORES", W // 2, top, color=OCHRE, size=18)
    for i, h in enumerate(table):
        r.draw_text(f"{i + 1}. {h.initials:<3}  {h.score:>7}  loop {h.loop}",
                    W // 2, top + 20 + 16 * i, color=BONE, size=16)


class TitleScreen(State):
    def enter(self, ctx):
        ctx.effects.clear()
        ctx.audio.play_music("title")

    def update(self, ctx, dt, inp):
        if start_pressed(inp):
            ctx.session.reset_game()
            ctx.audio.play("transition")
            ctx.switch_state(LEVEL1)

    def render(self, ctx):
        r = ctx.renderer
        r.clear(DEEP_BROWN)
        r.draw_text("SHAI-HULUD", W // 2, H // 2 - 70, color=SAND, size=56, glow=BURNT)
        r.draw_text("Press any key to start", W // 2, H // 2 - 25, color=BONE, size=18)
        if ctx.session.high_score:
            r.draw_text(f"Best {ctx.session.high_score}", W // 2, H // 2, color=OCHRE, size=16)
        render_table(ctx, H // 2 + 30)


class GameOverScreen(State):
    def __init__(self):
        self.entering = False
        self.letters = []
        self.cursor = 0
        self.timer = 0.0

    def enter(self, ctx):
        self.timer = 0.0
        self.entering = ctx.session.score_qualifies()
        self.letters = [0] * INITIALS_LEN
        self.cursor = 0
        ctx.audio.play_music("gameover")
        logger.info("game over: score %d, loop %d", ctx.session.score, ctx.session.loop)

    @property
    def initials(self):
        return "".join(LETTERS[i] for i in self.letters)

    def update(self, ctx, dt, inp):
        self.timer += dt
        if self.timer < INPUT_LOCK:
            return
        if not self.entering:
            if start_pressed(inp):
                ctx.switch_state(TITLE)
            return

        for sym in inp.presses:
            if sym == "up":
                self.letters[self.cursor] = (self.letters[self.cursor] + 1) % len(LETTERS)
            elif sym == "down":
                self.letters[self.cursor] = (self.letters[self.cursor] - 1) % len(LETTERS)
            elif sym in ("jump", "confirm"):
                self.cursor += 1
                ctx.audio.play("key")
                if self.cursor >= INITIALS_LEN:
                    ctx.session.save_high_scores(ctx.store, self.initials)
                    logger.info("high score %d saved as %s", ctx.session.score, self.initials)
                    self.entering = False
                    break

    def render(self, ctx):
        r = ctx.renderer
        r.clear(GAMEOVER_BG)
        r.draw_text("GAME OVER", W // 2, 60, color=BURNT, size=56)
        r.draw_text(f"Score {ctx.session.score}   Loop {ctx.session.loop}",
                    W // 2, 100, color=SAND, size=20)
        if self.entering:
            r.draw_text("NEW HIGH SCORE - enter your initials", W // 2, 140, color=BONE, size=18)
            for i, idx in enumerate(self.letters):
                x = W // 2 + (i - 1) * 28
                color = SAND if i == self.cursor else BONE
                r.draw_text(LETTERS[idx], x, 172, color=color, size=32)
                if i == self.cursor:
                    r.rect(SAND, (x - 9, 186, 18, 2))
            return
        render_table(ctx, 140)
        r.draw_text("Press any key to restart", W // 2, H - 30, color=BONE, size=16)
