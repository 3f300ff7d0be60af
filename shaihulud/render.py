"""
pygame drawing backend. Levels call these methods as fire-and-forget draw
intents; nothing returned here feeds back into the game.
"""

import pygame

from shaihulud.config import BONE, W, H


class Renderer:
    def __init__(self, surface=None):
        self.surface = surface if surface is not None else pygame.Surface((W, H))
        self._fonts = {}

    def font(self, size):
        f = self._fonts.get(size)
        if f is None:
            if not pygame.font.get_init():
                pygame.font.init()
            f = self._fonts[size] = pygame.font.Font(None, size)
        return f

    def clear(self, color):
        self.surface.fill(color)

    def draw_text(self, text, x, y, color=BONE, size=16, align="center", glow=None):
        font = self.font(size)
        img = font.render(str(text), True, color)
        r = img.get_rect()
        if align == "left":
            r.midleft = (int(x), int(y))
        elif align == "right":
            r.midright = (int(x), int(y))
        else:
            r.center = (int(x), int(y))
        if glow is not None:
            g = font.render(str(text), True, glow)
            for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
                self.surface.blit(g, r.move(dx, dy))
        self.surface.blit(img, r)

    def circle(self, color, center, radius, width=0):
        pygame.draw.circle(self.surface, color, (int(center[0]), int(center[1])),
                           max(1, int(radius)), width)

    def rect(self, color, rect, width=0):
        pygame.draw.rect(self.surface, color, pygame.Rect(rect), width)

    def line(self, color, a, b, width=1):
        pygame.draw.line(self.surface, color, a, b, width)

    def ellipse(self, color, rect, width=0):
        pygame.draw.ellipse(self.surface, color, pygame.Rect(rect), width)

    def overlay(self, color, alpha, rect=(0, 0, W, H)):
        r = pygame.Rect(rect)
        layer = pygame.Surface(r.size, pygame.SRCALPHA)
        layer.fill((color[0], color[1], color[2], int(255 * max(0.0, min(1.0, alpha)))))
        self.surface.blit(layer, r.topleft)
