"""Top bar drawn over every level: lives, loop counter, score."""

from shaihulud.config import BONE, SAND, W

BAR_H = 18


def render_hud(ctx):
    r = ctx.renderer
    s = ctx.session
    r.overlay((0, 0, 0), 0.35, (0, 0, W, BAR_H))
    r.draw_text(f"Lives {max(s.lives, 0)}", 8, BAR_H // 2, color=BONE, size=16, align="left")
    r.draw_text(f"Loop {s.loop}", W // 2, BAR_H // 2, color=SAND, size=16)
    mute = " [M]" if getattr(ctx.audio, "muted", False) else ""
    r.draw_text(f"{s.score}{mute}", W - 8, BAR_H // 2, color=BONE, size=16, align="right")


def render_banner(ctx, title, subtitle=None, color=BONE):
    r = ctx.renderer
    r.overlay((0, 0, 0), 0.45, (0, 140, W, 80))
    r.draw_text(title, W // 2, 168, color=color, size=36)
    if subtitle:
        r.draw_text(subtitle, W // 2, 198, color=BONE, size=18)
