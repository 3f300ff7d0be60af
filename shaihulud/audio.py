"""
Chiptune SFX and looping music built from synthesised tones.

If the mixer cannot start (no audio device, CI) the Audio object stays
usable: every call still updates its bookkeeping but nothing is played.
"""

import logging
import math
from array import array

import pygame

from shaihulud.geometry import clamp

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
MUSIC_VOLUME = 0.35

# (freq, seconds) pairs; freq 0 is a rest
MUSIC = {
    "title": {
        "notes": [
            (220, 0.4), (0, 0.1), (247, 0.4), (0, 0.1), (262, 0.6), (0, 0.2),
            (220, 0.3), (0, 0.1), (196, 0.4), (0, 0.1), (220, 0.8), (0, 0.4),
            (262, 0.4), (0, 0.1), (294, 0.4), (0, 0.1), (330, 0.6), (0, 0.2),
            (294, 0.3), (0, 0.1), (262, 0.4), (0, 0.1), (220, 0.8), (0, 0.6),
        ],
        "tempo": 1.0,
    },
    "level1": {
        "notes": [
            (330, 0.2), (0, 0.05), (330, 0.2), (0, 0.05), (392, 0.3), (0, 0.1),
            (330, 0.2), (0, 0.05), (294, 0.3), (0, 0.1), (262, 0.4), (0, 0.2),
            (294, 0.2), (0, 0.05), (330, 0.2), (0, 0.05), (294, 0.2), (0, 0.05),
            (262, 0.3), (0, 0.1), (220, 0.4), (0, 0.3),
        ],
        "tempo": 0.8,
    },
    "level2": {
        "notes": [
            (196, 0.15), (262, 0.15), (330, 0.15), (392, 0.15),
            (330, 0.15), (262, 0.15), (196, 0.3), (0, 0.1),
            (220, 0.15), (294, 0.15), (349, 0.15), (440, 0.15),
            (349, 0.15), (294, 0.15), (220, 0.3), (0, 0.1),
            (262, 0.15), (330, 0.15), (392, 0.15), (523, 0.3),
            (0, 0.1), (392, 0.15), (330, 0.15), (262, 0.3), (0, 0.3),
        ],
        "tempo": 0.7,
    },
    "level3": {
        "notes": [
            (440, 0.5), (0, 0.1), (392, 0.5), (0, 0.1),
            (349, 0.5), (0, 0.1), (330, 0.7), (0, 0.3),
            (349, 0.5), (0, 0.1), (392, 0.3), (0, 0.1),
            (349, 0.3), (0, 0.1), (330, 0.5), (0, 0.1),
            (294, 0.7), (0, 0.5),
        ],
        "tempo": 1.2,
    },
    "gameover": {
        "notes": [(196, 0.6), (0, 0.1), (175, 0.6), (0, 0.1), (147, 1.2), (0, 0.8)],
        "tempo": 1.0,
    },
}


# ---------- Tiny tone synth (no numpy) ----------
def make_tone(freq=440.0, duration=0.08, volume=0.45, samplerate=SAMPLE_RATE):
    n = int(duration * samplerate)
    amp = int(32767 * max(0.0, min(1.0, volume)))
    buf = array("h", [0] * n)
    two_pi_f = 2.0 * math.pi * freq
    for i in range(n):
        fade = 1.0 - (i / n) ** 0.5
        buf[i] = int(amp * fade * math.sin(two_pi_f * (i / samplerate)))
    return pygame.mixer.Sound(buffer=buf.tobytes())


def make_dual_tone(f1=440, f2=660, duration=0.09, volume=0.5, samplerate=SAMPLE_RATE):
    n = int(duration * samplerate)
    amp = int(32767 * max(0.0, min(1.0, volume))) // 2
    buf = array("h", [0] * n)
    two_pi_1 = 2.0 * math.pi * f1
    two_pi_2 = 2.0 * math.pi * f2
    for i in range(n):
        s = int(amp * math.sin(two_pi_1 * (i / samplerate))) + int(amp * math.sin(two_pi_2 * (i / samplerate)))
        buf[i] = s
    return pygame.mixer.Sound(buffer=buf.tobytes())


class Audio:
    def __init__(self, enable=True):
        self.enabled = False
        self.muted = False
        self.music = None
        self.intensity = 0.0
        self._note = 0
        self._note_t = 0.0
        self._tones = {}
        self._sfx = {}
        if enable:
            self._init_mixer()

    def _init_mixer(self):
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 1, 256)
            pygame.mixer.init()
            self.enabled = pygame.mixer.get_init() is not None
        except pygame.error as exc:
            logger.info("audio disabled: %s", exc)
            self.enabled = False
        if not self.enabled:
            return
        try:
            self._sfx = {
                "jump":       make_dual_tone(200, 400, 0.15, 0.45),
                "hook":       make_dual_tone(600, 800, 0.08, 0.5),
                "key":        make_tone(880, 0.05, 0.4),
                "eat":        make_dual_tone(150, 110, 0.2, 0.5),
                "death":      make_dual_tone(300, 100, 0.6, 0.5),
                "success":    make_dual_tone(600, 800, 0.4, 0.45),
                "rumble":     make_dual_tone(40, 55, 0.6, 0.55),
                "transition": make_dual_tone(300, 600, 0.2, 0.4),
                "close_call": make_dual_tone(900, 1200, 0.12, 0.45),
                "wave":       make_tone(520, 0.12, 0.4),
                "charge":     make_tone(700, 0.04, 0.3),
            }
        except pygame.error as exc:
            logger.warning("could not build sound effects: %s", exc)
            self.enabled = False

    # ---- SFX ----
    def play(self, key):
        if not self.enabled or self.muted:
            return
        s = self._sfx.get(key)
        if s:
            s.play()

    # ---- Music ----
    def play_music(self, name):
        self.stop_music()
        if name not in MUSIC:
            return
        self.music = name
        self._note = 0
        self._note_t = 0.0
        self._start_note()

    def stop_music(self):
        self.music = None
        self._note = 0
        self._note_t = 0.0

    def set_music_intensity(self, value):
        self.intensity = clamp(float(value), 0.0, 1.0)

    def toggle_mute(self):
        self.muted = not self.muted
        if self.muted and self.enabled:
            pygame.mixer.stop()
        return self.muted

    def _tempo(self):
        # busier scenes push the tune up to a third faster
        return MUSIC[self.music]["tempo"] / (1.0 + 0.33 * self.intensity)

    def _start_note(self):
        freq, dur = MUSIC[self.music]["notes"][self._note]
        self._note_t = dur * self._tempo()
        if freq <= 0 or not self.enabled or self.muted:
            return
        key = (freq, round(self._note_t * 0.9, 3))
        tone = self._tones.get(key)
        if tone is None:
            tone = self._tones[key] = make_tone(freq, key[1], 0.35)
        tone.set_volume(MUSIC_VOLUME * (0.6 + 0.4 * self.intensity))
        tone.play()

    def update(self, dt):
        if self.music is None:
            return
        self._note_t -= dt
        while self._note_t <= 0.0:
            notes = MUSIC[self.music]["notes"]
            self._note = (self._note + 1) % len(notes)
            carry = self._note_t
            self._start_note()
            self._note_t += carry
