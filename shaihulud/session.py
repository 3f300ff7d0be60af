"""
Session bookkeeping shared by every screen: lives, score, loop counter and
the top-5 high-score table, plus the JSON store that keeps the table
between runs.
"""

import json
import logging
import os
import secrets
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

from shaihulud.config import (
    DEFAULT_INITIALS, HIGH_SCORE_FILE, INITIAL_LIVES, MAX_HIGH_SCORES,
    STATE_DIR_ENV,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighScore:
    score: int
    loop: int
    initials: str = DEFAULT_INITIALS


@dataclass
class SessionState:
    lives: int = INITIAL_LIVES
    score: int = 0
    loop: int = 1
    high_score: int = 0
    high_scores: List[HighScore] = field(default_factory=list)

    def reset_game(self):
        self.lives = INITIAL_LIVES
        self.score = 0
        self.loop = 1

    def lose_life(self):
        """Take one life. False means none were left to spend."""
        self.lives -= 1
        return self.lives >= 0

    def add_life(self):
        self.lives += 1

    def add_score(self, points):
        if points < 0:
            raise ValueError(f"score cannot go down (got {points})")
        self.score += int(points)
        if self.score > self.high_score:
            self.high_score = self.score

    def next_loop(self):
        self.loop += 1

    def score_qualifies(self):
        if self.score <= 0:
            return False
        if len(self.high_scores) < MAX_HIGH_SCORES:
            return True
        return self.score > self.high_scores[-1].score

    def record_high_score(self, initials=None):
        if self.score <= 0:
            return
        entry = HighScore(score=self.score, loop=self.loop,
                          initials=(initials or DEFAULT_INITIALS)[:3])
        # sorted() is stable, so an equal score lands after the older entry
        table = sorted(self.high_scores + [entry], key=lambda h: -h.score)
        self.high_scores = table[:MAX_HIGH_SCORES]
        self.high_score = max(self.high_score, self.high_scores[0].score)

    def load_high_scores(self, store):
        self.high_scores = store.load()[:MAX_HIGH_SCORES]
        self.high_score = self.high_scores[0].score if self.high_scores else 0

    def save_high_scores(self, store, initials=None):
        self.record_high_score(initials)
        store.save(self.high_scores)


# ---------- Persistence ----------
def state_dir() -> Path:
    """
    Directory for the persistent high-score table.

    Override for tests/dev via `SHAIHULUD_STATE_DIR`.
    """

    override = os.environ.get(STATE_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".shaihulud"


class HighScoreStore:
    """JSON-file table of the best runs. Never raises on I/O problems."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else state_dir() / HIGH_SCORE_FILE

    def load(self) -> List[HighScore]:
        p = self.path
        if not p.exists():
            return []
        try:
            payload = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable high-score table %s: %s", p, exc)
            return []

        if not isinstance(payload, list):
            logger.warning("ignoring malformed high-score table %s", p)
            return []
        table = []
        for raw in payload:
            if not isinstance(raw, dict):
                continue
            score = raw.get("score")
            if isinstance(score, bool) or not isinstance(score, int) or score <= 0:
                continue
            loop = raw.get("loop")
            initials = raw.get("initials")
            table.append(HighScore(
                score=score,
                loop=loop if isinstance(loop, int) and loop >= 1 else 1,
                initials=initials[:3] if isinstance(initials, str) and initials.strip()
                else DEFAULT_INITIALS,
            ))
        table.sort(key=lambda h: -h.score)
        return table[:MAX_HIGH_SCORES]

    def save(self, table: List[HighScore]) -> None:
        p = self.path
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            tmp = p.with_name(f"{p.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp")
            tmp.write_text(
                json.dumps([asdict(h) for h in table[:MAX_HIGH_SCORES]], indent=2) + "\n",
                encoding="utf-8",
            )
            tmp.replace(p)
        except OSError as exc:
            logger.warning("could not write high-score table %s: %s", p, exc)
