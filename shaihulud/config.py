"""
Tunable values for SHAI-HULUD.

Everything the levels scale with the loop counter starts from a constant
here; the per-loop formulas live beside the level that uses them.
"""

import math

# ---------- Window & Timing ----------
W, H = 640, 360
FPS = 60
MAX_DT = 0.05            # host caps the frame delta to this
TAU = getattr(math, "tau", 2.0 * math.pi)
RESULT_PAUSE = 2.0       # seconds a DEATH / SUCCESS banner stays up

# ---------- States ----------
TITLE = "title"
LEVEL1 = "level1"
LEVEL2 = "level2"
LEVEL3 = "level3"
GAMEOVER = "gameover"

# ---------- Session ----------
INITIAL_LIVES = 3
MAX_HIGH_SCORES = 5
DEFAULT_INITIALS = "---"
STATE_DIR_ENV = "SHAIHULUD_STATE_DIR"
HIGH_SCORE_FILE = "highscores.json"

# ---------- Level 1: Mount ----------
GROUND_Y = 300
PLAYER_W = 12
PLAYER_H = 24
PLAYER_SPEED = 120
PLAYER_MIN_X = 10
PLAYER_MAX_X = W - 10
PLAYER_START_X = 80
GRAVITY = 900
JUMP_VELOCITY = -380
TORSO_TOP = 20           # torso box spans [y - TORSO_TOP, y - TORSO_BOTTOM]
TORSO_BOTTOM = 6

MOUNT_SEGMENTS = 12
MOUNT_GAP = 18
MOUNT_TAIL_CUTOFF = 10   # segments at or past this index never surface
MOUNT_RISE = 60
HEAD_RADIUS = 12
MOUNT_RADIUS = 22
MOUNT_SPEED_BASE = 140
MOUNT_SPEED_PER_LOOP = 20
MOUNT_SPEED_MAX = 260
ZONE_CENTER_RANGE = (200, 440)
ZONE_HALF_BASE = 110
ZONE_HALF_PER_LOOP = 10
ZONE_HALF_MIN = 50

QTE_POOL = ("up", "down", "left", "right")
QTE_LEN_BASE = 3
QTE_LEN_PER_LOOP = 1
QTE_LEN_MAX = 8
QTE_TIME_BASE = 3.5
QTE_TIME_DECAY = 0.5
QTE_TIME_MIN = 1.5
QTE_POINTS = 100

# ---------- Level 2: Ride ----------
WORLD_W, WORLD_H = W, H
RIDE_START_SEGMENTS = 8
RIDE_MAX_SEGMENTS = 40
RIDE_SPACING = 10
RIDE_BASE_SPEED = 110
RIDE_SPEED_RANGE = (0.5, 1.5)
RIDE_SPEED_CHANGE = 1.0
TURN_BASE = 3.2
TURN_PER_SEGMENT = 0.05
TURN_MIN = 1.6
RIDE_HEAD_R = 8
ENEMY_R = {"small": 6, "large": 14}
ENEMY_SPEED = {"soldier": 30, "ornithopter": 55, "harvester": 20}
ENEMY_SPEED_PER_LOOP = 0.1
SMALL_KINDS = ("soldier", "soldier", "ornithopter")
LARGE_KINDS = ("harvester", "ornithopter")
BASE_POINTS = {"soldier": 50, "ornithopter": 80, "harvester": 150}
FLEE_RADIUS = 80
FLEE_SPEED = 70
DANGER_RADIUS = 70
DANGER_BASE = 4
CLOSE_CALL_BONUS = 50
SPAWN_CLEARANCE = 60
COMBO_WINDOW = 1.5
COMBO_STEP = 0.5
WAVE_INTERVAL_BASE = 12.0
WAVE_INTERVAL_MIN = 6.0
RESUME_GRACE = 2.0
# (large, small) per wave; loops past the last table reuse it
WAVE_TABLES = (
    ((2, 3), (1, 2), (1, 2)),
    ((2, 4), (2, 3), (2, 3)),
    ((3, 4), (2, 4), (2, 4), (3, 3)),
)

# ---------- Level 3: Dismount ----------
DIVE_SEGMENTS = 10
DIVE_SPACING = 14
DIVE_HEAD_START = (200, 180)
DIVE_WORM_SPEED = 40
DIVE_WEAVE = 18
DIVE_START = 3.0
DIVE_SPEED_BASE = 0.5
DIVE_SPEED_PER_LOOP = 0.1
DIVE_SPEED_MAX = 1.2
SEGMENT_DELAY_BASE = 0.45
SEGMENT_DELAY_DECAY = 0.05
SEGMENT_DELAY_MIN = 0.15
SUBMERGE_THRESHOLD = 0.7
SHUFFLE_SPEED = 1.5
WALK_RANGE_BASE = 60
WALK_RANGE_DECAY = 8
WALK_RANGE_MIN = 20
WALK_SPEED = 60
CHARGE_TIME = 1.2
AIM_TURN_RATE = 2.5
MAX_JUMP_POWER = 220
JUMP_DURATION = 0.8
JUMP_ARC = 40
JUMP_MARGIN = 8
ROCK_HIT_PAD = 6
ROCK_HIT_FRACTION = 0.5
MAX_LAND_POINTS = 1000
ROCK_RADIUS_BASE = 28
ROCK_RADIUS_DECAY = 3
ROCK_RADIUS_MIN = 14
QUICKSAND_R = 26
GEYSER_R = 18
GEYSER_PERIOD = 3.0
GEYSER_ACTIVE = 1.0

# ---------- Colors ----------
SAND        = (255, 191, 0)
OCHRE       = (204, 119, 34)
BURNT       = (204, 85, 0)
DEEP_BROWN  = (59, 34, 0)
BONE        = (245, 240, 220)
SPICE_BLUE  = (52, 152, 219)
NIGHT       = (10, 8, 0)
BLOOD       = (170, 30, 20)
WORM_SKIN   = (150, 110, 70)
WORM_DARK   = (95, 66, 40)
ROCK_GREY   = (120, 110, 100)
QUICKSAND   = (160, 120, 60)
GEYSER_CYAN = (120, 220, 230)
GAMEOVER_BG = (26, 5, 0)
