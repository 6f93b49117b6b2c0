"""Shared constants for Armada. All game-wide configuration lives here."""

# --- Display ---
CANVAS_WIDTH = 320   # logical panel size; everything is drawn at this size
CANVAS_HEIGHT = 240
DEFAULT_SCALE = 3    # window pixels per canvas pixel
FPS = 60

# --- Timing ---
TICK_DURATION_MS = 1  # one logical tick per millisecond
MAX_TICKS_PER_FRAME = 100  # cap so a stalled frame can't spiral

# --- Board ---
GRID_ROWS = 10
GRID_COLS = 10
GRID_CELLS = GRID_ROWS * GRID_COLS
SHIP_LENGTHS = (5, 4, 3, 3, 2)
FLEET_CELLS = sum(SHIP_LENGTHS)  # 17
PLACEMENT_ATTEMPTS = 10  # fleet restarts before random placement gives up

# --- Board geometry (canvas pixels) ---
CELL_SIZE_PX = 16
PLAYER_GRID_X_PX = 0
ENEMY_GRID_X_PX = 160
GRID_Y_PX = 40
HEADER_HEIGHT_PX = 40
STATUS_Y_PX = 210

# --- Protocol cadences (ticks) ---
READY_RESEND_TICKS = 500
ATTACK_RESEND_TICKS = 100
PEER_TIMEOUT_TICKS = 120_000     # 2 minutes of silence during the peer's turn
POST_READY_GRACE_TICKS = 2000    # keep broadcasting READY after deciding
MAX_LINE_LENGTH = 31             # inbound characters kept per line

# --- Input ---
JOY_CENTER_RAW = 512
JOY_DEADZONE_RAW = 40
JOY_MIN_RAW = JOY_CENTER_RAW - JOY_DEADZONE_RAW
JOY_MAX_RAW = JOY_CENTER_RAW + JOY_DEADZONE_RAW
JOY_FULL_RAW = 1023
JOY_REPEAT_DELAY_TICKS = 150
LONG_PRESS_TICKS = 500     # held at least this long -> rotate instead of place
HOLD_LIMIT_TICKS = 1000    # a hold this long counts as long without release
INVALID_NOTICE_TICKS = 500

# --- AI ---
AI_QUEUE_CAPACITY = 4
AI_HIT_PROBABILITY_LIEUTENANT = 0.10
AI_HIT_PROBABILITY_CAPTAIN = 0.20
AI_HIT_PROBABILITY_ADMIRAL = 0.50
LFSR_DEFAULT_SEED = 0xACE1
LFSR_TAPS = 0xB400

# --- Networking ---
DEFAULT_PORT = 23456
MAX_DATAGRAM_SIZE = 512

# --- Audio ---
AUDIO_SAMPLE_RATE = 22050
AUDIO_VOLUME = 0.25

# --- Colors ---
COLOR_BLACK = (0, 0, 0)
COLOR_WHITE = (255, 255, 255)
COLOR_DARK_GRAY = (64, 64, 64)
COLOR_LIGHT_GRAY = (128, 128, 128)
COLOR_GREEN = (0, 255, 0)
COLOR_RED = (255, 0, 0)
COLOR_YELLOW = (255, 255, 0)
COLOR_ORANGE = (255, 128, 0)
COLOR_CYAN = (0, 255, 255)
COLOR_NAVY = (0, 0, 128)
