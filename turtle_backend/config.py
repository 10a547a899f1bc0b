import os

# ---- Arena ----
ARENA_MIN = -10.0
ARENA_MAX = 10.0

# ---- Mission controller ----
MISSION_TICK_PERIOD = float(os.environ.get("MISSION_TICK_PERIOD", "0.1"))  # seconds between ticks
MISSION_DT = 0.1             # velocity scale per tick (kinematics stay fixed if the tick period is tuned)
ARRIVAL_TOLERANCE = 0.1      # world units
HEADING_TOLERANCE = 0.2      # rad; above this the agent rotates in place
MAX_LINEAR = 1.0
MAX_ANGULAR = 1.0
MAX_MISSION_TICKS = int(os.environ.get("MAX_MISSION_TICKS", "6000"))  # 10 min at 10 Hz

# ---- Recording ----
RECORD_MIN_SPACING = 0.2     # drop recorded points closer than this to the previous kept one

# ---- Outbound queue per client ----
CLIENT_QUEUE_MAX = 1000

# ---- Persistence ----
PATH_DB = os.environ.get("PATH_DB", "turtle_paths.db")

# ---- Logging ----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ---- HTTP ----
CORS_ORIGINS = ["*"]
