# ============================================================================
# MATCHING & SCORING
# ============================================================================
MIN_RUN_LENGTH = 3
POINTS_PER_GEM = 10

# ============================================================================
# ITERATION CAPS
# ============================================================================
# Re-roll passes allowed while clearing matches out of a freshly rolled board.
MAX_GENERATION_PASSES = 1000
# Whole-board regenerations allowed while looking for a board with a legal move.
MAX_PLAYABLE_BOARD_ATTEMPTS = 200
# Clear/drop/refill rounds allowed for a single swap before it is treated as a bug.
MAX_CASCADE_DEPTH = 100

# ============================================================================
# TIMER
# ============================================================================
DEFAULT_TICK_SECONDS = 1

# ============================================================================
# ACHIEVEMENTS
# ============================================================================
SPEED_DEMON_SECONDS = 60
HIGH_SCORE_THRESHOLD = 500
