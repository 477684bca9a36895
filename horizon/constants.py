"""
Central configuration constants for horizon simulation.

Defines default values, thresholds, and configuration parameters
used across multiple modules.
"""

# ============================================================================
# Population Configuration
# ============================================================================

# Accepted creature count range for a new simulation (inclusive)
MIN_CREATURES = 1
MAX_CREATURES = 10

# Creature i (0-based) starts at i * INITIAL_SPACING on the horizon
INITIAL_SPACING = 2.0

# Gold carried by a freshly created creature
INITIAL_GOLD = 0.0

# First id handed out by a new horizon (ids are never reused)
FIRST_ENTITY_ID = 1


# ============================================================================
# Movement Configuration
# ============================================================================

# Random factor bounds (closed interval)
FACTOR_MIN = -1.0
FACTOR_MAX = 1.0

# Displacement rules:
#   additive:    position += factor * scale
#   gold_scaled: position += factor * scale * gold
DISPLACEMENT_ADDITIVE = "additive"
DISPLACEMENT_GOLD_SCALED = "gold_scaled"
DISPLACEMENT_MODES = (DISPLACEMENT_ADDITIVE, DISPLACEMENT_GOLD_SCALED)
DISPLACEMENT_MODE_DEFAULT = DISPLACEMENT_ADDITIVE
DISPLACEMENT_SCALE_DEFAULT = 1.0


# ============================================================================
# Interaction Configuration
# ============================================================================

# Two entities merge when |a - b| <= MERGE_DISTANCE
MERGE_DISTANCE_DEFAULT = 0.5

# Guardian eliminates entities with |e - guardian| < CAPTURE_RADIUS (strict)
CAPTURE_RADIUS_DEFAULT = 0.5

# Guardian starts left of the creature line and stays put unless enabled
GUARDIAN_POSITION_DEFAULT = -5.0
GUARDIAN_MOVES_DEFAULT = False

# Guardian id sits outside the creature id space
GUARDIAN_ID = 0


# ============================================================================
# Termination Configuration
# ============================================================================

# Run stops when active entities <= SURVIVOR_LIMIT
SURVIVOR_LIMIT = 1

# Hard iteration cutoff for runs that never converge
MAX_ITERATIONS_DEFAULT = 10_000

# Run outcomes
OUTCOME_RUNNING = "RUNNING"
OUTCOME_SUCCESSFUL = "SUCCESSFUL"
OUTCOME_FAILED = "FAILED"


# ============================================================================
# Statistics Configuration
# ============================================================================

# Default page size for global statistics
STATS_PAGE_SIZE_DEFAULT = 10


# ============================================================================
# Diagnostics
# ============================================================================

# Set to "1" to assert horizon invariants after every turn
DEBUG_INVARIANTS_ENV = "HORIZON_DEBUG_INVARIANTS"
