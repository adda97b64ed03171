"""Constants for doBag.

This module centralizes magic numbers and default values used by the modifier
behaviors and the scheduler.
"""

# Positions
FIRST_POSITION = 1

# Duration modifier
DEFAULT_DURATION_MINUTES = 30
DEFAULT_DURATION_VALUE = "30m"
DURATION_HINT_PRIORITY = 80

# Priority modifier
PRIORITY_LEVEL_VALUES = {
    "high": 90,
    "medium": 60,
    "low": 30,
}
DEFAULT_PRIORITY_LEVEL = "medium"

# Divisibility modifier
DEFAULT_MIN_SEGMENT_MINUTES = 15
DEFAULT_MAX_SEGMENTS = 3
DIVISIBILITY_HINT_PRIORITY = 50
