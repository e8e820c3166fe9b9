"""Constants for habitgrid.

This module centralizes the fixed numbers the recurrence engine relies on.
"""

# Week layout (Monday=0 ... Sunday=6)
DAYS_PER_WEEK = 7
WEEKDAY_MASK_ALL = 0b1111111

# Monthly schedules are capped to avoid variable month-length edge cases
MONTHDAY_MIN = 1
MONTHDAY_MAX = 28

# Custom schedules
MIN_INTERVAL_DAYS = 1

# Month grid: always six Monday-first weeks so the calendar height stays constant
MONTH_GRID_WEEKS = 6
MONTH_GRID_DAYS = MONTH_GRID_WEEKS * DAYS_PER_WEEK
