"""Physical bounds and fixed constants shared by the chemistry model."""

from __future__ import annotations

HOURS_PER_DAY = 24.0

MIN_CHLORINE_PPM = 0.0
MIN_PH = 0.0
MAX_PH = 14.0

# Reference temperature for the Q10 and pH-drift temperature terms.
REFERENCE_TEMPERATURE_C = 20.0

# Doses younger than this are still mixing; used for trend overrides.
PENDING_DOSE_WINDOW_HOURS = 4.0

DEFAULT_TREND_THRESHOLD = 0.05
