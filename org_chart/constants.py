"""
Org Chart Kernel — Constants (Default Values)

All sentinels and defaults live here as module-level values.
"""

# --- Department scope ---
# Sentinel meaning "no department filter".
ALL_DEPARTMENTS: str = "all"

# --- Positions ---
DEFAULT_AUTHORIZED_HEADCOUNT: int = 1

# --- Canonical serialization ---
CHART_FORMAT_VERSION: int = 1
