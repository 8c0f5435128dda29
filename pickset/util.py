"""Time unit constants for pickset.

Durations are expressed in whole seconds throughout the library.
"""

# Time unit constants (all values in seconds)
MINUTE = 60
HOUR = 3600
DAY = 86400
