"""
Shared constants for propagation analytics.
"""

# Bands offered by the dashboard band selector
SUPPORTED_BANDS = ('160m', '80m', '40m', '20m', '15m', '10m')

# Static band comparison: relative day/night performance (0-100) and noise level
BAND_COMPARISON_TABLE = (
    {'band': '160m', 'day': 15, 'night': 85, 'avg': 50, 'noise': 'High'},
    {'band': '80m', 'day': 35, 'night': 75, 'avg': 55, 'noise': 'Med'},
    {'band': '40m', 'day': 65, 'night': 80, 'avg': 72, 'noise': 'Low'},
    {'band': '20m', 'day': 85, 'night': 45, 'avg': 65, 'noise': 'Low'},
    {'band': '15m', 'day': 90, 'night': 20, 'avg': 55, 'noise': 'VLow'},
    {'band': '10m', 'day': 95, 'night': 10, 'avg': 52, 'noise': 'VLow'},
)

# Propagation mode distribution
GROUND_WAVE_RANGE_KM = 500
SKY_WAVE_MIN_KM = 300
SCATTER_SHARE = 15

# Signal quality radial
DEFAULT_CONFIDENCE = 75
SNR_PLACEHOLDER = 65
STABILITY_PLACEHOLDER = 80

# Historical series
HISTORY_HOURS = 24
NIGHT_SIGNAL = 65
GRAY_LINE_SIGNAL = 45
DAY_SIGNAL = 25
DEFAULT_SIGNAL = 40
WINTER_BONUS = 10
WINTER_MONTHS = (11, 12, 1, 2)

# Value ranges
SIGNAL_RANGE = (10, 90)
MUF_RANGE = (1.5, 3.0)
ABSORPTION_RANGE = (1, 6)
KP_RANGE = (0, 9)
SFI_RANGE = (60, 300)

# History limits
MAX_ANALYSIS_HISTORY = 50
MAX_PRESETS = 10
EXPORT_FEEDBACK_LIMIT = 10
