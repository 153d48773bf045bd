"""
Shared helper functions for propagation analytics.
"""

from typing import Optional


def clamp(value: float, bounds: tuple) -> float:
    """Clamp a value into an inclusive (low, high) range."""
    low, high = bounds
    return max(low, min(high, value))


def classify_kp(kp: Optional[float]) -> str:
    """Classify a planetary K-index into a NOAA storm level."""
    if kp is None:
        return 'Unknown'
    if kp >= 8:
        return 'Severe Storm (G4+)'
    if kp >= 7:
        return 'Strong Storm (G3)'
    if kp >= 6:
        return 'Moderate Storm (G2)'
    if kp >= 5:
        return 'Minor Storm (G1)'
    if kp >= 4:
        return 'Active'
    return 'Quiet'


def classify_geomagnetic_status(status: Optional[str]) -> str:
    """Map a free-form geomagnetic status onto quiet/active/storm/unknown."""
    s = (status or '').lower()
    if 'quiet' in s or 'calm' in s:
        return 'quiet'
    if 'active' in s or 'unsettled' in s:
        return 'active'
    if 'storm' in s or 'severe' in s:
        return 'storm'
    return 'unknown'
