"""
Input validation for the HF Propagation Dashboard.

- Location validation (Maidenhead grid squares and city/country names)
"""

from .location_validator import validate_location

__all__ = [
    'validate_location'
]
