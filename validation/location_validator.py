"""
Location validation for propagation path endpoints.

Accepts Maidenhead grid squares (FN30, GG66rf) and plain city/country names
(New York, USA). Purely syntactic: no geocoding or network lookups.
"""

import re

from exceptions import ValidationError
from models import LocationType, ValidatedLocation

INVALID_CHARACTERS = re.compile(r"""[!@#$%^&*()_+=\[\]{};':"\\|<>/?]""")
GRID_SQUARE_PATTERN = re.compile(r'^[A-R]{2}[0-9]{2}([A-X]{2})?$', re.IGNORECASE)
CITY_COUNTRY_PATTERN = re.compile(r'^[A-Za-z\s,.-]+$')


def validate_location(location: str) -> ValidatedLocation:
    """
    Validate and classify a location string.

    Args:
        location: Raw user input

    Returns:
        ValidatedLocation with the trimmed value and its type

    Raises:
        ValidationError: If the input is empty, contains illegal characters,
            or is neither a grid square nor a city/country name
    """
    if location is not None and not isinstance(location, str):
        raise ValidationError("Location must be text")

    location = (location or '').strip()

    if not location:
        raise ValidationError("Location cannot be empty")

    if INVALID_CHARACTERS.search(location):
        raise ValidationError("Location contains invalid characters")

    if GRID_SQUARE_PATTERN.match(location):
        return ValidatedLocation(value=location, type=LocationType.GRID)

    if CITY_COUNTRY_PATTERN.match(location):
        return ValidatedLocation(value=location, type=LocationType.CITY)

    raise ValidationError("Invalid location format. Use city name or grid square (e.g., FN30)")

