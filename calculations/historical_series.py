"""
Synthetic historical series for the propagation trend charts.

Produces 24 hourly samples ending at the top of the current hour. The signal
follows the low-band day/night cycle (night enhancement, gray line, daytime
D-layer absorption) with a winter bonus; every value is perturbed by
``deterministic_random`` so a given seed always reproduces the same series.
"""

import hashlib
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional, Union
import logging

import pytz

from models import HistoricalSample, QualityLevel
from .constants import (
    HISTORY_HOURS,
    NIGHT_SIGNAL,
    GRAY_LINE_SIGNAL,
    DAY_SIGNAL,
    DEFAULT_SIGNAL,
    WINTER_BONUS,
    WINTER_MONTHS,
    SIGNAL_RANGE,
    MUF_RANGE,
    ABSORPTION_RANGE,
    KP_RANGE,
    SFI_RANGE,
)
from .helpers import clamp

logger = logging.getLogger(__name__)

# Field offsets fed to deterministic_random
SIGNAL_OFFSET = 0
MUF_OFFSET = 1
ABSORPTION_OFFSET = 2
KP_OFFSET = 3
SFI_OFFSET = 4


def deterministic_random(seed: int, index: int, offset: int) -> float:
    """
    Map (seed, index, offset) to a float in [0, 1).

    The first 8 bytes of SHA-256("seed:index:offset") are read as an unsigned
    big-endian integer and divided by 2**64.
    """
    digest = hashlib.sha256(f"{seed}:{index}:{offset}".encode('utf-8')).digest()
    return int.from_bytes(digest[:8], 'big') / 2 ** 64


def base_signal_for_hour(hour: int) -> int:
    """Typical low-band signal level for an hour of the day."""
    if hour >= 19 or hour <= 6:
        return NIGHT_SIGNAL  # Night enhancement
    if 7 <= hour <= 10:
        return GRAY_LINE_SIGNAL  # Gray line
    if 11 <= hour <= 18:
        return DAY_SIGNAL  # Day absorption
    return DEFAULT_SIGNAL


def seasonal_bonus(month: int) -> int:
    """Northern-hemisphere winter bonus."""
    return WINTER_BONUS if month in WINTER_MONTHS else 0


def _resolve_timezone(tz: Union[str, tzinfo, None]) -> tzinfo:
    if tz is None:
        return pytz.utc
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def generate_historical_series(seed: Optional[int] = None, now: Optional[datetime] = None,
                               tz: Union[str, tzinfo, None] = None) -> List[HistoricalSample]:
    """
    Generate the trailing 24 hourly samples, oldest first.

    Args:
        seed: Seed for the perturbations (default: current time in ms)
        now: Reference time (default: now); the series ends at the top of its hour
        tz: Timezone for hour-of-day and labels (default: UTC)

    Returns:
        List of 24 HistoricalSample with strictly increasing fullTime
    """
    timezone = _resolve_timezone(tz)

    if now is None:
        now = datetime.now(pytz.utc)
    elif now.tzinfo is None:
        now = timezone.localize(now) if hasattr(timezone, 'localize') else now.replace(tzinfo=timezone)

    if seed is None:
        seed = int(now.timestamp() * 1000)

    anchor = now.astimezone(pytz.utc).replace(minute=0, second=0, microsecond=0)

    samples = []
    for index in range(HISTORY_HOURS):
        sample_utc = anchor - timedelta(hours=HISTORY_HOURS - 1 - index)
        local = sample_utc.astimezone(timezone)

        def rand(offset: int) -> float:
            return deterministic_random(seed, index, offset)

        noise = (rand(SIGNAL_OFFSET) - 0.5) * 20
        signal = int(round(clamp(base_signal_for_hour(local.hour) + seasonal_bonus(local.month) + noise,
                                 SIGNAL_RANGE)))
        muf = round(clamp(1.6 + rand(MUF_OFFSET) * 0.8, MUF_RANGE), 2)
        absorption = round(clamp(2 + rand(ABSORPTION_OFFSET) * 4, ABSORPTION_RANGE), 1)
        kp = round(clamp(rand(KP_OFFSET) * 5, KP_RANGE), 1)
        sfi = int(round(clamp(120 + rand(SFI_OFFSET) * 80, SFI_RANGE)))

        samples.append(HistoricalSample(
            time=local.strftime('%I:%M %p'),
            fullTime=sample_utc.strftime('%Y-%m-%dT%H:%M:%SZ'),
            signal=signal,
            muf=muf,
            absorption=absorption,
            kp=kp,
            sfi=sfi,
            quality=QualityLevel.from_signal(signal),
            snr=max(0, int(round((signal - 30) * 0.6))),
        ))

    logger.debug(f"Generated {len(samples)} historical samples (seed={seed})")
    return samples
