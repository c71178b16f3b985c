"""
Normal ranges for vital signs and per-user threshold resolution.
"""
import logging
import math
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VitalRange:
    min: float
    max: float
    unit: str


@dataclass(frozen=True)
class VitalRanges:
    """Effective alerting ranges for one user.

    Oxygen saturation only alerts below ``oxygen.min``; ``oxygen.max`` is
    carried for display and never compared against.
    """
    heart_rate: VitalRange
    oxygen: VitalRange
    temperature: VitalRange

    def to_dict(self):
        return {
            'heartRate': {'min': self.heart_rate.min, 'max': self.heart_rate.max, 'unit': self.heart_rate.unit},
            'oxygen': {'min': self.oxygen.min, 'max': self.oxygen.max, 'unit': self.oxygen.unit},
            'temperature': {'min': self.temperature.min, 'max': self.temperature.max, 'unit': self.temperature.unit},
        }


DEFAULT_VITAL_RANGES = VitalRanges(
    heart_rate=VitalRange(min=60, max=100, unit='BPM'),
    oxygen=VitalRange(min=95, max=100, unit='%'),
    temperature=VitalRange(min=36.5, max=37.5, unit='°C'),
)


def parse_number(value):
    """Return value as a finite float, or None if it is absent or unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _override(default: float, custom, field: str):
    number = parse_number(custom)
    if number is None:
        if custom not in (None, ''):
            logger.warning('Ignoring unparseable threshold %s=%r, using default %s', field, custom, default)
        return default
    return number


def resolve_ranges(threshold=None, defaults: VitalRanges = DEFAULT_VITAL_RANGES) -> VitalRanges:
    """Merge a user's custom threshold onto the default ranges.

    ``threshold`` is anything exposing ``heart_rate_min``, ``heart_rate_max``,
    ``oxygen_min``, ``temperature_min`` and ``temperature_max`` attributes
    (normally a ``Threshold`` row) or None. Each bound uses the custom value
    when it parses as a finite number and falls back to the default otherwise.
    Units and the oxygen upper bound always come from ``defaults``.
    """
    if threshold is None:
        return defaults

    return VitalRanges(
        heart_rate=replace(
            defaults.heart_rate,
            min=_override(defaults.heart_rate.min, threshold.heart_rate_min, 'heart_rate_min'),
            max=_override(defaults.heart_rate.max, threshold.heart_rate_max, 'heart_rate_max'),
        ),
        oxygen=replace(
            defaults.oxygen,
            min=_override(defaults.oxygen.min, threshold.oxygen_min, 'oxygen_min'),
        ),
        temperature=replace(
            defaults.temperature,
            min=_override(defaults.temperature.min, threshold.temperature_min, 'temperature_min'),
            max=_override(defaults.temperature.max, threshold.temperature_max, 'temperature_max'),
        ),
    )
