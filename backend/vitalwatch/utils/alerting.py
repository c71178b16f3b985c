"""
Threshold alerting for the latest telemetry reading.

``evaluate`` compares one reading against a user's effective ranges and
writes an alert for every vital that is out of range. It keeps no state
between calls and does not deduplicate: a vital that stays out of range
raises a new alert on every poll.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from vitalwatch.utils.vital_ranges import DEFAULT_VITAL_RANGES, VitalRanges, parse_number, resolve_ranges

logger = logging.getLogger(__name__)

HEART_RATE_CRITICAL_MARGIN = 10
OXYGEN_CRITICAL_MARGIN = 3
TEMPERATURE_CRITICAL_MARGIN = 1


@dataclass(frozen=True)
class Reading:
    """One telemetry sample. Any vital may be missing."""
    heart_rate: Optional[float] = None
    oxygen: Optional[float] = None
    temperature: Optional[float] = None
    created_at: Optional[str] = None

    @classmethod
    def from_feed(cls, entry: dict) -> 'Reading':
        """Build from a ThingSpeak feed entry (field1=heart rate,
        field2=oxygen, field3=temperature). ThingSpeak sends numbers as
        strings; null, blank and non-numeric values count as missing."""
        return cls(
            heart_rate=parse_number(entry.get('field1')),
            oxygen=parse_number(entry.get('field2')),
            temperature=parse_number(entry.get('field3')),
            created_at=entry.get('created_at'),
        )


def format_number(value) -> str:
    """Render 120.0 as '120' and 38.2 as '38.2'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _default_create_alert(**fields):
    from vitalwatch.models.alert import Alert
    return Alert.create(**fields)


def _decimal(value) -> Decimal:
    # Margins are applied in decimal so 64.1 - 3 is exactly 61.1
    return Decimal(str(value))


def _heart_rate_alert(value, rng):
    reading, low, high = _decimal(value), _decimal(rng.min), _decimal(rng.max)
    if low <= reading <= high:
        return None
    critical = (reading < low - HEART_RATE_CRITICAL_MARGIN
                or reading > high + HEART_RATE_CRITICAL_MARGIN)
    message = (f'Heart rate is {format_number(value)} {rng.unit}, outside normal range '
               f'({format_number(rng.min)}-{format_number(rng.max)} {rng.unit})')
    return 'heart-rate', message, 'critical' if critical else 'warning'


def _oxygen_alert(value, rng):
    # Floor only: high saturation is never an alert
    reading, low = _decimal(value), _decimal(rng.min)
    if reading >= low:
        return None
    critical = reading <= low - OXYGEN_CRITICAL_MARGIN
    message = (f'Oxygen saturation is {format_number(value)}{rng.unit}, below normal range '
               f'(≥{format_number(rng.min)}{rng.unit})')
    return 'oxygen', message, 'critical' if critical else 'warning'


def _temperature_alert(value, rng):
    reading, low, high = _decimal(value), _decimal(rng.min), _decimal(rng.max)
    if low <= reading <= high:
        return None
    critical = (reading > high + TEMPERATURE_CRITICAL_MARGIN
                or reading < low - TEMPERATURE_CRITICAL_MARGIN)
    message = (f'Temperature is {format_number(value)}{rng.unit}, outside normal range '
               f'({format_number(rng.min)}-{format_number(rng.max)}{rng.unit})')
    return 'temperature', message, 'critical' if critical else 'warning'


def evaluate(user_id, reading: Reading, ranges: VitalRanges, create_alert=None) -> list:
    """
    Check each vital present in ``reading`` against ``ranges``.

    Args:
        user_id: Owner of the reading; copied onto every alert.
        reading: Latest sample. Missing vitals are skipped.
        ranges: Fully resolved ranges (see ``resolve_ranges``).
        create_alert: Store callable taking the alert fields as keyword
            arguments. Defaults to ``Alert.create``. Errors it raises are
            not caught.

    Returns:
        The created alerts, in heart rate / oxygen / temperature order.
    """
    if create_alert is None:
        create_alert = _default_create_alert

    checks = (
        (reading.heart_rate, ranges.heart_rate, _heart_rate_alert),
        (reading.oxygen, ranges.oxygen, _oxygen_alert),
        (reading.temperature, ranges.temperature, _temperature_alert),
    )

    created = []
    for value, rng, check in checks:
        if value is None:
            continue
        result = check(value, rng)
        if result is None:
            continue
        alert_type, message, severity = result
        logger.info('Raising %s %s alert for user %s', severity, alert_type, user_id)
        created.append(create_alert(
            user_id=user_id,
            type=alert_type,
            message=message,
            severity=severity,
            is_read=False,
        ))
    return created


def check_for_alerts(user_id, feed: dict, threshold=None,
                     defaults: VitalRanges = DEFAULT_VITAL_RANGES, create_alert=None) -> list:
    """
    Evaluate the most recent reading of a ThingSpeak response.

    ``feed['feeds']`` is ordered most recent first. A missing or empty feed
    list is not an error and produces no alerts and no store writes.
    """
    feeds = (feed or {}).get('feeds') or []
    if not feeds:
        return []

    ranges = resolve_ranges(threshold, defaults)
    return evaluate(user_id, Reading.from_feed(feeds[0]), ranges, create_alert=create_alert)
