"""
Input validation for registration, devices, thresholds and profile updates.
Each validator returns a list of error strings (empty = valid).
"""
import re
from decimal import Decimal
from types import SimpleNamespace
from email_validator import validate_email, EmailNotValidError

from vitalwatch.utils.vital_ranges import parse_number, resolve_ranges

USER_ROLES = ('patient', 'caregiver')

USERNAME_RE = re.compile(r'^[A-Za-z0-9_.-]{3,50}$')

MIN_PASSWORD_LENGTH = 6

# Upper bound of an INTEGER primary key
MAX_USER_ID = 2 ** 31 - 1

# Request key -> Threshold column
THRESHOLD_FIELDS = {
    'heartRateMin': 'heart_rate_min',
    'heartRateMax': 'heart_rate_max',
    'oxygenMin': 'oxygen_min',
    'temperatureMin': 'temperature_min',
    'temperatureMax': 'temperature_max',
}

# Threshold columns are NUMERIC(6, 2)
THRESHOLD_STEP = Decimal('0.01')

# Plausible physiological limits for a custom threshold value
THRESHOLD_LIMITS = {
    'heartRateMin': ('Heart rate', 20, 250),
    'heartRateMax': ('Heart rate', 20, 250),
    'oxygenMin': ('Oxygen saturation', 50, 100),
    'temperatureMin': ('Temperature', 30, 45),
    'temperatureMax': ('Temperature', 30, 45),
}

PROFILE_FIELD_LIMITS = {
    'phone': ('Phone', 20),
    'address': ('Address', 500),
    'emergencyContact': ('Emergency contact', 200),
    'emergencyPhone': ('Emergency phone', 20),
}

NOTIFICATION_FIELDS = ('emailAlerts', 'smsAlerts', 'criticalAlertsOnly')


def _validate_name(data: dict, errors: list, required: bool):
    if 'name' not in data and not required:
        return
    name = data.get('name')
    if name is None:
        errors.append('Name is required')
        return
    name = str(name).strip()
    if len(name) < 2:
        errors.append('Name must be at least 2 characters')
    if len(name) > 200:
        errors.append('Name must be 200 characters or fewer')


def validate_registration(data: dict) -> list:
    errors = []

    username = (data.get('username') or '').strip()
    if not username:
        errors.append('Username is required')
    elif not USERNAME_RE.match(username):
        errors.append('Username must be 3-50 letters, digits, dots, dashes or underscores')

    email = (data.get('email') or '').strip()
    if not email:
        errors.append('Email is required')
    else:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors.append('Invalid email format')

    password = data.get('password') or ''
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')

    _validate_name(data, errors, required=True)

    role = data.get('role')
    if role is not None and role not in USER_ROLES:
        errors.append('Role must be patient or caregiver')

    caregiver_id = data.get('caregiver_id')
    if caregiver_id is not None:
        if role == 'caregiver':
            errors.append('Caregivers cannot be assigned a caregiver')
        try:
            caregiver_id = int(caregiver_id)
        except (ValueError, TypeError):
            errors.append('Caregiver ID must be an integer')
        else:
            if not 1 <= caregiver_id <= MAX_USER_ID:
                errors.append('Invalid caregiver ID')

    return errors


def validate_login(data: dict) -> list:
    errors = []
    if not (data.get('email') or '').strip():
        errors.append('Email is required')
    if not data.get('password'):
        errors.append('Password is required')
    return errors


def validate_device(data: dict) -> list:
    errors = []

    name = (data.get('name') or '').strip()
    if len(name) < 2:
        errors.append('Device name must be at least 2 characters')
    elif len(name) > 100:
        errors.append('Device name must be 100 characters or fewer')

    channel_id = str(data.get('channelId') or '').strip()
    if not channel_id:
        errors.append('ThingSpeak Channel ID is required')
    elif not channel_id.isdigit():
        errors.append('ThingSpeak Channel ID must be numeric')

    for key, label in (('readApiKey', 'Read API key'), ('writeApiKey', 'Write API key')):
        value = (data.get(key) or '').strip()
        if not value:
            errors.append(f'{label} is required')
        elif len(value) > 64:
            errors.append(f'{label} must be 64 characters or fewer')

    return errors


def validate_threshold(data: dict, existing=None) -> list:
    """Validate a threshold upsert payload.

    ``existing`` is the stored Threshold (or None). Keys missing from
    ``data`` keep their stored value; '' or null clears an override. The
    effective ranges after the update must keep min <= max.
    """
    errors = []

    unknown = set(data) - set(THRESHOLD_FIELDS) - {'userId'}
    if unknown:
        errors.append(f'Unknown threshold field(s): {", ".join(sorted(unknown))}')

    merged = {column: getattr(existing, column, None) for column in THRESHOLD_FIELDS.values()}

    for key, column in THRESHOLD_FIELDS.items():
        if key not in data:
            continue
        raw = data[key]
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            merged[column] = None
            continue
        value = parse_number(raw)
        label, low, high = THRESHOLD_LIMITS[key]
        if value is None:
            errors.append(f'{key} must be a number')
            continue
        if value < low or value > high:
            errors.append(f'{label} threshold must be between {low} and {high}')
            continue
        if Decimal(str(value)) != Decimal(str(value)).quantize(THRESHOLD_STEP):
            errors.append(f'{key} must have at most 2 decimal places')
            continue
        merged[column] = value

    if errors:
        return errors

    ranges = resolve_ranges(SimpleNamespace(**merged))

    if ranges.heart_rate.min > ranges.heart_rate.max:
        errors.append('Heart rate minimum must not exceed maximum')
    if ranges.temperature.min > ranges.temperature.max:
        errors.append('Temperature minimum must not exceed maximum')

    return errors


def validate_profile_update(data: dict) -> list:
    errors = []

    if 'email' in data:
        errors.append('Email cannot be changed via profile update')

    _validate_name(data, errors, required=False)

    for key, (label, max_len) in PROFILE_FIELD_LIMITS.items():
        value = data.get(key)
        if value is not None and len(str(value).strip()) > max_len:
            errors.append(f'{label} must be {max_len} characters or fewer')

    return errors


def validate_password_change(data: dict) -> list:
    errors = []

    if not data.get('currentPassword'):
        errors.append('Current password is required')

    new_password = data.get('newPassword') or ''
    if len(new_password) < MIN_PASSWORD_LENGTH:
        errors.append(f'New password must be at least {MIN_PASSWORD_LENGTH} characters')
    elif new_password != data.get('confirmPassword'):
        errors.append('Passwords do not match')

    return errors


def validate_notifications(data: dict) -> list:
    errors = []
    for key in NOTIFICATION_FIELDS:
        if key in data and not isinstance(data[key], bool):
            errors.append(f'{key} must be true or false')
    unknown = set(data) - set(NOTIFICATION_FIELDS)
    if unknown:
        errors.append(f'Unknown notification setting(s): {", ".join(sorted(unknown))}')
    return errors
