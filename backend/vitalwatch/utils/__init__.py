from .encryption import encrypt_phi, decrypt_phi, hash_email
from .audit_logger import audit_log, audit_phi_access
from .auth import generate_access_token, token_required, caregiver_required
from .alerting import check_for_alerts, evaluate
from .vital_ranges import DEFAULT_VITAL_RANGES, resolve_ranges
