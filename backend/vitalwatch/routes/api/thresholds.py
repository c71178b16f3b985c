"""Custom alert thresholds."""
from flask import jsonify, g

from vitalwatch.models import Threshold
from vitalwatch.utils.audit_logger import audit_log, audit_phi_access
from vitalwatch.utils.auth import token_required
from vitalwatch.utils.validators import validate_threshold, THRESHOLD_FIELDS
from vitalwatch.utils.vital_ranges import parse_number, resolve_ranges
from . import api_bp, get_json_body


def threshold_payload(user_id):
    """Stored overrides (None when never customised) plus effective ranges."""
    threshold = Threshold.for_user(user_id)
    return {
        'userId': user_id,
        'threshold': threshold.to_dict() if threshold else None,
        'effective': resolve_ranges(threshold).to_dict(),
    }


def upsert_threshold(user_id):
    data = get_json_body()
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    existing = Threshold.for_user(user_id)
    errors = validate_threshold(data, existing)
    if errors:
        return jsonify({'error': errors}), 400

    values = {column: parse_number(data[key])
              for key, column in THRESHOLD_FIELDS.items() if key in data}
    Threshold.upsert(user_id, values)

    audit_log('UPDATE' if existing else 'CREATE', 'threshold',
              resource_id=str(user_id), details={'fields': sorted(values)})
    return jsonify(threshold_payload(user_id)), 200


@api_bp.route('/thresholds', methods=['GET'])
@token_required
@audit_phi_access('READ', 'threshold')
def get_thresholds():
    return jsonify(threshold_payload(g.user_id)), 200


@api_bp.route('/thresholds', methods=['POST'])
@token_required
def save_thresholds():
    return upsert_threshold(g.user_id)
