"""Profile, password and notification settings for the signed-in user."""
from flask import jsonify, g

from vitalwatch import db
from vitalwatch.utils.audit_logger import audit_log, audit_phi_access
from vitalwatch.utils.auth import token_required, hash_password, verify_password
from vitalwatch.utils.validators import (
    validate_profile_update, validate_password_change, validate_notifications,
)
from . import api_bp, get_json_body

# Request key -> User attribute
PROFILE_FIELDS = {
    'name': 'name',
    'phone': 'phone',
    'address': 'address',
    'emergencyContact': 'emergency_contact',
    'emergencyPhone': 'emergency_phone',
}

NOTIFICATION_FIELDS = {
    'emailAlerts': 'email_alerts',
    'smsAlerts': 'sms_alerts',
    'criticalAlertsOnly': 'critical_alerts_only',
}


@api_bp.route('/user/profile', methods=['PATCH'])
@token_required
@audit_phi_access('UPDATE', 'user')
def update_profile():
    data = get_json_body()
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_profile_update(data)
    if errors:
        return jsonify({'error': errors}), 400

    user = g.current_user
    for key, attr in PROFILE_FIELDS.items():
        if key in data:
            value = data[key]
            setattr(user, attr, str(value).strip() if value else None)

    db.session.commit()
    return jsonify(user.to_dict(include_phi=True)), 200


@api_bp.route('/user/password', methods=['PATCH'])
@token_required
def change_password():
    data = get_json_body()
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_password_change(data)
    if errors:
        return jsonify({'error': errors}), 400

    user = g.current_user
    if not verify_password(user.password_hash, data['currentPassword']):
        audit_log('PASSWORD_CHANGE_FAILED', 'user', resource_id=str(user.id))
        return jsonify({'error': 'Current password is incorrect'}), 400

    user.password_hash = hash_password(data['newPassword'])
    db.session.commit()

    audit_log('PASSWORD_CHANGE', 'user', resource_id=str(user.id))
    return jsonify({'message': 'Password updated'}), 200


@api_bp.route('/user/notifications', methods=['PATCH'])
@token_required
def update_notifications():
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_notifications(data)
    if errors:
        return jsonify({'error': errors}), 400

    user = g.current_user
    for key, attr in NOTIFICATION_FIELDS.items():
        if key in data:
            setattr(user, attr, data[key])

    db.session.commit()
    audit_log('UPDATE', 'notification_settings', resource_id=str(user.id), details=data)
    return jsonify(user.notification_settings()), 200
