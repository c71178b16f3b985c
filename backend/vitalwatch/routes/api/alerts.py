"""Alert listing and read receipts."""
from flask import jsonify, g

from vitalwatch import db
from vitalwatch.models import Alert
from vitalwatch.utils.audit_logger import audit_log, audit_phi_access
from vitalwatch.utils.auth import token_required
from . import api_bp


@api_bp.route('/alerts', methods=['GET'])
@token_required
@audit_phi_access('READ', 'alert')
def list_alerts():
    return jsonify([a.to_dict() for a in Alert.for_user(g.user_id)]), 200


# Registered before /alerts/<id>/read so 'read-all' is never parsed as an id
@api_bp.route('/alerts/read-all', methods=['PATCH'])
@token_required
def mark_all_alerts_read():
    count = Alert.mark_all_read(g.user_id)
    audit_log('UPDATE', 'alert', details={'action': 'mark_all_read', 'count': count})
    return jsonify({'updated': count}), 200


@api_bp.route('/alerts/<int:alert_id>/read', methods=['PATCH'])
@token_required
@audit_phi_access('UPDATE', 'alert')
def mark_alert_read(alert_id):
    alert = db.session.get(Alert, alert_id)
    if not alert or alert.user_id != g.user_id:
        return jsonify({'error': 'Alert not found'}), 404
    return jsonify(alert.mark_read().to_dict()), 200
