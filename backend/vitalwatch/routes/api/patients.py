"""Caregiver views of their linked patients."""
from functools import wraps
from flask import jsonify, g

from vitalwatch.models import User, Alert
from vitalwatch.utils.audit_logger import audit_phi_access
from vitalwatch.utils.auth import token_required, caregiver_required
from . import api_bp
from .thresholds import threshold_payload, upsert_threshold
from .vitals import fetch_latest, fetch_history


def own_patient_required(f):
    """403 unless <patient_id> is linked to the signed-in caregiver."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not g.current_user.has_patient(kwargs['patient_id']):
            return jsonify({'error': 'Forbidden'}), 403
        return f(*args, **kwargs)
    return wrapper


@api_bp.route('/patients', methods=['GET'])
@token_required
@caregiver_required
@audit_phi_access('READ', 'patient_list')
def list_patients():
    patients = g.current_user.patients.order_by(User.id.asc()).all()
    return jsonify([p.to_dict(include_phi=True) for p in patients]), 200


@api_bp.route('/patients/<int:patient_id>/vitals/latest', methods=['GET'])
@token_required
@caregiver_required
@own_patient_required
@audit_phi_access('READ', 'vitals')
def patient_latest_vitals(patient_id):
    # Alerts are raised on the patient's own poll, not when a caregiver looks
    return fetch_latest(patient_id, evaluate_alerts=False)


@api_bp.route('/patients/<int:patient_id>/vitals/history', methods=['GET'])
@token_required
@caregiver_required
@own_patient_required
@audit_phi_access('READ', 'vitals')
def patient_vitals_history(patient_id):
    return fetch_history(patient_id)


@api_bp.route('/patients/<int:patient_id>/alerts', methods=['GET'])
@token_required
@caregiver_required
@own_patient_required
@audit_phi_access('READ', 'alert')
def patient_alerts(patient_id):
    return jsonify([a.to_dict() for a in Alert.for_user(patient_id)]), 200


@api_bp.route('/patients/<int:patient_id>/thresholds', methods=['GET'])
@token_required
@caregiver_required
@own_patient_required
@audit_phi_access('READ', 'threshold')
def get_patient_thresholds(patient_id):
    return jsonify(threshold_payload(patient_id)), 200


@api_bp.route('/patients/<int:patient_id>/thresholds', methods=['POST'])
@token_required
@caregiver_required
@own_patient_required
def save_patient_thresholds(patient_id):
    return upsert_threshold(patient_id)
