"""Live and historical vitals pulled from ThingSpeak."""
import logging
from flask import request, jsonify, g
from sqlalchemy.exc import SQLAlchemyError

from vitalwatch import db
from vitalwatch.models import Device, Threshold
from vitalwatch.utils.alerting import check_for_alerts
from vitalwatch.utils.audit_logger import audit_log, audit_phi_access
from vitalwatch.utils.auth import token_required
from vitalwatch.utils.thingspeak import ThingSpeakClient, TelemetryError
from . import api_bp

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS = 10
MAX_HISTORY_DAYS = 90


def parse_history_days():
    """Return (days, error_response)."""
    raw = request.args.get('days')
    if raw is None:
        return DEFAULT_HISTORY_DAYS, None
    try:
        days = int(raw)
    except ValueError:
        days = None
    if days is None or days < 1 or days > MAX_HISTORY_DAYS:
        return None, (jsonify({'error': f'days must be between 1 and {MAX_HISTORY_DAYS}'}), 400)
    return days, None


def fetch_latest(user_id, evaluate_alerts=False):
    """Latest feed for ``user_id``'s first device as a Flask response.

    With ``evaluate_alerts`` the reading is checked against the user's
    thresholds and any alerts are stored before responding.
    """
    device = Device.first_for_user(user_id)
    if not device:
        return jsonify({'error': 'No devices found'}), 404

    try:
        with ThingSpeakClient.from_app() as client:
            data = client.get_latest_data(device.channel_id, device.read_api_key)
    except TelemetryError:
        logger.exception('Failed to fetch latest vitals for user %s', user_id)
        return jsonify({'error': 'Failed to fetch vitals from device'}), 500

    if evaluate_alerts:
        try:
            created = check_for_alerts(user_id, data, threshold=Threshold.for_user(user_id))
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception('Failed to store alerts for user %s', user_id)
            return jsonify({'error': 'Failed to process vitals'}), 500
        if created:
            audit_log('CREATE', 'alert', details={
                'count': len(created),
                'alert_ids': [a.id for a in created],
                'patient_id': user_id,
            })

    return jsonify(data), 200


def fetch_history(user_id):
    days, error = parse_history_days()
    if error:
        return error

    device = Device.first_for_user(user_id)
    if not device:
        return jsonify({'error': 'No devices found'}), 404

    try:
        with ThingSpeakClient.from_app() as client:
            data = client.get_historical_data(device.channel_id, device.read_api_key, days)
    except TelemetryError:
        logger.exception('Failed to fetch vitals history for user %s', user_id)
        return jsonify({'error': 'Failed to fetch vitals from device'}), 500

    return jsonify(data), 200


@api_bp.route('/vitals/latest', methods=['GET'])
@token_required
@audit_phi_access('READ', 'vitals')
def latest_vitals():
    """Latest reading of the user's device; raises alerts for out-of-range vitals."""
    return fetch_latest(g.user_id, evaluate_alerts=True)


@api_bp.route('/vitals/history', methods=['GET'])
@token_required
@audit_phi_access('READ', 'vitals')
def vitals_history():
    return fetch_history(g.user_id)
