"""ThingSpeak device registration routes."""
import logging
from flask import jsonify, g
from sqlalchemy.exc import SQLAlchemyError

from vitalwatch import db
from vitalwatch.models import Device
from vitalwatch.utils.audit_logger import audit_log
from vitalwatch.utils.auth import token_required
from vitalwatch.utils.validators import validate_device
from . import api_bp, get_json_body

logger = logging.getLogger(__name__)


@api_bp.route('/devices', methods=['GET'])
@token_required
def list_devices():
    devices = Device.query.filter_by(user_id=g.user_id).order_by(Device.id.asc()).all()
    return jsonify([d.to_dict() for d in devices]), 200


@api_bp.route('/devices', methods=['POST'])
@token_required
def create_device():
    """Register a ThingSpeak channel for the signed-in user."""
    data = get_json_body()
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_device(data)
    if errors:
        return jsonify({'error': errors}), 400

    device = Device(
        user_id=g.user_id,
        name=data['name'].strip(),
        channel_id=str(data['channelId']).strip(),
    )
    device.read_api_key = data['readApiKey'].strip()
    device.write_api_key = data['writeApiKey'].strip()

    try:
        db.session.add(device)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Failed to register device for user %s', g.user_id)
        return jsonify({'error': 'Failed to register device'}), 500

    audit_log('CREATE', 'device', resource_id=str(device.id),
              details={'channel_id': device.channel_id})
    return jsonify(device.to_dict()), 201


@api_bp.route('/devices/<int:device_id>', methods=['GET'])
@token_required
def get_device(device_id):
    device = db.session.get(Device, device_id)
    if not device or device.user_id != g.user_id:
        return jsonify({'error': 'Device not found'}), 404
    return jsonify(device.to_dict()), 200
