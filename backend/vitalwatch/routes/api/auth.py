"""Account registration, login and logout."""
import logging
from flask import jsonify, g
from sqlalchemy.exc import SQLAlchemyError

from vitalwatch import db
from vitalwatch.models import User, RevokedToken
from vitalwatch.models.user import ROLE_PATIENT, ROLE_CAREGIVER
from vitalwatch.utils.audit_logger import audit_log
from vitalwatch.utils.auth import generate_access_token, token_required, hash_password, verify_password
from vitalwatch.utils.encryption import hash_email
from vitalwatch.utils.rate_limiter import rate_limit, login_limiter, registration_limiter
from vitalwatch.utils.validators import validate_registration, validate_login
from . import api_bp, get_json_body

logger = logging.getLogger(__name__)


@api_bp.route('/register', methods=['POST'])
@rate_limit(registration_limiter)
def register():
    """Create a patient or caregiver account and return an access token."""
    data = get_json_body()
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_registration(data)
    if errors:
        return jsonify({'error': errors}), 400

    username = data['username'].strip()
    email = data['email'].strip().lower()

    if User.find_by_username(username):
        return jsonify({'error': 'Username already exists'}), 409
    if User.find_by_email(email):
        return jsonify({'error': 'A user with this email already exists'}), 409

    caregiver_id = data.get('caregiver_id')
    if caregiver_id is not None:
        caregiver = db.session.get(User, int(caregiver_id))
        if not caregiver or caregiver.role != ROLE_CAREGIVER:
            return jsonify({'error': 'Invalid caregiver ID'}), 400
        caregiver_id = caregiver.id

    user = User(
        username=username,
        password_hash=hash_password(data['password']),
        role=data.get('role') or ROLE_PATIENT,
        caregiver_id=caregiver_id,
    )
    user.name = data['name'].strip()
    user.email = email

    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Registration failed for username=%s', username)
        return jsonify({'error': 'Registration failed. Please try again.'}), 500

    audit_log('CREATE', 'user', resource_id=str(user.id),
              details={'action': 'registration', 'role': user.role}, user_id=str(user.id))

    token = generate_access_token(user.id, user.role)
    return jsonify({'token': token, 'user': user.to_dict(include_phi=True)}), 201


@api_bp.route('/login', methods=['POST'])
@rate_limit(login_limiter)
def login():
    """Email + password login."""
    data = get_json_body()
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_login(data)
    if errors:
        return jsonify({'error': errors}), 400

    email = data['email'].strip().lower()
    user = User.find_by_email(email)

    if not user or not verify_password(user.password_hash, data['password']):
        audit_log('LOGIN_FAILED', 'user',
                  resource_id=str(user.id) if user else None,
                  details={'reason': 'bad_credentials', 'email_hash': hash_email(email)})
        return jsonify({'error': 'Invalid email or password'}), 401

    if not user.is_active:
        audit_log('LOGIN_FAILED', 'user', resource_id=str(user.id),
                  details={'reason': 'deactivated'}, user_id=str(user.id))
        return jsonify({'error': 'Invalid email or password'}), 401

    token = generate_access_token(user.id, user.role)
    audit_log('LOGIN', 'user', resource_id=str(user.id), user_id=str(user.id))

    return jsonify({'token': token, 'user': user.to_dict(include_phi=True)}), 200


@api_bp.route('/logout', methods=['POST'])
@token_required
def logout():
    """Revoke the current token."""
    RevokedToken.revoke(g.token_jti, g.user_id, g.token_exp)
    audit_log('LOGOUT', 'user', resource_id=str(g.user_id))
    return jsonify({'message': 'Successfully logged out'}), 200


@api_bp.route('/user', methods=['GET'])
@token_required
def current_user():
    return jsonify(g.current_user.to_dict(include_phi=True)), 200
