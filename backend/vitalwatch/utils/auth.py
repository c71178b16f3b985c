"""
Authentication utilities: JWT bearer tokens and password hashing.
"""
import os
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import request, jsonify, g
from werkzeug.security import generate_password_hash, check_password_hash

from vitalwatch import db


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


def _jwt_secret() -> str:
    secret = os.getenv('JWT_SECRET_KEY')
    if not secret:
        raise RuntimeError('JWT_SECRET_KEY environment variable is required')
    return secret


def generate_access_token(user_id: int, role: str) -> str:
    """
    Generate a JWT access token for a user.
    Lifetime comes from JWT_ACCESS_TOKEN_EXPIRES (seconds, default 12 hours).
    """
    expires = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 43200))
    now = datetime.now(timezone.utc)

    payload = {
        'user_id': user_id,
        'role': role,
        'jti': secrets.token_hex(16),
        'exp': now + timedelta(seconds=expires),
        'iat': now,
    }

    return jwt.encode(payload, _jwt_secret(), algorithm='HS256')


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Returns None when invalid or expired."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def token_required(f):
    """Decorator to require a valid bearer token for a route.

    Also checks:
    - Token has not been revoked (logout)
    - User account still exists and is active

    On success the user is available as ``g.current_user``.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get('Authorization')
        if not auth_header:
            return jsonify({'error': 'Unauthorized'}), 401

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return jsonify({'error': 'Invalid authorization header format'}), 401

        payload = decode_token(parts[1])
        if not payload:
            return jsonify({'error': 'Invalid or expired token'}), 401

        jti = payload.get('jti')

        from vitalwatch.models.revoked_token import RevokedToken
        if RevokedToken.is_token_revoked(jti):
            return jsonify({'error': 'Token has been revoked'}), 401

        from vitalwatch.models.user import User
        user = db.session.get(User, payload.get('user_id'))
        if not user or not user.is_active:
            return jsonify({'error': 'Account is deactivated'}), 401

        g.current_user = user
        g.user_id = user.id
        g.token_jti = jti
        g.token_exp = payload.get('exp')

        return f(*args, **kwargs)
    return wrapper


def caregiver_required(f):
    """Decorator that requires the authenticated user to be a caregiver.
    Must be applied after token_required."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if g.current_user.role != 'caregiver':
            return jsonify({'error': 'Forbidden'}), 403
        return f(*args, **kwargs)
    return wrapper
