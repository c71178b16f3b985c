"""
Persistent DB-backed rate limiter for API endpoints.
"""
from datetime import datetime, timedelta
from functools import wraps
from flask import request, jsonify, current_app


class DBRateLimiter:
    """Database-backed rate limiter that persists across server restarts."""

    def __init__(self, max_attempts=5, window_seconds=60, endpoint_name='default'):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.endpoint_name = endpoint_name

    def is_limited(self, key):
        from vitalwatch.models.rate_limit_entry import RateLimitEntry
        cutoff = datetime.utcnow() - timedelta(seconds=self.window_seconds)
        count = RateLimitEntry.query.filter(
            RateLimitEntry.key == key,
            RateLimitEntry.endpoint == self.endpoint_name,
            RateLimitEntry.timestamp > cutoff
        ).count()
        return count >= self.max_attempts

    def record(self, key):
        from vitalwatch import db
        from vitalwatch.models.rate_limit_entry import RateLimitEntry
        db.session.add(RateLimitEntry(key=key, endpoint=self.endpoint_name))
        db.session.commit()


# 5 login attempts per minute per IP
login_limiter = DBRateLimiter(max_attempts=5, window_seconds=60, endpoint_name='login')

# 3 registrations per minute per IP
registration_limiter = DBRateLimiter(max_attempts=3, window_seconds=60, endpoint_name='registration')


def rate_limit(limiter):
    """Decorator factory to rate-limit an endpoint by client IP using a given limiter.
    Disabled when the app config sets RATELIMIT_ENABLED to False."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_app.config.get('RATELIMIT_ENABLED', True):
                return f(*args, **kwargs)
            client_ip = request.remote_addr or 'unknown'
            if limiter.is_limited(client_ip):
                return jsonify({'error': 'Too many requests. Try again later.'}), 429
            limiter.record(client_ip)
            return f(*args, **kwargs)
        return wrapper
    return decorator
