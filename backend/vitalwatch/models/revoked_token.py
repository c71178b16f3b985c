"""
Revoked token model for JWT logout support.
"""
from datetime import datetime
from vitalwatch import db


class RevokedToken(db.Model):
    """Tracks revoked JWT tokens until they would have expired anyway."""
    __tablename__ = 'revoked_tokens'

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    revoked_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)

    @staticmethod
    def revoke(jti, user_id, exp_timestamp):
        entry = RevokedToken(
            jti=jti,
            user_id=user_id,
            expires_at=datetime.utcfromtimestamp(exp_timestamp),
        )
        db.session.add(entry)
        db.session.commit()
        return entry

    @staticmethod
    def is_token_revoked(jti):
        return db.session.query(
            db.exists().where(RevokedToken.jti == jti)
        ).scalar()

    @staticmethod
    def cleanup_expired():
        """Delete revoked token entries that have already expired."""
        count = RevokedToken.query.filter(
            RevokedToken.expires_at < datetime.utcnow()
        ).delete()
        db.session.commit()
        return count

    def __repr__(self):
        return f'<RevokedToken {self.jti}>'
