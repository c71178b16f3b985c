"""
Vital sign alert model.
"""
from datetime import datetime
from vitalwatch import db

ALERT_TYPES = ('heart-rate', 'oxygen', 'temperature')
ALERT_SEVERITIES = ('warning', 'critical')


class Alert(db.Model):
    """
    An out-of-range vital raised by the threshold evaluator.
    Alerts are never deleted; the only change after creation is marking them read.
    """
    __tablename__ = 'alerts'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)
    message = db.Column(db.Text, nullable=False)
    severity = db.Column(db.String(10), nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    @staticmethod
    def create(user_id, type, message, severity, is_read=False):
        """Insert and commit a new alert. Database errors propagate."""
        alert = Alert(user_id=user_id, type=type, message=message,
                      severity=severity, is_read=is_read)
        db.session.add(alert)
        db.session.commit()
        return alert

    @staticmethod
    def for_user(user_id: int):
        """All alerts for a user, newest first."""
        return (Alert.query.filter_by(user_id=user_id)
                .order_by(Alert.timestamp.desc(), Alert.id.desc())
                .all())

    def mark_read(self):
        self.is_read = True
        db.session.commit()
        return self

    @staticmethod
    def mark_all_read(user_id: int) -> int:
        count = Alert.query.filter_by(user_id=user_id, is_read=False).update({'is_read': True})
        db.session.commit()
        return count

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'type': self.type,
            'message': self.message,
            'severity': self.severity,
            'isRead': self.is_read,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f'<Alert {self.id} {self.severity} {self.type}>'
