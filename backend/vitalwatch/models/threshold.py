"""
Per-user alert threshold overrides.
"""
from datetime import datetime
from vitalwatch import db
from vitalwatch.utils.vital_ranges import parse_number


class Threshold(db.Model):
    """
    Custom alerting bounds for one user. NULL columns fall back to the
    default ranges. Created on first customisation, updated afterwards.
    """
    __tablename__ = 'thresholds'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)

    heart_rate_min = db.Column(db.Numeric(6, 2), nullable=True)
    heart_rate_max = db.Column(db.Numeric(6, 2), nullable=True)
    oxygen_min = db.Column(db.Numeric(6, 2), nullable=True)
    temperature_min = db.Column(db.Numeric(6, 2), nullable=True)
    temperature_max = db.Column(db.Numeric(6, 2), nullable=True)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    COLUMNS = ('heart_rate_min', 'heart_rate_max', 'oxygen_min', 'temperature_min', 'temperature_max')

    @staticmethod
    def for_user(user_id: int):
        return Threshold.query.filter_by(user_id=user_id).first()

    @staticmethod
    def upsert(user_id: int, values: dict):
        """Create or update the user's threshold row.

        ``values`` maps column names to numbers or None; columns not in
        ``values`` are left unchanged.
        """
        threshold = Threshold.for_user(user_id)
        if threshold is None:
            threshold = Threshold(user_id=user_id)
            db.session.add(threshold)

        for column, value in values.items():
            if column not in Threshold.COLUMNS:
                raise ValueError(f'Unknown threshold column: {column}')
            setattr(threshold, column, value)

        threshold.updated_at = datetime.utcnow()
        db.session.commit()
        return threshold

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'heartRateMin': parse_number(self.heart_rate_min),
            'heartRateMax': parse_number(self.heart_rate_max),
            'oxygenMin': parse_number(self.oxygen_min),
            'temperatureMin': parse_number(self.temperature_min),
            'temperatureMax': parse_number(self.temperature_max),
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Threshold user={self.user_id}>'
