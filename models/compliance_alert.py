"""Compliance alert model for conditions awaiting human review."""
from datetime import datetime
from database import db


class ComplianceAlert(db.Model):
    """A flagged compliance condition.

    ``customer_id`` and ``transaction_id`` are plain references rather than
    foreign keys: they are fixed at creation and may outlive the record they
    point at.
    """

    __tablename__ = 'compliance_alerts'
    __table_args__ = (
        db.Index('ix_compliance_alerts_status', 'status'),
        db.Index('ix_compliance_alerts_customer', 'customer_id'),
        db.Index('ix_compliance_alerts_severity', 'severity'),
        db.Index('ix_compliance_alerts_created_at', 'created_at'),
        {'sqlite_autoincrement': True},
    )

    id = db.Column(db.Integer, primary_key=True)
    alert_type = db.Column(db.String(40), nullable=False)  # sanction_match, suspicious_activity, threshold_exceeded
    severity = db.Column(db.String(20), nullable=False)  # low, medium, high, critical
    customer_id = db.Column(db.Integer, nullable=True)
    transaction_id = db.Column(db.Integer, nullable=True)
    description = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(20), nullable=False, default='pending')  # pending, reviewed, resolved, escalated
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    resolution_notes = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f'<ComplianceAlert {self.id} {self.alert_type}/{self.severity} ({self.status})>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'alert_type': self.alert_type,
            'severity': self.severity,
            'customer_id': self.customer_id,
            'transaction_id': self.transaction_id,
            'description': self.description,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'reviewed_at': self.reviewed_at.isoformat() if self.reviewed_at else None,
            'reviewed_by': self.reviewed_by,
            'resolution_notes': self.resolution_notes,
        }
