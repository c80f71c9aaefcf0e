"""
Exchange transaction model.
"""
from datetime import datetime
from database import db


class Transaction(db.Model):
    """A completed or voided buy/sell currency exchange."""

    __tablename__ = 'transactions'
    __table_args__ = (
        db.Index('ix_transactions_customer', 'customer_id'),
        db.Index('ix_transactions_branch', 'branch_id'),
        db.Index('ix_transactions_created_at', 'created_at'),
        db.Index('ix_transactions_status', 'status'),
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_number = db.Column(db.String(40), nullable=False, unique=True)
    transaction_type = db.Column(db.String(10), nullable=False)  # buy, sell

    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=True)
    branch_id = db.Column(db.Integer, db.ForeignKey('branches.id'), nullable=False)

    # Amounts
    source_currency = db.Column(db.String(3), nullable=False)
    target_currency = db.Column(db.String(3), nullable=False)
    source_amount = db.Column(db.Float, nullable=False)
    target_amount = db.Column(db.Float, nullable=False)
    exchange_rate = db.Column(db.Float, nullable=False)
    commission = db.Column(db.Float, nullable=False, default=0.0)
    total_amount = db.Column(db.Float, nullable=False)

    # Status
    status = db.Column(db.String(20), nullable=False, default='completed')  # completed, voided
    void_reason = db.Column(db.Text, nullable=True)
    voided_at = db.Column(db.DateTime, nullable=True)
    voided_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    branch = db.relationship('Branch')

    def __repr__(self):
        return f'<Transaction {self.transaction_number} ({self.status})>'

    @property
    def is_voided(self) -> bool:
        return self.status == 'voided'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'transaction_number': self.transaction_number,
            'transaction_type': self.transaction_type,
            'customer_id': self.customer_id,
            'branch_id': self.branch_id,
            'source_currency': self.source_currency,
            'target_currency': self.target_currency,
            'source_amount': self.source_amount,
            'target_amount': self.target_amount,
            'exchange_rate': self.exchange_rate,
            'commission': self.commission,
            'total_amount': self.total_amount,
            'status': self.status,
            'void_reason': self.void_reason,
            'voided_at': self.voided_at.isoformat() if self.voided_at else None,
            'voided_by': self.voided_by,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'created_by': self.created_by,
        }

    def to_report_row(self) -> dict:
        return {
            'transaction_number': self.transaction_number,
            'transaction_type': self.transaction_type,
            'source_currency': self.source_currency,
            'target_currency': self.target_currency,
            'source_amount': self.source_amount,
            'target_amount': self.target_amount,
            'exchange_rate': self.exchange_rate,
            'total_amount': self.total_amount,
            'date': self.created_at.isoformat() if self.created_at else None,
        }
