"""
Customer model with KYC and sanction screening data.
"""
from datetime import datetime
from database import db


class Customer(db.Model):
    """Represents an exchange customer."""

    __tablename__ = 'customers'
    __table_args__ = (
        db.Index('ix_customers_name', 'last_name', 'first_name'),
        db.Index('ix_customers_email', 'email'),
        db.Index('ix_customers_kyc_status', 'kyc_status'),
        {'sqlite_autoincrement': True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Personal info
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    date_of_birth = db.Column(db.String(10), nullable=True)  # YYYY-MM-DD
    nationality = db.Column(db.String(80), nullable=True)
    occupation = db.Column(db.String(120), nullable=True)

    # Identity document
    id_type = db.Column(db.String(40), nullable=True)  # passport, driver_license, national_id
    id_number = db.Column(db.String(80), nullable=True)
    id_expiry_date = db.Column(db.String(10), nullable=True)

    # Compliance
    kyc_status = db.Column(db.String(20), nullable=False, default='pending')  # pending, verified, rejected
    sanction_screening_status = db.Column(db.String(20), nullable=True, default='pending')  # pending, clear, flagged
    sanction_screening_date = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<Customer {self.first_name} {self.last_name}>'

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'date_of_birth': self.date_of_birth,
            'nationality': self.nationality,
            'occupation': self.occupation,
            'id_type': self.id_type,
            'id_number': self.id_number,
            'id_expiry_date': self.id_expiry_date,
            'kyc_status': self.kyc_status,
            'sanction_screening_status': self.sanction_screening_status,
            'sanction_screening_date': self.sanction_screening_date.isoformat() if self.sanction_screening_date else None,
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_report_subject(self) -> dict:
        """Identity fields disclosed on regulatory reports."""
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'date_of_birth': self.date_of_birth,
            'address': self.address,
            'id_type': self.id_type,
            'id_number': self.id_number,
            'nationality': self.nationality,
            'occupation': self.occupation,
        }
