"""
User and profile models for role-based authentication.
"""
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash
from database import db


class User(UserMixin, db.Model):
    """Back-office user with role-based access control."""

    __tablename__ = 'users'

    ROLE_ADMIN = 'admin'
    ROLE_MANAGER = 'manager'
    ROLE_COMPLIANCE = 'compliance'
    ROLE_TELLER = 'teller'

    ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_COMPLIANCE, ROLE_TELLER)

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False, unique=True)
    email = db.Column(db.String(255), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_TELLER)
    is_active_user = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    profile = db.relationship('UserProfile', back_populates='user', uselist=False)

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'

    @property
    def is_active(self):
        return bool(self.is_active_user)

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def can_manage_users(self):
        return self.is_admin

    @property
    def can_review_compliance(self):
        return self.role in {self.ROLE_ADMIN, self.ROLE_MANAGER, self.ROLE_COMPLIANCE}

    @property
    def can_view_audit(self):
        return self.role in {self.ROLE_ADMIN, self.ROLE_MANAGER, self.ROLE_COMPLIANCE}

    @property
    def can_manage_customers(self):
        return self.role in self.ROLES

    @property
    def can_transact(self):
        return self.role in {self.ROLE_ADMIN, self.ROLE_MANAGER, self.ROLE_TELLER}

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'is_active': self.is_active,
            'first_name': self.profile.first_name if self.profile else None,
            'last_name': self.profile.last_name if self.profile else None,
        }


class UserProfile(db.Model):
    """Business profile attached to a user account."""

    __tablename__ = 'user_profiles'
    __table_args__ = (
        db.Index('ix_user_profiles_branch', 'branch_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    branch_id = db.Column(db.Integer, db.ForeignKey('branches.id'), nullable=True)
    transaction_limit_per_day = db.Column(db.Float, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship('User', back_populates='profile')

    def __repr__(self):
        return f'<UserProfile {self.first_name} {self.last_name}>'

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'
