"""
SQLAlchemy models for the OpenCX back office.
"""
from .user import User, UserProfile
from .branch import Branch
from .customer import Customer
from .transaction import Transaction
from .compliance_alert import ComplianceAlert
from .audit_log import AuditLog

__all__ = [
    'User',
    'UserProfile',
    'Branch',
    'Customer',
    'Transaction',
    'ComplianceAlert',
    'AuditLog',
]
