"""
Regulatory report data: currency transaction reports (CTR) and suspicious
activity reports (SAR).

These functions only assemble the payloads; filing and rendering happen
elsewhere.
"""
from __future__ import annotations

from datetime import datetime

import config
from database import db
from models.branch import Branch
from models.compliance_alert import ComplianceAlert
from models.customer import Customer
from models.transaction import Transaction
from services.compliance import enrich_alerts
from services.errors import NotFound
from services.identity import require_principal


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def ctr_transactions(principal_id: int | None, date_from: datetime | None = None,
                     date_to: datetime | None = None, customer_id: int | None = None) -> list[dict]:
    """Transactions at or above the CTR threshold, newest first, with their customer."""
    require_principal(principal_id)

    query = Transaction.query.filter(Transaction.total_amount >= config.CTR_THRESHOLD)
    if date_from is not None:
        query = query.filter(Transaction.created_at >= date_from)
    if date_to is not None:
        query = query.filter(Transaction.created_at <= date_to)
    if customer_id is not None:
        query = query.filter(Transaction.customer_id == customer_id)
    transactions = query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()

    customer_ids = {t.customer_id for t in transactions if t.customer_id}
    customers = {}
    if customer_ids:
        customers = {c.id: c for c in Customer.query.filter(Customer.id.in_(customer_ids)).all()}

    payload = []
    for transaction in transactions:
        row = transaction.to_dict()
        customer = customers.get(transaction.customer_id)
        row['customer'] = customer.to_dict() if customer else None
        payload.append(row)
    return payload


def generate_ctr_report(principal_id: int | None, customer_id: int,
                        date_from: datetime, date_to: datetime) -> dict:
    """Aggregate a customer's completed transactions over a reporting window."""
    require_principal(principal_id)
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFound('Customer not found')

    transactions = (
        Transaction.query
        .filter(
            Transaction.customer_id == customer_id,
            Transaction.status == 'completed',
            Transaction.created_at >= date_from,
            Transaction.created_at <= date_to,
        )
        .order_by(Transaction.created_at, Transaction.id)
        .all()
    )

    currencies = []
    for t in transactions:
        for code in (t.source_currency, t.target_currency):
            if code not in currencies:
                currencies.append(code)

    branch = db.session.get(Branch, transactions[0].branch_id) if transactions else None
    return {
        'report_type': 'CTR',
        'report_date': datetime.utcnow().isoformat(),
        'reporting_period': {'from': _iso(date_from), 'to': _iso(date_to)},
        'customer': customer.to_report_subject(),
        'summary': {
            'total_transactions': len(transactions),
            'total_amount': round(sum(t.total_amount for t in transactions), 2),
            'total_buy': round(sum(t.total_amount for t in transactions if t.transaction_type == 'buy'), 2),
            'total_sell': round(sum(t.total_amount for t in transactions if t.transaction_type == 'sell'), 2),
            'currencies_involved': currencies,
        },
        'transactions': [t.to_report_row() for t in transactions],
        'branch': branch.to_summary() if branch else None,
        'filed_by': principal_id,
    }


def sar_alerts(principal_id: int | None, date_from: datetime | None = None,
               date_to: datetime | None = None, status: str | None = None) -> list[dict]:
    """Alerts that warrant a SAR, newest first, with customer and transaction."""
    require_principal(principal_id)

    query = ComplianceAlert.query.filter(db.or_(
        ComplianceAlert.alert_type.in_(config.SAR_ALERT_TYPES),
        ComplianceAlert.severity.in_(config.SAR_SEVERITIES),
    ))
    if date_from is not None:
        query = query.filter(ComplianceAlert.created_at >= date_from)
    if date_to is not None:
        query = query.filter(ComplianceAlert.created_at <= date_to)
    if status:
        query = query.filter(ComplianceAlert.status == status)
    alerts = query.order_by(ComplianceAlert.created_at.desc(), ComplianceAlert.id.desc()).all()
    return enrich_alerts(alerts, include_reviewer=False)


def generate_sar_report(principal_id: int | None, alert_id: int) -> dict:
    """Assemble SAR data around a single alert and its subject."""
    require_principal(principal_id)
    alert = db.session.get(ComplianceAlert, alert_id)
    if alert is None:
        raise NotFound('Alert not found')

    customer = db.session.get(Customer, alert.customer_id) if alert.customer_id else None
    transaction = db.session.get(Transaction, alert.transaction_id) if alert.transaction_id else None
    branch = db.session.get(Branch, transaction.branch_id) if transaction else None

    related_transactions = []
    related_alerts = []
    if alert.customer_id:
        related_transactions = (
            Transaction.query.filter_by(customer_id=alert.customer_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(config.SAR_RELATED_TRANSACTIONS)
            .all()
        )
        related_alerts = (
            ComplianceAlert.query.filter_by(customer_id=alert.customer_id)
            .order_by(ComplianceAlert.created_at.desc(), ComplianceAlert.id.desc())
            .all()
        )

    subject = None
    if customer is not None:
        subject = customer.to_report_subject()
        subject['sanction_screening_status'] = customer.sanction_screening_status
        subject['kyc_status'] = customer.kyc_status

    transaction_row = None
    if transaction is not None:
        transaction_row = transaction.to_report_row()
        transaction_row['status'] = transaction.status

    return {
        'report_type': 'SAR',
        'report_date': datetime.utcnow().isoformat(),
        'alert': {
            'id': alert.id,
            'type': alert.alert_type,
            'severity': alert.severity,
            'description': alert.description,
            'status': alert.status,
            'created_at': _iso(alert.created_at),
            'resolution_notes': alert.resolution_notes,
        },
        'subject': subject,
        'transaction': transaction_row,
        'related_transactions': [
            {
                'transaction_number': t.transaction_number,
                'transaction_type': t.transaction_type,
                'total_amount': t.total_amount,
                'date': _iso(t.created_at),
            }
            for t in related_transactions
        ],
        'related_alerts': [
            {
                'type': a.alert_type,
                'severity': a.severity,
                'description': a.description,
                'status': a.status,
                'created_at': _iso(a.created_at),
            }
            for a in related_alerts
        ],
        'branch': branch.to_summary() if branch else None,
        'filed_by': principal_id,
        'narrative': f'Suspicious activity detected: {alert.description}',
    }
