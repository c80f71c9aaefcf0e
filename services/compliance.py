"""
Compliance alert lifecycle for the OpenCX back office.

Alerts are raised manually or by the built-in transaction rules, reviewed by
compliance staff, and enriched with the customer, transaction and reviewer
they refer to when read back.
"""
from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app

import config
from database import db
from models.compliance_alert import ComplianceAlert
from models.customer import Customer
from models.transaction import Transaction
from models.user import User
from services.audit import log_action
from services.errors import NotFound, ValidationError
from services.identity import require_principal

logger = logging.getLogger(__name__)


def _by_id(model, ids: set[int]) -> dict:
    if not ids:
        return {}
    return {row.id: row for row in model.query.filter(model.id.in_(ids)).all()}


def enrich_alerts(alerts: list[ComplianceAlert], include_reviewer: bool = True) -> list[dict]:
    """Attach customer, transaction and reviewer records to each alert.

    Each related kind is fetched with a single batched lookup. References that
    no longer resolve come back as None.
    """
    customers = _by_id(Customer, {a.customer_id for a in alerts if a.customer_id})
    transactions = _by_id(Transaction, {a.transaction_id for a in alerts if a.transaction_id})
    reviewers = _by_id(User, {a.reviewed_by for a in alerts if a.reviewed_by}) if include_reviewer else {}

    payload = []
    for alert in alerts:
        row = alert.to_dict()
        customer = customers.get(alert.customer_id)
        transaction = transactions.get(alert.transaction_id)
        row['customer'] = customer.to_dict() if customer else None
        row['transaction'] = transaction.to_dict() if transaction else None
        if include_reviewer:
            reviewer = reviewers.get(alert.reviewed_by)
            row['reviewed_by_user'] = reviewer.to_dict() if reviewer else None
        payload.append(row)
    return payload


def _newest_first(query):
    return query.order_by(ComplianceAlert.created_at.desc(), ComplianceAlert.id.desc())


def list_alerts(principal_id: int | None, status: str | None = None, severity: str | None = None,
                alert_type: str | None = None, limit: int | None = None) -> list[dict]:
    """Return enriched alerts matching every given filter, newest first."""
    require_principal(principal_id)

    query = _newest_first(ComplianceAlert.query)
    if status:
        query = query.filter(ComplianceAlert.status == status)
    if severity:
        query = query.filter(ComplianceAlert.severity == severity)
    if alert_type:
        query = query.filter(ComplianceAlert.alert_type == alert_type)
    if limit:
        query = query.limit(limit)

    return enrich_alerts(query.all())


def get_pending(principal_id: int | None) -> list[dict]:
    """Pending alerts, newest first, without enrichment."""
    require_principal(principal_id)
    alerts = _newest_first(ComplianceAlert.query.filter_by(status='pending')).all()
    return [a.to_dict() for a in alerts]


def get_stats(principal_id: int | None) -> dict:
    """Counts by status, pending counts by severity, and counts by type.

    Severity buckets only cover pending alerts. Types outside the known
    vocabulary only contribute to the total.
    """
    require_principal(principal_id)

    rows = db.session.query(
        ComplianceAlert.status, ComplianceAlert.severity, ComplianceAlert.alert_type
    ).all()

    by_status = {status: 0 for status in config.ALERT_STATUSES}
    by_severity = {severity: 0 for severity in config.ALERT_SEVERITIES}
    by_type = {alert_type: 0 for alert_type in config.ALERT_TYPES}

    for status, severity, alert_type in rows:
        if status in by_status:
            by_status[status] += 1
        if status == 'pending' and severity in by_severity:
            by_severity[severity] += 1
        if alert_type in by_type:
            by_type[alert_type] += 1

    return {
        'total': len(rows),
        'by_status': by_status,
        'by_severity': by_severity,
        'by_type': by_type,
    }


def get_alert(principal_id: int | None, alert_id: int) -> dict | None:
    require_principal(principal_id)
    alert = db.session.get(ComplianceAlert, alert_id)
    if alert is None:
        return None
    return enrich_alerts([alert])[0]


def update_status(principal_id: int | None, alert_id: int, status: str,
                  resolution_notes: str | None = None) -> int:
    """Record a review decision on an alert.

    Notes replace the stored value only when given; otherwise the existing
    notes are kept.
    """
    require_principal(principal_id)
    if status not in config.ALERT_STATUSES:
        raise ValidationError(f'Unknown alert status "{status}".')

    alert = db.session.get(ComplianceAlert, alert_id)
    if alert is None:
        raise NotFound('Alert not found')

    previous = alert.status
    alert.status = status
    alert.reviewed_at = datetime.utcnow()
    alert.reviewed_by = principal_id
    if resolution_notes:
        alert.resolution_notes = resolution_notes

    log_action(principal_id, 'compliance_alert_status_updated', 'compliance_alert', alert.id,
               {'from': previous, 'to': status})
    db.session.commit()
    logger.info('Alert %s moved %s -> %s by user %s', alert.id, previous, status, principal_id)
    return alert.id


def _insert_alert(principal_id: int, alert_type: str, severity: str, description: str,
                  customer_id: int | None = None, transaction_id: int | None = None) -> ComplianceAlert:
    alert = ComplianceAlert(
        alert_type=alert_type,
        severity=severity,
        customer_id=customer_id,
        transaction_id=transaction_id,
        description=description,
        status='pending',
        created_at=datetime.utcnow(),
    )
    db.session.add(alert)
    db.session.flush()
    log_action(principal_id, 'compliance_alert_created', 'compliance_alert', alert.id,
               {'alert_type': alert_type, 'severity': severity})
    return alert


def create_alert(principal_id: int | None, alert_type: str, severity: str, description: str,
                 customer_id: int | None = None, transaction_id: int | None = None) -> int:
    """Open a new alert. New alerts are always pending."""
    require_principal(principal_id)
    for field_name, value in (('alert_type', alert_type), ('severity', severity), ('description', description)):
        if value is not None and not isinstance(value, str):
            raise ValidationError(f'{field_name} must be a string.')
        if not (value or '').strip():
            raise ValidationError(f'{field_name} is required.')

    if customer_id is not None and db.session.get(Customer, customer_id) is None:
        raise NotFound('Customer not found')
    if transaction_id is not None and db.session.get(Transaction, transaction_id) is None:
        raise NotFound('Transaction not found')

    alert = _insert_alert(principal_id, alert_type.strip(), severity.strip(), description.strip(),
                          customer_id, transaction_id)
    db.session.commit()
    logger.info('Alert %s raised (%s/%s)', alert.id, alert.alert_type, alert.severity)
    return alert.id


def remove_alert(principal_id: int | None, alert_id: int) -> None:
    """Hard-delete an alert. Nothing else is checked or cascaded."""
    require_principal(principal_id)
    alert = db.session.get(ComplianceAlert, alert_id)
    if alert is None:
        raise NotFound('Alert not found')

    db.session.delete(alert)
    log_action(principal_id, 'compliance_alert_removed', 'compliance_alert', alert_id,
               {'alert_type': alert.alert_type, 'status': alert.status})
    db.session.commit()
    logger.info('Alert %s removed by user %s', alert_id, principal_id)


def raise_transaction_alerts(principal_id: int, transaction: Transaction,
                             customer: Customer | None = None) -> list[int]:
    """Apply the built-in rules to a freshly recorded transaction.

    Alerts are added to the caller's unit of work; nothing is committed here.
    """
    if not current_app.config.get('COMPLIANCE_AUTO_ALERTS', True):
        return []

    raised = []
    if transaction.total_amount >= config.CTR_THRESHOLD:
        alert = _insert_alert(
            principal_id,
            'threshold_exceeded',
            'high',
            f'Transaction {transaction.transaction_number} total {transaction.total_amount:,.2f} '
            f'meets the reporting threshold of {config.CTR_THRESHOLD:,}.',
            customer_id=transaction.customer_id,
            transaction_id=transaction.id,
        )
        raised.append(alert.id)

    if customer is not None and customer.sanction_screening_status == 'flagged':
        alert = _insert_alert(
            principal_id,
            'sanction_match',
            'critical',
            f'Transaction {transaction.transaction_number} involves {customer.full_name}, '
            f'who is flagged by sanction screening.',
            customer_id=customer.id,
            transaction_id=transaction.id,
        )
        raised.append(alert.id)

    return raised


def raise_screening_alert(principal_id: int, customer: Customer, result: str, severity: str) -> int:
    """Open a sanction-match alert for a screening hit, inside the caller's unit of work."""
    alert = _insert_alert(
        principal_id,
        'sanction_match',
        severity,
        f'Sanction screening returned "{result}" for {customer.full_name}.',
        customer_id=customer.id,
    )
    return alert.id
