"""Customer registry: profiles, KYC status and sanction screening."""
from __future__ import annotations

import logging
from datetime import datetime

import config
from database import db
from models.customer import Customer
from models.transaction import Transaction
from services.audit import log_action
from services.compliance import raise_screening_alert
from services.errors import Conflict, NotFound, ValidationError
from services.identity import require_principal

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'first_name', 'last_name', 'email', 'phone', 'address', 'date_of_birth',
    'nationality', 'occupation', 'id_type', 'id_number', 'id_expiry_date', 'notes',
)


def _get_or_404(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFound('Customer not found')
    return customer


def create_customer(principal_id: int | None, **fields) -> int:
    require_principal(principal_id)
    values = {k: fields[k] for k in EDITABLE_FIELDS if fields.get(k) is not None}
    for required in ('first_name', 'last_name'):
        if not str(values.get(required) or '').strip():
            raise ValidationError(f'{required} is required.')

    customer = Customer(
        kyc_status='pending',
        sanction_screening_status='pending',
        created_by=principal_id,
        **values,
    )
    db.session.add(customer)
    db.session.flush()
    log_action(principal_id, 'customer_created', 'customer', customer.id, {'name': customer.full_name})
    db.session.commit()
    return customer.id


def get_customer(principal_id: int | None, customer_id: int) -> dict | None:
    require_principal(principal_id)
    customer = db.session.get(Customer, customer_id)
    return customer.to_dict() if customer else None


def list_customers(principal_id: int | None, search: str | None = None,
                   kyc_status: str | None = None) -> list[dict]:
    require_principal(principal_id)
    query = Customer.query.order_by(Customer.last_name, Customer.first_name)
    if kyc_status:
        query = query.filter(Customer.kyc_status == kyc_status)
    if search:
        pattern = f'%{search.strip()}%'
        query = query.filter(db.or_(Customer.first_name.ilike(pattern), Customer.last_name.ilike(pattern)))
    return [c.to_dict() for c in query.all()]


def update_kyc_status(principal_id: int | None, customer_id: int, kyc_status: str) -> int:
    require_principal(principal_id)
    if kyc_status not in config.KYC_STATUSES:
        raise ValidationError(f'Unknown KYC status "{kyc_status}".')
    customer = _get_or_404(customer_id)

    previous = customer.kyc_status
    customer.kyc_status = kyc_status
    log_action(principal_id, 'customer_kyc_updated', 'customer', customer.id,
               {'from': previous, 'to': kyc_status})
    db.session.commit()
    return customer.id


def record_screening(principal_id: int | None, customer_id: int, result: str) -> int:
    """Store a sanction screening outcome; hits open a sanction-match alert."""
    require_principal(principal_id)
    if result not in config.SCREENING_RESULTS:
        raise ValidationError(f'Unknown screening result "{result}".')
    customer = _get_or_404(customer_id)

    status, alert_severity = config.SCREENING_RESULTS[result]
    customer.sanction_screening_status = status
    customer.sanction_screening_date = datetime.utcnow()
    log_action(principal_id, 'customer_screened', 'customer', customer.id, {'result': result})
    if alert_severity:
        raise_screening_alert(principal_id, customer, result, alert_severity)
    db.session.commit()

    if alert_severity:
        logger.warning('Sanction screening %s for customer %s', result, customer.id)
    return customer.id


def remove_customer(principal_id: int | None, customer_id: int) -> None:
    """Delete a customer that no transaction refers to."""
    require_principal(principal_id)
    customer = _get_or_404(customer_id)
    if Transaction.query.filter_by(customer_id=customer.id).first():
        raise Conflict('Cannot delete customer with existing transactions')

    db.session.delete(customer)
    log_action(principal_id, 'customer_removed', 'customer', customer_id, {'name': customer.full_name})
    db.session.commit()
