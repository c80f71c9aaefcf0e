"""
Transaction ledger: recording, listing and voiding currency exchanges.
"""
from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime

import config
from database import db
from models.branch import Branch
from models.customer import Customer
from models.transaction import Transaction
from services.audit import log_action
from services.compliance import raise_transaction_alerts
from services.errors import Conflict, NotFound, ValidationError
from services.identity import require_principal

logger = logging.getLogger(__name__)

_NUMBER_ALPHABET = string.digits + string.ascii_uppercase


def generate_transaction_number() -> str:
    """Human-readable number: TXN-<epoch ms>-<9 base36 chars>."""
    suffix = ''.join(secrets.choice(_NUMBER_ALPHABET) for _ in range(9))
    return f'TXN-{int(time.time() * 1000)}-{suffix}'


def _unique_transaction_number() -> str:
    while True:
        number = generate_transaction_number()
        if not Transaction.query.filter_by(transaction_number=number).first():
            return number


def compute_amounts(source_amount: float, exchange_rate: float, commission: float = 0.0) -> tuple[float, float]:
    """Return (target_amount, total_amount) for an exchange."""
    target_amount = round(source_amount * exchange_rate, 2)
    total_amount = round(target_amount + (commission or 0.0), 2)
    return target_amount, total_amount


def create_transaction(principal_id: int | None, transaction_type: str, branch_id: int,
                       source_currency: str, target_currency: str, source_amount: float,
                       exchange_rate: float, customer_id: int | None = None,
                       commission: float = 0.0, notes: str | None = None) -> dict:
    """Record a completed exchange and run the compliance rules against it."""
    require_principal(principal_id)

    if transaction_type not in config.TRANSACTION_TYPES:
        raise ValidationError(f'Unknown transaction type "{transaction_type}".')
    if source_amount is None or source_amount <= 0:
        raise ValidationError('source_amount must be positive.')
    if exchange_rate is None or exchange_rate <= 0:
        raise ValidationError('exchange_rate must be positive.')
    if commission is not None and commission < 0:
        raise ValidationError('commission cannot be negative.')
    source_currency = (source_currency or '').strip().upper()
    target_currency = (target_currency or '').strip().upper()
    if len(source_currency) != 3 or len(target_currency) != 3:
        raise ValidationError('Currencies must be 3-letter codes.')
    if source_currency == target_currency:
        raise ValidationError('Source and target currency must differ.')

    if db.session.get(Branch, branch_id) is None:
        raise NotFound('Branch not found')
    customer = None
    if customer_id is not None:
        customer = db.session.get(Customer, customer_id)
        if customer is None:
            raise NotFound('Customer not found')

    target_amount, total_amount = compute_amounts(source_amount, exchange_rate, commission)
    transaction = Transaction(
        transaction_number=_unique_transaction_number(),
        transaction_type=transaction_type,
        customer_id=customer_id,
        branch_id=branch_id,
        source_currency=source_currency,
        target_currency=target_currency,
        source_amount=source_amount,
        target_amount=target_amount,
        exchange_rate=exchange_rate,
        commission=commission or 0.0,
        total_amount=total_amount,
        status='completed',
        notes=notes,
        created_at=datetime.utcnow(),
        created_by=principal_id,
    )
    db.session.add(transaction)
    db.session.flush()

    log_action(principal_id, 'transaction_created', 'transaction', transaction.id,
               {'transaction_number': transaction.transaction_number, 'total_amount': total_amount})
    alert_ids = raise_transaction_alerts(principal_id, transaction, customer)
    db.session.commit()

    logger.info('Transaction %s recorded (%s %.2f %s)', transaction.transaction_number,
                transaction_type, total_amount, target_currency)
    payload = transaction.to_dict()
    payload['alert_ids'] = alert_ids
    return payload


def get_transaction(principal_id: int | None, transaction_id: int) -> dict | None:
    require_principal(principal_id)
    transaction = db.session.get(Transaction, transaction_id)
    return transaction.to_dict() if transaction else None


def list_transactions(principal_id: int | None, status: str | None = None,
                      customer_id: int | None = None, limit: int | None = None) -> list[dict]:
    require_principal(principal_id)
    query = Transaction.query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
    if status:
        query = query.filter(Transaction.status == status)
    if customer_id is not None:
        query = query.filter(Transaction.customer_id == customer_id)
    if limit:
        query = query.limit(limit)
    return [t.to_dict() for t in query.all()]


def void_transaction(principal_id: int | None, transaction_id: int, reason: str) -> int:
    """Mark a transaction voided. A reason is mandatory."""
    require_principal(principal_id)
    reason = (reason or '').strip()
    if not reason:
        raise ValidationError('A void reason is required.')

    transaction = db.session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFound('Transaction not found')
    if transaction.is_voided:
        raise Conflict('Transaction is already voided.')

    transaction.status = 'voided'
    transaction.void_reason = reason
    transaction.voided_at = datetime.utcnow()
    transaction.voided_by = principal_id

    log_action(principal_id, 'transaction_voided', 'transaction', transaction.id,
               {'transaction_number': transaction.transaction_number, 'reason': reason})
    db.session.commit()
    logger.info('Transaction %s voided by user %s', transaction.transaction_number, principal_id)
    return transaction.id
