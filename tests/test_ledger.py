"""Tests for the transaction ledger and customer registry."""

import re

import pytest
from sqlalchemy.exc import IntegrityError

from database import db
from models import ComplianceAlert, Customer, Transaction
from services import customers, transactions
from services.errors import Conflict, NotFound, Unauthenticated, ValidationError


def _exchange(admin, branch, customer_id=None, source_amount=500.0, rate=1.36, **kwargs):
    return transactions.create_transaction(
        admin.id,
        kwargs.pop('transaction_type', 'buy'),
        branch.id,
        kwargs.pop('source_currency', 'USD'),
        kwargs.pop('target_currency', 'CAD'),
        source_amount,
        rate,
        customer_id=customer_id,
        **kwargs,
    )


def test_transaction_number_format():
    number = transactions.generate_transaction_number()
    assert re.fullmatch(r'TXN-\d{13}-[0-9A-Z]{9}', number)


def test_compute_amounts():
    assert transactions.compute_amounts(500, 1.36, 5) == (680.0, 685.0)
    assert transactions.compute_amounts(100, 0.735) == (73.5, 73.5)


def test_create_transaction_derives_totals(admin, branch, customer):
    payload = _exchange(admin, branch, customer.id, commission=5)

    assert payload['status'] == 'completed'
    assert payload['target_amount'] == 680.0
    assert payload['total_amount'] == 685.0
    assert payload['source_currency'] == 'USD'
    assert payload['alert_ids'] == []
    assert payload['transaction_number'].startswith('TXN-')


def test_create_transaction_validates_input(admin, branch):
    with pytest.raises(ValidationError):
        _exchange(admin, branch, transaction_type='swap')
    with pytest.raises(ValidationError):
        _exchange(admin, branch, source_amount=0)
    with pytest.raises(ValidationError):
        _exchange(admin, branch, target_currency='USD')
    with pytest.raises(NotFound):
        _exchange(admin, branch, customer_id=999)
    with pytest.raises(Unauthenticated):
        transactions.create_transaction(None, 'buy', branch.id, 'USD', 'CAD', 1, 1)


def test_large_transaction_raises_threshold_alert(admin, branch, customer):
    payload = _exchange(admin, branch, customer.id, source_amount=8000, rate=1.25)

    assert payload['total_amount'] == 10000.0
    assert len(payload['alert_ids']) == 1
    alert = db.session.get(ComplianceAlert, payload['alert_ids'][0])
    assert alert.alert_type == 'threshold_exceeded'
    assert alert.transaction_id == payload['id']
    assert alert.status == 'pending'


def test_flagged_customer_raises_sanction_alert(admin, branch, customer):
    customer.sanction_screening_status = 'flagged'
    db.session.commit()

    payload = _exchange(admin, branch, customer.id)

    alert = db.session.get(ComplianceAlert, payload['alert_ids'][0])
    assert alert.alert_type == 'sanction_match'
    assert alert.severity == 'critical'


def test_void_transaction(admin, branch):
    payload = _exchange(admin, branch)

    transactions.void_transaction(admin.id, payload['id'], 'Customer cancelled')

    transaction = db.session.get(Transaction, payload['id'])
    assert transaction.status == 'voided'
    assert transaction.void_reason == 'Customer cancelled'
    assert transaction.voided_by == admin.id
    assert transaction.voided_at is not None


def test_void_requires_reason_and_is_once_only(admin, branch):
    payload = _exchange(admin, branch)
    with pytest.raises(ValidationError):
        transactions.void_transaction(admin.id, payload['id'], '   ')

    transactions.void_transaction(admin.id, payload['id'], 'Duplicate entry')
    with pytest.raises(Conflict):
        transactions.void_transaction(admin.id, payload['id'], 'Again')
    with pytest.raises(NotFound):
        transactions.void_transaction(admin.id, 999, 'Missing')


def test_list_transactions_filters(admin, branch, customer):
    kept = _exchange(admin, branch, customer.id)
    voided = _exchange(admin, branch, customer.id)
    _exchange(admin, branch)
    transactions.void_transaction(admin.id, voided['id'], 'Mistake')

    rows = transactions.list_transactions(admin.id, status='completed', customer_id=customer.id)
    assert [r['id'] for r in rows] == [kept['id']]


def test_create_customer_defaults(admin):
    customer_id = customers.create_customer(admin.id, first_name='Sam', last_name='Park', email='sam@example.com')

    row = customers.get_customer(admin.id, customer_id)
    assert row['kyc_status'] == 'pending'
    assert row['sanction_screening_status'] == 'pending'
    assert row['created_by'] == admin.id


def test_create_customer_requires_names(admin):
    with pytest.raises(ValidationError):
        customers.create_customer(admin.id, first_name='Sam')


def test_list_customers_search(admin):
    customers.create_customer(admin.id, first_name='Sam', last_name='Park')
    customers.create_customer(admin.id, first_name='Alex', last_name='Parkinson')
    customers.create_customer(admin.id, first_name='Robin', last_name='Diaz')

    rows = customers.list_customers(admin.id, search='park')
    assert [r['last_name'] for r in rows] == ['Park', 'Parkinson']


def test_update_kyc_status(admin, customer):
    customers.update_kyc_status(admin.id, customer.id, 'verified')
    assert db.session.get(Customer, customer.id).kyc_status == 'verified'
    with pytest.raises(ValidationError):
        customers.update_kyc_status(admin.id, customer.id, 'approved')


def test_screening_match_flags_customer_and_opens_alert(admin, customer):
    customers.record_screening(admin.id, customer.id, 'match')

    refreshed = db.session.get(Customer, customer.id)
    assert refreshed.sanction_screening_status == 'flagged'
    assert refreshed.sanction_screening_date is not None
    alert = ComplianceAlert.query.filter_by(customer_id=customer.id).one()
    assert alert.alert_type == 'sanction_match'
    assert alert.severity == 'critical'


def test_screening_clear_opens_no_alert(admin, customer):
    customers.record_screening(admin.id, customer.id, 'clear')
    assert db.session.get(Customer, customer.id).sanction_screening_status == 'clear'
    assert ComplianceAlert.query.count() == 0


def test_remove_customer_blocked_by_transactions(admin, branch, customer):
    _exchange(admin, branch, customer.id)
    with pytest.raises(Conflict):
        customers.remove_customer(admin.id, customer.id)
    assert db.session.get(Customer, customer.id) is not None


def test_remove_customer(admin, customer):
    customers.remove_customer(admin.id, customer.id)
    assert customers.get_customer(admin.id, customer.id) is None
    with pytest.raises(NotFound):
        customers.remove_customer(admin.id, customer.id)


def test_sqlite_foreign_keys_are_enforced(admin):
    db.session.add(Transaction(
        transaction_number='TXN-ORPHAN', transaction_type='buy', branch_id=999,
        source_currency='USD', target_currency='CAD', source_amount=1, target_amount=1,
        exchange_rate=1, total_amount=1, created_by=admin.id,
    ))
    with pytest.raises(IntegrityError):
        db.session.flush()
    db.session.rollback()
