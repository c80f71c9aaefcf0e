"""Tests for the compliance alert lifecycle."""

from datetime import datetime, timedelta

import pytest

from database import db
from models import AuditLog, ComplianceAlert, Transaction
from services import compliance, customers
from services.errors import NotFound, Unauthenticated, ValidationError


def _alert(principal_id, severity='high', alert_type='suspicious_activity', **kwargs):
    return compliance.create_alert(
        principal_id,
        alert_type=alert_type,
        severity=severity,
        description=kwargs.pop('description', 'Unusual cash pattern'),
        **kwargs,
    )


def _transaction(admin, branch, customer=None, amount=100.0):
    transaction = Transaction(
        transaction_number=f'TXN-TEST-{amount}',
        transaction_type='buy',
        customer_id=customer.id if customer else None,
        branch_id=branch.id,
        source_currency='USD',
        target_currency='CAD',
        source_amount=amount,
        target_amount=amount,
        exchange_rate=1.0,
        total_amount=amount,
        created_by=admin.id,
    )
    db.session.add(transaction)
    db.session.commit()
    return transaction


def test_create_alert_starts_pending_with_fresh_timestamp(admin):
    before = datetime.utcnow()
    alert_id = _alert(admin.id, severity='critical')

    alert = db.session.get(ComplianceAlert, alert_id)
    assert alert.status == 'pending'
    assert alert.created_at >= before
    assert alert.reviewed_at is None
    assert alert.reviewed_by is None


def test_create_alert_records_audit_entry(admin):
    alert_id = _alert(admin.id)
    entry = AuditLog.query.filter_by(action='compliance_alert_created').one()
    assert entry.entity_id == str(alert_id)
    assert entry.user_id == admin.id


def test_create_alert_rejects_blank_fields(admin):
    with pytest.raises(ValidationError):
        compliance.create_alert(admin.id, alert_type='sanction_match', severity='high', description='  ')


def test_create_alert_rejects_unknown_references(admin):
    with pytest.raises(NotFound):
        _alert(admin.id, customer_id=999)
    with pytest.raises(NotFound):
        _alert(admin.id, transaction_id=999)


def test_operations_require_principal(admin):
    alert_id = _alert(admin.id)
    with pytest.raises(Unauthenticated):
        compliance.list_alerts(None)
    with pytest.raises(Unauthenticated):
        compliance.get_stats(None)
    with pytest.raises(Unauthenticated):
        compliance.get_pending(None)
    with pytest.raises(Unauthenticated):
        compliance.update_status(None, alert_id, 'reviewed')
    with pytest.raises(Unauthenticated):
        _alert(None)


def test_list_applies_filters_conjunctively(admin):
    match = _alert(admin.id, severity='high', alert_type='threshold_exceeded')
    _alert(admin.id, severity='high', alert_type='sanction_match')
    _alert(admin.id, severity='low', alert_type='threshold_exceeded')

    rows = compliance.list_alerts(admin.id, severity='high', alert_type='threshold_exceeded')
    assert [r['id'] for r in rows] == [match]


def test_list_limit_applies_after_filtering_and_keeps_newest(admin):
    matching = [_alert(admin.id, severity='high') for _ in range(5)]
    newest_other = _alert(admin.id, severity='low')

    rows = compliance.list_alerts(admin.id, status='pending', severity='high', limit=1)
    assert len(rows) == 1
    assert rows[0]['id'] == matching[-1]
    assert rows[0]['id'] != newest_other


def test_list_is_newest_first(admin):
    ids = [_alert(admin.id) for _ in range(3)]
    rows = compliance.list_alerts(admin.id)
    assert [r['id'] for r in rows] == list(reversed(ids))


def test_list_enriches_related_records(admin, officer, branch, customer):
    transaction = _transaction(admin, branch, customer)
    alert_id = _alert(admin.id, customer_id=customer.id, transaction_id=transaction.id)
    compliance.update_status(officer.id, alert_id, 'reviewed')

    row = compliance.list_alerts(admin.id)[0]
    assert row['customer']['last_name'] == 'Lee'
    assert row['transaction']['transaction_number'] == transaction.transaction_number
    assert row['reviewed_by_user']['username'] == 'officer'


def test_enrichment_tolerates_dangling_references(admin):
    customer_id = customers.create_customer(admin.id, first_name='Gone', last_name='Soon')
    alert_id = _alert(admin.id, customer_id=customer_id)
    customers.remove_customer(admin.id, customer_id)

    row = compliance.get_alert(admin.id, alert_id)
    assert row['customer_id'] == customer_id
    assert row['customer'] is None
    assert row['transaction'] is None
    assert row['reviewed_by_user'] is None


def test_get_alert_missing_returns_none(admin):
    assert compliance.get_alert(admin.id, 12345) is None


def test_get_pending_returns_raw_pending_alerts(admin):
    first = _alert(admin.id)
    reviewed = _alert(admin.id)
    last = _alert(admin.id)
    compliance.update_status(admin.id, reviewed, 'reviewed')

    rows = compliance.get_pending(admin.id)
    assert [r['id'] for r in rows] == [last, first]
    assert 'customer' not in rows[0]


def test_update_status_sets_review_fields(admin, officer):
    alert_id = _alert(admin.id)
    before = datetime.utcnow()

    assert compliance.update_status(officer.id, alert_id, 'escalated') == alert_id

    alert = db.session.get(ComplianceAlert, alert_id)
    assert alert.status == 'escalated'
    assert alert.reviewed_by == officer.id
    assert alert.reviewed_at >= before


def test_update_status_preserves_notes_unless_given(admin):
    alert_id = _alert(admin.id)
    compliance.update_status(admin.id, alert_id, 'reviewed', resolution_notes='Called customer')

    compliance.update_status(admin.id, alert_id, 'resolved')
    assert db.session.get(ComplianceAlert, alert_id).resolution_notes == 'Called customer'

    compliance.update_status(admin.id, alert_id, 'resolved', resolution_notes='Source of funds verified')
    assert db.session.get(ComplianceAlert, alert_id).resolution_notes == 'Source of funds verified'


def test_update_status_never_changes_identity_fields(admin, customer):
    alert_id = _alert(admin.id, alert_type='sanction_match', customer_id=customer.id)
    compliance.update_status(admin.id, alert_id, 'resolved')

    alert = db.session.get(ComplianceAlert, alert_id)
    assert alert.alert_type == 'sanction_match'
    assert alert.customer_id == customer.id
    assert alert.transaction_id is None


def test_update_status_can_return_to_pending(admin):
    alert_id = _alert(admin.id)
    compliance.update_status(admin.id, alert_id, 'resolved')
    compliance.update_status(admin.id, alert_id, 'pending')
    assert db.session.get(ComplianceAlert, alert_id).status == 'pending'


def test_update_status_rejects_unknown_status(admin):
    alert_id = _alert(admin.id)
    with pytest.raises(ValidationError):
        compliance.update_status(admin.id, alert_id, 'closed')
    assert db.session.get(ComplianceAlert, alert_id).status == 'pending'


def test_update_status_missing_alert(admin):
    with pytest.raises(NotFound):
        compliance.update_status(admin.id, 4040, 'reviewed')


def test_stats_total_matches_status_buckets(admin):
    ids = [_alert(admin.id, severity=s) for s in ('low', 'medium', 'high', 'critical', 'high')]
    compliance.update_status(admin.id, ids[0], 'reviewed')
    compliance.update_status(admin.id, ids[1], 'resolved')
    compliance.update_status(admin.id, ids[2], 'escalated')

    stats = compliance.get_stats(admin.id)
    assert stats['total'] == 5
    assert stats['total'] == sum(stats['by_status'].values())
    assert stats['by_status'] == {'pending': 2, 'reviewed': 1, 'resolved': 1, 'escalated': 1}
    assert stats['by_severity'] == {'critical': 1, 'high': 1, 'medium': 0, 'low': 0}


def test_stats_severity_tracks_only_pending(admin):
    alert_id = _alert(admin.id, severity='critical')
    assert compliance.get_stats(admin.id)['by_severity']['critical'] == 1

    compliance.update_status(admin.id, alert_id, 'resolved')

    stats = compliance.get_stats(admin.id)
    assert stats['by_severity']['critical'] == 0
    assert stats['by_status']['resolved'] == 1


def test_stats_unknown_type_counts_only_in_total(admin):
    _alert(admin.id, alert_type='aggregation_threshold')
    _alert(admin.id, alert_type='sanction_match')

    stats = compliance.get_stats(admin.id)
    assert stats['total'] == 2
    assert stats['by_type'] == {'sanction_match': 1, 'suspicious_activity': 0, 'threshold_exceeded': 0}


def test_remove_alert_deletes_without_reference_checks(admin, branch, customer):
    transaction = _transaction(admin, branch, customer)
    alert_id = _alert(admin.id, customer_id=customer.id, transaction_id=transaction.id)

    compliance.remove_alert(admin.id, alert_id)

    assert db.session.get(ComplianceAlert, alert_id) is None
    assert AuditLog.query.filter_by(action='compliance_alert_removed', entity_id=str(alert_id)).count() == 1


def test_remove_alert_missing(admin):
    with pytest.raises(NotFound):
        compliance.remove_alert(admin.id, 77)


def test_transaction_rules_raise_threshold_alert(app, admin, branch, customer):
    transaction = _transaction(admin, branch, customer, amount=10000.0)
    alert_ids = compliance.raise_transaction_alerts(admin.id, transaction, customer)
    db.session.commit()

    assert len(alert_ids) == 1
    alert = db.session.get(ComplianceAlert, alert_ids[0])
    assert alert.alert_type == 'threshold_exceeded'
    assert alert.severity == 'high'
    assert alert.transaction_id == transaction.id


def test_transaction_rules_can_be_disabled(app, admin, branch, customer):
    app.config['COMPLIANCE_AUTO_ALERTS'] = False
    transaction = _transaction(admin, branch, customer, amount=50000.0)
    assert compliance.raise_transaction_alerts(admin.id, transaction, customer) == []


def test_created_at_is_set_per_alert(admin):
    first = _alert(admin.id)
    second = _alert(admin.id)
    a, b = db.session.get(ComplianceAlert, first), db.session.get(ComplianceAlert, second)
    assert b.created_at >= a.created_at
    assert b.created_at - a.created_at < timedelta(seconds=5)


def test_removed_customer_id_is_not_reused(admin):
    gone = customers.create_customer(admin.id, first_name='Former', last_name='Client')
    alert_id = _alert(admin.id, alert_type='sanction_match', customer_id=gone)
    customers.remove_customer(admin.id, gone)

    fresh = customers.create_customer(admin.id, first_name='Innocent', last_name='Bystander')

    assert fresh != gone
    row = compliance.get_alert(admin.id, alert_id)
    assert row['customer_id'] == gone
    assert row['customer'] is None


def test_removed_alert_id_is_not_reused(admin):
    first = _alert(admin.id)
    compliance.remove_alert(admin.id, first)
    assert _alert(admin.id) != first


def test_create_alert_rejects_non_string_fields(admin):
    with pytest.raises(ValidationError):
        compliance.create_alert(admin.id, alert_type=5, severity='high', description='Numeric type')
    assert ComplianceAlert.query.count() == 0
