"""
Compliance alert and regulatory report endpoints.
"""
from flask import Blueprint, abort, jsonify, request
from flask_login import current_user
from routes.params import arg_datetime, arg_int, body_int, json_body, parse_datetime
from services import compliance, compliance_reports
from services.errors import ValidationError
from services.identity import current_principal_id

compliance_bp = Blueprint('compliance', __name__)


@compliance_bp.route('/alerts')
def list_alerts():
    """Alerts filtered by status, severity and type."""
    alerts = compliance.list_alerts(
        current_principal_id(),
        status=(request.args.get('status') or '').strip() or None,
        severity=(request.args.get('severity') or '').strip() or None,
        alert_type=(request.args.get('alert_type') or '').strip() or None,
        limit=arg_int('limit'),
    )
    return jsonify(alerts)


@compliance_bp.route('/alerts/pending')
def pending_alerts():
    return jsonify(compliance.get_pending(current_principal_id()))


@compliance_bp.route('/stats')
def alert_stats():
    return jsonify(compliance.get_stats(current_principal_id()))


@compliance_bp.route('/alerts/<int:alert_id>')
def get_alert(alert_id):
    alert = compliance.get_alert(current_principal_id(), alert_id)
    if alert is None:
        abort(404)
    return jsonify(alert)


@compliance_bp.route('/alerts', methods=['POST'])
def create_alert():
    body = json_body()
    alert_id = compliance.create_alert(
        current_principal_id(),
        alert_type=body.get('alert_type') or '',
        severity=body.get('severity') or '',
        description=body.get('description') or '',
        customer_id=body_int(body, 'customer_id'),
        transaction_id=body_int(body, 'transaction_id'),
    )
    return jsonify({'id': alert_id}), 201


@compliance_bp.route('/alerts/<int:alert_id>/status', methods=['POST'])
def update_alert_status(alert_id):
    body = json_body()
    status = (body.get('status') or '').strip()
    if not status:
        raise ValidationError('status is required.')
    updated_id = compliance.update_status(
        current_principal_id(),
        alert_id,
        status,
        resolution_notes=body.get('resolution_notes'),
    )
    return jsonify({'id': updated_id})


@compliance_bp.route('/alerts/<int:alert_id>', methods=['DELETE'])
def remove_alert(alert_id):
    """Administrative hard delete."""
    principal_id = current_principal_id()
    if principal_id is not None and not current_user.is_admin:
        abort(403)
    compliance.remove_alert(principal_id, alert_id)
    return '', 204


# ---------------------------------------------------------------------------
# Regulatory reports
# ---------------------------------------------------------------------------

@compliance_bp.route('/reports/ctr')
def ctr_transactions():
    rows = compliance_reports.ctr_transactions(
        current_principal_id(),
        date_from=arg_datetime('date_from'),
        date_to=arg_datetime('date_to'),
        customer_id=arg_int('customer_id'),
    )
    return jsonify(rows)


@compliance_bp.route('/reports/ctr/<int:customer_id>')
def ctr_report(customer_id):
    date_from = parse_datetime(request.args.get('date_from'), 'date_from')
    date_to = parse_datetime(request.args.get('date_to'), 'date_to')
    if date_from is None or date_to is None:
        raise ValidationError('date_from and date_to are required.')
    report = compliance_reports.generate_ctr_report(current_principal_id(), customer_id, date_from, date_to)
    return jsonify(report)


@compliance_bp.route('/reports/sar')
def sar_alerts():
    rows = compliance_reports.sar_alerts(
        current_principal_id(),
        date_from=arg_datetime('date_from'),
        date_to=arg_datetime('date_to'),
        status=(request.args.get('status') or '').strip() or None,
    )
    return jsonify(rows)


@compliance_bp.route('/reports/sar/<int:alert_id>')
def sar_report(alert_id):
    return jsonify(compliance_reports.generate_sar_report(current_principal_id(), alert_id))
