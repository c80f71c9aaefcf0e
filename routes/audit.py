"""Audit log endpoints."""
from flask import Blueprint, jsonify, request
from database import db
from routes.params import arg_datetime, arg_int, json_body
from services import audit
from services.errors import ValidationError
from services.identity import current_principal_id

audit_bp = Blueprint('audit', __name__)


@audit_bp.route('/entries')
def list_entries():
    """Filtered audit entries with the acting user's display name."""
    entries = audit.list_entries(
        current_principal_id(),
        user_id=arg_int('user_id'),
        entity_type=(request.args.get('entity_type') or '').strip() or None,
        start_date=arg_datetime('start_date'),
        end_date=arg_datetime('end_date'),
        limit=arg_int('limit'),
    )
    return jsonify(entries)


@audit_bp.route('/entries', methods=['POST'])
def log_entry():
    body = json_body()
    action = (body.get('action') or '').strip()
    entity_type = (body.get('entity_type') or '').strip()
    if not action or not entity_type:
        raise ValidationError('action and entity_type are required.')

    entry_id = audit.log_action(
        current_principal_id(),
        action,
        entity_type,
        entity_id=body.get('entity_id'),
        details=body.get('details'),
    )
    db.session.commit()
    return jsonify({'id': entry_id}), 201


@audit_bp.route('/stats')
def audit_stats():
    return jsonify(audit.get_stats(current_principal_id()))
