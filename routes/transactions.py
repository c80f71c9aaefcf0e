"""Transaction ledger endpoints."""
from flask import Blueprint, abort, jsonify, request
from routes.params import arg_int, body_float, body_int, json_body
from services import transactions
from services.errors import ValidationError
from services.identity import current_principal_id

transactions_bp = Blueprint('transactions', __name__)


@transactions_bp.route('/')
def list_transactions():
    rows = transactions.list_transactions(
        current_principal_id(),
        status=(request.args.get('status') or '').strip() or None,
        customer_id=arg_int('customer_id'),
        limit=arg_int('limit'),
    )
    return jsonify(rows)


@transactions_bp.route('/', methods=['POST'])
def create_transaction():
    body = json_body()
    branch_id = body_int(body, 'branch_id')
    if branch_id is None:
        raise ValidationError('branch_id is required.')

    payload = transactions.create_transaction(
        current_principal_id(),
        transaction_type=(body.get('transaction_type') or '').strip(),
        branch_id=branch_id,
        source_currency=body.get('source_currency') or '',
        target_currency=body.get('target_currency') or '',
        source_amount=body_float(body, 'source_amount'),
        exchange_rate=body_float(body, 'exchange_rate'),
        customer_id=body_int(body, 'customer_id'),
        commission=body_float(body, 'commission', 0.0),
        notes=body.get('notes'),
    )
    return jsonify(payload), 201


@transactions_bp.route('/<int:transaction_id>')
def get_transaction(transaction_id):
    transaction = transactions.get_transaction(current_principal_id(), transaction_id)
    if transaction is None:
        abort(404)
    return jsonify(transaction)


@transactions_bp.route('/<int:transaction_id>/void', methods=['POST'])
def void_transaction(transaction_id):
    body = json_body()
    voided = transactions.void_transaction(current_principal_id(), transaction_id, body.get('reason') or '')
    return jsonify({'id': voided})
