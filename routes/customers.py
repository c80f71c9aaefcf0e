"""Customer registry endpoints."""
from flask import Blueprint, abort, jsonify, request
from routes.params import json_body
from services import customers
from services.customers import EDITABLE_FIELDS
from services.identity import current_principal_id

customers_bp = Blueprint('customers', __name__)


@customers_bp.route('/')
def list_customers():
    rows = customers.list_customers(
        current_principal_id(),
        search=(request.args.get('search') or '').strip() or None,
        kyc_status=(request.args.get('kyc_status') or '').strip() or None,
    )
    return jsonify(rows)


@customers_bp.route('/', methods=['POST'])
def create_customer():
    body = json_body()
    fields = {k: body[k] for k in EDITABLE_FIELDS if k in body}
    customer_id = customers.create_customer(current_principal_id(), **fields)
    return jsonify({'id': customer_id}), 201


@customers_bp.route('/<int:customer_id>')
def get_customer(customer_id):
    customer = customers.get_customer(current_principal_id(), customer_id)
    if customer is None:
        abort(404)
    return jsonify(customer)


@customers_bp.route('/<int:customer_id>/kyc', methods=['POST'])
def update_kyc(customer_id):
    body = json_body()
    updated = customers.update_kyc_status(current_principal_id(), customer_id, (body.get('kyc_status') or '').strip())
    return jsonify({'id': updated})


@customers_bp.route('/<int:customer_id>/screening', methods=['POST'])
def record_screening(customer_id):
    body = json_body()
    updated = customers.record_screening(current_principal_id(), customer_id, (body.get('result') or '').strip())
    return jsonify({'id': updated})


@customers_bp.route('/<int:customer_id>', methods=['DELETE'])
def remove_customer(customer_id):
    customers.remove_customer(current_principal_id(), customer_id)
    return '', 204
