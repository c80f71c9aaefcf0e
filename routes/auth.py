"""
Authentication and user-management routes.
"""
from flask import Blueprint, abort, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from database import db
from models.branch import Branch
from models.user import User, UserProfile
from routes.params import body_float, body_int, json_body
from services.audit import log_action
from services.errors import Conflict, NotFound, ValidationError

auth_bp = Blueprint('auth', __name__)


def _require_admin():
    if not current_user.is_authenticated:
        abort(401)
    if not getattr(current_user, 'can_manage_users', False):
        abort(403)


def _validated_credentials(body: dict) -> tuple[str, str]:
    username = (body.get('username') or '').strip()
    password = body.get('password') or ''
    if len(username) < 3:
        raise ValidationError('Username must be at least 3 characters.')
    if len(password) < 8:
        raise ValidationError('Password must be at least 8 characters.')
    return username, password


def _create_user(body: dict, role: str) -> User:
    username, password = _validated_credentials(body)
    first_name = (body.get('first_name') or '').strip()
    last_name = (body.get('last_name') or '').strip()
    if not first_name or not last_name:
        raise ValidationError('first_name and last_name are required.')
    if User.query.filter_by(username=username).first():
        raise Conflict('That username is already in use.')

    branch_id = body_int(body, 'branch_id')
    if branch_id is not None and db.session.get(Branch, branch_id) is None:
        raise NotFound('Branch not found')

    user = User(
        username=username,
        email=(body.get('email') or '').strip() or None,
        role=role,
        is_active_user=True,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    db.session.add(UserProfile(
        user_id=user.id,
        first_name=first_name,
        last_name=last_name,
        branch_id=branch_id,
        transaction_limit_per_day=body_float(body, 'transaction_limit_per_day'),
    ))
    return user


@auth_bp.route('/csrf-token')
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log in an existing user."""
    body = json_body()
    username = (body.get('username') or '').strip()
    password = body.get('password') or ''

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        return jsonify({'error': 'unauthenticated', 'message': 'Invalid username or password.'}), 401
    if not user.is_active_user:
        return jsonify({'error': 'forbidden', 'message': 'This account is disabled.'}), 403

    login_user(user)
    log_action(user.id, 'login', 'user', user.id, {'username': user.username, 'role': user.role})
    db.session.commit()
    return jsonify(user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Log out current user."""
    log_action(current_user.id, 'logout', 'user', current_user.id, {'username': current_user.username})
    db.session.commit()
    logout_user()
    return '', 204


@auth_bp.route('/me')
@login_required
def me():
    return jsonify(current_user.to_dict())


@auth_bp.route('/bootstrap', methods=['POST'])
def bootstrap():
    """Create the first admin account when the database has no users."""
    if User.query.count() > 0:
        raise Conflict('Bootstrap is disabled because users already exist.')

    user = _create_user(json_body(), User.ROLE_ADMIN)
    log_action(user.id, 'bootstrap_user_created', 'user', user.id, {'role': user.role})
    db.session.commit()
    return jsonify(user.to_dict()), 201


@auth_bp.route('/users')
def list_users():
    _require_admin()
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([u.to_dict() for u in users])


@auth_bp.route('/users', methods=['POST'])
def create_user():
    """Admin-only account creation."""
    _require_admin()
    body = json_body()
    role = body.get('role', User.ROLE_TELLER)
    if role not in User.ROLES:
        raise ValidationError('Invalid role selection.')

    user = _create_user(body, role)
    log_action(current_user.id, 'user_created', 'user', user.id, {'role': role, 'username': user.username})
    db.session.commit()
    return jsonify(user.to_dict()), 201


@auth_bp.route('/users/<int:user_id>/toggle-active', methods=['POST'])
def toggle_user_active(user_id):
    """Enable or disable a non-self account."""
    _require_admin()
    user = db.session.get(User, user_id)
    if user is None:
        abort(404)
    if user.id == current_user.id:
        raise Conflict('You cannot disable your own account.')

    user.is_active_user = not user.is_active_user
    log_action(current_user.id, 'user_toggled_active', 'user', user.id, {'active': user.is_active_user})
    db.session.commit()
    return jsonify(user.to_dict())
