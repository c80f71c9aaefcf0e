"""Append-only audit trail: writing, filtered listing and statistics."""
from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timedelta

from flask import has_request_context, request

import config
from database import db
from models.audit_log import AuditLog
from models.user import User, UserProfile
from services.identity import require_principal

logger = logging.getLogger(__name__)


def _request_meta() -> tuple[str | None, str | None]:
    if not has_request_context():
        return None, None
    ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
    user_agent = (request.user_agent.string or '')[:255] or None
    return ip_address, user_agent


def _encode_details(details) -> str | None:
    if details is None:
        return None
    if isinstance(details, str):
        return details
    return json.dumps(details, sort_keys=True, default=str)


def log_action(principal_id: int | None, action: str, entity_type: str,
               entity_id=None, details=None) -> int:
    """Append an audit record stamped with the caller and the current time.

    The entry is added to the current session and flushed; committing is left
    to the operation that owns the unit of work.
    """
    require_principal(principal_id)
    ip_address, user_agent = _request_meta()

    entry = AuditLog(
        user_id=principal_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=_encode_details(details),
        ip_address=ip_address,
        user_agent=user_agent,
        created_at=datetime.utcnow(),
    )
    db.session.add(entry)
    db.session.flush()
    logger.info('audit %s %s:%s by user %s', action, entity_type, entry.entity_id, principal_id)
    return entry.id


def _user_directory(user_ids: set[int]) -> dict[int, dict]:
    """Resolve display name and email for each user id in one pass."""
    if not user_ids:
        return {}
    users = {u.id: u for u in User.query.filter(User.id.in_(user_ids)).all()}
    profiles = {p.user_id: p for p in UserProfile.query.filter(UserProfile.user_id.in_(user_ids)).all()}

    directory = {}
    for user_id in user_ids:
        profile = profiles.get(user_id)
        user = users.get(user_id)
        if profile is None:
            directory[user_id] = {'user_name': config.AUDIT_UNKNOWN_USER, 'user_email': None}
        else:
            directory[user_id] = {
                'user_name': profile.full_name,
                'user_email': user.email if user else None,
            }
    return directory


def list_entries(principal_id: int | None, user_id: int | None = None, entity_type: str | None = None,
                 start_date: datetime | None = None, end_date: datetime | None = None,
                 limit: int | None = None) -> list[dict]:
    """Return audit entries newest-first with the acting user's name and email.

    Anonymous callers get an empty list.
    """
    if principal_id is None:
        return []

    query = AuditLog.query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if start_date is not None:
        query = query.filter(AuditLog.created_at >= start_date)
    if end_date is not None:
        query = query.filter(AuditLog.created_at <= end_date)

    entries = query.limit(limit or config.AUDIT_DEFAULT_LIMIT).all()
    directory = _user_directory({e.user_id for e in entries})

    payload = []
    for entry in entries:
        row = entry.to_dict()
        row.update(directory.get(entry.user_id, {'user_name': config.AUDIT_UNKNOWN_USER, 'user_email': None}))
        payload.append(row)
    return payload


def get_stats(principal_id: int | None, now: datetime | None = None) -> dict | None:
    """Aggregate counts over the whole log.

    ``top_actions`` ranks by descending count; equal counts keep the order in
    which the action first appears in the log (oldest first).
    """
    if principal_id is None:
        return None

    now = now or datetime.utcnow()
    day_ago = now - timedelta(hours=24)
    week_ago = now - timedelta(days=7)

    rows = (
        db.session.query(AuditLog.action, AuditLog.user_id, AuditLog.created_at)
        .order_by(AuditLog.created_at, AuditLog.id)
        .all()
    )

    action_counts = Counter(action for action, _, _ in rows)
    return {
        'total_entries': len(rows),
        'today_entries': sum(1 for _, _, created_at in rows if created_at >= day_ago),
        'week_entries': sum(1 for _, _, created_at in rows if created_at >= week_ago),
        'unique_users': len({user_id for _, user_id, _ in rows}),
        'action_counts': dict(action_counts),
        'top_actions': [
            {'action': action, 'count': count}
            for action, count in action_counts.most_common(config.AUDIT_TOP_ACTIONS)
        ],
    }
