"""Principal resolution for service calls.

Routes resolve the caller once and pass the id explicitly; services never
read the session themselves.
"""
from flask_login import current_user
from services.errors import Unauthenticated


def current_principal_id() -> int | None:
    """Return the logged-in user's id, or None for anonymous requests."""
    if not getattr(current_user, 'is_authenticated', False):
        return None
    return current_user.id


def require_principal(principal_id: int | None) -> int:
    if principal_id is None:
        raise Unauthenticated()
    return principal_id
