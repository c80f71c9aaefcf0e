"""Request parsing helpers shared by the JSON blueprints."""
from datetime import datetime, timezone
from flask import request
from services.errors import ValidationError


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object.')
    return body


def arg_int(name: str) -> int | None:
    raw = (request.args.get(name) or '').strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f'{name} must be an integer.') from None


def arg_datetime(name: str) -> datetime | None:
    return parse_datetime(request.args.get(name), name)


def parse_datetime(raw, name: str) -> datetime | None:
    raw = (raw or '').strip() if isinstance(raw, str) else raw
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an ISO-8601 timestamp.') from None
    # Stored timestamps are naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def body_int(body: dict, name: str) -> int | None:
    value = body.get(name)
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer.') from None


def body_float(body: dict, name: str, default=None) -> float | None:
    value = body.get(name, default)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be a number.') from None
