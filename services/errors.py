"""Service-layer failures and their HTTP status mapping."""


class ServiceError(Exception):
    """Base class for failures surfaced to the caller of a single operation."""

    code = 'error'
    status_code = 400

    def __init__(self, message: str = ''):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict:
        return {'error': self.code, 'message': self.message}


class Unauthenticated(ServiceError):
    code = 'unauthenticated'
    status_code = 401

    def __init__(self, message: str = 'Not authenticated'):
        super().__init__(message)


class NotFound(ServiceError):
    code = 'not_found'
    status_code = 404


class Conflict(ServiceError):
    code = 'conflict'
    status_code = 409


class ValidationError(ServiceError):
    code = 'validation_error'
    status_code = 400
