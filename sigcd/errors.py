"""
Error taxonomy shared by services, integration clients and routes.

Every error carries the HTTP status the global error handler should answer
with and an internal code that is exposed to clients for non-5xx responses.
"""


class SIGCDError(Exception):
    """Base error for the appointment backend"""
    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message, status_code=None, code=None, cause=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.cause = cause


class ValidationError(SIGCDError):
    """Missing or malformed input"""
    status_code = 400
    code = 'VALIDATION_ERROR'


class NotFoundError(SIGCDError):
    status_code = 404
    code = 'NOT_FOUND'


class ConflictError(SIGCDError):
    """Scheduling rule violated"""
    status_code = 409
    code = 'CONFLICT'


class InvalidStateError(ConflictError):
    """Resource is in a state that does not allow the requested operation"""
    status_code = 400
    code = 'INVALID_STATE'


class IntegrationError(SIGCDError):
    """Downstream collaborator (Caja, Atención Clínica) unreachable or failing"""
    status_code = 502
    code = 'INTEGRATION_ERROR'


class InternalError(SIGCDError):
    status_code = 500
    code = 'INTERNAL_ERROR'
