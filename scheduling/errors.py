"""Error taxonomy for scheduling operations.

Every failure an operation can report maps to exactly one of these, and each
carries the HTTP status the JSON API answers with.
"""


class SchedulingError(Exception):
    """Base class for expected scheduling failures."""
    code = 'scheduling_error'
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            'success': False,
            'error': self.code,
            'message': self.message
        }


class ValidationError(SchedulingError):
    """Malformed or missing input."""
    code = 'validation_error'
    status_code = 400


class ForbiddenError(SchedulingError):
    """The caller may not act on this record."""
    code = 'forbidden'
    status_code = 403


class NotFoundError(SchedulingError):
    """A referenced shift, appointment, employee or service does not exist."""
    code = 'not_found'
    status_code = 404


class ConflictError(SchedulingError):
    """The requested interval collides with an existing one."""
    code = 'conflict'
    status_code = 409

    def __init__(self, message: str, conflict=None):
        super().__init__(message)
        self.conflict = conflict

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.conflict is not None:
            data['conflict'] = self.conflict.to_dict()
        return data
