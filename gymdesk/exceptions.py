class AppError(Exception):
    """Base error carrying a stable code and an HTTP status."""

    status_code = 500
    default_code = 'INTERNAL_SERVER_ERROR'

    def __init__(self, message, code=None, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self):
        error = {'code': self.code, 'message': self.message}
        if self.details is not None:
            error['details'] = self.details
        return error


class NotFoundError(AppError):
    status_code = 404
    default_code = 'NOT_FOUND'


class ConflictError(AppError):
    status_code = 409
    default_code = 'CONFLICT'


class InvalidInputError(AppError):
    status_code = 400
    default_code = 'VALIDATION_ERROR'


class InvalidRecurrenceRule(InvalidInputError):
    default_code = 'INVALID_RECURRENCE_RULE'


class AuthenticationError(AppError):
    status_code = 401
    default_code = 'MISSING_AUTH'


class ForbiddenError(AppError):
    status_code = 403
    default_code = 'INSUFFICIENT_PERMISSIONS'
