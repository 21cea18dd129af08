"""
services/errors.py

Domain errors raised by the gradebook services.
middlewares/error_handler.py turns them into the standard ErrorResponse body.
"""


class GradebookError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GradebookValidationError(GradebookError):
    """Request input rejected before any write"""
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(GradebookError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(GradebookError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(GradebookError):
    status_code = 404
    code = "NOT_FOUND"
