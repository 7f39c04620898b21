"""
Error taxonomy for grading and analytics.
Every failure is raised to the caller; the API layer decides the HTTP mapping.
"""


class ExamEngineError(Exception):
    """Base class for all recoverable exam engine errors"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ExamEngineError):
    """Malformed input: empty question set, missing required fields"""

    status_code = 400


class AlreadyCompletedError(ExamEngineError):
    """A completed attempt already exists for this exam and user"""

    status_code = 409


class ForbiddenError(ExamEngineError):
    """Exam or attempt accessed by someone other than its owner"""

    status_code = 403


class NotFoundError(ExamEngineError):
    """Referenced exam or attempt does not exist"""

    status_code = 404
