"""Errors raised by the marketplace services."""

from django.core.exceptions import PermissionDenied

PERMISSION_DENIED_MESSAGE = "Missing or insufficient permissions."


class RuleDenied(PermissionDenied):
    """A write or read failed the access rules.

    Callers only ever see the blanket permission message; the reason a
    predicate failed is kept on the instance for logging.
    """

    def __init__(self, target: str, operation: str, reason: str = ""):
        super().__init__(PERMISSION_DENIED_MESSAGE)
        self.target = target
        self.operation = operation
        self.reason = reason


class DuplicateReviewError(ValueError):
    pass


class InterestStateError(ValueError):
    pass


class StudentNotFoundError(ValueError):
    pass


class UploadError(ValueError):
    pass
