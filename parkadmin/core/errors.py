"""
Domain error taxonomy.

Services raise these; ``parkadmin.main`` turns them into HTTP responses.

Status mapping:
---------------
- ValidationError        → 400  (bad field, malformed id, unknown category)
- PermissionDeniedError  → 403  (signed in, but not allowed / not admin)
- NotFoundError          → 404  (id does not resolve to a record)
- UpstreamError          → 502  (database or image CDN failed / timed out)

Partial failures (record saved, image step failed) are NOT errors: the
mutation succeeds and the response carries a ``warning`` string instead.
"""

from fastapi import status


class AppError(Exception):
    """Base exception for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Raised when input is missing, malformed or references nothing."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class NotFoundError(AppError):
    """Raised when an id does not resolve to a record."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class UpstreamError(AppError):
    """Raised when the database or the image CDN fails or times out."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_error"
