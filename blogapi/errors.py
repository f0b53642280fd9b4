# blogapi/errors.py
from typing import List, Optional


class BlogError(Exception):
    """Base error carrying the HTTP status and the envelope message."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors) if errors else []


class ValidationError(BlogError):
    """Missing or oversized field, or a per-field constraint violation."""

    status_code = 400

    def __init__(self, message: str = 'Validation error', errors: Optional[List[str]] = None):
        super().__init__(message, errors or [message])


class NotFoundError(BlogError):
    status_code = 404


class InvalidIdentifierError(BlogError):
    """Identifier is not in the store's key format."""

    status_code = 400


class DuplicateKeyError(BlogError):
    status_code = 400


class StoreError(BlogError):
    """Transport, connection or unexpected store failure."""

    status_code = 500
