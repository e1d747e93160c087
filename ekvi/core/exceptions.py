"""
Application exceptions.
Each carries the message shown to the caller and the HTTP status it maps to.
"""


class EkviError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(EkviError):
    status_code = 404


class ForbiddenError(EkviError):
    status_code = 403


class ConflictError(EkviError):
    status_code = 409


class ConfigurationError(EkviError):
    """Server-side configuration is missing (credentials, secrets)."""

    status_code = 500


class UpstreamError(EkviError):
    """An external provider rejected or failed a request."""

    status_code = 502
