from __future__ import annotations


class AppError(Exception):
    """Chat-level failure.

    ``detail`` is shown to the client as-is (Portuguese, like every other
    user-facing string); ``code`` is the machine-readable tag used in
    WebSocket ``error`` frames.
    """

    code = "error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    code = "not_found"


class ForbiddenError(AppError):
    code = "forbidden"


class ValidationError(AppError):
    """Rejected chat input, e.g. a blank message."""

    code = "invalid_payload"


class AuthenticationError(AppError):
    code = "unauthenticated"
