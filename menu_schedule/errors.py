"""Application errors rendered as JSON error envelopes by the web layer."""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base error carrying an HTTP status and a machine-readable code."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        """Return the `error` member of the response envelope."""
        return {"code": self.code, "message": self.message}


class NotFoundError(AppError):
    """A venue, menu or schedule does not exist."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class ValidationError(AppError):
    """Request data failed validation.

    `details` maps a dotted field path (or "_root") to its messages.
    """

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, details: Dict[str, List[str]], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["details"] = self.details
        return out
