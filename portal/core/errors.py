# portal/core/errors.py
from typing import Any, Dict

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class PortalError(HTTPException):
    """
    Base class of every business failure raised by the services.

    Each subclass fixes an HTTP status and a `kind` so callers can tell
    the failures apart without parsing messages. Extra keyword arguments
    end up in `details` (product id, cap value, expected amount, ...).
    """

    status_code: int = 400
    kind: str = "error"

    def __init__(self, message: str, **details: Any):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": self.details or None}


class ValidationError(PortalError):
    status_code = 400
    kind = "validation_error"


class NotFoundError(PortalError):
    status_code = 404
    kind = "not_found"


class InsufficientResourceError(PortalError):
    status_code = 400
    kind = "insufficient_resource"


class LimitExceededError(PortalError):
    status_code = 400
    kind = "limit_exceeded"


class PaymentError(PortalError):
    status_code = 400
    kind = "payment_error"


class AccessDeniedError(PortalError):
    status_code = 403
    kind = "access_denied"


class ConflictError(PortalError):
    status_code = 409
    kind = "conflict"


class CommitFailedError(PortalError):
    """A write inside the checkout transaction failed; nothing was committed."""

    status_code = 500
    kind = "commit_failed"


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
