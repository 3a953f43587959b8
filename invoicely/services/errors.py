"""
Invoicely Error Handling

Specific error types with user-friendly messages and debugging context.
"""
from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for client handling."""
    # Input errors (400s)
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # External service errors
    EXCHANGE_RATE_UNAVAILABLE = "EXCHANGE_RATE_UNAVAILABLE"

    # Rendering errors
    NO_TEMPLATES_REGISTERED = "NO_TEMPLATES_REGISTERED"
    TEMPLATE_ID_COLLISION = "TEMPLATE_ID_COLLISION"
    TEMPLATE_RENDER_FAILED = "TEMPLATE_RENDER_FAILED"


class InvoicelyError(Exception):
    """Base exception with structured error info."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.detail = detail
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response format."""
        result = {
            "error": self.code.value,
            "message": self.message
        }
        if self.detail:
            result["detail"] = self.detail
        if self.context:
            result["context"] = self.context
        return result


class NotFoundError(InvoicelyError):
    """Record missing or owned by another user."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{resource} not found",
            context={"resource": resource, "id": identifier}
        )


class ValidationFailedError(InvoicelyError):
    """Input rejected before touching the store."""

    def __init__(self, field: str, detail: str):
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message=detail,
            context={"field": field}
        )


class ConflictError(InvoicelyError):
    """Operation would break a referential constraint."""

    def __init__(self, detail: str):
        super().__init__(
            code=ErrorCode.CONFLICT,
            message=detail,
        )


class ExchangeRateProviderError(InvoicelyError):
    """Rate provider unreachable or returned an unusable body.

    Raised by the provider only; the converter absorbs it.
    """

    def __init__(self, base: str, detail: str):
        super().__init__(
            code=ErrorCode.EXCHANGE_RATE_UNAVAILABLE,
            message=f"Exchange rates unavailable for {base}",
            detail=detail,
            context={"base": base}
        )


class NoTemplatesRegisteredError(InvoicelyError):
    """The template registry is empty. Configuration bug, never user-facing."""

    def __init__(self):
        super().__init__(
            code=ErrorCode.NO_TEMPLATES_REGISTERED,
            message="No templates registered",
        )


class TemplateIdCollisionError(InvoicelyError):

    def __init__(self, template_id: str):
        super().__init__(
            code=ErrorCode.TEMPLATE_ID_COLLISION,
            message=f"Template id already registered: {template_id}",
            context={"template_id": template_id}
        )


class TemplateRenderError(InvoicelyError):

    def __init__(self, template_id: str, detail: str):
        super().__init__(
            code=ErrorCode.TEMPLATE_RENDER_FAILED,
            message=f"Could not load template: {template_id}",
            detail=detail,
            context={"template_id": template_id}
        )


STATUS_MAP = {
    ErrorCode.VALIDATION_FAILED: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.EXCHANGE_RATE_UNAVAILABLE: 502,
    ErrorCode.NO_TEMPLATES_REGISTERED: 500,
    ErrorCode.TEMPLATE_ID_COLLISION: 500,
    ErrorCode.TEMPLATE_RENDER_FAILED: 500,
}


def status_for(error: InvoicelyError) -> int:
    return STATUS_MAP.get(error.code, 500)
