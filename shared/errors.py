"""
Shared error handling for the Policy Assembly services.

These exceptions are raised at the service boundary only (malformed request
payloads, unknown templates). The assembly engine itself degrades data
problems to auditable no-ops and never raises them.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from .logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class PolicyEngineException(Exception):
    """Base exception for Policy Assembly services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(PolicyEngineException):
    """Request payload could not be turned into engine inputs."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class TemplateNotFoundError(PolicyEngineException):
    """No template or assembler registered under the requested code."""

    status_code = 404

    def __init__(self, template_code: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "TEMPLATE_NOT_FOUND",
            f"Unknown policy template: {template_code}",
            details or {"template_code": template_code}
        )


class ServiceError(PolicyEngineException):
    """Service-related errors."""

    status_code = 500

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)
